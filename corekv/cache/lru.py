"""The window LRU that new cache entries enter first."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Any


@dataclass(eq=False)
class StoreItem:
    """A cached value with its key hash, conflict hash and segment stage."""

    stage: int = 0
    key: int = 0
    conflict: int = 0
    value: Any = None


class WindowLRU:
    """Fixed-size LRU; when full, the oldest slot is reused for the new item."""

    def __init__(self, size: int, data: dict[int, StoreItem]) -> None:
        if size < 1:
            raise ValueError(f"window size must be positive: {size}")
        self.data = data
        self.cap = size
        # Most recently used at the end.
        self.items: OrderedDict[StoreItem, None] = OrderedDict()

    def __len__(self) -> int:
        return len(self.items)

    def add(self, item: StoreItem) -> tuple[StoreItem | None, bool]:
        """Insert ``item``; return ``(evicted copy, True)`` if an old item was pushed out."""
        if len(self.items) < self.cap:
            stored = replace(item)
            self.items[stored] = None
            self.data[stored.key] = stored
            return None, False

        slot = next(iter(self.items))
        self.data.pop(slot.key, None)
        evicted = replace(slot)
        vars(slot).update(vars(item))
        self.data[slot.key] = slot
        self.items.move_to_end(slot)
        return evicted, True

    def get(self, item: StoreItem) -> None:
        """Mark ``item`` as most recently used."""
        if item in self.items:
            self.items.move_to_end(item)