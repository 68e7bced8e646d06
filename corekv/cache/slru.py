"""The segmented LRU holding entries admitted from the window."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import replace

from corekv.cache.lru import StoreItem

STAGE_ONE = 0
STAGE_TWO = 1


class SegmentedLRU:
    """Two-segment LRU: a probation segment and a protected segment."""

    def __init__(self, data: dict[int, StoreItem], stage_one_cap: int, stage_two_cap: int) -> None:
        self.data = data
        self.stage_one_cap = stage_one_cap
        self.stage_two_cap = stage_two_cap
        # Most recently used at the end of each segment.
        self.stage_one: OrderedDict[StoreItem, None] = OrderedDict()
        self.stage_two: OrderedDict[StoreItem, None] = OrderedDict()

    def __len__(self) -> int:
        return len(self.stage_one) + len(self.stage_two)

    def _capacity(self) -> int:
        return self.stage_one_cap + self.stage_two_cap

    def add(self, item: StoreItem) -> None:
        """Put a copy of ``item`` into the first segment, reusing its oldest slot if full."""
        new = replace(item, stage=STAGE_TWO)
        if len(self.stage_one) < self.stage_one_cap or len(self) < self._capacity():
            self.stage_one[new] = None
            self.data[new.key] = new
            return

        slot = next(iter(self.stage_one), None)
        if slot is None:
            raise LookupError("segmented LRU has no slot to reuse")
        self.data.pop(slot.key, None)
        vars(slot).update(vars(new))
        self.data[slot.key] = slot
        self.stage_one.move_to_end(slot)

    def get(self, item: StoreItem) -> None:
        """Record an access to ``item``, promoting it to the second segment if it is in the first."""
        if item.stage == STAGE_TWO:
            if item in self.stage_two:
                self.stage_two.move_to_end(item)
            return

        if len(self.stage_two) < self.stage_two_cap:
            self.stage_one.pop(item, None)
            item.stage = STAGE_TWO
            self.stage_two[item] = None
            self.data[item.key] = item
            return

        back = next(iter(self.stage_two), None)
        if back is None:
            return
        saved = replace(back)
        vars(back).update(vars(item))
        vars(item).update(vars(saved))
        back.stage = STAGE_TWO
        item.stage = STAGE_ONE

        self.data[item.key] = item
        self.data[back.key] = back
        if item in self.stage_one:
            self.stage_one.move_to_end(item)
        self.stage_two.move_to_end(back)

    def victim(self) -> StoreItem | None:
        """The item that would be replaced next, or ``None`` while there is room."""
        if len(self) < self._capacity():
            return None
        return next(iter(self.stage_one), None)