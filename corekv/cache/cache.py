"""A W-TinyLFU style cache: window LRU, segmented LRU and frequency-based admission."""

from __future__ import annotations

import hashlib
import threading
from typing import Any

from corekv.cache.bloom import new_filter
from corekv.cache.lru import StoreItem, WindowLRU
from corekv.cache.sketch import CmSketch
from corekv.cache.slru import SegmentedLRU
from corekv.constants import MAX_UINT32, MAX_UINT64
from corekv.keys import mem_hash, mem_hash_string

_LRU_PCT = 1


def _conflict_hash(data: bytes) -> int:
    return int.from_bytes(hashlib.blake2b(data, digest_size=8).digest(), "little")


def key_to_hash(key: Any) -> tuple[int, int]:
    """Return the key hash and a second hash used to detect collisions."""
    if key is None:
        return 0, 0
    if isinstance(key, bool):
        raise TypeError("Key type not supported")
    if isinstance(key, int):
        return key & MAX_UINT64, 0
    if isinstance(key, str):
        return mem_hash_string(key), _conflict_hash(key.encode("utf-8", "surrogatepass"))
    if isinstance(key, (bytes, bytearray, memoryview)):
        data = bytes(key)
        return mem_hash(data), _conflict_hash(data)
    raise TypeError("Key type not supported")


class Cache:
    """Thread-safe cache holding about ``size`` entries."""

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"cache size must be positive: {size}")
        lru_size = max(_LRU_PCT * size // 100, 1)
        slru_size = max(int(size * ((100 - _LRU_PCT) / 100.0)), 1)
        stage_one = max(int(0.2 * slru_size), 1)

        self._data: dict[int, StoreItem] = {}
        self._lru = WindowLRU(lru_size, self._data)
        self._slru = SegmentedLRU(self._data, stage_one, slru_size - stage_one)
        self._door = new_filter(size, 0.01)
        self._sketch = CmSketch(size)
        self._lock = threading.Lock()
        self._t = 0
        # Number of reads after which frequencies age; 0 disables aging.
        self._threshold = 0

    def set(self, key: Any, value: Any) -> bool:
        """Store ``value``; an entry pushed out of the window may be admitted or dropped."""
        key_hash, conflict = key_to_hash(key)
        with self._lock:
            item = StoreItem(stage=0, key=key_hash, conflict=conflict, value=value)
            evicted, was_evicted = self._lru.add(item)
            if not was_evicted:
                return True

            victim = self._slru.victim()
            if victim is None:
                self._slru.add(evicted)
                return True

            if not self._door.allow(key_hash & MAX_UINT32):
                return True

            victim_count = self._sketch.estimate(victim.key)
            evicted_count = self._sketch.estimate(evicted.key)
            if evicted_count < victim_count:
                return True

            self._slru.add(evicted)
            return True

    def get(self, key: Any) -> tuple[Any, bool]:
        """Return ``(value, True)`` when cached, else ``(None, False)``."""
        key_hash, conflict = key_to_hash(key)
        with self._lock:
            self._t += 1
            if self._t == self._threshold:
                self._sketch.reset()
                self._door.reset()
                self._t = 0

            item = self._data.get(key_hash)
            if item is None or item.conflict != conflict:
                self._sketch.increment(key_hash)
                return None, False

            self._sketch.increment(item.key)
            value = item.value
            if item.stage == 0:
                self._lru.get(item)
            else:
                self._slru.get(item)
            return value, True

    def delete(self, key: Any) -> tuple[Any, bool]:
        """Forget ``key``; return ``(conflict hash, True)`` if it was cached, else ``(0, False)``."""
        key_hash, conflict = key_to_hash(key)
        with self._lock:
            item = self._data.get(key_hash)
            if item is None:
                return 0, False
            if conflict != 0 and conflict != item.conflict:
                return 0, False
            del self._data[key_hash]
            return item.conflict, True