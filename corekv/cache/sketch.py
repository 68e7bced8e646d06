"""Count-min sketch of 4-bit counters used to estimate access frequency."""

from __future__ import annotations

import random

CM_DEPTH = 4
_COUNTER_MAX = 15


def next_2_power(x: int) -> int:
    """Smallest power of two not below ``x``; 0 for non-positive ``x``."""
    if x <= 0:
        return 0
    return 1 << (x - 1).bit_length()


class CmSketch:
    """Approximate frequency counter with ``CM_DEPTH`` rows of 4-bit counters."""

    def __init__(self, num_counters: int, rng: random.Random | None = None) -> None:
        if num_counters <= 0:
            raise ValueError("cmSketch: invalid numCounters")
        counters = next_2_power(num_counters)
        self._mask = counters - 1
        source = rng if rng is not None else random.Random()
        self._seeds = [source.getrandbits(64) for _ in range(CM_DEPTH)]
        # Two counters share each byte.
        self._rows = [bytearray(max(counters // 2, 1)) for _ in range(CM_DEPTH)]

    def _slots(self, hashed: int):
        for seed, row in zip(self._seeds, self._rows):
            n = (hashed ^ seed) & self._mask
            yield row, n >> 1, (n & 1) * 4

    def increment(self, hashed: int) -> None:
        """Count one more occurrence of ``hashed``; counters saturate at 15."""
        for row, index, shift in self._slots(hashed):
            if (row[index] >> shift) & 0x0F < _COUNTER_MAX:
                row[index] += 1 << shift

    def estimate(self, hashed: int) -> int:
        """Smallest counter for ``hashed`` across all rows."""
        return min(
            [255] + [(row[index] >> shift) & 0x0F for row, index, shift in self._slots(hashed)]
        )

    def reset(self) -> None:
        """Halve every counter."""
        for row in self._rows:
            row[:] = bytes((b >> 1) & 0x77 for b in row)

    def clear(self) -> None:
        """Zero every counter."""
        for row in self._rows:
            row[:] = bytes(len(row))