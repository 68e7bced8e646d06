"""Bloom filters over 32-bit key hashes, laid out as in LevelDB."""

from __future__ import annotations

import math
import struct
from collections.abc import Iterable

from corekv.constants import MAX_UINT32

_MAX_K = 30
_MIN_BITS = 64


def _rotate(h: int) -> int:
    return ((h >> 17) | (h << 15)) & MAX_UINT32


class Filter(bytes):
    """An encoded bloom filter: the bit array followed by one byte holding k."""

    def may_contain_key(self, key: bytes) -> bool:
        """Whether ``key`` may be in the set; false positives are possible."""
        return self.may_contain(bloom_hash(key))

    def may_contain(self, h: int) -> bool:
        """Whether a key with hash ``h`` may be in the set."""
        if len(self) < 2:
            return False
        k = self[-1]
        if k > _MAX_K:
            # Reserved for other encodings of short filters: treat as a match.
            return True
        n_bits = 8 * (len(self) - 1)
        h &= MAX_UINT32
        delta = _rotate(h)
        for _ in range(k):
            bit_pos = h % n_bits
            if not self[bit_pos // 8] & (1 << (bit_pos % 8)):
                return False
            h = (h + delta) & MAX_UINT32
        return True


def new_filter(keys: Iterable[int], bits_per_key: int) -> Filter:
    """Build a filter holding the given key hashes with about ``bits_per_key`` bits each."""
    hashes = list(keys)
    bits_per_key = max(bits_per_key, 0)
    # 0.69 is approximately ln(2).
    k = min(max(int(bits_per_key * 0.69), 1), _MAX_K)

    n_bits = max(len(hashes) * bits_per_key, _MIN_BITS)
    n_bytes = (n_bits + 7) // 8
    n_bits = n_bytes * 8
    bitmap = bytearray(n_bytes + 1)

    for h in hashes:
        h &= MAX_UINT32
        delta = _rotate(h)
        for _ in range(k):
            bit_pos = h % n_bits
            bitmap[bit_pos // 8] |= 1 << (bit_pos % 8)
            h = (h + delta) & MAX_UINT32

    bitmap[n_bytes] = k
    return Filter(bytes(bitmap))


def bloom_bits_per_key(num_entries: int, fp: float) -> int:
    """Bits per key needed to reach the false-positive rate ``fp``."""
    size = -1 * num_entries * math.log(fp) / math.pow(0.69314718056, 2)
    return int(math.ceil(size / num_entries))


def bloom_hash(data: bytes) -> int:
    """A Murmur-like 32-bit hash of ``data``."""
    seed = 0xBC9F1D34
    m = 0xC6A4A793
    data = bytes(data)
    h = (seed ^ ((len(data) * m) & MAX_UINT32)) & MAX_UINT32
    whole = len(data) - len(data) % 4
    for (word,) in struct.iter_unpack("<I", data[:whole]):
        h = (h + word) & MAX_UINT32
        h = (h * m) & MAX_UINT32
        h ^= h >> 16
    rest = data[whole:]
    if rest:
        if len(rest) == 3:
            h = (h + (rest[2] << 16)) & MAX_UINT32
        if len(rest) >= 2:
            h = (h + (rest[1] << 8)) & MAX_UINT32
        h = (h + rest[0]) & MAX_UINT32
        h = (h * m) & MAX_UINT32
        h ^= h >> 24
    return h