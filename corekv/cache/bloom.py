"""A mutable bloom filter used as the admission doorkeeper of the cache."""

from __future__ import annotations

import math

from corekv.constants import MAX_UINT32

__all__ = ["BloomFilter", "new_filter", "bloom_bits_per_key", "bloom_hash"]

_MAX_K = 30
_MIN_BITS = 64
_LN2 = 0.69314718056
_HASH_SEED = 0xBC9F1D34
_HASH_MUL = 0xC6A4A793


def _rotate(h: int) -> int:
    return ((h >> 17) | (h << 15)) & MAX_UINT32


def bloom_hash(data: bytes) -> int:
    """32-bit Murmur-like hash of ``data``."""
    data = bytes(data)
    h = (_HASH_SEED ^ ((len(data) * _HASH_MUL) & MAX_UINT32)) & MAX_UINT32
    full = len(data) - len(data) % 4
    for start in range(0, full, 4):
        h = (h + int.from_bytes(data[start:start + 4], "little")) & MAX_UINT32
        h = (h * _HASH_MUL) & MAX_UINT32
        h ^= h >> 16
    tail = data[full:]
    if tail:
        h = (h + int.from_bytes(tail, "little")) & MAX_UINT32
        h = (h * _HASH_MUL) & MAX_UINT32
        h ^= h >> 24
    return h


def bloom_bits_per_key(num_entries: int, fp: float) -> int:
    """Bits per key needed to reach the false-positive rate ``fp``."""
    size = -1 * num_entries * math.log(fp) / (_LN2 ** 2)
    return int(math.ceil(size / num_entries))


class BloomFilter:
    """Bloom filter over 32-bit hashes that keys can be added to over time."""

    def __init__(self, bitmap: bytes | bytearray, k: int) -> None:
        self.bitmap = bytearray(bitmap)
        self.k = k

    def __len__(self) -> int:
        return len(self.bitmap)

    def _bit_positions(self, h: int):
        n_bits = 8 * (len(self.bitmap) - 1)
        if n_bits <= 0:
            raise ValueError("bloom filter has no bits")
        h &= MAX_UINT32
        delta = _rotate(h)
        for _ in range(self.k):
            yield h % n_bits
            h = (h + delta) & MAX_UINT32

    def may_contain_key(self, key: bytes) -> bool:
        """Whether ``key`` may have been inserted; false positives are possible."""
        return self.may_contain(bloom_hash(key))

    def may_contain(self, h: int) -> bool:
        """Whether a key with hash ``h`` may have been inserted."""
        if len(self.bitmap) < 2:
            return False
        if self.k > _MAX_K:
            # Reserved for other encodings of short filters: treat as a match.
            return True
        return all(
            self.bitmap[pos // 8] & (1 << (pos % 8)) for pos in self._bit_positions(h)
        )

    def insert_key(self, key: bytes) -> bool:
        return self.insert(bloom_hash(key))

    def insert(self, h: int) -> bool:
        """Set the bits for hash ``h``."""
        if self.k > _MAX_K:
            return True
        for pos in self._bit_positions(h):
            self.bitmap[pos // 8] |= 1 << (pos % 8)
        return True

    def allow_key(self, key: bytes) -> bool:
        return self.allow(bloom_hash(key))

    def allow(self, h: int) -> bool:
        """Return whether ``h`` was already present, inserting it if it was not."""
        already = self.may_contain(h)
        if not already:
            self.insert(h)
        return already

    def reset(self) -> None:
        """Clear every byte of the bitmap."""
        self.bitmap[:] = bytes(len(self.bitmap))


def _init_filter(num_entries: int, bits_per_key: int) -> BloomFilter:
    bits_per_key = max(bits_per_key, 0)
    # 0.69 is approximately ln(2).
    k = min(max(int(bits_per_key * 0.69), 1), _MAX_K)
    n_bits = max(num_entries * bits_per_key, _MIN_BITS)
    n_bytes = (n_bits + 7) // 8
    bitmap = bytearray(n_bytes + 1)
    bitmap[n_bytes] = k
    return BloomFilter(bitmap, k)


def new_filter(num_entries: int, false_positive: float) -> BloomFilter:
    """An empty filter sized for ``num_entries`` keys at the given false-positive rate."""
    if num_entries <= 0:
        raise ValueError(f"num_entries must be positive: {num_entries}")
    if not 0 < false_positive < 1 or math.isnan(false_positive):
        raise ValueError(f"false_positive must be in (0, 1): {false_positive}")
    return _init_filter(num_entries, bloom_bits_per_key(num_entries, false_positive))