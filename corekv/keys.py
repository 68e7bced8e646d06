"""Helpers for versioned keys and byte copies."""

from __future__ import annotations

from corekv.constants import MAX_UINT64

_TS_SIZE = 8


def parse_key(key: bytes) -> bytes:
    """Return the user key without its 8-byte timestamp suffix."""
    if len(key) < _TS_SIZE:
        return key
    return key[:-_TS_SIZE]


def parse_ts(key: bytes) -> int:
    """Return the timestamp stored in the key's suffix, or 0 for short keys."""
    if len(key) <= _TS_SIZE:
        return 0
    return MAX_UINT64 - int.from_bytes(key[-_TS_SIZE:], "big")


def same_key(src: bytes, dst: bytes) -> bool:
    """Compare two keys ignoring their timestamp suffix."""
    if len(src) != len(dst):
        return False
    return parse_key(src) == parse_key(dst)


def key_with_ts(key: bytes, ts: int) -> bytes:
    """Append ``ts`` so that newer versions sort before older ones."""
    if not 0 <= ts <= MAX_UINT64:
        raise ValueError(f"timestamp out of range: {ts}")
    return bytes(key) + (MAX_UINT64 - ts).to_bytes(_TS_SIZE, "big")


def mem_hash(data: bytes) -> int:
    """Fast in-process hash of bytes; not stable across processes."""
    return hash(bytes(data)) & MAX_UINT64


def mem_hash_string(text: str) -> int:
    """Fast in-process hash of a string; not stable across processes."""
    return hash(text) & MAX_UINT64


def safe_copy(a: bytearray | bytes | None, src: bytes) -> bytearray | bytes:
    """Copy ``src`` into ``a`` when it is a bytearray, else return a new copy."""
    if isinstance(a, bytearray):
        a[:] = src
        return a
    return bytes(src)


def copy_bytes(a: bytes) -> bytes:
    """Return an independent copy of ``a``."""
    return bytes(a)


def value_size(value: bytes) -> int:
    """Accounting size charged for a value; values are not charged.

    Raises TypeError when ``value`` is not bytes-like.
    """
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"value must be bytes-like, not {type(value).__name__}")
    return 0