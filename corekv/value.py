"""Value pointers, integer byte conversions and entry liveness checks."""

from __future__ import annotations

import struct
import time
from dataclasses import dataclass
from typing import Any, Callable

from corekv.constants import BIT_DELETE, BIT_VALUE_POINTER

# Size of the value log header: key id (8 bytes) and base IV (12 bytes).
VALUE_LOG_HEADER_SIZE = 20

_VPTR = struct.Struct("<III")
VPTR_SIZE = _VPTR.size


@dataclass(frozen=True)
class ValuePtr:
    """Location of a value inside a value log file."""

    length: int = 0
    offset: int = 0
    fid: int = 0

    def less(self, other: ValuePtr | None) -> bool:
        """Order by file id, then offset, then length; ``None`` is never greater."""
        if other is None:
            return False
        return (self.fid, self.offset, self.length) < (other.fid, other.offset, other.length)

    def is_zero(self) -> bool:
        return self.fid == 0 and self.offset == 0 and self.length == 0

    def encode(self) -> bytes:
        """Serialise to a fixed 12-byte layout: length, offset, fid."""
        return _VPTR.pack(self.length, self.offset, self.fid)

    @classmethod
    def decode(cls, data: bytes) -> ValuePtr:
        """Read a pointer from the first 12 bytes of ``data``."""
        if len(data) < VPTR_SIZE:
            raise ValueError(f"value pointer needs {VPTR_SIZE} bytes, got {len(data)}")
        length, offset, fid = _VPTR.unpack_from(data)
        return cls(length=length, offset=offset, fid=fid)


def is_value_ptr(entry: Any) -> bool:
    """Whether the entry's value is a pointer into the value log."""
    return entry.meta & BIT_VALUE_POINTER > 0


def _require(data: bytes, size: int) -> None:
    if len(data) < size:
        raise ValueError(f"need at least {size} bytes, got {len(data)}")


def bytes_to_u32(data: bytes) -> int:
    """Big-endian uint32 from the first 4 bytes."""
    _require(data, 4)
    return int.from_bytes(data[:4], "big")


def bytes_to_u64(data: bytes) -> int:
    """Big-endian uint64 from the first 8 bytes."""
    _require(data, 8)
    return int.from_bytes(data[:8], "big")


def u32_to_bytes(v: int) -> bytes:
    return v.to_bytes(4, "big")


def u64_to_bytes(v: int) -> bytes:
    return v.to_bytes(8, "big")


def u32_slice_to_bytes(values: list[int]) -> bytes:
    """Pack uint32 values in native byte order."""
    if not values:
        return b""
    return struct.pack(f"={len(values)}I", *values)


def bytes_to_u32_slice(data: bytes) -> list[int]:
    """Unpack native-order uint32 values; trailing partial words are ignored."""
    count = len(data) // 4
    if count == 0:
        return []
    return list(struct.unpack_from(f"={count}I", data))


def run_callback(cb: Callable[[], Any] | None) -> None:
    if cb is not None:
        cb()


def is_deleted_or_expired(meta: int, expires_at: int) -> bool:
    """True when the delete bit is set or the expiry time has passed."""
    if meta & BIT_DELETE > 0:
        return True
    if expires_at == 0:
        return False
    return expires_at <= int(time.time())


def discard_entry(e: Any, vs: Any) -> bool:
    """Whether the log entry ``e`` is stale given the current LSM value ``vs``."""
    if is_deleted_or_expired(vs.meta, vs.expires_at):
        return True
    # Value stored inline in the LSM tree: the log copy is obsolete.
    return (vs.meta & BIT_VALUE_POINTER) == 0