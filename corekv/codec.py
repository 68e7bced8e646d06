"""Binary encodings for values, log entries, value-log headers and WAL records."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, BinaryIO

from corekv.constants import CRC32_SIZE, MAX_HEADER_SIZE, MAX_UINT64, crc32c

_MAX_VARINT_LEN64 = 10
_VALUE_PTR_SIZE = 12


def size_varint(x: int) -> int:
    """Number of bytes needed to encode ``x`` as an unsigned varint."""
    n = 1
    x >>= 7
    while x:
        n += 1
        x >>= 7
    return n


def put_uvarint(x: int) -> bytes:
    """Encode a 64-bit unsigned integer as a little-endian base-128 varint."""
    if not 0 <= x <= MAX_UINT64:
        raise ValueError(f"value out of uint64 range: {x}")
    out = bytearray()
    while x >= 0x80:
        out.append((x & 0x7F) | 0x80)
        x >>= 7
    out.append(x)
    return bytes(out)


def decode_uvarint(data: bytes) -> tuple[int, int]:
    """Decode a varint from the start of ``data``; return (value, bytes used)."""
    x = 0
    shift = 0
    for i, b in enumerate(data):
        if i == _MAX_VARINT_LEN64:
            raise ValueError("varint overflows a 64-bit integer")
        if b < 0x80:
            if i == _MAX_VARINT_LEN64 - 1 and b > 1:
                raise ValueError("varint overflows a 64-bit integer")
            return x | (b << shift), i + 1
        x |= (b & 0x7F) << shift
        shift += 7
    raise ValueError("truncated varint")


def _next_byte(reader: Any) -> int | None:
    read_byte = getattr(reader, "read_byte", None)
    if read_byte is not None:
        try:
            return read_byte()
        except EOFError:
            return None
    chunk = reader.read(1)
    return chunk[0] if chunk else None


def read_uvarint(reader: Any) -> int:
    """Read a varint byte by byte from ``reader``.

    Raises ``EOFError`` when the stream ends, and ``ValueError`` on overflow.
    """
    x = 0
    shift = 0
    for i in range(_MAX_VARINT_LEN64):
        b = _next_byte(reader)
        if b is None:
            raise EOFError("EOF" if i == 0 else "unexpected EOF")
        if b < 0x80:
            if i == _MAX_VARINT_LEN64 - 1 and b > 1:
                raise ValueError("varint overflows a 64-bit integer")
            return x | (b << shift)
        x |= (b & 0x7F) << shift
        shift += 7
    raise ValueError("varint overflows a 64-bit integer")


@dataclass
class ValueStruct:
    """A value as stored in memory tables: meta byte, expiry and raw bytes."""

    meta: int = 0
    value: bytes = b""
    expires_at: int = 0

    def encoded_size(self) -> int:
        return len(self.value) + 1 + size_varint(self.expires_at)

    def encode_value(self) -> bytes:
        """Encode as meta byte, varint expiry, then the value bytes."""
        return bytes([self.meta]) + put_uvarint(self.expires_at) + bytes(self.value)

    @classmethod
    def decode_value(cls, data: bytes) -> ValueStruct:
        if not data:
            raise ValueError("empty value encoding")
        expires_at, size = decode_uvarint(data[1:])
        return cls(meta=data[0], value=bytes(data[1 + size:]), expires_at=expires_at)


@dataclass
class Entry:
    """A key/value pair as written by callers and read back from logs."""

    key: bytes = b""
    value: bytes = b""
    expires_at: int = 0
    meta: int = 0
    version: int = 0
    offset: int = 0
    hlen: int = 0
    val_threshold: int = 0

    def with_ttl(self, seconds: float | timedelta) -> Entry:
        """Set the expiry to now plus ``seconds``; returns the entry itself."""
        if isinstance(seconds, timedelta):
            seconds = seconds.total_seconds()
        self.expires_at = int(time.time() + seconds)
        return self

    def encoded_size(self) -> int:
        return len(self.value) + size_varint(self.meta) + size_varint(self.expires_at)

    def estimate_size(self, threshold: int) -> int:
        """Size in the LSM tree: inline value below ``threshold``, else a pointer."""
        if len(self.value) < threshold:
            return len(self.key) + len(self.value) + 1
        return len(self.key) + _VALUE_PTR_SIZE + 1

    def is_zero(self) -> bool:
        return len(self.key) == 0

    def log_header_len(self) -> int:
        return self.hlen

    def log_offset(self) -> int:
        return self.offset


class HashReader:
    """Wraps a binary stream, counting bytes read and keeping a running CRC-32C."""

    def __init__(self, reader: BinaryIO) -> None:
        self._reader = reader
        self._crc = 0
        self.bytes_read = 0

    def read(self, n: int) -> bytes:
        """Read up to ``n`` bytes, feeding them to the checksum."""
        data = self._reader.read(n)
        if data:
            self.bytes_read += len(data)
            self._crc = crc32c(data, self._crc)
        return data

    def read_byte(self) -> int:
        data = self.read(1)
        if not data:
            raise EOFError("EOF")
        return data[0]

    def sum32(self) -> int:
        return self._crc


@dataclass
class Header:
    """Value-log entry header: meta, key length, value length, expiry."""

    klen: int = 0
    vlen: int = 0
    expires_at: int = 0
    meta: int = 0

    def encode(self) -> bytes:
        return (
            bytes([self.meta])
            + put_uvarint(self.klen)
            + put_uvarint(self.vlen)
            + put_uvarint(self.expires_at)
        )

    @classmethod
    def decode(cls, data: bytes) -> tuple[Header, int]:
        """Decode from a buffer; return the header and the bytes consumed."""
        if not data:
            raise ValueError("empty header encoding")
        index = 1
        klen, count = decode_uvarint(data[index:])
        index += count
        vlen, count = decode_uvarint(data[index:])
        index += count
        expires_at, count = decode_uvarint(data[index:])
        header = cls(klen=klen & 0xFFFFFFFF, vlen=vlen & 0xFFFFFFFF,
                     expires_at=expires_at, meta=data[0])
        return header, index + count

    @classmethod
    def decode_from(cls, reader: HashReader) -> tuple[Header, int]:
        """Decode from a ``HashReader``; return the header and its bytes read so far."""
        meta = reader.read_byte()
        klen = read_uvarint(reader)
        vlen = read_uvarint(reader)
        expires_at = read_uvarint(reader)
        header = cls(klen=klen & 0xFFFFFFFF, vlen=vlen & 0xFFFFFFFF,
                     expires_at=expires_at, meta=meta)
        return header, reader.bytes_read


@dataclass
class WalHeader:
    """Write-ahead log record header."""

    key_len: int = 0
    value_len: int = 0
    meta: int = 0
    expires_at: int = 0

    def encode(self) -> bytes:
        return (
            put_uvarint(self.key_len)
            + put_uvarint(self.value_len)
            + put_uvarint(self.meta)
            + put_uvarint(self.expires_at)
        )

    @classmethod
    def decode(cls, reader: HashReader) -> tuple[WalHeader, int]:
        key_len = read_uvarint(reader)
        value_len = read_uvarint(reader)
        meta = read_uvarint(reader)
        expires_at = read_uvarint(reader)
        header = cls(
            key_len=key_len & 0xFFFFFFFF,
            value_len=value_len & 0xFFFFFFFF,
            meta=meta & 0xFF,
            expires_at=expires_at,
        )
        return header, reader.bytes_read


def wal_codec(entry: Entry) -> bytes:
    """Encode a WAL record: header | key | value | big-endian CRC-32C."""
    header = WalHeader(
        key_len=len(entry.key),
        value_len=len(entry.value),
        expires_at=entry.expires_at,
    )
    body = header.encode() + bytes(entry.key) + bytes(entry.value)
    return body + crc32c(body).to_bytes(CRC32_SIZE, "big")


def estimate_wal_codec_size(entry: Entry) -> int:
    """Upper bound on the bytes ``wal_codec`` produces for ``entry``."""
    return len(entry.key) + len(entry.value) + 8 + CRC32_SIZE + MAX_HEADER_SIZE