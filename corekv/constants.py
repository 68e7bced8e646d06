"""Store-wide constants and the CRC-32C checksum."""

from __future__ import annotations

import os

MAX_LEVEL_NUM = 7
DEFAULT_VALUE_THRESHOLD = 1024

MANIFEST_FILENAME = "MANIFEST"
MANIFEST_REWRITE_FILENAME = "REWRITEMANIFEST"
MANIFEST_DELETIONS_REWRITE_THRESHOLD = 10000
MANIFEST_DELETIONS_RATIO = 10
DEFAULT_FILE_FLAG = os.O_RDWR | os.O_CREAT | os.O_APPEND
DEFAULT_FILE_MODE = 0o666
MAX_VALUE_LOG_SIZE = 10 << 20
DATASYNC_FILE_FLAG = 0x0
# Largest possible varint-encoded header.
MAX_HEADER_SIZE = 21
VLOG_HEADER_SIZE = 0
MAX_VLOG_FILE_SIZE = 0xFFFFFFFF
MI = 1 << 20
KV_WRITE_CH_CAPACITY = 1000

BIT_DELETE = 1 << 0
BIT_VALUE_POINTER = 1 << 1

MAGIC_TEXT = b"HARD"
MAGIC_VERSION = 1

CRC32_SIZE = 4
MAX_UINT32 = 0xFFFFFFFF
MAX_UINT64 = 0xFFFFFFFFFFFFFFFF

_CASTAGNOLI_POLY = 0x82F63B78


def _make_table(poly: int) -> tuple[int, ...]:
    table = []
    for n in range(256):
        crc = n
        for _ in range(8):
            crc = (crc >> 1) ^ poly if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


CASTAGNOLI_CRC_TABLE = _make_table(_CASTAGNOLI_POLY)


def crc32c(data: bytes, crc: int = 0) -> int:
    """Return the CRC-32C of ``data``, continuing from a previous ``crc``."""
    table = CASTAGNOLI_CRC_TABLE
    value = ~crc & MAX_UINT32
    for byte in data:
        value = table[(value ^ byte) & 0xFF] ^ (value >> 8)
    return ~value & MAX_UINT32