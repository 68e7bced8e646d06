"""File naming, directory syncing, key comparison and checksum helpers."""

from __future__ import annotations

import os
import re
from typing import BinaryIO

from corekv.constants import DATASYNC_FILE_FLAG, MAX_UINT64, crc32c
from corekv.errors import ChecksumMismatchError, CoreKVError, cond_panic, log_err
from corekv.value import bytes_to_u64

_SST_SUFFIX = ".sst"
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def fid(name: str) -> int:
    """Return the numeric id of an ``.sst`` file name, or 0 if it is not one."""
    base = os.path.basename(name)
    if not base.endswith(_SST_SUFFIX):
        return 0
    stem = base[: -len(_SST_SUFFIX)]
    if not _INT_PATTERN.fullmatch(stem):
        log_err(CoreKVError(f"invalid file id: {stem!r}"))
        return 0
    return int(stem) & MAX_UINT64


def vlog_file_path(dir_path: str, fid: int) -> str:
    return f"{dir_path}{os.sep}{fid:05d}.vlog"


def create_synced_file(filename: str, sync: bool) -> BinaryIO:
    """Create a new read-write file; raises ``FileExistsError`` if it exists."""
    flags = os.O_RDWR | os.O_CREAT | os.O_EXCL
    if sync:
        flags |= DATASYNC_FILE_FLAG
    fd = os.open(filename, flags, 0o600)
    return os.fdopen(fd, "r+b")


def file_name_sstable(directory: str, file_id: int) -> str:
    return os.path.join(directory, f"{file_id:05d}.sst")


def sync_dir(directory: str) -> None:
    """Fsync a directory so that newly created or removed entries are durable."""
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError as exc:
        raise OSError(exc.errno, f"While opening directory: {directory}. {exc.strerror}") from exc
    try:
        os.fsync(fd)
    except OSError as exc:
        raise OSError(exc.errno, f"While syncing directory: {directory}. {exc.strerror}") from exc
    finally:
        os.close(fd)


def load_id_map(directory: str) -> set[int]:
    """Ids of all ``.sst`` files in ``directory``; empty if it cannot be read."""
    ids: set[int] = set()
    try:
        entries = list(os.scandir(directory))
    except OSError as exc:
        log_err(exc)
        return ids
    for entry in entries:
        if entry.is_dir():
            continue
        file_id = fid(entry.name)
        if file_id != 0:
            ids.add(file_id)
    return ids


def _cmp(a: bytes, b: bytes) -> int:
    return (a > b) - (a < b)


def compare_keys(key1: bytes, key2: bytes) -> int:
    """Compare user keys first, then their 8-byte timestamp suffixes."""
    cond_panic(
        len(key1) <= 8 or len(key2) <= 8,
        ValueError(f"{key1!r},{key2!r} < 8"),
    )
    result = _cmp(key1[:-8], key2[:-8])
    if result:
        return result
    return _cmp(key1[-8:], key2[-8:])


def verify_checksum(data: bytes, expected: bytes) -> None:
    """Raise ``ChecksumMismatchError`` unless ``expected`` holds the CRC of ``data``."""
    actual = crc32c(data)
    expected_u64 = bytes_to_u64(expected)
    if actual != expected_u64:
        raise ChecksumMismatchError(
            f"actual: {actual}, expected: {expected_u64}: checksum mismatch"
        )


def calculate_checksum(data: bytes) -> int:
    return crc32c(data)