"""Memory-mapping of files used by table and log storage."""

from __future__ import annotations

import mmap
from typing import Any, Union

FileLike = Union[int, Any]


def _fileno(fd: FileLike) -> int:
    if isinstance(fd, int):
        return fd
    fileno = getattr(fd, "fileno", None)
    if fileno is None:
        raise TypeError(f"expected a file descriptor or file object, got {type(fd).__name__}")
    return fileno()


def _check_open(mapping: mmap.mmap) -> None:
    if mapping.closed:
        raise ValueError("mapping is closed")


def mmap_file(fd: FileLike, writable: bool, size: int) -> mmap.mmap:
    """Map the first ``size`` bytes of ``fd`` into memory, shared with the file.

    With ``writable`` set, writes to the mapping reach the file; otherwise the
    mapping is read-only. ``size`` must be positive and within the file.
    """
    if size <= 0:
        raise ValueError(f"invalid mapping size: {size}")
    access = mmap.ACCESS_WRITE if writable else mmap.ACCESS_READ
    return mmap.mmap(_fileno(fd), size, access=access)


def munmap(mapping: mmap.mmap) -> None:
    """Unmap a mapping made by ``mmap_file``; unmapping twice is an error."""
    if len(mapping) == 0 if not mapping.closed else True:
        raise ValueError("mapping is closed or empty")
    mapping.close()


def madvise(mapping: mmap.mmap, readahead: bool) -> None:
    """Advise the kernel of the access pattern: sequential-friendly or random.

    Pass ``readahead=False`` when pages will be touched in random order. On
    platforms without ``madvise`` the advice is ignored.
    """
    _check_open(mapping)
    advise = getattr(mapping, "madvise", None)
    if advise is None:
        return
    advice = mmap.MADV_NORMAL if readahead else mmap.MADV_RANDOM
    advise(advice)


def msync(mapping: mmap.mmap) -> None:
    """Write modified pages of the mapping back to the file."""
    _check_open(mapping)
    mapping.flush()


def mremap(mapping: mmap.mmap, size: int) -> mmap.mmap:
    """Resize the mapping to ``size`` bytes and return it.

    The underlying file is resized to match, so the whole mapping stays backed.
    """
    _check_open(mapping)
    if size <= 0:
        raise ValueError(f"invalid mapping size: {size}")
    mapping.resize(size)
    return mapping