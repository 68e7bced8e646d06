"""Error types and small error-reporting helpers used across the store."""

from __future__ import annotations

import inspect
import os


class CoreKVError(Exception):
    """Base class for every error raised by the store."""

    default_message = "corekv error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class KeyNotFoundError(CoreKVError):
    """The key is not present."""

    default_message = "Key not found"


class EmptyKeyError(CoreKVError):
    """An empty key was passed to an update."""

    default_message = "Key cannot be empty"


class RewriteFailureError(CoreKVError):
    """A rewrite did not complete."""

    default_message = "reWrite failure"


class BadMagicError(CoreKVError):
    """A file does not start with the expected magic bytes."""

    default_message = "bad magic"


class BadChecksumError(CoreKVError):
    """A stored checksum is malformed."""

    default_message = "bad check sum"


class ChecksumMismatchError(CoreKVError):
    """Computed and stored checksums differ."""

    default_message = "checksum mismatch"


class TruncateError(CoreKVError):
    """A log must be truncated at the current position."""

    default_message = "Do truncate"


class StopIterationError(CoreKVError):
    """Raised by a callback to end an iteration early."""

    default_message = "Stop"


class FillTablesError(CoreKVError):
    """Compaction could not pick tables to fill."""

    default_message = "Unable to fill tables"


class BlockedWritesError(CoreKVError):
    """Writes are refused while the store is closing or being dropped."""

    default_message = "Writes are blocked, possibly due to DropAll or Close"


class TxnTooBigError(CoreKVError):
    """A batch is too large to fit in one request."""

    default_message = "Txn is too big to fit into one request"


class DeleteVlogFileError(CoreKVError):
    """A value log file should be removed."""

    default_message = "Delete vlog file"


class NoRoomError(CoreKVError):
    """There is no room left for a write."""

    default_message = "No room for write"


class InvalidRequestError(CoreKVError):
    """The request made by the caller is invalid."""

    default_message = "Invalid request"


class NoRewriteError(CoreKVError):
    """A value log GC attempt cleaned nothing up."""

    default_message = "Value log GC attempt didn't result in any cleanup"


class RejectedError(CoreKVError):
    """A value log GC request was refused."""

    default_message = "Value log GC request rejected"


def _caller_location(depth: int) -> str:
    frame = inspect.currentframe()
    try:
        for _ in range(depth + 1):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return "???:0"
        return f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}"
    finally:
        del frame


def cond_panic(condition: bool, error: BaseException | str) -> None:
    """Raise ``error`` when ``condition`` holds."""
    if not condition:
        return
    if isinstance(error, BaseException):
        raise error
    raise CoreKVError(str(error))


def log_err(err: BaseException | None) -> BaseException | None:
    """Print ``err`` with the caller's location when it is set; return it."""
    if err is not None:
        print(f"{_caller_location(2)} {err}")
    return err


def wrap_err(message: str, err: BaseException | None) -> BaseException | None:
    """Print ``message`` and ``err`` with the caller's location when set; return ``err``."""
    if err is not None:
        print(f"{message} {_caller_location(2)} {err}")
    return err