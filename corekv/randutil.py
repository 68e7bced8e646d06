"""Thread-safe random helpers and random test entries."""

from __future__ import annotations

import random
import threading
import time

from corekv.codec import Entry

ALPHABET = (
    "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "~=+%^*/()[]{}/!@#$?|©®😁😭🉑️🐂㎡硬核课堂"
)

_rng = random.Random()
_lock = threading.Lock()


def _check_positive(n: int) -> None:
    if n <= 0:
        raise ValueError(f"invalid argument, must be positive: {n}")


def int63n(n: int) -> int:
    """Random integer in ``[0, n)``; ``n`` must be positive."""
    _check_positive(n)
    with _lock:
        return _rng.randrange(n)


def rand_n(n: int) -> int:
    """Random integer in ``[0, n)``; ``n`` must be positive."""
    _check_positive(n)
    with _lock:
        return _rng.randrange(n)


def rand_float() -> float:
    """Random float in ``[0.0, 1.0)``."""
    with _lock:
        return _rng.random()


def rand_str(length: int) -> str:
    """Random string of ``length`` characters, including non-ASCII ones."""
    with _lock:
        return "".join(_rng.choice(ALPHABET) for _ in range(length))


def build_entry() -> Entry:
    """A random entry whose expiry is twelve hours from now, in milliseconds."""
    key = (rand_str(16) + "12345678").encode("utf-8")
    value = rand_str(128).encode("utf-8")
    expires_at = int((time.time() + 12 * 3600) * 1000)
    return Entry(key=key, value=value, expires_at=expires_at)