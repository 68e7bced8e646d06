"""Signal background workers to stop and wait for them to finish."""

from __future__ import annotations

import threading


class Closer:
    """Pairs a close signal with a count of workers that must acknowledge it."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._count = 0
        self.close_signal = threading.Event()

    def add(self, n: int) -> None:
        """Register ``n`` more workers (negative ``n`` removes them)."""
        with self._cond:
            if self._count + n < 0:
                raise ValueError("negative worker count")
            self._count += n
            if self._count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        """Report that one worker has released its resources."""
        self.add(-1)

    def close(self) -> None:
        """Signal all workers and block until each has called ``done``."""
        with self._cond:
            if self.close_signal.is_set():
                raise RuntimeError("closer already closed")
            self.close_signal.set()
            self._cond.wait_for(lambda: self._count == 0)

    def wait_signal(self, timeout: float | None = None) -> bool:
        """Wait for the close signal; return whether it was given."""
        return self.close_signal.wait(timeout)