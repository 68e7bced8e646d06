"""Bound the number of concurrent workers and collect their errors."""

from __future__ import annotations

import threading
from collections import deque


class Throttle:
    """Lets at most ``max_workers`` run at once and gathers their failures."""

    def __init__(self, max_workers: int) -> None:
        if max_workers < 0:
            raise ValueError("max_workers must not be negative")
        self._cond = threading.Condition()
        self._max = max_workers
        self._active = 0
        self._errors: deque[BaseException] = deque()
        self._finished = False
        self._finish_error: BaseException | None = None

    def do(self) -> None:
        """Claim a worker slot, blocking while all are busy.

        Raises an error reported by an earlier worker, if one is pending.
        """
        with self._cond:
            while True:
                if self._finished:
                    raise RuntimeError("throttle already finished")
                if self._errors:
                    raise self._errors.popleft()
                if self._active < self._max:
                    self._active += 1
                    return
                self._cond.wait()

    def done(self, err: BaseException | None = None) -> None:
        """Release a slot, recording ``err`` if the work failed."""
        with self._cond:
            if err is not None:
                self._errors.append(err)
            if self._active == 0:
                raise RuntimeError("Throttle Do Done mismatch")
            self._active -= 1
            self._cond.notify_all()

    def finish(self) -> None:
        """Wait for all workers, then raise the first error any reported.

        Only the first call waits; later calls raise the same error again.
        """
        with self._cond:
            if not self._finished:
                self._cond.wait_for(lambda: self._active == 0)
                if not self._finished:
                    self._finished = True
                    self._finish_error = self._errors[0] if self._errors else None
                    self._errors.clear()
                    self._cond.notify_all()
            error = self._finish_error
        if error is not None:
            raise error