"""Cooperative cancellation for selector calls.

A CancellationToken is shared by every worker spawned for one call. Workers
check it between upstream requests; the caller waits on futures no longer
than remaining() and drops whatever has not finished.
"""

import threading
import time


class CancellationToken:
    """threading.Event plus an optional monotonic deadline."""

    def __init__(self, timeout_seconds: float | None = None):
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout_seconds if timeout_seconds else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def remaining(self) -> float | None:
        """Seconds until the deadline (None = no deadline, 0 when cancelled)."""
        if self._event.is_set():
            return 0.0
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled}, remaining={self.remaining()})"
