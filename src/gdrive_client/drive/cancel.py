"""Cancellation and deadline signal threaded through every remote call."""

from __future__ import annotations

import contextlib
import logging
import threading
import time
from collections.abc import Callable, Iterator

from gdrive_client.drive.errors import DriveCancelledError

logger = logging.getLogger(__name__)


class CancelScope:
    """Caller-owned cancellation signal with an optional deadline.

    A scope can be cancelled from any thread. Callbacks registered through
    ``bind()`` run on cancellation; transfers use this to close the in-flight
    HTTP response so a blocked read returns promptly.

    Only body reads are interrupted. A request still waiting for response
    headers (a listing page, the initial GET of a download, the reply to an
    upload body) runs until the server answers or its per-request timeout
    expires. That timeout is capped by the deadline, so deadlines stay
    prompt; an explicit ``cancel()`` takes effect when the call returns, and
    the late response is discarded.
    """

    def __init__(
        self,
        timeout: float | None = None,
        event: threading.Event | None = None,
    ) -> None:
        """Initialise the scope.

        Args:
            timeout: Seconds from now after which the scope counts as expired.
                None means no deadline.
            event: Existing event to share with other scopes or caller code.
        """
        self._event = event or threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        """True once ``cancel()`` was called or the deadline has passed."""
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def request_timeout(self, default: float) -> float:
        """Timeout for a single HTTP call: the remaining time capped at ``default``."""
        remaining = self.remaining()
        if remaining is None:
            return default
        # requests treats 0 as "no timeout" on some adapters.
        return max(min(default, remaining), 0.001)

    def cancel(self) -> None:
        """Cancel the scope and run registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
        logger.info("[cancel] scope cancelled; callbacks:%d", len(callbacks))
        for callback in callbacks:
            callback()

    def check(self, operation: str, bytes_written: int = 0) -> None:
        """Raise DriveCancelledError if the scope is cancelled or expired.

        Args:
            operation: Name of the operation, used in the error message.
            bytes_written: Bytes already delivered, reported on the error.

        Raises:
            DriveCancelledError: If the scope is no longer live.
        """
        if not self.cancelled:
            return
        reason = "cancelled" if self._event.is_set() else "deadline exceeded"
        raise DriveCancelledError(f"{operation}: {reason}", bytes_written=bytes_written)

    @contextlib.contextmanager
    def bind(self, callback: Callable[[], None]) -> Iterator[None]:
        """Register ``callback`` to run on cancellation while the block executes.

        If the scope is already cancelled the callback runs immediately.
        """
        with self._lock:
            already = self._event.is_set()
            if not already:
                self._callbacks.append(callback)
        if already:
            callback()
        try:
            yield
        finally:
            with self._lock, contextlib.suppress(ValueError):
                self._callbacks.remove(callback)
