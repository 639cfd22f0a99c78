"""Cancellable operation context.

Every store operation accepts an ``OperationContext``. Cancellation is
cooperative: the store polls ``err()`` before starting blocking work and
before descending into each directory during a listing, never in the middle
of a single filesystem call.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from .errors import OperationCancelled, OperationDeadlineExceeded, OperationError

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05


class OperationContext:
    """Cancellation signal with an optional deadline.

    Contexts form a tree: a child created with ``child()`` reports the
    parent's cancellation and never outlives the parent's deadline.

    Thread Safety:
        ``cancel()`` may be called from any thread; state is an Event plus an
        immutable deadline.

    Example:
        >>> ctx = OperationContext(timeout=5.0)
        >>> data = store.read_object(cid, ctx=ctx)
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        deadline: Optional[float] = None,
        parent: Optional[OperationContext] = None,
    ):
        """
        Args:
            timeout: Seconds from now until the deadline
            deadline: Absolute deadline on the time.monotonic() clock
            parent: Context whose cancellation and deadline this one inherits
        """
        if timeout is not None:
            timeout_deadline = time.monotonic() + timeout
            deadline = timeout_deadline if deadline is None else min(deadline, timeout_deadline)
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)

        self._deadline = deadline
        self._parent = parent
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> OperationContext:
        """A context that is never cancelled and has no deadline."""
        return cls()

    def child(self, timeout: Optional[float] = None) -> OperationContext:
        """Derive a context cancelled together with this one."""
        return type(self)(timeout=timeout, parent=self)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    def cancel(self) -> None:
        """Signal cancellation to every operation using this context."""
        self._cancelled.set()

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def err(self) -> Optional[OperationError]:
        """Return the error an operation should fail with, or None.

        Cancellation takes precedence over an expired deadline.
        """
        if self.cancelled:
            return OperationCancelled()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return OperationDeadlineExceeded()
        return None

    def check(self, debug: bool = False) -> None:
        """Raise the pending context error, if any."""
        error = self.err()
        if debug:
            logger.debug("context state: %s", error.kind.value if error else "normal")
        if error is not None:
            raise error

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled, the deadline passes or timeout elapses.

        Returns:
            True if the context is done (cancelled or expired)
        """
        end = None if timeout is None else time.monotonic() + timeout
        while self.err() is None:
            now = time.monotonic()
            if end is not None and now >= end:
                return False
            steps = [
                s for s in (
                    None if end is None else end - now,
                    None if self._deadline is None else self._deadline - now,
                    # Parent cancellation does not set our Event; poll for it
                    None if self._parent is None else _POLL_INTERVAL,
                ) if s is not None
            ]
            self._cancelled.wait(min(steps) if steps else None)
        return True

    def __enter__(self) -> OperationContext:
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()
