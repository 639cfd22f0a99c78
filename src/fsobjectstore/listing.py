"""Streaming enumeration of the objects in a bucket.

A listing runs a depth-first walk of the bucket directory in a background
thread and hands each discovered CID to the consumer through a queue of size
one. The walker blocks while the consumer is not ready, so a slow consumer
never causes unbounded buffering.

The walk ends in one of three ways, and the consumer sees the CID sequence end
in all of them:
- exhaustion: ``error`` stays None
- cancellation or deadline on the context: ``error`` is the context error
- a filesystem or other walker error: ``error`` is ``ObjectReadFailed``
  wrapping it

Emission order follows directory iteration order and is not stable across
filesystems.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Iterator, Optional

from .constants import HIDDEN_PREFIX
from .context import OperationContext
from .errors import ObjectReadFailed, ObjectStoreError, OperationError

logger = logging.getLogger(__name__)

# End-of-stream sentinel
_DONE = object()

# How often a blocked walker re-checks for close/cancellation
_POLL_INTERVAL = 0.05


class _Abandoned(Exception):
    """Raised inside the walker when the consumer closed the listing."""


class ObjectListing:
    """One-shot, lazily produced sequence of CIDs plus a terminal error slot.

    Iterate it to receive CIDs. Once iteration ends, ``error`` holds the
    reason the walk stopped early, or None on clean completion. Read the
    error after consuming the sequence; the walker cannot finish while
    the consumer is not draining it.

    Example:
        >>> with store.list_objects(ctx) as listing:
        ...     for cid in listing:
        ...         print(cid)
        ...     listing.raise_for_error()
    """

    def __init__(self, root: Path, ctx: Optional[OperationContext] = None, debug: bool = False):
        """Start walking root in a background thread.

        Args:
            root: Bucket directory to walk
            ctx: Operation context checked before each descent
            debug: Log every emitted CID
        """
        self.root = Path(root)
        self._ctx = ctx or OperationContext.background()
        self._debug = debug
        self._queue: queue.Queue = queue.Queue(maxsize=1)
        self._closed = threading.Event()
        self._exhausted = False
        self._error: Optional[ObjectStoreError] = None

        self._thread = threading.Thread(
            target=self._produce,
            name=f"fsobjectstore-list-{self.root.name}",
            daemon=True,
        )
        self._thread.start()

    # ---- Producer side ------------------------------------------------------

    def _produce(self) -> None:
        """Background thread: walk the tree, then signal end of stream."""
        try:
            self._walk(self.root)
        except _Abandoned:
            logger.debug("Listing of %s abandoned by consumer", self.root)
        except OperationError as e:
            if self._debug:
                logger.debug("Listing of %s stopped: %s", self.root, e)
            self._error = e
        except OSError as e:
            logger.error("Walking %s failed: %s", self.root, e)
            self._error = ObjectReadFailed(None, e, path=e.filename)
        except Exception as e:
            logger.exception("Listing of %s failed unexpectedly", self.root)
            self._error = ObjectReadFailed(None, e, path=self.root)
        finally:
            try:
                self._offer(_DONE, check_context=False)
            except _Abandoned:
                pass

    def _walk(self, path: Path) -> None:
        self._check_context()
        try:
            entries = os.scandir(path)
        except FileNotFoundError:
            # A bucket nobody has written to yet lists as empty
            if path == self.root:
                return
            raise

        with entries:
            for entry in entries:
                if entry.name.startswith(HIDDEN_PREFIX):
                    continue
                if entry.is_dir(follow_symlinks=False):
                    self._walk(Path(entry.path))
                elif entry.is_file(follow_symlinks=False):
                    if self._debug:
                        logger.debug("list object: %s", entry.name)
                    self._offer(entry.name)

    def _check_context(self) -> None:
        error = self._ctx.err()
        if error is not None:
            raise error

    def _offer(self, item: object, check_context: bool = True) -> None:
        """Block until the consumer takes item, the listing closes or the context ends."""
        while True:
            if self._closed.is_set():
                raise _Abandoned()
            if check_context:
                self._check_context()
            try:
                self._queue.put(item, timeout=_POLL_INTERVAL)
                return
            except queue.Full:
                continue

    # ---- Consumer side ------------------------------------------------------

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        while True:
            if self._exhausted:
                raise StopIteration
            try:
                item = self._queue.get(timeout=_POLL_INTERVAL)
                break
            except queue.Empty:
                continue
        if item is _DONE:
            self._exhausted = True
            self._thread.join()
            raise StopIteration
        return item

    @property
    def error(self) -> Optional[ObjectStoreError]:
        """Terminal error of the walk, or None if it completed cleanly."""
        return self._error

    @property
    def done(self) -> bool:
        """True once the walker thread has exited."""
        return not self._thread.is_alive()

    def errors(self) -> Iterator[ObjectStoreError]:
        """Error channel: yields the terminal error once, or nothing."""
        if self._error is not None:
            yield self._error

    def raise_for_error(self) -> None:
        """Raise the terminal error, if the walk stopped early."""
        if self._error is not None:
            raise self._error

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the walk and release the walker thread.

        Safe to call more than once and after exhaustion.
        """
        self._closed.set()
        self._exhausted = True
        # Free the slot so a walker blocked in put() wakes up and sees the close
        try:
            while True:
                self._queue.get_nowait()
        except queue.Empty:
            pass
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Listing thread for %s did not exit within %ss", self.root, timeout)

    def __enter__(self) -> ObjectListing:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
