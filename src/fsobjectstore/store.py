"""Filesystem-backed content-addressed object store.

Objects are stored one file per CID under the bucket directory:

    <data_dir>/<bucket>/<cid[:k]>/<cid[k:]>/<cid>

Key properties:
- Idempotent, deduplicating writes: content already present is never rewritten
- Atomic publish: bytes go to a hidden temp file that is fsynced and renamed
  onto the object link, so a CID never names partial content
- Optional per-object write locks via portalocker for multi-writer setups
- Cooperative cancellation through OperationContext

Concurrency:
    Without locking, two writers of the same content may both write; the
    rename makes the last one win with identical bytes. The store keeps no
    in-memory state beyond its configuration.
"""

from __future__ import annotations

import contextlib
import logging
import os
import stat
import uuid
from pathlib import Path
from typing import Any, Optional

import portalocker

from .config import StoreConfig
from .constants import DIR_MODE, FILE_MODE, LOCK_DIR, LOCK_TIMEOUT, TEMP_PREFIX
from .context import OperationContext
from .errors import ObjectNotFound, ObjectReadFailed, ObjectWriteFailed
from .hashing import compute_digest
from .listing import ObjectListing
from .paths import resolve_object_link

logger = logging.getLogger(__name__)


def _fsync_dir(path: Path) -> None:
    """Flush a directory entry after renaming an object into it.

    Platforms without directory fsync only get a debug message.
    """
    flags = os.O_RDONLY | getattr(os, "O_DIRECTORY", 0)
    try:
        fd = os.open(path, flags)
    except OSError as e:
        logger.debug("Cannot open %s for fsync: %s", path, e)
        return
    try:
        os.fsync(fd)
    except OSError as e:
        logger.debug("Directory fsync unavailable for %s: %s", path, e)
    finally:
        os.close(fd)


class FilesystemObjectStore:
    """Content-addressed object store on the local filesystem.

    Construct once; every call afterwards is independent and cancellable.

    Attributes:
        config: Validated, immutable store configuration
        root: Bucket directory (<data_dir>/<bucket>)
    """

    def __init__(self, config: Optional[StoreConfig] = None, **overrides: Any):
        """
        Build the store and create its bucket directory.

        Args:
            config: Store configuration. If None, built from the environment.
            **overrides: data_dir, bucket, shard_length, debug, locking;
                applied on top of config

        Raises:
            DataDirectoryNotSpecified: If data_dir is empty after trimming
            BucketNotSpecified: If bucket is empty after trimming
            OSError: If the bucket directory cannot be created
        """
        if config is None:
            config = StoreConfig.from_env(**overrides)
        elif overrides:
            config = config.with_options(**overrides)

        self.config = config
        self.root = config.root
        self.root.mkdir(parents=True, exist_ok=True, mode=DIR_MODE)
        self._trace("store ready: %s (shard_length=%d, locking=%s)",
                    self.root, config.shard_length, config.locking)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(root={str(self.root)!r})"

    def _trace(self, msg: str, *args: Any) -> None:
        if self.config.debug:
            logger.debug(msg, *args)

    # ---- Addressing ---------------------------------------------------------

    def digest_object(self, data: bytes) -> str:
        """Compute the CID of data (SHA-256 hex)."""
        return compute_digest(data)

    def object_link(self, cid: str, name: Optional[str] = None) -> Path:
        """Get the path an object with this CID is stored at.

        Raises:
            ValueError: If cid is not lowercase hex
        """
        link = resolve_object_link(
            cid,
            self.config.bucket,
            self.config.data_dir,
            shard_length=self.config.shard_length,
            name=name,
        )
        self._trace("objectLink %s, %s: %s", cid, name or cid, link)
        return link

    # ---- Operations ---------------------------------------------------------

    def has_object(self, cid: str, ctx: Optional[OperationContext] = None) -> bool:
        """Check whether a regular file is stored under cid.

        Never raises. Malformed identifiers and stat failures other than
        "not found" (e.g. permission denied) report the object as absent.
        """
        try:
            link = self.object_link(cid)
        except ValueError:
            self._trace("has object: invalid cid %r", cid)
            return False

        try:
            st = link.stat()
        except (FileNotFoundError, NotADirectoryError):
            ret = False
        except OSError as e:
            logger.warning("Cannot stat %s, treating object as absent: %s", link, e)
            ret = False
        else:
            ret = stat.S_ISREG(st.st_mode)

        self._trace("has object: %s, %s", link, ret)
        return ret

    def read_object(self, cid: str, ctx: Optional[OperationContext] = None) -> bytes:
        """Read the bytes stored under cid.

        The context is checked once, after the existence check and before the
        file is opened; a single read is not interrupted.

        Raises:
            ObjectNotFound: If no object is stored under cid
            OperationCancelled: If ctx was cancelled
            OperationDeadlineExceeded: If ctx passed its deadline
            ObjectReadFailed: If opening or reading the file failed
        """
        ctx = ctx or OperationContext.background()
        if not self.has_object(cid, ctx):
            raise ObjectNotFound(cid)

        link = self.object_link(cid)
        ctx.check(self.config.debug)

        try:
            with link.open("rb") as f:
                data = f.read()
        except OSError as e:
            logger.error("reading object failed: %s, %s", link, e)
            raise ObjectReadFailed(cid, e, path=link) from e

        self._trace("read object: %s (%d bytes)", cid, len(data))
        return data

    def create_object(self, data: bytes, ctx: Optional[OperationContext] = None) -> str:
        """Store data and return its CID.

        Storing content that is already present writes nothing and returns
        the same CID.

        Raises:
            DigestionFailed: If data is not bytes-like
            OperationCancelled: If ctx was cancelled
            OperationDeadlineExceeded: If ctx passed its deadline
            ObjectWriteFailed: If directory creation, file creation or the
                write failed; nothing is left under the CID
        """
        ctx = ctx or OperationContext.background()
        cid = self.digest_object(data)
        ctx.check(self.config.debug)
        self._trace("created object cid: %s", cid)

        if self.has_object(cid, ctx):
            self._trace("skip writing already existing object: %s", cid)
            return cid

        link = self.object_link(cid)
        if self.config.locking:
            self._write_locked(cid, link, data, ctx)
        else:
            self._write(cid, link, data)
        return cid

    def list_objects(self, ctx: Optional[OperationContext] = None) -> ObjectListing:
        """Stream the CIDs of every stored object.

        Starts one background walker thread; see ObjectListing.
        """
        self._trace("list objects: %s", self.root)
        return ObjectListing(self.root, ctx, debug=self.config.debug)

    # ---- Write path ---------------------------------------------------------

    def _write(self, cid: str, link: Path, data: bytes) -> None:
        """Write data to a temp file beside link and atomically promote it."""
        tmppath: Optional[Path] = None
        try:
            link.parent.mkdir(parents=True, exist_ok=True, mode=DIR_MODE)
            tmppath = link.parent / f"{TEMP_PREFIX}{uuid.uuid4().hex}"
            fd = os.open(str(tmppath), os.O_WRONLY | os.O_CREAT | os.O_EXCL, FILE_MODE)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(str(tmppath), str(link))
        except OSError as e:
            if tmppath is not None:
                with contextlib.suppress(OSError):
                    tmppath.unlink()
            logger.error("writing object failed: %s, %s", link, e)
            raise ObjectWriteFailed(cid, e, path=link) from e

        _fsync_dir(link.parent)
        self._trace("wrote object: %s", link)

    def _write_locked(self, cid: str, link: Path, data: bytes, ctx: OperationContext) -> None:
        """Write under a per-object lock so only one writer persists the object.

        Lock files live in <bucket>/.locks and persist (OS releases the lock
        on crash).
        """
        lock_path = self.root / LOCK_DIR / f"{cid}.lock"
        remaining = ctx.remaining()
        timeout = LOCK_TIMEOUT if remaining is None else min(LOCK_TIMEOUT, remaining)

        try:
            lock_path.parent.mkdir(parents=True, exist_ok=True, mode=DIR_MODE)
            with portalocker.Lock(str(lock_path), "w", timeout=timeout):
                # Re-check after acquiring lock (TOCTOU)
                if self.has_object(cid, ctx):
                    self._trace("object written concurrently: %s", cid)
                    return
                self._write(cid, link, data)
        except portalocker.LockException as e:
            logger.error("locking object failed: %s, %s", lock_path, e)
            raise ObjectWriteFailed(cid, e, path=link) from e
        except OSError as e:
            logger.error("preparing object lock failed: %s, %s", lock_path, e)
            raise ObjectWriteFailed(cid, e, path=link) from e
