"""Custom exceptions for fsobjectstore.

Every failure the store can report is one of a closed set of kinds. Each kind
has its own exception class so callers can catch precisely what they handle,
and every exception also carries its ``ErrorKind`` plus the underlying cause
(when there is one) for logging.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed enumeration of store error kinds."""
    OBJECT_NOT_FOUND = "object_not_found"
    OBJECT_READ_FAILED = "object_read_failed"
    OBJECT_WRITE_FAILED = "object_write_failed"
    OPERATION_CANCELLED = "operation_cancelled"
    OPERATION_DEADLINE_EXCEEDED = "operation_deadline_exceeded"
    BUCKET_NOT_SPECIFIED = "bucket_not_specified"
    DATA_DIRECTORY_NOT_SPECIFIED = "data_directory_not_specified"
    DIGESTION_FAILED = "digestion_failed"


class ObjectStoreError(RuntimeError):
    """Base class for all object store errors."""

    kind: ErrorKind

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


# Object Errors
class ObjectError(ObjectStoreError):
    """Base class for errors tied to a single object."""

    def __init__(self, message: str, cid: Optional[str] = None, cause: Optional[BaseException] = None):
        self.cid = cid
        super().__init__(message, cause)


class ObjectNotFound(ObjectError):
    """No object is stored under the requested CID."""
    kind = ErrorKind.OBJECT_NOT_FOUND

    def __init__(self, cid: str):
        super().__init__(f"objectstore: object not found: {cid}", cid=cid)


class ObjectReadFailed(ObjectError):
    """Object exists but could not be opened or read."""
    kind = ErrorKind.OBJECT_READ_FAILED

    def __init__(self, cid: Optional[str], cause: Optional[BaseException] = None, path=None):
        self.path = path
        target = cid if cid is not None else path
        super().__init__(f"objectstore: reading object failed: {target}", cid=cid, cause=cause)


class ObjectWriteFailed(ObjectError):
    """Object could not be persisted (directory, file creation or write)."""
    kind = ErrorKind.OBJECT_WRITE_FAILED

    def __init__(self, cid: str, cause: Optional[BaseException] = None, path=None):
        self.path = path
        super().__init__(f"objectstore: writing object failed: {cid}", cid=cid, cause=cause)


# Operation Errors
class OperationError(ObjectStoreError):
    """Base class for errors raised by the operation context."""
    pass


class OperationCancelled(OperationError):
    """The operation context was cancelled before the operation ran."""
    kind = ErrorKind.OPERATION_CANCELLED

    def __init__(self):
        super().__init__("objectstore: operation cancelled")


class OperationDeadlineExceeded(OperationError):
    """The operation context passed its deadline before the operation ran."""
    kind = ErrorKind.OPERATION_DEADLINE_EXCEEDED

    def __init__(self):
        super().__init__("objectstore: operation deadline exceeded")


# Configuration Errors
class ConfigError(ObjectStoreError):
    """Base class for configuration errors raised at construction time."""
    pass


class BucketNotSpecified(ConfigError):
    """Bucket name is empty after trimming."""
    kind = ErrorKind.BUCKET_NOT_SPECIFIED

    def __init__(self):
        super().__init__("objectstore: bucket parameter not specified")


class DataDirectoryNotSpecified(ConfigError):
    """Data directory is empty after trimming."""
    kind = ErrorKind.DATA_DIRECTORY_NOT_SPECIFIED

    def __init__(self):
        super().__init__("fsobjectstore: data directory parameter not specified")


# Digest Errors
class DigestionFailed(ObjectStoreError):
    """Content could not be digested."""
    kind = ErrorKind.DIGESTION_FAILED

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__("objectstore: digesting object failed", cause)
