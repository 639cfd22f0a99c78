"""Content-addressed object store backed by the local filesystem."""

from .base import ObjectStore
from .config import StoreConfig, load_store_config
from .context import OperationContext
from .errors import (
    BucketNotSpecified,
    ConfigError,
    DataDirectoryNotSpecified,
    DigestionFailed,
    ErrorKind,
    ObjectError,
    ObjectNotFound,
    ObjectReadFailed,
    ObjectStoreError,
    ObjectWriteFailed,
    OperationCancelled,
    OperationDeadlineExceeded,
    OperationError,
)
from .hashing import compute_digest, compute_file_digest, validate_cid
from .listing import ObjectListing
from .paths import resolve_object_link
from .store import FilesystemObjectStore

__version__ = "0.1.0"

__all__ = [
    "BucketNotSpecified",
    "ConfigError",
    "DataDirectoryNotSpecified",
    "DigestionFailed",
    "ErrorKind",
    "FilesystemObjectStore",
    "ObjectError",
    "ObjectListing",
    "ObjectNotFound",
    "ObjectReadFailed",
    "ObjectStore",
    "ObjectStoreError",
    "ObjectWriteFailed",
    "OperationCancelled",
    "OperationContext",
    "OperationDeadlineExceeded",
    "OperationError",
    "StoreConfig",
    "compute_digest",
    "compute_file_digest",
    "load_store_config",
    "resolve_object_link",
    "validate_cid",
]
