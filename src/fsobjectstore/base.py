"""Base protocol for object store implementations."""

from typing import Optional, Protocol

from .context import OperationContext
from .listing import ObjectListing


class ObjectStore(Protocol):
    """
    Protocol for content-addressed object stores.

    Objects are named by the digest of their bytes. Implementations never
    overwrite an object with different content, and every operation honours
    the cancellation and deadline carried by its context.
    """

    def has_object(self, cid: str, ctx: Optional[OperationContext] = None) -> bool:
        """
        Check if an object is stored under cid.

        Never raises; anything other than a readable object reports False.
        """
        ...

    def read_object(self, cid: str, ctx: Optional[OperationContext] = None) -> bytes:
        """
        Read the exact bytes stored under cid.

        Raises:
            ObjectNotFound: If no object is stored under cid
            OperationCancelled: If ctx was cancelled
            OperationDeadlineExceeded: If ctx passed its deadline
            ObjectReadFailed: If the object could not be read
        """
        ...

    def create_object(self, data: bytes, ctx: Optional[OperationContext] = None) -> str:
        """
        Store data and return its CID.

        Idempotent: storing content that is already present writes nothing
        and returns the same CID.

        Raises:
            OperationCancelled: If ctx was cancelled
            OperationDeadlineExceeded: If ctx passed its deadline
            ObjectWriteFailed: If the object could not be persisted
        """
        ...

    def digest_object(self, data: bytes) -> str:
        """Compute the CID data would be stored under, without storing it."""
        ...

    def list_objects(self, ctx: Optional[OperationContext] = None) -> ObjectListing:
        """Stream the CIDs of all stored objects."""
        ...
