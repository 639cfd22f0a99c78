"""Hashing utilities for content identifiers.

A content identifier (CID) is the lowercase hex SHA-256 digest of an object's
bytes. Hex output is safe to use as a path component without escaping.
"""

from pathlib import Path
import hashlib
import re

from .constants import CHUNK_SIZE
from .errors import DigestionFailed


_HEX = re.compile(r"^[0-9a-f]+$")


def compute_digest(data: bytes) -> str:
    """Compute the CID of an in-memory byte sequence.

    Deterministic and total over bytes-like input, including b"".

    Args:
        data: Content to digest (bytes, bytearray or memoryview)

    Returns:
        64-character lowercase hex SHA-256 digest

    Raises:
        DigestionFailed: If data is not bytes-like (e.g. str)
    """
    try:
        return hashlib.sha256(data).hexdigest()
    except TypeError as e:
        raise DigestionFailed(e) from e


def compute_file_digest(path: Path) -> str:
    """CID of a file, streamed in CHUNK_SIZE reads.

    Raises:
        DigestionFailed: If the file cannot be opened or read
    """
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                digest.update(chunk)
    except OSError as e:
        raise DigestionFailed(e) from e
    return digest.hexdigest()


def validate_cid(cid: str) -> str:
    """Validate the shape of a content identifier.

    Security:
        Only lowercase hex is accepted, so an identifier can never carry
        path separators or ".." segments out of the bucket.

    Raises:
        ValueError: If cid is not a non-empty lowercase hex string
    """
    if not isinstance(cid, str) or not _HEX.fullmatch(cid):
        raise ValueError(f"Invalid content identifier (must be lowercase hex): {cid!r}")
    return cid


__all__ = [
    "compute_digest",
    "compute_file_digest",
    "validate_cid",
]
