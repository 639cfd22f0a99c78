"""Object link resolution: CID to filesystem path."""

from pathlib import Path
from typing import Optional, Union

from .constants import DEFAULT_SHARD_LENGTH
from .hashing import validate_cid


def resolve_object_link(
    cid: str,
    bucket: str,
    base_dir: Union[str, Path],
    shard_length: int = DEFAULT_SHARD_LENGTH,
    name: Optional[str] = None,
) -> Path:
    """Map a CID to its object link.

    Layout: base_dir/bucket/<cid[:k]>/<cid[k:]>/<name>, with name defaulting
    to the CID. The shard segment bounds the number of entries in any one
    directory. With shard_length 0 the empty parent segment is dropped.

    Pure function: performs no I/O.

    Args:
        cid: Content identifier (lowercase hex)
        bucket: Bucket name
        base_dir: Store data directory
        shard_length: Number of leading CID characters used as parent directory
        name: Leaf file name (defaults to cid)

    Returns:
        Path of the object file

    Raises:
        ValueError: If cid is malformed or shard_length is negative
    """
    validate_cid(cid)
    if shard_length < 0:
        raise ValueError(f"shard_length must be non-negative, got {shard_length}")

    parent, child = cid[:shard_length], cid[shard_length:]
    # Path drops empty segments, so shard_length 0 and >= len(cid) both work
    return Path(base_dir) / bucket / parent / child / (name or cid)
