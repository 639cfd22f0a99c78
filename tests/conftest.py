"""Shared test fixtures and utilities."""

import pytest

from fsobjectstore.constants import (
    ENV_BUCKET,
    ENV_DATA_DIR,
    ENV_DEBUG,
    ENV_LOCKING,
    ENV_SHARD_LENGTH,
)
from fsobjectstore.store import FilesystemObjectStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep store settings from the outer environment out of tests."""
    for name in (ENV_DATA_DIR, ENV_BUCKET, ENV_DEBUG, ENV_SHARD_LENGTH, ENV_LOCKING):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def data_dir(tmp_path):
    """Base directory for the store under test."""
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    """Create a FilesystemObjectStore with default sharding."""
    return FilesystemObjectStore(data_dir=data_dir, bucket="store", debug=True)


@pytest.fixture
def put_raw(store):
    """Factory fixture placing a file directly at the link for a CID."""
    def _put(cid: str, content: bytes = b"raw"):
        link = store.object_link(cid)
        link.parent.mkdir(parents=True, exist_ok=True)
        link.write_bytes(content)
        return link
    return _put


def _stored_files(root):
    return sorted(
        p.relative_to(root).as_posix()
        for p in root.rglob("*")
        if p.is_file() and not any(part.startswith(".") for part in p.relative_to(root).parts)
    )


@pytest.fixture
def stored_files():
    """Function listing regular files under a root, excluding hidden bookkeeping."""
    return _stored_files

