"""Tests for hashing module."""

import pytest

from fsobjectstore.errors import DigestionFailed, ErrorKind
from fsobjectstore.hashing import compute_digest, compute_file_digest, validate_cid


EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
HELLO_SHA256 = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


class TestComputeDigest:
    """Test in-memory digests."""

    def test_known_values(self):
        """Digest should be hex SHA-256."""
        assert compute_digest(b"") == EMPTY_SHA256
        assert compute_digest(b"hello") == HELLO_SHA256

    def test_deterministic(self):
        """Equal content should always give equal CIDs."""
        data = bytes(range(256)) * 10
        assert compute_digest(data) == compute_digest(bytes(data))

    def test_detects_single_byte_change(self):
        """Different content should give different CIDs."""
        assert compute_digest(b"return 42") != compute_digest(b"return 43")

    def test_format(self):
        """CID should be 64 lowercase hex characters."""
        cid = compute_digest(b"\x00\x01\x02")
        assert len(cid) == 64
        assert cid == cid.lower()
        validate_cid(cid)

    def test_accepts_bytes_like(self):
        """bytearray and memoryview should digest like bytes."""
        assert compute_digest(bytearray(b"hello")) == HELLO_SHA256
        assert compute_digest(memoryview(b"hello")) == HELLO_SHA256

    def test_rejects_text(self):
        """str is not content; digesting it should fail with DigestionFailed."""
        with pytest.raises(DigestionFailed) as exc:
            compute_digest("hello")

        assert exc.value.kind is ErrorKind.DIGESTION_FAILED
        assert isinstance(exc.value.cause, TypeError)
        assert isinstance(exc.value.__cause__, TypeError)


class TestComputeFileDigest:
    """Test streaming file digests."""

    def test_matches_in_memory_digest(self, tmp_path):
        """File digest should equal digest of the file's bytes."""
        f = tmp_path / "data.bin"
        content = b"\x00\x01" * 10000  # spans several read chunks
        f.write_bytes(content)

        assert compute_file_digest(f) == compute_digest(content)

    def test_empty_file(self, tmp_path):
        """Empty file should hash like empty bytes."""
        f = tmp_path / "empty"
        f.write_bytes(b"")
        assert compute_file_digest(f) == EMPTY_SHA256

    def test_missing_file(self, tmp_path):
        """Unreadable file should fail with DigestionFailed."""
        with pytest.raises(DigestionFailed) as exc:
            compute_file_digest(tmp_path / "missing")
        assert isinstance(exc.value.cause, FileNotFoundError)


class TestValidateCid:
    """Test identifier validation for path safety."""

    def test_valid(self):
        """Lowercase hex of any length should pass."""
        assert validate_cid("aa11") == "aa11"
        assert validate_cid(HELLO_SHA256) == HELLO_SHA256

    @pytest.mark.parametrize("cid", [
        "",
        "ABCD",
        "gggg",
        "../../etc/passwd",
        "ab/cd",
        "ab cd",
    ])
    def test_invalid(self, cid):
        """Anything that is not lowercase hex should be rejected."""
        with pytest.raises(ValueError, match="Invalid content identifier"):
            validate_cid(cid)

    def test_non_string(self):
        """Non-string identifiers should be rejected."""
        with pytest.raises(ValueError):
            validate_cid(None)
