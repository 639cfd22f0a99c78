"""Tests for store configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from fsobjectstore.config import StoreConfig, load_store_config
from fsobjectstore.errors import (
    BucketNotSpecified,
    ConfigError,
    DataDirectoryNotSpecified,
    ErrorKind,
)


class TestStoreConfigDefaults:
    """Test defaults and environment overrides."""

    def test_defaults(self):
        """Unconfigured store uses /data, bucket 'store', debug off."""
        config = StoreConfig()
        assert config.data_dir == "/data"
        assert config.bucket == "store"
        assert config.shard_length == 2
        assert config.debug is False
        assert config.locking is False
        assert config.root == Path("/data/store")

    def test_from_env(self, monkeypatch):
        """Environment variables replace the defaults."""
        monkeypatch.setenv("FSSTORE_DATA_DIR", "/srv/objects")
        monkeypatch.setenv("FSSTORE_BUCKET", "artifacts")
        monkeypatch.setenv("FSSTORE_SHARD_LENGTH", "3")
        monkeypatch.setenv("FSSTORE_DEBUG", "true")
        monkeypatch.setenv("FSSTORE_LOCKING", "1")

        config = StoreConfig.from_env()

        assert config.data_dir == "/srv/objects"
        assert config.bucket == "artifacts"
        assert config.shard_length == 3
        assert config.debug is True
        assert config.locking is True

    def test_env_flag_false_values(self, monkeypatch):
        """Anything but true/1/yes disables a flag."""
        monkeypatch.setenv("FSSTORE_DEBUG", "off")
        assert StoreConfig.from_env().debug is False

    def test_overrides_win_over_env(self, monkeypatch):
        """Explicit overrides take precedence; None overrides are ignored."""
        monkeypatch.setenv("FSSTORE_BUCKET", "from-env")

        config = StoreConfig.from_env(bucket="explicit", data_dir=None)

        assert config.bucket == "explicit"
        assert config.data_dir == "/data"

    def test_with_options(self):
        """with_options returns a revalidated copy."""
        config = StoreConfig(data_dir="/a", bucket="b")
        changed = config.with_options(bucket="c")

        assert changed.bucket == "c"
        assert changed.data_dir == "/a"
        assert config.bucket == "b"

        with pytest.raises(BucketNotSpecified):
            config.with_options(bucket=" ")


class TestStoreConfigValidation:
    """Test construction-time validation."""

    def test_trims_whitespace(self):
        """Surrounding whitespace is not part of the setting."""
        config = StoreConfig(data_dir="  /srv/data  ", bucket=" store\n")
        assert config.data_dir == "/srv/data"
        assert config.bucket == "store"

    def test_accepts_path(self, tmp_path):
        """data_dir may be given as a Path."""
        config = StoreConfig(data_dir=tmp_path)
        assert config.data_dir == str(tmp_path)

    def test_empty_bucket(self):
        """Empty bucket name fails with BucketNotSpecified."""
        with pytest.raises(BucketNotSpecified) as exc:
            StoreConfig(bucket="")
        assert exc.value.kind is ErrorKind.BUCKET_NOT_SPECIFIED

    def test_blank_bucket(self):
        """Whitespace-only bucket name counts as empty."""
        with pytest.raises(BucketNotSpecified):
            StoreConfig(bucket="   ")

    def test_empty_data_dir(self):
        """Empty data directory fails with DataDirectoryNotSpecified."""
        with pytest.raises(DataDirectoryNotSpecified) as exc:
            StoreConfig(data_dir=" ")
        assert exc.value.kind is ErrorKind.DATA_DIRECTORY_NOT_SPECIFIED

    def test_data_dir_checked_first(self):
        """With both empty, the data directory is reported."""
        with pytest.raises(DataDirectoryNotSpecified):
            StoreConfig(data_dir="", bucket="")

    def test_config_errors_share_base(self):
        """Both validation failures are ConfigErrors."""
        assert issubclass(BucketNotSpecified, ConfigError)
        assert issubclass(DataDirectoryNotSpecified, ConfigError)

    @pytest.mark.parametrize("length", [-1, 65])
    def test_shard_length_bounds(self, length):
        """Shard length must be within the CID length."""
        with pytest.raises(ValidationError):
            StoreConfig(shard_length=length)

    def test_immutable(self):
        """Configuration cannot change after construction."""
        config = StoreConfig()
        with pytest.raises(ValidationError):
            config.bucket = "other"


class TestLoadStoreConfig:
    """Test YAML configuration files."""

    def test_store_section(self, tmp_path):
        """Settings are read from the store: section."""
        cfg = tmp_path / "fsstore.yaml"
        cfg.write_text(
            "store:\n"
            "  data_dir: /srv/objects\n"
            "  bucket: artifacts\n"
            "  shard_length: 4\n"
        )

        config = load_store_config(cfg)

        assert config.data_dir == "/srv/objects"
        assert config.bucket == "artifacts"
        assert config.shard_length == 4

    def test_top_level_mapping(self, tmp_path):
        """Settings may also sit at the top level."""
        cfg = tmp_path / "fsstore.yaml"
        cfg.write_text("bucket: top\nunrelated: value\n")

        config = load_store_config(cfg)

        assert config.bucket == "top"
        assert config.data_dir == "/data"

    def test_overrides(self, tmp_path):
        """Explicit overrides win over file settings."""
        cfg = tmp_path / "fsstore.yaml"
        cfg.write_text("store:\n  bucket: from-file\n")

        config = load_store_config(cfg, bucket="explicit", debug=None)

        assert config.bucket == "explicit"
        assert config.debug is False

    def test_missing_file(self, tmp_path, monkeypatch):
        """Missing file falls back to environment defaults."""
        monkeypatch.setenv("FSSTORE_BUCKET", "env-bucket")
        config = load_store_config(tmp_path / "missing.yaml")
        assert config.bucket == "env-bucket"

    def test_empty_file(self, tmp_path):
        """Empty file gives defaults."""
        cfg = tmp_path / "fsstore.yaml"
        cfg.write_text("")
        assert load_store_config(cfg) == StoreConfig()

    def test_invalid_bucket_in_file(self, tmp_path):
        """Validation applies to file settings too."""
        cfg = tmp_path / "fsstore.yaml"
        cfg.write_text("store:\n  bucket: ''\n")
        with pytest.raises(BucketNotSpecified):
            load_store_config(cfg)

    def test_non_mapping_section(self, tmp_path):
        """A store section that is not a mapping is rejected."""
        cfg = tmp_path / "fsstore.yaml"
        cfg.write_text("store:\n  - a\n  - b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_store_config(cfg)
