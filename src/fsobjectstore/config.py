"""Store configuration: defaults, environment overrides and validation."""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import (
    CID_LENGTH,
    DEFAULT_BUCKET,
    DEFAULT_DATA_DIR,
    DEFAULT_DEBUG,
    DEFAULT_LOCKING,
    DEFAULT_SHARD_LENGTH,
    ENV_BUCKET,
    ENV_DATA_DIR,
    ENV_DEBUG,
    ENV_LOCKING,
    ENV_SHARD_LENGTH,
)
from .errors import BucketNotSpecified, DataDirectoryNotSpecified


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


class StoreConfig(BaseModel):
    """
    Filesystem object store configuration.

    Validated once when built and immutable afterwards. Empty data directory
    or bucket (after trimming whitespace) is a construction-time failure.
    """
    model_config = ConfigDict(frozen=True)

    data_dir: str = DEFAULT_DATA_DIR
    bucket: str = DEFAULT_BUCKET
    shard_length: int = Field(default=DEFAULT_SHARD_LENGTH, ge=0, le=CID_LENGTH)
    debug: bool = DEFAULT_DEBUG
    locking: bool = DEFAULT_LOCKING  # Per-object write locks via portalocker

    @field_validator("data_dir", "bucket", mode="before")
    @classmethod
    def trim(cls, v: Any) -> Any:
        """Trim surrounding whitespace from path-like settings."""
        if isinstance(v, Path):
            v = str(v)
        if isinstance(v, str):
            return v.strip()
        return v

    @model_validator(mode="after")
    def validate_required(self):
        """Ensure data directory and bucket are set."""
        if not self.data_dir:
            raise DataDirectoryNotSpecified()
        if not self.bucket:
            raise BucketNotSpecified()
        return self

    @property
    def root(self) -> Path:
        """Bucket directory: <data_dir>/<bucket>."""
        return Path(self.data_dir) / self.bucket

    @classmethod
    def from_env(cls, **overrides: Any) -> "StoreConfig":
        """
        Build configuration from environment variables.

        Unset variables fall back to the defaults. Explicit overrides win over
        the environment; overrides that are None are ignored.

        Args:
            **overrides: data_dir, bucket, shard_length, debug, locking

        Returns:
            Validated StoreConfig
        """
        values: Dict[str, Any] = {
            "data_dir": os.environ.get(ENV_DATA_DIR, DEFAULT_DATA_DIR),
            "bucket": os.environ.get(ENV_BUCKET, DEFAULT_BUCKET),
            "shard_length": os.environ.get(ENV_SHARD_LENGTH, DEFAULT_SHARD_LENGTH),
            "debug": _env_flag(ENV_DEBUG, DEFAULT_DEBUG),
            "locking": _env_flag(ENV_LOCKING, DEFAULT_LOCKING),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_options(self, **overrides: Any) -> "StoreConfig":
        """Return a revalidated copy with the given settings replaced."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return type(self)(**values)


def load_store_config(path: Union[str, Path], **overrides: Any) -> StoreConfig:
    """Load store configuration from a YAML file.

    Settings are read from a ``store:`` section when present, otherwise from
    the top-level mapping. Missing keys and a missing file fall back to the
    environment defaults.

    Example file::

        store:
          data_dir: /srv/objects
          bucket: artifacts
          shard_length: 2
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        return StoreConfig.from_env(**overrides)

    data = yaml.safe_load(cfg_path.read_text()) or {}
    section = data.get("store", data) if isinstance(data, dict) else data
    if not isinstance(section, dict):
        raise ValueError(f"Expected a mapping of store settings in {cfg_path}")

    known = set(StoreConfig.model_fields)
    values = {k: v for k, v in section.items() if k in known}
    values.update({k: v for k, v in overrides.items() if v is not None})
    return StoreConfig.from_env(**values)


__all__ = ["StoreConfig", "load_store_config"]
