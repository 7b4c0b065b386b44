# src/config/settings.py - v1
"""Typed configuration loaded from the environment and .env via pydantic-settings.

Single source of truth for object store, cache, hashing, batch and logging
settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Object store ===
    object_store_backend: Literal["s3", "local"] = "s3"
    local_store_root: Path | None = None

    # S3 / S3-compatible (MinIO) connection
    aws_profile: str = ""
    s3_region: str = "us-east-1"
    s3_endpoint_url: str = ""
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_anonymous: bool = False
    s3_force_path_style: bool = False
    s3_max_attempts: int = 5

    # === Local metadata cache ===
    cache_enabled: bool = True
    cache_backend: Literal["auto", "ads", "xattr", "sidecar"] = "auto"
    cache_dir_name: str = ".cee3cache"
    cache_attribute_prefix: str = "cee3.s3"

    # === Hashing ===
    hash_chunk_size: int = 81920

    # === Batch ===
    batch_pattern: str = "*"
    batch_recursive: bool = False

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("hash_chunk_size")
    @classmethod
    def validate_hash_chunk_size(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("hash_chunk_size must be > 0")
        return v

    @field_validator("s3_max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("s3_max_attempts must be >= 1")
        return v

    @field_validator("cache_dir_name")
    @classmethod
    def validate_cache_dir_name(cls, v: str) -> str:  # noqa: N805
        if not v or "/" in v or "\\" in v:
            raise ValueError("cache_dir_name must be a single directory name")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if bool(self.s3_access_key_id) != bool(self.s3_secret_access_key):
            errors.append(
                "S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY must be set together"
            )

        if self.s3_anonymous and (self.s3_access_key_id or self.aws_profile):
            errors.append(
                "S3_ANONYMOUS cannot be combined with static keys or AWS_PROFILE"
            )

        if self.object_store_backend == "local" and self.local_store_root is None:
            errors.append("OBJECT_STORE_BACKEND=local requires LOCAL_STORE_ROOT")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
