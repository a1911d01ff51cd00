"""Engine configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Size and expiration fields accept human-readable
strings ("20M", "7d") and are normalized to integers at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pastebin.core.constants import (
    ACCESS_COUNT_PROBABILITY,
    LARGE_STORE_GRACE_SECONDS,
    MIN_PHYSICAL_TTL_SECONDS,
    SWEEP_BATCH_SIZE,
)
from pastebin.shared.parsers import parse_expiration, parse_size


class Settings(BaseSettings):
    """Engine settings loaded from environment and .env.

    Every field has a default suitable for local development (in-memory
    metadata store, filesystem large-object store).
    """

    # App
    app_name: str = "pastebin"
    app_version: str = "1.0.0"
    debug: bool = False

    # Small-object store: "memory" (single process) or "redis"
    kv_backend: str = "memory"
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_key_prefix: str = "paste"

    # Large-object store: "local" (filesystem) or "s3" (any S3-compatible service)
    blob_backend: str = "local"
    blob_root: str = "/var/pastebin/blobs"
    s3_bucket: str | None = None
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None

    # Tiering
    large_store_threshold: int = 20 * 1024 * 1024  # 20MB
    large_store_max_allowed: int = 100 * 1024 * 1024  # 100MB

    # Expiration
    default_expiration: int = 7 * 24 * 3600  # 7d
    max_expiration: int = 30 * 24 * 3600  # 30d
    min_physical_ttl_seconds: int = MIN_PHYSICAL_TTL_SECONDS
    large_store_grace_seconds: int = LARGE_STORE_GRACE_SECONDS

    # Access accounting and sweep
    access_count_probability: float = ACCESS_COUNT_PROBABILITY
    sweep_batch_size: int = SWEEP_BATCH_SIZE

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("large_store_threshold", "large_store_max_allowed", mode="before")
    @classmethod
    def parse_size_field(cls, value: object) -> object:
        """Accept '20M' style sizes in addition to plain integers."""
        if isinstance(value, str):
            parsed = parse_size(value)
            if parsed is None:
                raise ValueError(f"{value!r} is not a valid size (e.g. '512K', '20M')")
            return parsed
        return value

    @field_validator("default_expiration", "max_expiration", mode="before")
    @classmethod
    def parse_expiration_field(cls, value: object) -> object:
        """Accept '7d' style expirations in addition to plain seconds."""
        if isinstance(value, str):
            parsed = parse_expiration(value)
            if parsed is None:
                raise ValueError(f"{value!r} is not a valid expiration (e.g. '30m', '7d')")
            return parsed
        return value

    @model_validator(mode="after")
    def validate_backends(self) -> "Settings":
        """Validate backend names, S3 bucket and size ordering."""
        if self.kv_backend not in ("memory", "redis"):
            raise ValueError(
                f"Invalid kv_backend '{self.kv_backend}'. Must be one of: 'memory', 'redis'"
            )
        if self.blob_backend == "s3":
            if not self.s3_bucket:
                raise ValueError(
                    "s3_bucket is required when blob_backend is 's3'. "
                    "Set S3_BUCKET environment variable or update .env file."
                )
        elif self.blob_backend != "local":
            raise ValueError(
                f"Invalid blob_backend '{self.blob_backend}'. Must be one of: 'local', 's3'"
            )
        if self.large_store_threshold > self.large_store_max_allowed:
            raise ValueError(
                "large_store_threshold must not exceed large_store_max_allowed"
            )
        if not 0.0 <= self.access_count_probability <= 1.0:
            raise ValueError("access_count_probability must be within [0, 1]")
        if self.sweep_batch_size < 1:
            raise ValueError("sweep_batch_size must be positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    In tests, call get_settings.cache_clear() before overriding env vars
    so the next get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
