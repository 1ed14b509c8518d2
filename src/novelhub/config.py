from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NOVELHUB_", env_file=".env", extra="ignore", populate_by_name=True
    )

    app_name: str = "novelhub"
    env: str = "dev"
    host: str = "0.0.0.0"  # nosec B104 - intentional for container deployments
    port: int = 8080

    # Key-value cache (Redis URL or Redis-over-REST endpoint)
    cache_url: str | None = Field(default=None, validation_alias="KV_REST_API_URL")
    cache_token: str | None = Field(default=None, validation_alias="KV_REST_API_TOKEN")
    cache_namespace: str = Field(default="novelhub", validation_alias="CACHE_NAMESPACE")
    cache_timeout_seconds: float = Field(default=1.0, validation_alias="CACHE_TIMEOUT")
    cache_max_value_bytes: int = Field(default=1_000_000, validation_alias="CACHE_MAX_VALUE_BYTES")

    # TTLs per entity type (seconds)
    novel_ttl: int = Field(default=120, validation_alias="CACHE_NOVEL_TTL")
    author_ttl: int = Field(default=300, validation_alias="CACHE_AUTHOR_TTL")
    listing_ttl: int = Field(default=60, validation_alias="CACHE_LISTING_TTL")

    # Primary store (JSON catalog export used by the bundled store adapter)
    catalog_path: str = Field(default="catalog.json", validation_alias="CATALOG_PATH")

    # Observability
    enable_metrics: bool = Field(default=True, validation_alias="ENABLE_METRICS")
    log_level: str = "INFO"

    @field_validator("novel_ttl", "author_ttl", "listing_ttl")
    @classmethod
    def _ttl_must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("cache TTLs must be positive")
        return value

    @field_validator("cache_timeout_seconds")
    @classmethod
    def _timeout_must_be_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("cache timeout must be positive")
        return value


settings = Settings()
