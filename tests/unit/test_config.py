"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from novelhub.config import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without configuration the cache is unconfigured and TTLs are defaults."""
        monkeypatch.delenv("KV_REST_API_URL", raising=False)
        monkeypatch.delenv("KV_REST_API_TOKEN", raising=False)

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.cache_url is None
        assert settings.cache_token is None
        assert settings.cache_namespace == "novelhub"
        assert settings.cache_timeout_seconds == 1.0
        assert settings.cache_max_value_bytes == 1_000_000
        assert (settings.novel_ttl, settings.author_ttl, settings.listing_ttl) == (120, 300, 60)

    def test_cache_credentials_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Cache URL and token use the hosting platform's variable names."""
        monkeypatch.setenv("KV_REST_API_URL", "https://kv.example.com")
        monkeypatch.setenv("KV_REST_API_TOKEN", "secret")
        monkeypatch.setenv("CACHE_NOVEL_TTL", "30")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.cache_url == "https://kv.example.com"
        assert settings.cache_token == "secret"
        assert settings.novel_ttl == 30

    def test_prefixed_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Fields without an alias use the NOVELHUB_ prefix."""
        monkeypatch.setenv("NOVELHUB_PORT", "9000")
        assert Settings(_env_file=None).port == 9000  # type: ignore[call-arg]

    @pytest.mark.parametrize("field", ["novel_ttl", "author_ttl", "listing_ttl"])
    def test_non_positive_ttl_rejected(self, field: str) -> None:
        """TTLs must be positive."""
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_non_positive_timeout_rejected(self) -> None:
        """The cache timeout must be positive."""
        with pytest.raises(ValidationError):
            Settings(cache_timeout_seconds=0)
