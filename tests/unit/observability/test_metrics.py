"""Tests for Prometheus metrics."""

import pytest

from novelhub.observability.metrics import (
    MetricsMiddleware,
    MetricsRegistry,
    get_metrics,
    record_cache_hit,
    record_cache_write_skipped,
)


class TestPathNormalization:
    """Tests for metric path labels."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/novels", "/novels"),
            ("/novels/n123", "/novels/{id}"),
            ("/novels/n123/likes", "/novels/{id}"),
            ("/authors/u1", "/authors/{id}"),
            ("/cache/policy", "/cache/{entity_type}"),
            ("/cache/novel/n123", "/cache/{entity_type}/{id}"),
            ("/", "/"),
        ],
    )
    def test_ids_replaced(self, path: str, expected: str) -> None:
        """Identifiers never become label values."""
        normalize = MetricsMiddleware._normalize_path
        assert normalize(None, path) == expected  # type: ignore[arg-type]


class TestRecorders:
    """Tests for metric helper functions."""

    def test_cache_hit_counted(self) -> None:
        """Hits increment the per-entity counter."""
        metrics = get_metrics()
        if metrics.cache_hits_total is None:
            pytest.skip("metrics disabled")

        counter = metrics.cache_hits_total.labels(entity_type="author")
        before = counter._value.get()
        record_cache_hit("author")
        assert counter._value.get() == before + 1

    def test_recorders_never_raise(self) -> None:
        """Recording works whether or not metrics are enabled."""
        record_cache_write_skipped("novel", "too_large")

    def test_exposition(self) -> None:
        """The registry renders text exposition."""
        assert isinstance(get_metrics().generate_latest(), bytes)


class TestRegistryInitialization:
    """Tests for the enable flag."""

    def test_explicit_flag_overrides_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An explicit disable wins over environment settings that enable metrics."""
        monkeypatch.setattr("novelhub.observability.metrics.settings.enable_metrics", True)
        registry = MetricsRegistry()

        registry.initialize(enabled=False)

        assert registry.cache_hits_total is None
        assert registry.http_requests_total is None
        assert registry.generate_latest() == b"# Metrics disabled\n"

    def test_initialize_is_idempotent(self) -> None:
        """Later calls do not change the first decision."""
        registry = MetricsRegistry()
        registry.initialize(enabled=False)

        registry.initialize(enabled=True)

        assert registry.cache_hits_total is None
