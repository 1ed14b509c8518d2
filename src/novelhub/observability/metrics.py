"""Prometheus metrics for NovelHub.

Provides metrics collection and exposure:
- HTTP request metrics (latency, count)
- Cache metrics (hits, misses, errors, latency)
- Loader metrics (primary store latency on cache misses)

Usage:
    from novelhub.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.cache_hits_total.labels(entity_type="novel").inc()
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from prometheus_client import REGISTRY, Counter, Histogram
from prometheus_client import generate_latest as prometheus_generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from novelhub.config import settings

if TYPE_CHECKING:
    from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    # HTTP metrics
    http_requests_total: Any = None
    http_request_duration_seconds: Any = None

    # Cache metrics
    cache_hits_total: Any = None
    cache_misses_total: Any = None
    cache_errors_total: Any = None
    cache_skipped_writes_total: Any = None
    cache_operation_duration_seconds: Any = None

    # Primary store metrics
    loader_duration_seconds: Any = None

    # Internal state
    _initialized: bool = field(default=False, repr=False)
    _registry: Any = field(default=None, repr=False)

    def initialize(self, enabled: bool | None = None) -> None:
        """Initialize Prometheus metrics.

        Args:
            enabled: Whether to register collectors. Falls back to the
                environment settings when None.
        """
        if self._initialized:
            return

        if enabled is None:
            enabled = settings.enable_metrics
        if not enabled:
            logger.info("Metrics are disabled")
            self._initialized = True
            return

        self._registry = REGISTRY

        self.http_requests_total = Counter(
            "novelhub_http_requests_total",
            "Total HTTP requests",
            ["method", "path", "status"],
        )

        self.http_request_duration_seconds = Histogram(
            "novelhub_http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "path"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
        )

        self.cache_hits_total = Counter(
            "novelhub_cache_hits_total",
            "Cache hits",
            ["entity_type"],
        )

        self.cache_misses_total = Counter(
            "novelhub_cache_misses_total",
            "Cache misses (including corrupt entries and unreachable cache)",
            ["entity_type"],
        )

        self.cache_errors_total = Counter(
            "novelhub_cache_errors_total",
            "Cache operations that failed or timed out",
            ["operation", "backend"],
        )

        self.cache_skipped_writes_total = Counter(
            "novelhub_cache_skipped_writes_total",
            "Loaded records that were not written to the cache",
            ["entity_type", "reason"],
        )

        self.cache_operation_duration_seconds = Histogram(
            "novelhub_cache_operation_duration_seconds",
            "Cache operation latency in seconds",
            ["operation", "backend"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
        )

        self.loader_duration_seconds = Histogram(
            "novelhub_loader_duration_seconds",
            "Primary store load latency on cache misses",
            ["entity_type"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if self._registry is None:
            return b"# Metrics disabled\n"
        return prometheus_generate_latest(self._registry)


# Global metrics registry
metrics_registry = MetricsRegistry()


def get_metrics(enabled: bool | None = None) -> MetricsRegistry:
    """Get the global metrics registry.

    Initializes metrics on first access. The first caller decides whether
    collectors are registered; ``enabled`` is ignored afterwards.
    """
    if not metrics_registry._initialized:
        metrics_registry.initialize(enabled)
    return metrics_registry


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for HTTP request metrics."""

    def __init__(self, app: "ASGIApp", enabled: bool | None = None) -> None:
        super().__init__(app)
        self.metrics = get_metrics(enabled)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        """Record metrics for HTTP requests."""
        if request.url.path.startswith("/health") or request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        path = self._normalize_path(request.url.path)

        start_time = time.perf_counter()
        status_code = 500  # Default in case of exception

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start_time

            if self.metrics.http_requests_total:
                self.metrics.http_requests_total.labels(
                    method=method,
                    path=path,
                    status=status_code,
                ).inc()

            if self.metrics.http_request_duration_seconds:
                self.metrics.http_request_duration_seconds.labels(
                    method=method,
                    path=path,
                ).observe(duration)

    def _normalize_path(self, path: str) -> str:
        """Normalize path by replacing IDs with placeholders.

        Examples:
            /novels/n123 -> /novels/{id}
            /cache/novel/n123 -> /cache/{entity_type}/{id}
        """
        parts = path.strip("/").split("/")
        if not parts or parts == [""]:
            return path

        head = parts[0]
        if head in ("novels", "authors") and len(parts) > 1:
            return f"/{head}/{{id}}"
        if head == "cache":
            placeholders = ["{entity_type}", "{id}"][: len(parts) - 1]
            return "/" + "/".join([head, *placeholders])
        return path


def record_cache_hit(entity_type: str) -> None:
    """Record cache hit."""
    metrics = get_metrics()
    if metrics.cache_hits_total:
        metrics.cache_hits_total.labels(entity_type=entity_type).inc()


def record_cache_miss(entity_type: str) -> None:
    """Record cache miss."""
    metrics = get_metrics()
    if metrics.cache_misses_total:
        metrics.cache_misses_total.labels(entity_type=entity_type).inc()


def record_cache_error(operation: str, backend: str) -> None:
    """Record a failed or timed-out cache operation."""
    metrics = get_metrics()
    if metrics.cache_errors_total:
        metrics.cache_errors_total.labels(operation=operation, backend=backend).inc()


def record_cache_write_skipped(entity_type: str, reason: str) -> None:
    """Record a loaded record that was deliberately not cached."""
    metrics = get_metrics()
    if metrics.cache_skipped_writes_total:
        metrics.cache_skipped_writes_total.labels(entity_type=entity_type, reason=reason).inc()


def record_cache_operation(operation: str, duration: float, backend: str) -> None:
    """Record cache operation duration.

    Args:
        operation: Cache operation (get, set, delete, delete_prefix, ping)
        duration: Operation duration in seconds
        backend: Cache backend (redis, rest)
    """
    metrics = get_metrics()
    if metrics.cache_operation_duration_seconds:
        metrics.cache_operation_duration_seconds.labels(
            operation=operation,
            backend=backend,
        ).observe(duration)


def record_loader(entity_type: str, duration: float) -> None:
    """Record primary store load duration."""
    metrics = get_metrics()
    if metrics.loader_duration_seconds:
        metrics.loader_duration_seconds.labels(entity_type=entity_type).observe(duration)
