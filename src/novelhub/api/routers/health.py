"""Health check endpoints for NovelHub.

Provides Kubernetes-compatible liveness and readiness checks:
- /health/live  - Liveness check (always returns OK if process is running)
- /health/ready - Readiness check (checks primary store and cache)

The cache is optional for serving: an unreachable or disabled cache makes
the service degraded, never unready.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from novelhub.api.deps import CatalogCacheDep, CatalogStoreDep

router = APIRouter(prefix="/health", tags=["health"])

CHECK_TIMEOUT = 5.0


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    status: HealthStatus
    latency_ms: float
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        return result


async def _check(
    name: str,
    check: Callable[[], Awaitable[bool]],
    failure_status: HealthStatus,
) -> ComponentHealth:
    start = time.monotonic()
    try:
        healthy = await asyncio.wait_for(check(), timeout=CHECK_TIMEOUT)
        message = None if healthy else f"{name} check failed"
    except asyncio.TimeoutError:
        healthy, message = False, f"{name} check timed out"
    latency = (time.monotonic() - start) * 1000
    return ComponentHealth(
        name=name,
        status=HealthStatus.HEALTHY if healthy else failure_status,
        latency_ms=latency,
        message=message,
    )


@router.get("/live")
async def live() -> dict[str, str]:
    """Liveness check.

    Returns OK if the process is running.
    """
    return {"status": "ok"}


@router.get("/ready")
async def ready(store: CatalogStoreDep, cache: CatalogCacheDep) -> JSONResponse:
    """Readiness check.

    Returns 503 only when the primary store is unhealthy.
    """
    store_result = await _check("store", store.health_check, HealthStatus.UNHEALTHY)
    if cache.enabled:
        cache_result = await _check("cache", cache.health_check, HealthStatus.DEGRADED)
    else:
        cache_result = ComponentHealth(
            name="cache",
            status=HealthStatus.DEGRADED,
            latency_ms=0.0,
            message="cache disabled",
        )

    components = [store_result, cache_result]
    if store_result.status == HealthStatus.UNHEALTHY:
        overall = HealthStatus.UNHEALTHY
    elif all(c.status == HealthStatus.HEALTHY for c in components):
        overall = HealthStatus.HEALTHY
    else:
        overall = HealthStatus.DEGRADED

    return JSONResponse(
        content={
            "status": overall.value,
            "components": [c.to_dict() for c in components],
        },
        status_code=503 if overall == HealthStatus.UNHEALTHY else 200,
    )
