"""FastAPI application factory for NovelHub.

Creates the application with:
- Catalog routers (/novels, /authors) served through the read-through cache
- Cache control router (/cache) for external write paths
- Health checks and Prometheus metrics
- Lifecycle management: one cache client per process, closed on shutdown
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from novelhub.api.errors import (
    ApiError,
    api_exception_handler,
    generic_exception_handler,
    loader_exception_handler,
)
from novelhub.api.middleware import CorrelationMiddleware
from novelhub.api.routers import authors, cache, health, metrics, novels
from novelhub.cache import CatalogCache, LoaderError, build_catalog_cache
from novelhub.catalog import CatalogService, CatalogStore, JsonCatalogStore
from novelhub.config import Settings
from novelhub.config import settings as default_settings
from novelhub.observability import configure_logging
from novelhub.observability.metrics import MetricsMiddleware, get_metrics

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    store: CatalogStore | None = None,
    catalog_cache: CatalogCache | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings (defaults to the environment)
        store: Primary store adapter (defaults to the JSON catalog file)
        catalog_cache: Catalog cache (defaults to one built from settings
            at startup, in a server context)
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(json_format=settings.env != "dev", level=settings.log_level)
        get_metrics(settings.enable_metrics)

        logger.info(f"Starting NovelHub ({settings.env})")
        catalog_store = store or JsonCatalogStore(settings.catalog_path)
        cache_instance = catalog_cache or build_catalog_cache(settings, server_context=True)

        app.state.catalog_store = catalog_store
        app.state.catalog_cache = cache_instance
        app.state.catalog_service = CatalogService(catalog_store, cache_instance)
        logger.info("NovelHub startup complete")

        yield

        logger.info("Shutting down NovelHub")
        await cache_instance.close()
        await catalog_store.close()
        logger.info("NovelHub shutdown complete")

    app = FastAPI(
        title="NovelHub",
        description="Novel catalog API with a read-through cache",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationMiddleware)
    if settings.enable_metrics:
        app.add_middleware(MetricsMiddleware, enabled=True)

    app.add_exception_handler(ApiError, cast(ExceptionHandler, api_exception_handler))
    app.add_exception_handler(LoaderError, cast(ExceptionHandler, loader_exception_handler))
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health.router)
    app.include_router(metrics.router)
    app.include_router(novels.router)
    app.include_router(authors.router)
    app.include_router(cache.router)

    return app
