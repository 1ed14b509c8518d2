"""Shared FastAPI dependencies for NovelHub routers.

The catalog service and cache are built once in the application lifespan
and stored on ``app.state``; handlers receive them through these
dependencies.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from novelhub.cache import CatalogCache
from novelhub.catalog import CatalogService, CatalogStore


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service  # type: ignore[no-any-return]


def get_catalog_cache(request: Request) -> CatalogCache:
    return request.app.state.catalog_cache  # type: ignore[no-any-return]


def get_catalog_store(request: Request) -> CatalogStore:
    return request.app.state.catalog_store  # type: ignore[no-any-return]


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
CatalogCacheDep = Annotated[CatalogCache, Depends(get_catalog_cache)]
CatalogStoreDep = Annotated[CatalogStore, Depends(get_catalog_store)]
