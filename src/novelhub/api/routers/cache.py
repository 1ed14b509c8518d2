"""Cache control endpoints.

Lets write paths outside this service (imports, admin tools, webhooks from
the primary store) invalidate cached entries after their own commits.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter
from pydantic import BaseModel

from novelhub.api.deps import CatalogCacheDep
from novelhub.cache import EntityRef, EntityType

router = APIRouter(prefix="/cache", tags=["Cache"])


class CachePolicy(BaseModel):
    """Cache status and TTLs per entity type."""

    enabled: bool
    backend: str
    ttl_seconds: dict[str, int]


class InvalidationResult(BaseModel):
    """Result of a cache invalidation operation."""

    entity_type: EntityType
    entity_id: str | None = None
    key: str | None = None
    deleted_count: int
    timestamp: datetime


@router.get("/policy", response_model=CachePolicy)
async def get_cache_policy(cache: CatalogCacheDep) -> CachePolicy:
    policy = cache.ttl_policy
    return CachePolicy(
        enabled=cache.enabled,
        backend=cache.client.backend,
        ttl_seconds={t.value: policy.ttl_for(t) for t in EntityType},
    )


@router.delete("/{entity_type}/{entity_id}", response_model=InvalidationResult)
async def invalidate_entity(
    entity_type: EntityType, entity_id: str, cache: CatalogCacheDep
) -> InvalidationResult:
    """Invalidate the cached entry of one entity.

    Parameterized listing entries are not addressed here; use the
    entity-type endpoint for those.
    """
    ref = EntityRef(entity_type, entity_id)
    deleted = await cache.invalidate(ref)
    return InvalidationResult(
        entity_type=entity_type,
        entity_id=entity_id,
        key=cache.keys.derive(ref),
        deleted_count=1 if deleted else 0,
        timestamp=datetime.now(UTC),
    )


@router.delete("/{entity_type}", response_model=InvalidationResult)
async def invalidate_entity_type(
    entity_type: EntityType, cache: CatalogCacheDep
) -> InvalidationResult:
    """Invalidate every cached entry of an entity type."""
    deleted = await cache.invalidate_entity_type(entity_type)
    return InvalidationResult(
        entity_type=entity_type,
        deleted_count=deleted,
        timestamp=datetime.now(UTC),
    )
