"""Cache layer for NovelHub.

Provides a read-through cache between catalog handlers and the primary
store:
- Structured cache keys per entity reference
- Cache-aside reads with per-entity-type TTLs
- Invalidation after committed writes
- Redis, Redis-over-REST and inert client backends
"""

from novelhub.cache.accessor import ReadThroughCache, TtlPolicy
from novelhub.cache.catalog import CatalogCache, build_catalog_cache
from novelhub.cache.client import (
    CacheClient,
    NullCacheClient,
    RedisCacheClient,
    RestCacheClient,
    create_cache_client,
)
from novelhub.cache.errors import CacheError, CacheUnavailable, LoaderError, SerializationError
from novelhub.cache.invalidation import CacheInvalidator
from novelhub.cache.keys import CacheKeys, EntityRef, EntityType, derive_key

__all__ = [
    # Entry points
    "CatalogCache",
    "build_catalog_cache",
    # Keys
    "CacheKeys",
    "EntityRef",
    "EntityType",
    "derive_key",
    # Read-through and invalidation
    "ReadThroughCache",
    "TtlPolicy",
    "CacheInvalidator",
    # Clients
    "CacheClient",
    "NullCacheClient",
    "RedisCacheClient",
    "RestCacheClient",
    "create_cache_client",
    # Errors
    "CacheError",
    "CacheUnavailable",
    "LoaderError",
    "SerializationError",
]
