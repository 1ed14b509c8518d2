"""Catalog cache facade.

``CatalogCache.fetch`` and ``CatalogCache.invalidate`` are the entry points
handlers and write paths use. The cache client and key scheme behind them
are built once per process by ``build_catalog_cache`` and injected.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from novelhub.cache.accessor import (
    DEFAULT_MAX_VALUE_BYTES,
    Loader,
    R,
    ReadThroughCache,
    TtlPolicy,
)
from novelhub.cache.client import CacheClient, create_cache_client
from novelhub.cache.invalidation import CacheInvalidator
from novelhub.cache.keys import CacheKeys, EntityRef, EntityType

if TYPE_CHECKING:
    from novelhub.config import Settings


class CatalogCache:
    """Read-through cache for novels, author profiles and listings."""

    def __init__(
        self,
        client: CacheClient,
        keys: CacheKeys | None = None,
        ttl_policy: TtlPolicy | None = None,
        max_value_bytes: int = DEFAULT_MAX_VALUE_BYTES,
    ):
        self.client = client
        self.keys = keys or CacheKeys()
        self._reader = ReadThroughCache(client, self.keys, ttl_policy, max_value_bytes)
        self._invalidator = CacheInvalidator(client, self.keys)

    @property
    def enabled(self) -> bool:
        return self.client.enabled

    @property
    def ttl_policy(self) -> TtlPolicy:
        return self._reader.ttl_policy

    async def fetch(self, ref: EntityRef, loader: Loader[R]) -> R | None:
        """Return the record for ``ref``, loading it on a cache miss."""
        return await self._reader.fetch(ref, loader)

    async def invalidate(self, ref: EntityRef) -> bool:
        """Drop the cached entry for ``ref`` after a committed write."""
        return await self._invalidator.invalidate(ref)

    async def invalidate_entity_type(self, entity_type: EntityType) -> int:
        """Drop every cached entry of ``entity_type``."""
        return await self._invalidator.invalidate_entity_type(entity_type)

    async def health_check(self) -> bool:
        """Check cache connectivity."""
        return await self.client.ping()

    async def close(self) -> None:
        await self.client.close()


def build_catalog_cache(settings: Settings, *, server_context: bool = True) -> CatalogCache:
    """Build the process-wide catalog cache from settings.

    Called once at startup by the hosting process.
    """
    client = create_cache_client(settings, server_context=server_context)
    return CatalogCache(
        client,
        keys=CacheKeys(settings.cache_namespace),
        ttl_policy=TtlPolicy.from_settings(settings),
        max_value_bytes=settings.cache_max_value_bytes,
    )
