"""Cache invalidation after catalog writes.

Write paths await ``invalidate`` after the primary store acknowledges the
commit and before reporting success to their caller, so a completed write is
never followed by a stale cached read (barring a loader already in flight).

Example:
    await store.update_novel(novel)           # committed
    await invalidator.invalidate(EntityRef.novel(novel.novel_id))
    return novel                               # now report success

Listings keyed by filter parameters cannot be enumerated per record; they
rely on their short TTL, or on ``invalidate_entity_type`` after catalog-wide
changes such as an import.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from novelhub.cache.keys import CacheKeys, EntityRef, EntityType

if TYPE_CHECKING:
    from novelhub.cache.client import CacheClient

logger = logging.getLogger(__name__)


class CacheInvalidator:
    """Deletes cache entries for changed catalog entities."""

    def __init__(self, client: CacheClient, keys: CacheKeys):
        self.client = client
        self.keys = keys

    async def invalidate(self, ref: EntityRef) -> bool:
        """Delete the cached entry for ``ref``.

        Returns False if the cache could not be reached; the entry then
        expires with its TTL.
        """
        key = self.keys.derive(ref)
        deleted = await self.client.delete(key)
        if deleted:
            logger.debug(f"Invalidated {key}")
        elif self.client.enabled:
            logger.warning(f"Could not invalidate {key}; entry expires with its TTL")
        return deleted

    async def invalidate_many(self, refs: Iterable[EntityRef]) -> int:
        """Invalidate several entries. Returns how many deletes succeeded."""
        succeeded = 0
        for ref in refs:
            if await self.invalidate(ref):
                succeeded += 1
        return succeeded

    async def invalidate_entity_type(self, entity_type: EntityType) -> int:
        """Delete every cached entry of an entity type.

        Returns the number of keys deleted.
        """
        prefix = self.keys.entity_prefix(entity_type)
        deleted = await self.client.delete_prefix(prefix)
        logger.info(f"Invalidated {deleted} cached {entity_type.value} entries")
        return deleted
