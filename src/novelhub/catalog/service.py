"""Catalog service: cached reads and invalidating writes.

Reads go through the catalog cache with the store as loader. Writes go to
the store first and invalidate the affected cache entries before returning,
so a caller that sees a write succeed never reads the previous version from
the cache afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import partial

from novelhub.cache import CatalogCache, EntityRef, EntityType
from novelhub.catalog.base import CatalogStore, NovelFilters
from novelhub.core.model import AuthorProfile, Novel, NovelListing

logger = logging.getLogger(__name__)


class CatalogService:
    """Catalog operations used by the HTTP API and the CLI."""

    def __init__(self, store: CatalogStore, cache: CatalogCache):
        self.store = store
        self.cache = cache

    async def get_novel(self, novel_id: str) -> Novel | None:
        return await self.cache.fetch(
            EntityRef.novel(novel_id), partial(self.store.get_novel, novel_id)
        )

    async def get_author(self, user_id: str) -> AuthorProfile | None:
        return await self.cache.fetch(
            EntityRef.author(user_id), partial(self.store.get_author, user_id)
        )

    async def list_novels(self, filters: NovelFilters) -> NovelListing:
        ref = EntityRef.novel_listing(**filters.to_params())
        listing = await self.cache.fetch(ref, partial(self.store.list_novels, filters))
        # Stores always return a listing, possibly empty
        return listing if listing is not None else NovelListing()

    async def save_novel(self, novel: Novel) -> None:
        """Persist a novel, then drop its cached copy.

        Cached listings containing the novel expire with their TTL.
        """
        await self.store.save_novel(novel)
        await self.cache.invalidate(EntityRef.novel(novel.novel_id))

    async def save_author(self, author: AuthorProfile) -> None:
        await self.store.save_author(author)
        await self.cache.invalidate(EntityRef.author(author.user_id))

    async def like_novel(self, novel_id: str) -> Novel | None:
        """Increment a novel's like count.

        Reads the current record from the store, never from the cache.
        Returns None if the novel does not exist.
        """
        novel = await self.store.get_novel(novel_id)
        if novel is None:
            return None

        updated = novel.model_copy(update={"likes": novel.likes + 1})
        await self.save_novel(updated)
        return updated

    async def import_novels(self, novels: Iterable[Novel]) -> int:
        """Persist a batch of novels and drop every cached listing.

        Returns the number of novels imported.
        """
        count = 0
        for novel in novels:
            await self.save_novel(novel)
            count += 1

        if count:
            await self.cache.invalidate_entity_type(EntityType.NOVEL_LISTING)
        logger.info(f"Imported {count} novels")
        return count
