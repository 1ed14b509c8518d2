"""Tests for cache invalidation."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest

from novelhub.cache.invalidation import CacheInvalidator
from novelhub.cache.keys import CacheKeys, EntityRef, EntityType

if TYPE_CHECKING:
    from tests.conftest import FakeCacheClient


@pytest.fixture
def invalidator(fake_cache: FakeCacheClient) -> CacheInvalidator:
    return CacheInvalidator(fake_cache, CacheKeys())


class TestCacheInvalidator:
    """Tests for CacheInvalidator."""

    @pytest.mark.asyncio
    async def test_invalidate_deletes_key(
        self, invalidator: CacheInvalidator, fake_cache: FakeCacheClient
    ) -> None:
        """Invalidation removes exactly the entity's key."""
        fake_cache.entries["novelhub:novel:n1"] = (b"{}", 100.0)
        fake_cache.entries["novelhub:novel:n2"] = (b"{}", 100.0)

        assert await invalidator.invalidate(EntityRef.novel("n1")) is True

        assert "novelhub:novel:n1" not in fake_cache.entries
        assert "novelhub:novel:n2" in fake_cache.entries

    @pytest.mark.asyncio
    async def test_invalidate_absent_key(self, invalidator: CacheInvalidator) -> None:
        """Invalidating an uncached entity succeeds."""
        assert await invalidator.invalidate(EntityRef.author("nobody")) is True

    @pytest.mark.asyncio
    async def test_invalidate_reports_unreachable_cache(self) -> None:
        """A failed delete is reported, not raised."""
        client = AsyncMock()
        client.delete = AsyncMock(return_value=False)
        client.enabled = True
        invalidator = CacheInvalidator(client, CacheKeys())

        assert await invalidator.invalidate(EntityRef.novel("n1")) is False
        client.delete.assert_awaited_once_with("novelhub:novel:n1")

    @pytest.mark.asyncio
    async def test_invalidate_many(
        self, invalidator: CacheInvalidator, fake_cache: FakeCacheClient
    ) -> None:
        """Several entities can be invalidated together."""
        fake_cache.entries["novelhub:novel:n1"] = (b"{}", 100.0)
        fake_cache.entries["novelhub:author:u1"] = (b"{}", 100.0)

        count = await invalidator.invalidate_many([EntityRef.novel("n1"), EntityRef.author("u1")])

        assert count == 2
        assert fake_cache.entries == {}

    @pytest.mark.asyncio
    async def test_invalidate_entity_type(
        self, invalidator: CacheInvalidator, fake_cache: FakeCacheClient
    ) -> None:
        """Bulk invalidation removes only keys of that entity type."""
        keys = CacheKeys()
        for ref in (
            EntityRef.novel_listing(sort="likes"),
            EntityRef.novel_listing(genre="Fantasy", sort="rating"),
            EntityRef.novel("n1"),
        ):
            fake_cache.entries[keys.derive(ref)] = (b"{}", 100.0)

        deleted = await invalidator.invalidate_entity_type(EntityType.NOVEL_LISTING)

        assert deleted == 2
        assert list(fake_cache.entries) == ["novelhub:novel:n1"]

    @pytest.mark.asyncio
    async def test_namespaces_are_isolated(self, fake_cache: FakeCacheClient) -> None:
        """Bulk invalidation never crosses namespaces."""
        fake_cache.entries["staging:novel:n1"] = (b"{}", 100.0)
        fake_cache.entries["novelhub:novel:n1"] = (b"{}", 100.0)
        invalidator = CacheInvalidator(fake_cache, CacheKeys("staging"))

        assert await invalidator.invalidate_entity_type(EntityType.NOVEL) == 1
        assert list(fake_cache.entries) == ["novelhub:novel:n1"]
