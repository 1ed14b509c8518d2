"""Tests for the read-through accessor."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock

import orjson
import pytest

from novelhub.cache.accessor import (
    ReadThroughCache,
    TtlPolicy,
    decode_record,
    encode_record,
)
from novelhub.cache.client import NullCacheClient
from novelhub.cache.errors import LoaderError, SerializationError
from novelhub.cache.keys import CacheKeys, EntityRef, EntityType
from novelhub.config import Settings
from novelhub.core.model import AuthorProfile, Novel, NovelListing

if TYPE_CHECKING:
    from tests.conftest import FakeCacheClient


class CountingLoader:
    """Loader stub that records how often it ran."""

    def __init__(self, result: Any = None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def reader(fake_cache: FakeCacheClient) -> ReadThroughCache:
    return ReadThroughCache(fake_cache, CacheKeys())


class TestTtlPolicy:
    """Tests for per-entity TTLs."""

    def test_defaults(self) -> None:
        """Default TTLs reflect how often each entity changes."""
        policy = TtlPolicy()
        assert policy.ttl_for(EntityType.NOVEL) == 120
        assert policy.ttl_for(EntityType.AUTHOR) == 300
        assert policy.ttl_for(EntityType.NOVEL_LISTING) == 60

    def test_from_settings(self) -> None:
        """TTLs can be tuned through settings."""
        settings = Settings(novel_ttl=30, author_ttl=600, listing_ttl=15)
        policy = TtlPolicy.from_settings(settings)
        assert policy == TtlPolicy(novel=30, author=600, novel_listing=15)

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_non_positive_ttl_rejected(self, ttl: int) -> None:
        """Every entity type needs a positive TTL."""
        with pytest.raises(ValueError):
            TtlPolicy(author=ttl)


class TestRecordCodec:
    """Tests for cached payload encoding."""

    def test_payload_uses_camel_case(self, novel: Novel) -> None:
        """Payloads use the site's JSON field names."""
        payload = orjson.loads(encode_record(novel))
        assert payload["novelId"] == "n123"
        assert payload["coverPhoto"] == "https://img.example.com/n123.jpg"
        assert payload["availability"] == {"type": "FREE", "price": None}

    def test_decode_encoded(self, author: AuthorProfile) -> None:
        """Decoding an encoded record yields an equal record."""
        payload = encode_record(author)
        assert decode_record("k", payload, AuthorProfile) == author

    @pytest.mark.parametrize(
        "payload",
        [b"not json", b"[]", b'{"novelId": ""}', b'{"title": "missing fields"}'],
    )
    def test_corrupt_payload(self, payload: bytes) -> None:
        """Undecodable payloads raise SerializationError."""
        with pytest.raises(SerializationError) as exc_info:
            decode_record("novelhub:novel:n1", payload, Novel)
        assert exc_info.value.key == "novelhub:novel:n1"


class TestReadThroughCache:
    """Tests for ReadThroughCache.fetch."""

    @pytest.mark.asyncio
    async def test_miss_then_hit(
        self, reader: ReadThroughCache, fake_cache: FakeCacheClient, novel: Novel
    ) -> None:
        """The first fetch loads and caches; the second is served from cache."""
        loader = CountingLoader(novel)
        ref = EntityRef.novel("n123")

        first = await reader.fetch(ref, loader)
        second = await reader.fetch(ref, loader)

        assert first == novel
        assert second == novel
        assert loader.calls == 1
        assert fake_cache.set_calls[0][0] == "novelhub:novel:n123"
        assert fake_cache.set_calls[0][2] == 120

    @pytest.mark.asyncio
    async def test_entry_expires_with_ttl(
        self, reader: ReadThroughCache, fake_cache: FakeCacheClient, novel: Novel
    ) -> None:
        """Within the TTL reads are hits; after it the loader runs again."""
        loader = CountingLoader(novel)
        ref = EntityRef.novel("n123")

        await reader.fetch(ref, loader)
        fake_cache.advance(5)
        await reader.fetch(ref, loader)
        assert loader.calls == 1

        fake_cache.advance(125)
        await reader.fetch(ref, loader)
        assert loader.calls == 2

    @pytest.mark.asyncio
    async def test_ttl_per_entity_type(
        self, reader: ReadThroughCache, fake_cache: FakeCacheClient, author: AuthorProfile
    ) -> None:
        """Each entity type is written with its own TTL."""
        await reader.fetch(EntityRef.author("u1"), CountingLoader(author))
        await reader.fetch(EntityRef.novel_listing(sort="likes"), CountingLoader(NovelListing()))

        ttls = {key: ttl for key, _, ttl in fake_cache.set_calls}
        assert ttls["novelhub:author:u1"] == 300
        assert ttls["novelhub:novel_listing:all:sort=likes"] == 60

    @pytest.mark.asyncio
    async def test_unreachable_cache_falls_through(self, novel: Novel) -> None:
        """With the cache down every read goes to the loader."""
        client = AsyncMock()
        client.get = AsyncMock(return_value=None)
        client.set = AsyncMock(return_value=False)
        client.enabled = True
        reader = ReadThroughCache(client, CacheKeys())
        loader = CountingLoader(novel)

        assert await reader.fetch(EntityRef.novel("n123"), loader) == novel
        assert await reader.fetch(EntityRef.novel("n123"), loader) == novel
        assert loader.calls == 2

    @pytest.mark.asyncio
    async def test_null_client_always_loads(self, novel: Novel) -> None:
        """The inert client serves every read from the loader."""
        reader = ReadThroughCache(NullCacheClient(), CacheKeys())
        loader = CountingLoader(novel)

        await reader.fetch(EntityRef.novel("n123"), loader)
        await reader.fetch(EntityRef.novel("n123"), loader)

        assert loader.calls == 2

    @pytest.mark.asyncio
    async def test_loader_error_propagates_and_is_not_cached(
        self, reader: ReadThroughCache, fake_cache: FakeCacheClient
    ) -> None:
        """Loader failures reach the caller unchanged and nothing is written."""
        error = LoaderError("store down")
        loader = CountingLoader(error=error)

        with pytest.raises(LoaderError) as exc_info:
            await reader.fetch(EntityRef.novel("n123"), loader)

        assert exc_info.value is error
        assert fake_cache.set_calls == []

    @pytest.mark.asyncio
    async def test_unexpected_loader_exception_propagates(self, reader: ReadThroughCache) -> None:
        """Exceptions of any type propagate unchanged."""
        with pytest.raises(KeyError):
            await reader.fetch(EntityRef.novel("n123"), CountingLoader(error=KeyError("x")))

    @pytest.mark.asyncio
    async def test_not_found_is_not_cached(
        self, reader: ReadThroughCache, fake_cache: FakeCacheClient, novel: Novel
    ) -> None:
        """A missing record is reloaded on the next read."""
        ref = EntityRef.novel("n123")

        assert await reader.fetch(ref, CountingLoader(None)) is None
        assert fake_cache.set_calls == []

        # Created afterwards: visible immediately
        assert await reader.fetch(ref, CountingLoader(novel)) == novel

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_deleted_and_reloaded(
        self, reader: ReadThroughCache, fake_cache: FakeCacheClient, novel: Novel
    ) -> None:
        """Undecodable entries are treated as misses and replaced."""
        key = "novelhub:novel:n123"
        fake_cache.entries[key] = (b"{garbage", 1000.0)
        loader = CountingLoader(novel)

        assert await reader.fetch(EntityRef.novel("n123"), loader) == novel
        assert loader.calls == 1
        assert decode_record(key, fake_cache.entries[key][0], Novel) == novel

    @pytest.mark.asyncio
    async def test_wrong_record_type_in_cache_is_reloaded(
        self,
        reader: ReadThroughCache,
        fake_cache: FakeCacheClient,
        novel: Novel,
        author: AuthorProfile,
    ) -> None:
        """A payload of another record type is treated as corrupt."""
        fake_cache.entries["novelhub:novel:n123"] = (encode_record(author), 1000.0)
        loader = CountingLoader(novel)

        assert await reader.fetch(EntityRef.novel("n123"), loader) == novel
        assert loader.calls == 1

    @pytest.mark.asyncio
    async def test_loader_returning_wrong_type(
        self, reader: ReadThroughCache, author: AuthorProfile
    ) -> None:
        """A loader returning the wrong record type is a programming error."""
        with pytest.raises(TypeError):
            await reader.fetch(EntityRef.novel("n123"), CountingLoader(author))

    @pytest.mark.asyncio
    async def test_oversized_value_is_not_cached(
        self, fake_cache: FakeCacheClient, novel: Novel
    ) -> None:
        """Records above the size limit are returned but not written."""
        reader = ReadThroughCache(fake_cache, CacheKeys(), max_value_bytes=64)
        loader = CountingLoader(novel)

        assert await reader.fetch(EntityRef.novel("n123"), loader) == novel
        assert fake_cache.set_calls == []

    @pytest.mark.asyncio
    async def test_invalidate_then_reload(
        self, reader: ReadThroughCache, fake_cache: FakeCacheClient, novel: Novel
    ) -> None:
        """After the entry is deleted the next read sees the updated record."""
        ref = EntityRef.novel("n123")
        await reader.fetch(ref, CountingLoader(novel))

        updated = novel.model_copy(update={"likes": 11})
        await fake_cache.delete("novelhub:novel:n123")

        result = await reader.fetch(ref, CountingLoader(updated))
        assert result is not None
        assert result.likes == 11
