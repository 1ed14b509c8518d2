"""Read-through access to catalog records.

On a hit the cached payload is decoded and returned without touching the
primary store. On a miss, timeout or corrupt entry the caller's loader runs,
and its result is written back with the TTL of its entity type.

Staleness bounds (default TTLs):
- novel: 120s. Like counts and availability may lag by up to two minutes.
- author: 300s. Profiles change rarely and are invalidated on edit.
- novel_listing: 60s. Listings are keyed by filter parameters and are
  not enumerated on invalidation, so the TTL alone bounds their staleness.

A loader that started before an invalidation may write its (older) result
after the delete. That entry lives at most one TTL.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar, cast

import orjson
from pydantic import ValidationError

from novelhub.cache.errors import SerializationError
from novelhub.cache.keys import CacheKeys, EntityRef, EntityType
from novelhub.core.model import AuthorProfile, CatalogModel, Novel, NovelListing
from novelhub.observability.metrics import (
    record_cache_hit,
    record_cache_miss,
    record_cache_write_skipped,
    record_loader,
)

if TYPE_CHECKING:
    from novelhub.cache.client import CacheClient
    from novelhub.config import Settings

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=CatalogModel)
Loader = Callable[[], Awaitable[R | None]]

DEFAULT_MAX_VALUE_BYTES = 1_000_000

RECORD_TYPES: dict[EntityType, type[CatalogModel]] = {
    EntityType.NOVEL: Novel,
    EntityType.AUTHOR: AuthorProfile,
    EntityType.NOVEL_LISTING: NovelListing,
}


@dataclass(frozen=True)
class TtlPolicy:
    """Cache TTL in seconds per entity type."""

    novel: int = 120
    author: int = 300
    novel_listing: int = 60

    def __post_init__(self) -> None:
        for entity_type in EntityType:
            if self.ttl_for(entity_type) <= 0:
                raise ValueError(f"TTL for {entity_type.value} must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> TtlPolicy:
        return cls(
            novel=settings.novel_ttl,
            author=settings.author_ttl,
            novel_listing=settings.listing_ttl,
        )

    def ttl_for(self, entity_type: EntityType) -> int:
        return cast(int, getattr(self, entity_type.value))


def encode_record(record: CatalogModel) -> bytes:
    """Serialize a record to the JSON bytes stored in the cache."""
    return orjson.dumps(record.model_dump(mode="json", by_alias=True))


def decode_record(key: str, payload: bytes, record_type: type[R]) -> R:
    """Decode a cached payload.

    Raises:
        SerializationError: If the payload is not a valid record.
    """
    try:
        return record_type.model_validate_json(payload)
    except ValidationError as e:
        raise SerializationError(key, f"{e.error_count()} validation error(s)") from e


class ReadThroughCache:
    """Cache-aside reads of catalog records."""

    def __init__(
        self,
        client: CacheClient,
        keys: CacheKeys,
        ttl_policy: TtlPolicy | None = None,
        max_value_bytes: int = DEFAULT_MAX_VALUE_BYTES,
    ):
        self.client = client
        self.keys = keys
        self.ttl_policy = ttl_policy or TtlPolicy()
        self.max_value_bytes = max_value_bytes

    async def fetch(self, ref: EntityRef, loader: Loader[R]) -> R | None:
        """Return the record for ``ref`` from the cache or from ``loader``.

        Exceptions raised by ``loader`` propagate unchanged and nothing is
        written for them. A loader returning None (record not found) is not
        cached either.
        """
        key = self.keys.derive(ref)
        entity_type = ref.entity_type.value
        record_type = cast(type[R], RECORD_TYPES[ref.entity_type])

        payload = await self.client.get(key)
        if payload is not None:
            try:
                cached = decode_record(key, payload, record_type)
            except SerializationError as e:
                logger.warning(f"Discarding corrupt cache entry: {e}")
                await self.client.delete(key)
            else:
                record_cache_hit(entity_type)
                logger.debug(f"Cache hit: {key}")
                return cached

        record_cache_miss(entity_type)
        logger.debug(f"Cache miss: {key}")

        start = time.perf_counter()
        record = await loader()
        record_loader(entity_type, time.perf_counter() - start)

        if record is None:
            logger.debug(f"No record for {key}; nothing cached")
            return None

        if not isinstance(record, record_type):
            raise TypeError(
                f"Loader for {entity_type} returned {type(record).__name__}, "
                f"expected {record_type.__name__}"
            )

        await self._store(key, ref, record)
        return record

    async def _store(self, key: str, ref: EntityRef, record: CatalogModel) -> None:
        payload = encode_record(record)
        if len(payload) > self.max_value_bytes:
            logger.warning(
                f"Not caching {key}: {len(payload)} bytes exceeds limit of "
                f"{self.max_value_bytes}"
            )
            record_cache_write_skipped(ref.entity_type.value, "too_large")
            return

        ttl = self.ttl_policy.ttl_for(ref.entity_type)
        if await self.client.set(key, payload, ttl):
            logger.debug(f"Cached {key} for {ttl}s")
        elif self.client.enabled:
            record_cache_write_skipped(ref.entity_type.value, "set_failed")
