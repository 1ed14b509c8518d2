"""Global pytest configuration and fixtures.

Provides an in-memory cache client with a controllable clock and sample
catalog records shared across the unit tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson
import pytest

from novelhub.cache.client import CacheClient
from novelhub.core.model import AuthorProfile, Novel


class FakeCacheClient(CacheClient):
    """In-memory cache client with TTL expiry against a manual clock."""

    backend = "fake"

    def __init__(self, timeout: float = 1.0) -> None:
        super().__init__(timeout)
        self.now = 0.0
        self.entries: dict[str, tuple[bytes, float]] = {}
        self.set_calls: list[tuple[str, bytes, int]] = []
        self.closed = False

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def _get(self, key: str) -> bytes | None:
        entry = self.entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.now >= expires_at:
            del self.entries[key]
            return None
        return value

    async def _set(self, key: str, value: bytes, ttl_seconds: int) -> bool:
        self.set_calls.append((key, value, ttl_seconds))
        self.entries[key] = (value, self.now + ttl_seconds)
        return True

    async def _delete(self, key: str) -> bool:
        self.entries.pop(key, None)
        return True

    async def _delete_prefix(self, prefix: str) -> int:
        matching = [key for key in self.entries if key.startswith(prefix)]
        for key in matching:
            del self.entries[key]
        return len(matching)

    async def _ping(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_cache() -> FakeCacheClient:
    return FakeCacheClient()


@pytest.fixture
def novel_data() -> dict[str, Any]:
    return {
        "novelId": "n123",
        "title": "Foo",
        "genres": [{"name": "Fantasy"}, {"name": "Adventure"}],
        "synopsis": "A long journey.",
        "rating": 4.5,
        "coverPhoto": "https://img.example.com/n123.jpg",
        "publishers": {"original": "Lantern Press", "english": "Moonlit"},
        "likes": 10,
        "availability": {"type": "FREE"},
        "tags": ["magic", "quest"],
        "authorId": "u1",
        "lastUpdated": "2026-09-01T12:00:00Z",
    }


@pytest.fixture
def novel(novel_data: dict[str, Any]) -> Novel:
    return Novel.model_validate(novel_data)


@pytest.fixture
def author_data() -> dict[str, Any]:
    return {
        "id": "u1",
        "username": "inkwell",
        "bio": "Writes long fantasy.",
        "profilePicture": "https://img.example.com/u1.png",
        "socialLinks": {"website": "https://inkwell.example.com"},
        "totalWorks": 3,
        "totalLikes": 120,
        "createdAt": "2024-02-01T00:00:00Z",
    }


@pytest.fixture
def author(author_data: dict[str, Any]) -> AuthorProfile:
    return AuthorProfile.model_validate(author_data)


@pytest.fixture
def catalog_file(tmp_path: Path, novel_data: dict[str, Any], author_data: dict[str, Any]) -> Path:
    """Catalog export with three novels and one author."""
    second = {
        **novel_data,
        "novelId": "n456",
        "title": "Bar",
        "genres": [{"name": "Romance"}],
        "likes": 50,
        "rating": 3.9,
        "availability": {"type": "PAID", "price": 4.99},
        "tags": ["drama"],
        "lastUpdated": "2026-10-01T12:00:00Z",
    }
    third = {
        **novel_data,
        "novelId": "n789",
        "title": "Baz",
        "likes": 5,
        "rating": 4.9,
        "lastUpdated": "2026-08-01T12:00:00Z",
    }
    path = tmp_path / "catalog.json"
    path.write_bytes(
        orjson.dumps({"novels": [novel_data, second, third], "authors": [author_data]})
    )
    return path
