"""JSON file catalog store.

Reads a catalog export of the form:

    {"novels": [{"novelId": "n123", ...}], "authors": [{"id": "u1", ...}]}

The file is loaded on first access and rewritten atomically on every save.
Suited to development, fixtures and small static deployments.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]
import orjson
from pydantic import ValidationError

from novelhub.cache.errors import LoaderError
from novelhub.catalog.base import CatalogStore, NovelFilters, SortOrder
from novelhub.core.model import AuthorProfile, Novel, NovelListing

logger = logging.getLogger(__name__)


class JsonCatalogStore(CatalogStore):
    """Catalog store backed by a JSON file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._novels: dict[str, Novel] | None = None
        self._authors: dict[str, AuthorProfile] = {}
        self._lock = asyncio.Lock()

    async def _load(self) -> dict[str, Novel]:
        if self._novels is not None:
            return self._novels

        async with self._lock:
            if self._novels is not None:
                return self._novels

            try:
                async with aiofiles.open(self.path, "rb") as f:
                    raw = await f.read()
            except OSError as e:
                raise LoaderError(f"Cannot read catalog {self.path}: {e}") from e

            try:
                data = orjson.loads(raw)
                novels = [Novel.model_validate(item) for item in data.get("novels", [])]
                authors = [AuthorProfile.model_validate(item) for item in data.get("authors", [])]
            except (orjson.JSONDecodeError, AttributeError, ValidationError) as e:
                raise LoaderError(f"Invalid catalog {self.path}: {e}") from e

            self._authors = {a.user_id: a for a in authors}
            self._novels = {n.novel_id: n for n in novels}
            logger.info(
                f"Loaded catalog {self.path}: {len(self._novels)} novels, "
                f"{len(self._authors)} authors"
            )
            return self._novels

    async def _persist(self, novels: dict[str, Novel], authors: dict[str, AuthorProfile]) -> None:
        """Write the catalog atomically. Raises LoaderError if the write fails."""
        document = {
            "novels": [n.model_dump(mode="json", by_alias=True) for n in novels.values()],
            "authors": [a.model_dump(mode="json", by_alias=True) for a in authors.values()],
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(orjson.dumps(document, option=orjson.OPT_INDENT_2))
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            raise LoaderError(f"Cannot write catalog {self.path}: {e}") from e

    async def health_check(self) -> bool:
        try:
            await self._load()
        except LoaderError as e:
            logger.warning(f"Catalog health check failed: {e}")
            return False
        return True

    async def get_novel(self, novel_id: str) -> Novel | None:
        novels = await self._load()
        return novels.get(novel_id)

    async def get_author(self, user_id: str) -> AuthorProfile | None:
        await self._load()
        return self._authors.get(user_id)

    async def list_novels(self, filters: NovelFilters) -> NovelListing:
        novels = await self._load()
        matching = [n for n in novels.values() if filters.matches(n)]

        if filters.sort is SortOrder.LIKES:
            matching.sort(key=lambda n: (-n.likes, n.novel_id))
        elif filters.sort is SortOrder.RATING:
            matching.sort(key=lambda n: (-n.rating, n.novel_id))
        else:
            matching.sort(key=lambda n: (n.last_updated or "", n.novel_id), reverse=True)

        return NovelListing(novels=matching[: filters.limit], total=len(matching))

    async def save_novel(self, novel: Novel) -> None:
        novels = await self._load()
        async with self._lock:
            current = self._novels if self._novels is not None else novels
            updated = {**current, novel.novel_id: novel}
            await self._persist(updated, self._authors)
            # Swapped in only once the file write has been committed
            self._novels = updated

    async def save_author(self, author: AuthorProfile) -> None:
        novels = await self._load()
        async with self._lock:
            current = self._novels if self._novels is not None else novels
            updated = {**self._authors, author.user_id: author}
            await self._persist(current, updated)
            self._authors = updated
