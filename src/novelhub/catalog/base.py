"""Primary store interface.

Defines the abstract interface the cache layer's loaders call into. The
cache knows nothing about the store's query language: it only sees the
records these methods return.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from novelhub.core.model import AuthorProfile, AvailabilityType, Novel, NovelListing


class SortOrder(str, Enum):
    """Listing sort orders."""

    LIKES = "likes"
    RATING = "rating"
    LATEST = "latest"


@dataclass(frozen=True)
class NovelFilters:
    """Filters for a catalog listing."""

    genre: str | None = None
    tag: str | None = None
    availability: AvailabilityType | None = None
    sort: SortOrder = SortOrder.LIKES
    limit: int = 20

    def __post_init__(self) -> None:
        if not 1 <= self.limit <= 100:
            raise ValueError("limit must be between 1 and 100")

    def to_params(self) -> dict[str, str]:
        """Cache key parameters for this listing."""
        params = {"sort": self.sort.value, "limit": str(self.limit)}
        if self.genre is not None:
            params["genre"] = self.genre
        if self.tag is not None:
            params["tag"] = self.tag
        if self.availability is not None:
            params["availability"] = self.availability.value
        return params

    def matches(self, novel: Novel) -> bool:
        if self.genre is not None and self.genre not in {g.name for g in novel.genres}:
            return False
        if self.tag is not None and self.tag not in novel.tags:
            return False
        if self.availability is not None and novel.availability.type != self.availability:
            return False
        return True


class CatalogStore(ABC):
    """Abstract base class for primary store adapters.

    Implementations raise ``novelhub.cache.LoaderError`` for data-layer
    failures and return None for records that do not exist.
    """

    @abstractmethod
    async def get_novel(self, novel_id: str) -> Novel | None:
        """Fetch a novel by ID."""
        ...

    @abstractmethod
    async def get_author(self, user_id: str) -> AuthorProfile | None:
        """Fetch an author profile by user ID."""
        ...

    @abstractmethod
    async def list_novels(self, filters: NovelFilters) -> NovelListing:
        """Fetch a filtered, sorted listing."""
        ...

    @abstractmethod
    async def save_novel(self, novel: Novel) -> None:
        """Create or replace a novel. Returns once the write is committed."""
        ...

    @abstractmethod
    async def save_author(self, author: AuthorProfile) -> None:
        """Create or replace an author profile."""
        ...

    async def health_check(self) -> bool:
        """Check that the store can serve reads."""
        return True

    async def close(self) -> None:
        """Release store resources."""
