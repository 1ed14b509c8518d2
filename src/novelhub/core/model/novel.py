"""Novel records and catalog listings."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from novelhub.core.model import CatalogModel


class AvailabilityType(str, Enum):
    """How a novel can be read."""

    FREE = "FREE"
    FREEMIUM = "FREEMIUM"
    PAID = "PAID"


class SeriesType(str, Enum):
    """Origin of a series."""

    ORIGINAL = "ORIGINAL"
    TRANSLATED = "TRANSLATED"
    FAN_FIC = "FAN_FIC"


class SeriesStatus(str, Enum):
    """Publication status of a series."""

    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    ON_HOLD = "ON HOLD"
    CANCELLED = "CANCELLED"
    UPCOMING = "UPCOMING"


class Genre(CatalogModel):
    name: str


class Publishers(CatalogModel):
    original: str
    english: str | None = None


class Availability(CatalogModel):
    type: AvailabilityType
    price: float | None = Field(default=None, ge=0)


class Novel(CatalogModel):
    """A novel as served to catalog pages.

    ``likes`` and ``availability`` change independently of the rest of the
    record, which is why cached novels carry a short TTL.
    """

    novel_id: str = Field(alias="novelId", min_length=1)
    title: str
    genres: list[Genre] = Field(default_factory=list)
    synopsis: str = ""
    rating: float = Field(default=0.0, ge=0)
    cover_photo: str = Field(default="", alias="coverPhoto")
    publishers: Publishers
    likes: int = Field(default=0, ge=0)
    availability: Availability
    tags: list[str] = Field(default_factory=list)

    author_id: str | None = Field(default=None, alias="authorId")
    series_type: SeriesType | None = Field(default=None, alias="seriesType")
    series_status: SeriesStatus | None = Field(default=None, alias="seriesStatus")
    total_chapters: int | None = Field(default=None, alias="totalChapters", ge=0)
    last_updated: str | None = Field(default=None, alias="lastUpdated")


class NovelListing(CatalogModel):
    """A filtered page of the catalog."""

    novels: list[Novel] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
