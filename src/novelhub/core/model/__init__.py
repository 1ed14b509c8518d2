"""Catalog domain models.

Records mirror the documents held by the primary store. JSON uses the
website's camelCase field names; Python code uses snake_case attributes.
All models use Pydantic v2.
"""

from pydantic import BaseModel


class CatalogModel(BaseModel):
    """Base model for catalog records.

    Unknown fields are ignored rather than forbidden: the primary store
    carries many more fields than the site reads, and cached payloads must
    stay readable across additive schema changes.
    """

    model_config = {
        "extra": "ignore",
        "populate_by_name": True,
        "validate_default": True,
    }


# ruff: noqa: E402
from novelhub.core.model.author import AuthorProfile, SocialLinks
from novelhub.core.model.novel import (
    Availability,
    AvailabilityType,
    Genre,
    Novel,
    NovelListing,
    Publishers,
    SeriesStatus,
    SeriesType,
)

__all__ = [
    "CatalogModel",
    "AuthorProfile",
    "SocialLinks",
    "Availability",
    "AvailabilityType",
    "Genre",
    "Novel",
    "NovelListing",
    "Publishers",
    "SeriesStatus",
    "SeriesType",
]
