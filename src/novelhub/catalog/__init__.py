"""Catalog access for NovelHub.

Primary store adapters and the service that reads through the cache and
invalidates it after writes.
"""

from novelhub.catalog.base import CatalogStore, NovelFilters, SortOrder
from novelhub.catalog.json_store import JsonCatalogStore
from novelhub.catalog.service import CatalogService

__all__ = [
    "CatalogStore",
    "NovelFilters",
    "SortOrder",
    "JsonCatalogStore",
    "CatalogService",
]
