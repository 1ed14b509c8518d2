"""Novel catalog endpoints.

Reads are served through the catalog cache. Writes persist to the primary
store and invalidate the novel's cache entry before responding.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from novelhub.api.deps import CatalogServiceDep
from novelhub.api.errors import BadRequestError, NotFoundError
from novelhub.catalog import NovelFilters, SortOrder
from novelhub.core.model import AvailabilityType, Novel, NovelListing

router = APIRouter(prefix="/novels", tags=["Novels"])


@router.get("", response_model=NovelListing)
async def list_novels(
    service: CatalogServiceDep,
    genre: str | None = Query(default=None, description="Only novels with this genre"),
    tag: str | None = Query(default=None, description="Only novels with this tag"),
    availability: AvailabilityType | None = Query(default=None),
    sort: SortOrder = Query(default=SortOrder.LIKES),
    limit: int = Query(default=20, ge=1, le=100),
) -> NovelListing:
    """List novels. Listings are cached per filter combination."""
    filters = NovelFilters(
        genre=genre,
        tag=tag,
        availability=availability,
        sort=sort,
        limit=limit,
    )
    return await service.list_novels(filters)


@router.get("/{novel_id}", response_model=Novel)
async def get_novel(novel_id: str, service: CatalogServiceDep) -> Novel:
    novel = await service.get_novel(novel_id)
    if novel is None:
        raise NotFoundError("Novel", novel_id)
    return novel


@router.put("/{novel_id}", response_model=Novel)
async def put_novel(novel_id: str, novel: Novel, service: CatalogServiceDep) -> Novel:
    """Create or replace a novel."""
    if novel.novel_id != novel_id:
        raise BadRequestError(f"Body novelId '{novel.novel_id}' does not match path '{novel_id}'")
    await service.save_novel(novel)
    return novel


@router.post("/{novel_id}/likes", response_model=Novel)
async def like_novel(novel_id: str, service: CatalogServiceDep) -> Novel:
    """Add a like to a novel."""
    novel = await service.like_novel(novel_id)
    if novel is None:
        raise NotFoundError("Novel", novel_id)
    return novel
