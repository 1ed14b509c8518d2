"""Author profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from novelhub.api.deps import CatalogServiceDep
from novelhub.api.errors import BadRequestError, NotFoundError
from novelhub.core.model import AuthorProfile

router = APIRouter(prefix="/authors", tags=["Authors"])


@router.get("/{user_id}", response_model=AuthorProfile)
async def get_author(user_id: str, service: CatalogServiceDep) -> AuthorProfile:
    author = await service.get_author(user_id)
    if author is None:
        raise NotFoundError("Author", user_id)
    return author


@router.put("/{user_id}", response_model=AuthorProfile)
async def put_author(
    user_id: str, author: AuthorProfile, service: CatalogServiceDep
) -> AuthorProfile:
    """Create or replace an author profile."""
    if author.user_id != user_id:
        raise BadRequestError(f"Body id '{author.user_id}' does not match path '{user_id}'")
    await service.save_author(author)
    return author
