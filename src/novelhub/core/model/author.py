"""Author profile records."""

from __future__ import annotations

from pydantic import Field

from novelhub.core.model import CatalogModel


class SocialLinks(CatalogModel):
    twitter: str | None = None
    facebook: str | None = None
    website: str | None = None


class AuthorProfile(CatalogModel):
    """Public profile of an author, keyed by their user ID."""

    user_id: str = Field(alias="id", min_length=1)
    username: str
    bio: str = ""
    profile_picture: str = Field(default="", alias="profilePicture")
    social_links: SocialLinks = Field(default_factory=SocialLinks, alias="socialLinks")
    total_works: int = Field(default=0, alias="totalWorks", ge=0)
    total_likes: int = Field(default=0, alias="totalLikes", ge=0)
    created_at: str | None = Field(default=None, alias="createdAt")
