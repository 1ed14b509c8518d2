"""API routers for NovelHub."""

from novelhub.api.routers import authors, cache, health, metrics, novels

__all__ = ["authors", "cache", "health", "metrics", "novels"]
