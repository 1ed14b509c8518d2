"""Middleware for the NovelHub API."""

from novelhub.api.middleware.correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
