"""HTTP API for NovelHub."""

from novelhub.api.app import create_app

__all__ = ["create_app"]
