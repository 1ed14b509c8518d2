"""Error taxonomy for the catalog cache.

Only ``LoaderError`` crosses the cache boundary. ``CacheUnavailable`` and
``SerializationError`` are raised inside backends and codecs and absorbed
as cache misses.
"""

from __future__ import annotations


class CacheError(Exception):
    """Base class for cache-side failures."""


class CacheUnavailable(CacheError):
    """The backing store could not be reached or answered with an error."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Cache {operation} failed: {reason}")


class SerializationError(CacheError):
    """A cached payload could not be decoded into a catalog record."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Corrupt cache entry {key}: {reason}")


class LoaderError(Exception):
    """Primary store failure raised by loaders.

    Store adapters raise this (or a subclass) for data-layer errors. The
    read-through accessor re-raises it unchanged and never caches it.
    """
