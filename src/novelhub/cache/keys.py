"""Cache key schema for NovelHub.

Key format: {namespace}:{entity_type}:{id}[:{param}={value}&...]

Where:
- namespace: "novelhub" by default (shared Redis instances)
- entity_type: "novel", "author", "novel_listing"
- id: entity identifier
- params: optional query parameters, sorted by name

Components are percent-encoded so that separators inside identifiers or
parameter values can never make two different references share a key.
Keys stay readable, and every key for an entity type shares the
``{namespace}:{entity_type}:`` prefix for bulk invalidation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from urllib.parse import quote, unquote

DEFAULT_NAMESPACE = "novelhub"

# Characters left unescaped inside a key component
_SAFE = "-_.~/@+!$()*,;"


class EntityType(str, Enum):
    """Kinds of cacheable catalog entities."""

    NOVEL = "novel"
    AUTHOR = "author"
    NOVEL_LISTING = "novel_listing"


@dataclass(frozen=True)
class EntityRef:
    """Logical reference to a cacheable catalog entity."""

    entity_type: EntityType
    id: str
    params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze params so the reference is immutable and hashable
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __hash__(self) -> int:
        return hash((self.entity_type, self.id, tuple(sorted(self.params.items()))))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityRef):
            return NotImplemented
        return (
            self.entity_type == other.entity_type
            and self.id == other.id
            and dict(self.params) == dict(other.params)
        )

    @classmethod
    def novel(cls, novel_id: str) -> EntityRef:
        return cls(EntityType.NOVEL, novel_id)

    @classmethod
    def author(cls, user_id: str) -> EntityRef:
        return cls(EntityType.AUTHOR, user_id)

    @classmethod
    def novel_listing(cls, name: str = "all", **params: str) -> EntityRef:
        return cls(EntityType.NOVEL_LISTING, name, params)


def _encode(component: str) -> str:
    return quote(component, safe=_SAFE)


class CacheKeys:
    """Cache key generator following consistent naming convention."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        if not namespace or ":" in namespace:
            raise ValueError(f"Invalid cache namespace: {namespace!r}")
        self.namespace = namespace

    def derive(self, ref: EntityRef) -> str:
        """Key for an entity reference.

        Pure and deterministic: equal references always map to the same key
        and references differing in type, id or any parameter never do.
        """
        key = f"{self.namespace}:{ref.entity_type.value}:{_encode(ref.id)}"
        if ref.params:
            query = "&".join(
                f"{_encode(name)}={_encode(value)}" for name, value in sorted(ref.params.items())
            )
            key = f"{key}:{query}"
        return key

    def entity_prefix(self, entity_type: EntityType) -> str:
        """Prefix shared by every key of an entity type."""
        return f"{self.namespace}:{entity_type.value}:"

    def parse_key(self, key: str) -> EntityRef | None:
        """Parse a cache key back into an entity reference.

        Returns None if the key doesn't match the expected format.
        """
        parts = key.split(":")
        if len(parts) not in (3, 4) or parts[0] != self.namespace:
            return None

        try:
            entity_type = EntityType(parts[1])
        except ValueError:
            return None

        params: dict[str, str] = {}
        if len(parts) == 4:
            for pair in parts[3].split("&"):
                name, sep, value = pair.partition("=")
                if not sep:
                    return None
                params[unquote(name)] = unquote(value)

        return EntityRef(entity_type, unquote(parts[2]), params)


def derive_key(ref: EntityRef, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Derive the cache key for ``ref`` in ``namespace``."""
    return CacheKeys(namespace).derive(ref)
