"""NovelHub: novel catalog service with a read-through cache."""

__version__ = "0.1.0"
