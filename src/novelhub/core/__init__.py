"""Core domain types for NovelHub."""
