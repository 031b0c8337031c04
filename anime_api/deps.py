"""Shared FastAPI dependencies."""

from anime_api.storage.base import AnimeStore, get_anime_store


def get_store() -> AnimeStore:
    """Dependency: the configured anime store (overridden in tests)."""
    return get_anime_store()
