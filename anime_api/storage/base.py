from abc import ABC, abstractmethod

from anime_api.core.config import get_settings
from anime_api.core.pagination import PagingRequest, ResultPage
from anime_api.models.anime import SORTABLE_FIELDS, AnimeRecord


class AnimeStore(ABC):
    """Persistence for anime records. Reads take an already guarded ``PagingRequest``."""

    sortable_fields: frozenset[str] = SORTABLE_FIELDS

    @abstractmethod
    async def fetch_all(self, paging: PagingRequest) -> ResultPage[AnimeRecord]:
        ...

    @abstractmethod
    async def fetch_by_substring(self, text: str, paging: PagingRequest) -> ResultPage[AnimeRecord]:
        """Records whose name contains ``text`` (case-sensitive)."""
        ...

    @abstractmethod
    async def fetch_by_exact(self, text: str, paging: PagingRequest) -> ResultPage[AnimeRecord]:
        ...

    @abstractmethod
    async def find_by_id(self, anime_id: str) -> AnimeRecord | None:
        ...

    @abstractmethod
    async def save(self, record: AnimeRecord) -> AnimeRecord:
        """Insert ``record`` (id ignored) and return it with its new id."""
        ...

    @abstractmethod
    async def delete(self, record: AnimeRecord) -> None:
        ...

    @abstractmethod
    async def update_name(self, anime_id: str, name: str) -> AnimeRecord | None:
        """Atomically set the name; return the updated record, or None if it no longer exists."""
        ...


_memory_store: "AnimeStore | None" = None


def get_anime_store() -> AnimeStore:
    settings = get_settings()
    if settings.anime_store_backend == "memory":
        global _memory_store
        if _memory_store is None:
            from anime_api.storage.memory import MemoryAnimeStore
            _memory_store = MemoryAnimeStore()
        return _memory_store
    from anime_api.storage.mongo import MongoAnimeStore
    return MongoAnimeStore()
