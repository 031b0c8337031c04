"""Process-local store, for development and tests. Not shared between workers."""

import asyncio
import itertools

from anime_api.core.pagination import Direction, PagingRequest, ResultPage
from anime_api.models.anime import AnimeRecord
from anime_api.storage.base import AnimeStore


def _sort_key(field: str):
    if field == "id":
        return lambda r: int(r.id)
    return lambda r: (getattr(r, field) is None, getattr(r, field) or "")


class MemoryAnimeStore(AnimeStore):
    def __init__(self, names: list[str] | None = None) -> None:
        self._rows: dict[str, AnimeRecord] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()
        for name in names or []:
            self._insert(name)

    def _insert(self, name: str | None) -> AnimeRecord:
        record = AnimeRecord(id=str(next(self._ids)), name=name)
        self._rows[record.id] = record
        return record

    def _page(self, rows: list[AnimeRecord], paging: PagingRequest) -> ResultPage[AnimeRecord]:
        # Stable sorts applied from the last key to the first give multi-key ordering.
        for order in reversed(paging.sort):
            if order.field in self.sortable_fields:
                rows = sorted(rows, key=_sort_key(order.field), reverse=order.direction == Direction.DESC)
        start = paging.offset
        return ResultPage[AnimeRecord](
            items=rows[start:start + paging.page_size],
            page_number=paging.page_number,
            page_size=paging.page_size,
            total_elements=len(rows),
        )

    async def fetch_all(self, paging: PagingRequest) -> ResultPage[AnimeRecord]:
        return self._page(list(self._rows.values()), paging)

    async def fetch_by_substring(self, text: str, paging: PagingRequest) -> ResultPage[AnimeRecord]:
        rows = [r for r in self._rows.values() if r.name is not None and text in r.name]
        return self._page(rows, paging)

    async def fetch_by_exact(self, text: str, paging: PagingRequest) -> ResultPage[AnimeRecord]:
        rows = [r for r in self._rows.values() if r.name == text]
        return self._page(rows, paging)

    async def find_by_id(self, anime_id: str) -> AnimeRecord | None:
        return self._rows.get(anime_id)

    async def save(self, record: AnimeRecord) -> AnimeRecord:
        async with self._lock:
            return self._insert(record.name)

    async def delete(self, record: AnimeRecord) -> None:
        async with self._lock:
            self._rows.pop(record.id, None)

    async def update_name(self, anime_id: str, name: str) -> AnimeRecord | None:
        async with self._lock:
            if anime_id not in self._rows:
                return None
            updated = AnimeRecord(id=anime_id, name=name)
            self._rows[anime_id] = updated
            return updated
