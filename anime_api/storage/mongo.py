import re
from datetime import datetime

from beanie import PydanticObjectId, UpdateResponse
from beanie.operators import Set
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING

from anime_api.core.pagination import Direction, PagingRequest, ResultPage
from anime_api.models.anime import Anime, AnimeRecord
from anime_api.storage.base import AnimeStore

# Record field -> document field
_SORT_FIELDS = {"id": "_id", "name": "name"}


def _object_id(anime_id: str) -> PydanticObjectId | None:
    try:
        return PydanticObjectId(anime_id)
    except (InvalidId, TypeError):
        return None


def _sort_spec(paging: PagingRequest) -> list[tuple[str, int]]:
    return [
        (_SORT_FIELDS[o.field], DESCENDING if o.direction == Direction.DESC else ASCENDING)
        for o in paging.sort
        if o.field in _SORT_FIELDS
    ]


class MongoAnimeStore(AnimeStore):
    async def _page(self, query: dict, paging: PagingRequest) -> ResultPage[AnimeRecord]:
        total = await Anime.find(query).count()
        docs = (
            await Anime.find(query)
            .sort(_sort_spec(paging))
            .skip(paging.offset)
            .limit(paging.page_size)
            .to_list()
        )
        return ResultPage[AnimeRecord](
            items=[d.to_record() for d in docs],
            page_number=paging.page_number,
            page_size=paging.page_size,
            total_elements=total,
        )

    async def fetch_all(self, paging: PagingRequest) -> ResultPage[AnimeRecord]:
        return await self._page({}, paging)

    async def fetch_by_substring(self, text: str, paging: PagingRequest) -> ResultPage[AnimeRecord]:
        return await self._page({"name": {"$regex": re.escape(text)}}, paging)

    async def fetch_by_exact(self, text: str, paging: PagingRequest) -> ResultPage[AnimeRecord]:
        return await self._page({"name": text}, paging)

    async def find_by_id(self, anime_id: str) -> AnimeRecord | None:
        oid = _object_id(anime_id)
        if oid is None:
            return None
        doc = await Anime.get(oid)
        return doc.to_record() if doc else None

    async def save(self, record: AnimeRecord) -> AnimeRecord:
        doc = Anime(name=record.name)
        await doc.insert()
        return doc.to_record()

    async def delete(self, record: AnimeRecord) -> None:
        oid = _object_id(record.id)
        if oid is None:
            return
        await Anime.find_one(Anime.id == oid).delete()

    async def update_name(self, anime_id: str, name: str) -> AnimeRecord | None:
        oid = _object_id(anime_id)
        if oid is None:
            return None
        # Single findOneAndUpdate: the read-modify-write is atomic on the document.
        doc = await Anime.find_one(Anime.id == oid).update(
            Set({Anime.name: name, Anime.updated_at: datetime.utcnow()}),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
        return doc.to_record() if doc else None
