from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from anime_api.core.exceptions import InvalidInputError
from anime_api.core.pagination import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    PagingRequest,
    ResultPage,
    parse_sort_param,
)
from anime_api.deps import get_store
from anime_api.models.anime import NAME_MAX_LEN, AnimeRecord
from anime_api.services import animes as animes_service
from anime_api.storage.base import AnimeStore

router = APIRouter()

# Letters (Portuguese accents included), digits, whitespace, "-", "." and "_".
NAME_QUERY_PATTERN = r"^[a-zA-Z0-9áàâãéèêíïóôõöúçñÁÀÂÃÉÈÊÍÏÓÔÕÖÚÇÑ\s\-._]*$"


class AnimeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LEN)


class AnimeUpdate(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)


def paging_params(
    page: int = Query(DEFAULT_PAGE_NUMBER, description="Zero-based page number"),
    size: int = Query(DEFAULT_PAGE_SIZE, description="Page size, capped server-side"),
    sort: list[str] = Query([], description="field or field,asc|desc; repeatable"),
) -> PagingRequest:
    """Raw paging input. Deliberately unconstrained here; the service clamps it."""
    orders = tuple(o for o in (parse_sort_param(s) for s in sort) if o is not None)
    return PagingRequest(page_number=page, page_size=size, sort=orders)


@router.get("", response_model=ResultPage[AnimeRecord])
async def animes_list(
    paging: PagingRequest = Depends(paging_params),
    store: AnimeStore = Depends(get_store),
):
    """List animes, one page at a time."""
    return await animes_service.list_all(store, paging)


@router.get("/findByName", response_model=ResultPage[AnimeRecord])
async def animes_find_by_name(
    name: str = Query(..., min_length=1, max_length=50, pattern=NAME_QUERY_PATTERN),
    contains: bool = Query(False, description="Substring match instead of exact match"),
    paging: PagingRequest = Depends(paging_params),
    store: AnimeStore = Depends(get_store),
):
    if not name.strip():
        raise InvalidInputError("Name must not be blank")
    return await animes_service.find_by_name(store, paging, name, contains)


@router.get("/{anime_id}", response_model=AnimeRecord)
async def anime_get(anime_id: str, store: AnimeStore = Depends(get_store)):
    return await animes_service.get_by_id(store, anime_id)


@router.post("", response_model=AnimeRecord, status_code=status.HTTP_201_CREATED)
async def anime_create(body: AnimeCreate, store: AnimeStore = Depends(get_store)):
    return await animes_service.create(store, body.name)


@router.put("", response_model=AnimeRecord)
async def anime_update(body: AnimeUpdate, store: AnimeStore = Depends(get_store)):
    return await animes_service.update_name(store, body.id, body.name)


@router.delete("/{anime_id}", response_model=AnimeRecord)
async def anime_delete(anime_id: str, store: AnimeStore = Depends(get_store)):
    return await animes_service.delete_by_id(store, anime_id)
