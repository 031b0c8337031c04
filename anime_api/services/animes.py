"""Anime queries and mutations: guards and sanitizer around the store."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from anime_api.core.config import get_settings
from anime_api.core.exceptions import InvalidInputError, NotFoundError, QueryTimeoutError
from anime_api.core.guards import guard_page_request, guard_result_page
from anime_api.core.logging import get_logger
from anime_api.core.pagination import PagingRequest, ResultPage
from anime_api.core.sanitizer import sanitize, sanitize_record
from anime_api.models.anime import AnimeRecord
from anime_api.storage.base import AnimeStore

log = get_logger(__name__)

T = TypeVar("T")


async def _bounded(query: Awaitable[T], operation: str) -> T:
    """Await a store read, giving up after ``query_timeout_seconds``."""
    timeout = get_settings().query_timeout_seconds
    try:
        return await asyncio.wait_for(query, timeout=timeout)
    except asyncio.TimeoutError:
        log.warning("query_timeout", operation=operation, timeout_seconds=timeout)
        raise QueryTimeoutError(
            f"Query exceeded {timeout:g}s", details={"operation": operation}
        ) from None


async def list_all(store: AnimeStore, raw_paging: PagingRequest) -> ResultPage[AnimeRecord]:
    paging = guard_page_request(raw_paging, store.sortable_fields)
    page = await _bounded(store.fetch_all(paging), "fetch_all")
    return guard_result_page(page)


async def find_by_name(
    store: AnimeStore,
    raw_paging: PagingRequest,
    raw_name: str | None,
    contains: bool = False,
) -> ResultPage[AnimeRecord]:
    """Exact name match, or substring match when ``contains`` is set."""
    paging = guard_page_request(raw_paging, store.sortable_fields)
    name = sanitize(raw_name)
    if name is None:
        raise InvalidInputError("invalid name")
    if contains:
        page = await _bounded(store.fetch_by_substring(name, paging), "fetch_by_substring")
    else:
        page = await _bounded(store.fetch_by_exact(name, paging), "fetch_by_exact")
    return guard_result_page(page)


async def get_by_id(store: AnimeStore, anime_id: str) -> AnimeRecord:
    record = await store.find_by_id(anime_id)
    if record is None:
        raise NotFoundError("Anime not found", details={"id": anime_id})
    return sanitize_record(record)


async def create(store: AnimeStore, raw_name: str | None) -> AnimeRecord:
    name = sanitize(raw_name)
    if name is not None and not name.strip():
        raise InvalidInputError("Enter a valid name (HTML tags alone are not allowed)")
    saved = await store.save(AnimeRecord(name=name))
    log.info("anime_created", anime_id=saved.id)
    return sanitize_record(saved)


async def delete_by_id(store: AnimeStore, anime_id: str) -> AnimeRecord:
    record = await store.find_by_id(anime_id)
    if record is None:
        raise NotFoundError("Anime not found", details={"id": anime_id})
    await store.delete(record)
    log.info("anime_deleted", anime_id=anime_id)
    return record


async def update_name(store: AnimeStore, anime_id: str, raw_name: str | None) -> AnimeRecord:
    """Rename an anime. The write itself is a single atomic update in the store."""
    if await store.find_by_id(anime_id) is None:
        raise NotFoundError("Anime not found", details={"id": anime_id})
    name = sanitize(raw_name)
    if name is None or not name.strip():
        raise InvalidInputError("Name must not be empty")
    updated = await store.update_name(anime_id, name)
    if updated is None:
        # Deleted between the lookup and the write.
        raise NotFoundError("Anime not found", details={"id": anime_id})
    log.info("anime_renamed", anime_id=anime_id)
    return updated
