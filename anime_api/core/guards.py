"""Entry and exit guards around every paged read.

``guard_page_request`` runs before the store is queried and never fails: paging
input is advisory, so anything unusable degrades to a safe default.
``guard_result_page`` runs on what the store returns and rejects impossible
pages, then sanitizes each item. The two stages are independent on purpose;
data can reach the store through paths that never saw the entry guard.
"""

from collections.abc import Iterable

from anime_api.core.exceptions import InvalidResultError
from anime_api.core.logging import get_logger
from anime_api.core.pagination import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_FIELD,
    MAX_PAGE_NUMBER,
    MAX_PAGE_SIZE,
    Direction,
    PagingRequest,
    ResultPage,
    SortOrder,
)
from anime_api.core.sanitizer import sanitize, sanitize_record
from anime_api.models.anime import AnimeRecord

log = get_logger(__name__)

DEFAULT_SORT = (SortOrder(field=DEFAULT_SORT_FIELD, direction=Direction.ASC),)


def _safe_page_size(requested: int) -> int:
    if requested <= 0:
        return DEFAULT_PAGE_SIZE
    return min(requested, MAX_PAGE_SIZE)


def _safe_page_number(requested: int) -> int:
    return min(max(requested, DEFAULT_PAGE_NUMBER), MAX_PAGE_NUMBER)


def _safe_sort(requested: Iterable[SortOrder], allowed_fields: frozenset[str]) -> tuple[SortOrder, ...]:
    requested = tuple(requested or ())
    if not requested:
        return DEFAULT_SORT
    safe = tuple(
        SortOrder(field=sanitize(order.field), direction=order.direction)
        for order in requested
        if is_sort_field_allowed(order.field, allowed_fields)
    )
    if len(safe) < len(requested):
        log.info(
            "sort_fields_dropped",
            dropped=[o.field for o in requested if o.field not in allowed_fields],
        )
    return safe or DEFAULT_SORT


def is_sort_field_allowed(field: str, allowed_fields: frozenset[str]) -> bool:
    return field in allowed_fields


def guard_page_request(request: PagingRequest, allowed_fields: frozenset[str]) -> PagingRequest:
    """Clamp size and number, keep only allow-listed sort fields."""
    safe = PagingRequest(
        page_number=_safe_page_number(request.page_number),
        page_size=_safe_page_size(request.page_size),
        sort=_safe_sort(request.sort, allowed_fields),
    )
    if safe.page_size != request.page_size or safe.page_number != request.page_number:
        log.debug(
            "paging_clamped",
            requested_size=request.page_size,
            requested_page=request.page_number,
            page_size=safe.page_size,
            page_number=safe.page_number,
        )
    return safe


def quick_guard_page_request(request: PagingRequest) -> PagingRequest:
    """Clamp size and number only. The sort is passed through untouched, so use
    this only where the caller is trusted."""
    return PagingRequest(
        page_number=_safe_page_number(request.page_number),
        page_size=_safe_page_size(request.page_size),
        sort=request.sort,
    )


def guard_result_page(page: ResultPage[AnimeRecord] | None) -> ResultPage[AnimeRecord]:
    if page is None:
        raise InvalidResultError("page null!!")
    if page.page_size <= 0 or page.page_size > MAX_PAGE_SIZE:
        raise InvalidResultError(
            f"Invalid page size: {page.page_size}. Must be between 1 and {MAX_PAGE_SIZE}",
            details={"page_size": page.page_size},
        )
    if page.page_number < 0:
        raise InvalidResultError(
            f"Invalid page number: {page.page_number}. Must not be negative",
            details={"page_number": page.page_number},
        )
    if not page.items:
        return page
    return ResultPage[AnimeRecord](
        items=[sanitize_record(item) for item in page.items],
        page_number=page.page_number,
        page_size=page.page_size,
        total_elements=page.total_elements,
    )
