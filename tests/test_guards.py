"""Tests for the paging entry guard and the result-page exit guard."""

import pytest

from anime_api.core.exceptions import InvalidResultError
from anime_api.core.guards import (
    DEFAULT_SORT,
    guard_page_request,
    guard_result_page,
    is_sort_field_allowed,
    quick_guard_page_request,
)
from anime_api.core.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_NUMBER,
    MAX_PAGE_SIZE,
    Direction,
    PagingRequest,
    ResultPage,
    SortOrder,
    parse_sort_param,
)
from anime_api.core.sanitizer import INVALID_TEXT_SENTINEL
from anime_api.models.anime import SORTABLE_FIELDS, AnimeRecord

INTS = [-(2**31), -999, -1, 0, 1, 5, 49, 50, 51, 999999, 2**31 - 1]


def _page(items, page_number=0, page_size=5, total=None):
    return ResultPage[AnimeRecord](
        items=items,
        page_number=page_number,
        page_size=page_size,
        total_elements=len(items) if total is None else total,
    )


class TestPageRequestGuard:
    @pytest.mark.parametrize("page_number", INTS)
    @pytest.mark.parametrize("page_size", INTS)
    def test_clamps_into_bounds(self, page_number, page_size):
        safe = guard_page_request(PagingRequest(page_number=page_number, page_size=page_size), SORTABLE_FIELDS)
        assert 1 <= safe.page_size <= MAX_PAGE_SIZE
        assert safe.page_number >= 0

    @pytest.mark.parametrize(
        "requested,expected",
        [(0, DEFAULT_PAGE_SIZE), (-3, DEFAULT_PAGE_SIZE), (1, 1), (7, 7), (50, 50), (51, 50), (999999, 50)],
    )
    def test_page_size(self, requested, expected):
        assert guard_page_request(PagingRequest(page_size=requested), SORTABLE_FIELDS).page_size == expected

    def test_negative_page_number_becomes_zero(self):
        assert guard_page_request(PagingRequest(page_number=-4), SORTABLE_FIELDS).page_number == 0

    def test_huge_page_number_keeps_offset_within_int64(self):
        safe = guard_page_request(PagingRequest(page_number=10**20, page_size=999), SORTABLE_FIELDS)
        assert safe.page_number == MAX_PAGE_NUMBER
        assert safe.offset <= 2**63 - 1

    def test_page_number_is_kept(self):
        assert guard_page_request(PagingRequest(page_number=12), SORTABLE_FIELDS).page_number == 12

    def test_empty_sort_defaults_to_id_ascending(self):
        assert guard_page_request(PagingRequest(), SORTABLE_FIELDS).sort == DEFAULT_SORT
        assert DEFAULT_SORT == (SortOrder(field="id", direction=Direction.ASC),)

    def test_abusive_request_is_made_safe(self):
        raw = PagingRequest(
            page_number=0,
            page_size=999999,
            sort=(SortOrder(field="password<H1><script>", direction=Direction.DESC),),
        )
        safe = guard_page_request(raw, SORTABLE_FIELDS)
        assert safe.page_size == 50
        assert [o.field for o in safe.sort] == ["id"]

    def test_disallowed_fields_are_filtered_keeping_order_and_direction(self):
        raw = PagingRequest(
            sort=(
                SortOrder(field="name", direction=Direction.DESC),
                SortOrder(field="password", direction=Direction.ASC),
                SortOrder(field="id", direction=Direction.ASC),
            )
        )
        safe = guard_page_request(raw, SORTABLE_FIELDS)
        assert safe.sort == (
            SortOrder(field="name", direction=Direction.DESC),
            SortOrder(field="id", direction=Direction.ASC),
        )

    @pytest.mark.parametrize("field", ["password", "ID", "name ", "<b>name</b>", "created_at", ""])
    def test_fields_outside_allow_list_never_survive(self, field):
        raw = PagingRequest(sort=(SortOrder(field=field, direction=Direction.DESC),))
        safe = guard_page_request(raw, SORTABLE_FIELDS)
        assert all(o.field in SORTABLE_FIELDS for o in safe.sort)
        assert field not in [o.field for o in safe.sort]

    def test_allow_list_is_injected(self):
        raw = PagingRequest(sort=(SortOrder(field="name", direction=Direction.ASC),))
        safe = guard_page_request(raw, frozenset({"id"}))
        assert safe.sort == DEFAULT_SORT

    def test_does_not_mutate_request(self):
        raw = PagingRequest(page_number=-1, page_size=0)
        guard_page_request(raw, SORTABLE_FIELDS)
        assert raw.page_number == -1
        assert raw.page_size == 0

    def test_is_sort_field_allowed(self):
        assert is_sort_field_allowed("id", SORTABLE_FIELDS)
        assert is_sort_field_allowed("name", SORTABLE_FIELDS)
        assert not is_sort_field_allowed("password", SORTABLE_FIELDS)


class TestQuickGuard:
    def test_clamps_like_full_guard(self):
        safe = quick_guard_page_request(PagingRequest(page_number=-2, page_size=999))
        assert safe.page_number == 0
        assert safe.page_size == MAX_PAGE_SIZE

    def test_caps_huge_page_number(self):
        assert quick_guard_page_request(PagingRequest(page_number=10**20)).page_number == MAX_PAGE_NUMBER

    def test_zero_size_defaults(self):
        assert quick_guard_page_request(PagingRequest(page_size=0)).page_size == DEFAULT_PAGE_SIZE

    def test_passes_sort_through_unchecked(self):
        sort = (SortOrder(field="password<script>", direction=Direction.DESC),)
        assert quick_guard_page_request(PagingRequest(sort=sort)).sort == sort


class TestResultPageGuard:
    def test_none_page_is_rejected(self):
        with pytest.raises(InvalidResultError) as exc:
            guard_result_page(None)
        assert exc.value.message == "page null!!"

    @pytest.mark.parametrize("page_size", [0, -1, MAX_PAGE_SIZE + 1, 10_000])
    def test_page_size_out_of_bounds_is_rejected(self, page_size):
        with pytest.raises(InvalidResultError):
            guard_result_page(_page([], page_size=page_size))

    def test_negative_page_number_is_rejected(self):
        with pytest.raises(InvalidResultError):
            guard_result_page(_page([], page_number=-1))

    def test_empty_page_is_returned_as_is(self):
        page = _page([], total=0)
        assert guard_result_page(page) is page

    def test_items_are_sanitized_into_a_new_page(self):
        items = [
            AnimeRecord(id="1", name="alemcar<script>alert('xss')</script>"),
            AnimeRecord(id="2", name="<img src=x onerror=alert(1)>"),
            AnimeRecord(id="3", name="<h1>alfredo</h1>"),
            AnimeRecord(id="4", name="<a href='http://site-malicioso.com'>Click</a>"),
            AnimeRecord(id="5", name="<H1><Script></Script></H1>"),
        ]
        page = _page(items, page_number=2, page_size=5, total=16)
        guarded = guard_result_page(page)

        assert guarded is not page
        assert [i.name for i in guarded.items] == [
            "alemcar",
            INVALID_TEXT_SENTINEL,
            "alfredo",
            "Click",
            INVALID_TEXT_SENTINEL,
        ]
        assert [i.id for i in guarded.items] == ["1", "2", "3", "4", "5"]
        assert (guarded.page_number, guarded.page_size, guarded.total_elements) == (2, 5, 16)
        assert page.items[2].name == "<h1>alfredo</h1>"


class TestResultPage:
    @pytest.mark.parametrize("total,size,pages", [(0, 5, 0), (4, 5, 1), (5, 5, 1), (6, 5, 2), (101, 50, 3)])
    def test_total_pages(self, total, size, pages):
        assert _page([], page_size=size, total=total).total_pages == pages

    def test_total_pages_is_serialized(self):
        assert _page([], page_size=5, total=6).model_dump()["total_pages"] == 2


class TestParseSortParam:
    def test_field_only_is_ascending(self):
        assert parse_sort_param("name") == SortOrder(field="name", direction=Direction.ASC)

    def test_descending(self):
        assert parse_sort_param("id,DESC") == SortOrder(field="id", direction=Direction.DESC)

    def test_unknown_direction_is_ascending(self):
        assert parse_sort_param("id,sideways").direction == Direction.ASC

    def test_blank_field(self):
        assert parse_sort_param(" ,desc") is None
