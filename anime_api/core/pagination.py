"""Paging descriptors and result pages."""

import math
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, computed_field

T = TypeVar("T")

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 5
DEFAULT_PAGE_NUMBER = 0
# Largest page whose offset still fits a signed 64-bit skip.
MAX_PAGE_NUMBER = (2**63 - 1) // MAX_PAGE_SIZE
DEFAULT_SORT_FIELD = "id"


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortOrder(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    direction: Direction = Direction.ASC


class PagingRequest(BaseModel):
    """Zero-based page request. Built per call and never mutated afterwards."""

    model_config = ConfigDict(frozen=True)

    page_number: int = DEFAULT_PAGE_NUMBER
    page_size: int = DEFAULT_PAGE_SIZE
    sort: tuple[SortOrder, ...] = ()

    @property
    def offset(self) -> int:
        return self.page_number * self.page_size


class ResultPage(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True)

    items: list[T]
    page_number: int
    page_size: int
    total_elements: int = 0

    @computed_field
    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_elements / self.page_size)


def parse_sort_param(raw: str) -> SortOrder | None:
    """Parse ``field`` or ``field,dir``. Unknown directions read as ascending."""
    field, _, direction = raw.partition(",")
    field = field.strip()
    if not field:
        return None
    if direction.strip().lower() == Direction.DESC.value:
        return SortOrder(field=field, direction=Direction.DESC)
    return SortOrder(field=field, direction=Direction.ASC)
