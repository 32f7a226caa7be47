"""In-memory paging of computed report rows."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from math import ceil
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    content: list[T]
    total_elements: int
    total_pages: int
    page: int
    size: int

    def serialize(self, item_serializer: Callable[[T], R]) -> dict[str, object]:
        return {
            "content": [item_serializer(item) for item in self.content],
            "total_elements": self.total_elements,
            "total_pages": self.total_pages,
            "page": self.page,
            "size": self.size,
        }


def paginate(items: Sequence[T], page: int, size: int) -> Page[T]:
    """Slice an already ordered sequence into one page.

    Rows must be fully aggregated and sorted before this is called: slicing
    the raw facts instead would cut a subject's facts across pages and
    produce partial metrics. Page indexes past the end return empty content
    with the real totals.
    """

    if size < 1:
        raise ValueError("size must be greater than zero.")
    if page < 0:
        raise ValueError("page must be greater or equal zero.")

    total = len(items)
    start = page * size
    end = min(start + size, total)
    content = list(items[start:end]) if start < total else []
    return Page(
        content=content,
        total_elements=total,
        total_pages=ceil(total / size),
        page=page,
        size=size,
    )
