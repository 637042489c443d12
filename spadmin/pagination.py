"""
Fixed-size pagination over an in-memory list.

Pages are 1-based. The current page always satisfies
1 <= page <= max(1, total_pages), so an empty list still has page 1.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterator, List, Sequence

from .config import DEFAULT_PAGE_SIZE


def total_pages(count: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    return math.ceil(max(count, 0) / page_size)


def clamp_page(page: int, pages: int) -> int:
    return max(1, min(page, max(1, pages)))


@dataclass
class Page:
    items: List[Any]
    number: int
    total_pages: int
    start: int
    end: int

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages


def paginate(items: Sequence[Any], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    """
    Slice one page out of ``items``.

    Args:
        items: Full (already filtered) list
        page: Requested 1-based page, clamped into range
        page_size: Items per page

    Returns:
        Page with the slice and its [start, end) window
    """
    pages = total_pages(len(items), page_size)
    number = clamp_page(page, pages)
    start = (number - 1) * page_size
    end = min(start + page_size, len(items))
    return Page(items=list(items[start:end]), number=number, total_pages=pages, start=start, end=end)


class Paginator:
    """Navigation state over a list that may be replaced after a refetch or filter change."""

    def __init__(self, items: Sequence[Any] = (), page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.page_size = page_size
        self.items: List[Any] = list(items)
        self.current_page = 1

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.items), self.page_size)

    @property
    def current(self) -> Page:
        return paginate(self.items, self.current_page, self.page_size)

    def set_items(self, items: Sequence[Any]) -> None:
        """Replace the list; a change in length sends the view back to page 1."""
        changed = len(items) != len(self.items)
        self.items = list(items)
        if changed:
            self.current_page = 1
        else:
            self.current_page = clamp_page(self.current_page, self.total_pages)

    def go_to_page(self, number: int) -> bool:
        """Jump to a page; out-of-range requests are ignored."""
        if 1 <= number <= self.total_pages:
            self.current_page = number
            return True
        return False

    def next_page(self) -> Page:
        self.current_page = clamp_page(self.current_page + 1, self.total_pages)
        return self.current

    def previous_page(self) -> Page:
        self.current_page = clamp_page(self.current_page - 1, self.total_pages)
        return self.current

    def pages(self) -> Iterator[Page]:
        for number in range(1, self.total_pages + 1):
            yield paginate(self.items, number, self.page_size)
