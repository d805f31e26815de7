"""Page slicing and the compact page-number window."""

from __future__ import annotations

import math
from typing import Sequence, TypeVar

from rd_common.errors import ConfigurationError
from rd_table.models import Page, PageState

T = TypeVar("T")

DEFAULT_WINDOW_SIZE = 5


def _check_size(page_size: int) -> None:
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
        raise ConfigurationError(
            f"page_size must be a positive integer, got {page_size!r}",
            context={"page_size": page_size},
        )


def total_pages(count: int, page_size: int) -> int:
    _check_size(page_size)
    return math.ceil(max(0, count) / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Keep ``page`` within ``[1, max(1, pages)]``."""
    return max(1, min(int(page), max(1, pages)))


def paginate(rows: Sequence[T], state: PageState) -> Page:
    """Slice one page; an out-of-range page is clamped first."""
    pages = total_pages(len(rows), state.page_size)
    current = clamp_page(state.current_page, pages)
    start = (current - 1) * state.page_size
    return Page(
        rows=list(rows[start : start + state.page_size]),
        current_page=current,
        total_pages=pages,
        page_size=state.page_size,
        total_count=len(rows),
    )


def page_window(current: int, pages: int, size: int = DEFAULT_WINDOW_SIZE) -> list[int]:
    """Page numbers for a compact pager.

    Length is ``min(size, pages)``. Near the start the window is anchored to
    ``1..size``, near the end to the last ``size`` pages, and centred on the
    current page in between.
    """
    if size < 1:
        raise ConfigurationError(f"window size must be positive, got {size!r}")
    if pages <= 0:
        return []
    current = clamp_page(current, pages)
    if pages <= size:
        return list(range(1, pages + 1))
    half = size // 2
    if current <= half + 1:
        start = 1
    elif current >= pages - (size - 1 - half):
        start = pages - size + 1
    else:
        start = current - half
    return list(range(start, start + size))


def page_range(current: int, page_size: int, count: int) -> tuple[int, int]:
    """One-based (first, last) row numbers shown on ``current``; (0, 0) if empty."""
    if count <= 0:
        return (0, 0)
    first = (current - 1) * page_size + 1
    last = min(current * page_size, count)
    return (first, last)


def anchored_page(current: int, old_size: int, new_size: int) -> int:
    """Page of the new size that holds the previous first visible row."""
    _check_size(new_size)
    first_index = (max(1, current) - 1) * old_size
    return first_index // new_size + 1
