"""Pagination arithmetic and display strings.

Out-of-range page numbers are clamped to the nearest valid page. Page
sizes are never clamped: a size outside the allowed options is rejected
and the previous size is kept.
"""

from __future__ import annotations

import math

from collections.abc import Iterable, Sequence
from typing import Literal

from .exceptions import PaginationError
from .models import PaginationView


PageMarker = Literal["left-dots", "right-dots"]


def validate_page_sizes(allowed: Iterable[int]) -> tuple[int, ...]:
    """Check and freeze a collection of allowed page sizes.

    Raises
    ------
    PaginationError
        If no sizes are given or one of them is not positive.
    """
    sizes = tuple(allowed)
    if not sizes:
        raise PaginationError("At least one page size must be allowed", allowed=sizes)
    for size in sizes:
        if size < 1:
            raise PaginationError("Page sizes must be positive", page_size=size, allowed=sizes)
    return sizes


def is_allowed_page_size(size: int, allowed: Sequence[int]) -> bool:
    """Whether ``size`` is one of the allowed page sizes."""
    return size in allowed


def total_pages(total_items: int, page_size: int) -> int:
    """Number of pages, never less than one."""
    return max(1, math.ceil(max(total_items, 0) / page_size))


def clamp_page(page: int, pages: int) -> int:
    """Clamp ``page`` into ``[1, pages]``."""
    return min(max(page, 1), pages)


def paginate(total_items: int, page: int, page_size: int) -> PaginationView:
    """Resolve a page request.

    Parameters
    ----------
    total_items : int
        Number of items in the dataset.
    page : int
        Requested 1-based page; clamped into range.
    page_size : int
        Items per page.

    Returns
    -------
    PaginationView
        The clamped page with its ``[start_index, end_index)`` range.
    """
    total_items = max(total_items, 0)
    pages = total_pages(total_items, page_size)
    current = clamp_page(page, pages)
    start = (current - 1) * page_size
    end = min(start + page_size, total_items)
    return PaginationView(
        page=current,
        page_size=page_size,
        total_items=total_items,
        total_pages=pages,
        start_index=start,
        end_index=end,
    )


def page_info(view: PaginationView) -> str:
    """Range text such as ``"1 - 10 of 247"``."""
    return f"{view.start_item} - {view.end_item} of {view.total_items}"


def page_label(view: PaginationView) -> str:
    """Compact position text such as ``"Page 3 of 25"``."""
    return f"Page {view.page} of {view.total_pages}"


def page_size_label(size: int) -> str:
    """Label for a page size option, e.g. ``"25 / Page"``."""
    return f"{size} / Page"


def page_buttons(page: int, pages: int, max_buttons: int = 7) -> list[int | PageMarker]:
    """Page numbers to offer as buttons, with ellipsis markers.

    When every page fits, all pages are listed. Otherwise the first page,
    the neighbours of the current page and the last page are listed, and
    a ``"left-dots"``/``"right-dots"`` marker stands for each gap.

    Examples
    --------
    >>> page_buttons(6, 25)
    [1, 'left-dots', 5, 6, 7, 'right-dots', 25]
    """
    if pages <= max_buttons:
        return list(range(1, pages + 1))

    page = clamp_page(page, pages)
    left = max(page - 1, 1)
    right = min(page + 1, pages)

    buttons: list[int | PageMarker] = [1]
    if left > 2:
        buttons.append("left-dots")
    buttons.extend(i for i in range(left, right + 1) if i not in (1, pages))
    if right < pages - 1:
        buttons.append("right-dots")
    buttons.append(pages)
    return buttons
