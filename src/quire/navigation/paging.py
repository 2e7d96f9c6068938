"""
Paging arithmetic for single-page and two-page (spread) viewing.

All functions are pure: they take the canvas index, the number of canvases
and the viewing direction, and never look at a document. Spreads pair each
odd index with the following even one; the first and last canvases (the
covers) are always shown alone.
"""

from __future__ import annotations


LEFT_TO_RIGHT = "left-to-right"
RIGHT_TO_LEFT = "right-to-left"
PAGED = "paged"

NO_CANVAS = -1


def is_paged(viewing_hint: str | None, paging_enabled: bool) -> bool:
    return viewing_hint == PAGED and bool(paging_enabled)


def is_first_canvas(index: int) -> bool:
    return index == 0


def is_last_canvas(index: int, total: int) -> bool:
    return index == total - 1


def in_range(index: int, total: int) -> bool:
    return 0 <= index < total


def get_paged_indices(index: int, total: int, direction: str = LEFT_TO_RIGHT) -> list[int]:
    """
    Canvas indices shown together with ``index``.

    Example:
        >>> get_paged_indices(2, 5)
        [1, 2]
        >>> get_paged_indices(2, 5, RIGHT_TO_LEFT)
        [2, 1]

    Returns:
        One or two indices in display order, or [] when ``index`` is out of
        range
    """
    if not in_range(index, total):
        return []

    if is_first_canvas(index) or is_last_canvas(index, total):
        indices = [index]
    elif index % 2:
        indices = [index, index + 1]
    else:
        indices = [index - 1, index]

    if direction == RIGHT_TO_LEFT:
        indices.reverse()
    return indices


def get_first_page_index(total: int) -> int:
    return 0


def get_last_page_index(total: int) -> int:
    return total - 1


def get_prev_page_index(
    index: int, total: int, direction: str = LEFT_TO_RIGHT, paged: bool = False
) -> int:
    """
    Index to show when paging back.

    Going below zero is not special-cased; callers check is_first_canvas.
    """
    indices = get_paged_indices(index, total, direction) if paged else []
    if not indices:
        return index - 1

    if direction == RIGHT_TO_LEFT:
        return indices[-1] - 1
    return indices[0] - 1


def get_next_page_index(
    index: int, total: int, direction: str = LEFT_TO_RIGHT, paged: bool = False
) -> int:
    """
    Index to show when paging forward.

    Returns:
        The next index, or -1 past the last canvas
    """
    indices = get_paged_indices(index, total, direction) if paged else []
    if not indices:
        next_index = index + 1
    elif direction == RIGHT_TO_LEFT:
        next_index = indices[0] + 1
    else:
        next_index = indices[-1] + 1

    if next_index > total - 1:
        return NO_CANVAS
    return next_index
