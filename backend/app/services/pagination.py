"""
Page/limit resolution for store queries and in-memory sequences.

Both the song listing and the verse listing share one policy:

- ``page`` missing or ``<= 0`` means page 1
- ``limit`` missing or ``<= 0`` means the default page size

A resolved :class:`PageWindow` is used either as ``LIMIT/OFFSET`` for SQL or
as a ``[start, end)`` slice over a sequence. Slicing past the end yields an
empty page, never an error.
"""

from __future__ import annotations

from collections.abc import Iterable, Sized
from dataclasses import dataclass
from itertools import islice
from typing import TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageWindow:
    """Effective page size and zero-based offset."""

    limit: int
    offset: int

    @property
    def start(self) -> int:
        return self.offset

    @property
    def end(self) -> int:
        return self.offset + self.limit


def resolve_page(page: int | None) -> int:
    """Return a 1-based page number, treating missing or non-positive as 1."""
    if page is None or page <= 0:
        return 1
    return page


def resolve_limit(limit: int | None, *, default: int) -> int:
    """Return the effective page size; large limits are honoured as given."""
    if limit is None or limit <= 0:
        return default
    return limit


def resolve_window(
    page: int | None,
    limit: int | None,
    *,
    default_limit: int,
) -> PageWindow:
    """Resolve raw query values into a :class:`PageWindow`."""
    effective_page = resolve_page(page)
    effective_limit = resolve_limit(limit, default=default_limit)
    return PageWindow(limit=effective_limit, offset=(effective_page - 1) * effective_limit)


def slice_range(window: PageWindow, length: int) -> tuple[int, int]:
    """Clamp a window to a sequence of ``length`` items.

    Returns ``(start, end)`` with ``end`` exclusive. When the window starts at
    or past the end, ``start == end == length`` (an empty range).
    """
    if window.start >= length:
        return length, length
    return window.start, min(window.end, length)


def paginate(items: Iterable[T], window: PageWindow) -> list[T]:
    """Return the items that fall inside ``window``.

    Sized inputs are clamped with :func:`slice_range` first. Items are
    consumed lazily and never read past the end of the window.
    """
    if isinstance(items, Sized):
        start, end = slice_range(window, len(items))
    else:
        start, end = window.start, window.end
    return list(islice(items, start, end))
