"""Relay-style cursor pagination over an offset/count upstream."""
from __future__ import annotations

import base64
import binascii
import inspect
from typing import Awaitable, Callable, Optional, Sequence, TypeVar, Union

from config import Settings
from domain.entities import Connection, Edge, PageInfo, PaginationWindow
from domain.exceptions import InvalidCursor, InvalidPaginationArgument

T = TypeVar("T")

MAX_PAGE_SIZE = Settings.MAX_PAGE_SIZE
UPPER_BOUND   = Settings.MATCH_HISTORY_CEILING

_PREFIX = "cursor:"

Fetch = Callable[[int, int], Union[Awaitable[Sequence[T]], Sequence[T]]]


def encode_cursor(index: int) -> str:
    """Opaque cursor for a zero-based absolute index."""
    if index < 0:
        raise ValueError("cursor index must be non-negative")
    return base64.urlsafe_b64encode(f"{_PREFIX}{index}".encode()).decode()


def decode_cursor(cursor: str) -> int:
    """Index of a cursor made by ``encode_cursor``; anything else is rejected."""
    if not isinstance(cursor, str) or not cursor:
        raise InvalidCursor(cursor)
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("ascii")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise InvalidCursor(cursor) from exc
    if not raw.startswith(_PREFIX):
        raise InvalidCursor(cursor)
    digits = raw[len(_PREFIX):]
    if not digits.isdigit():
        raise InvalidCursor(cursor)
    index = int(digits)
    # leading zeros or padding variants decode fine but are not ours
    if encode_cursor(index) != cursor:
        raise InvalidCursor(cursor)
    return index


def _limit(name: str, value: Optional[int], max_page_size: int) -> Optional[int]:
    if value is None:
        return None
    if value < 0:
        raise InvalidPaginationArgument(f"'{name}' must be non-negative, got {value}")
    return min(value, max_page_size)


def compute_window(
    after: Optional[str] = None,
    before: Optional[str] = None,
    first: Optional[int] = None,
    last: Optional[int] = None,
    *,
    max_page_size: int = MAX_PAGE_SIZE,
    upper_bound: int = UPPER_BOUND,
) -> PaginationWindow:
    """
    Map ``after/before/first/last`` onto an upstream ``start/count`` window.

    ``fetch_count`` asks for one row more than can be returned; that row
    only tells whether a next page exists.
    """
    first = _limit("first", first, max_page_size)
    last = _limit("last", last, max_page_size)

    start = decode_cursor(after) + 1 if after is not None else 0
    end = decode_cursor(before) if before is not None else upper_bound
    end = max(end, start)

    if first is not None:
        end = min(start + first, end)
    if last is not None:
        start = max(start, end - last)

    fetch_count = min(end - start + 1, max_page_size + 1)
    return PaginationWindow(start=start, end=end, fetch_count=fetch_count)


def build_connection(window: PaginationWindow, items: Sequence[T]) -> Connection[T]:
    """Turn the fetched window into edges, dropping the lookahead row."""
    edges = [
        Edge(cursor=encode_cursor(window.start + i), node=item)
        for i, item in enumerate(items[:window.page_size])
    ]
    return Connection(
        page_info=PageInfo(
            has_previous_page=window.start > 0,
            has_next_page=len(items) >= window.fetch_count,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        ),
        edges=edges,
    )


async def paginate(
    fetch: Fetch,
    after: Optional[str] = None,
    before: Optional[str] = None,
    first: Optional[int] = None,
    last: Optional[int] = None,
    *,
    max_page_size: int = MAX_PAGE_SIZE,
    upper_bound: int = UPPER_BOUND,
) -> Connection:
    """Compute the window, call ``fetch(start, count)`` once, build the page."""
    window = compute_window(
        after, before, first, last, max_page_size=max_page_size, upper_bound=upper_bound
    )
    items = fetch(window.start, window.fetch_count)
    if inspect.isawaitable(items):
        items = await items
    return build_connection(window, list(items))


async def paginate_sequence(
    items: Sequence[T],
    after: Optional[str] = None,
    before: Optional[str] = None,
    first: Optional[int] = None,
    last: Optional[int] = None,
    *,
    max_page_size: int = MAX_PAGE_SIZE,
) -> Connection[T]:
    """Same cursor semantics over a list already in memory."""
    return await paginate(
        lambda start, count: items[start:start + count],
        after, before, first, last,
        max_page_size=max_page_size,
        upper_bound=len(items),
    )
