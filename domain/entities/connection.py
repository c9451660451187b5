"""Cursor-connection entities."""
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class PaginationWindow:
    """Half-open ``[start, end)`` index window plus the upstream fetch size."""

    start: int
    end: int
    fetch_count: int

    @property
    def page_size(self) -> int:
        """Maximum number of edges returned (the lookahead row excluded)."""
        return self.fetch_count - 1


@dataclass
class PageInfo:
    has_previous_page: bool
    has_next_page: bool
    start_cursor: Optional[str] = None
    end_cursor: Optional[str] = None


@dataclass
class Edge(Generic[T]):
    cursor: str
    node: T


@dataclass
class Connection(Generic[T]):
    page_info: PageInfo
    edges: list[Edge[T]] = field(default_factory=list)

    @property
    def nodes(self) -> list[T]:
        return [e.node for e in self.edges]

    def to_dict(self, render: Callable[[T], object]) -> dict:
        return {
            'edges': [{'cursor': e.cursor, 'node': render(e.node)} for e in self.edges],
            'page_info': {
                'has_previous_page': self.page_info.has_previous_page,
                'has_next_page': self.page_info.has_next_page,
                'start_cursor': self.page_info.start_cursor,
                'end_cursor': self.page_info.end_cursor,
            },
        }
