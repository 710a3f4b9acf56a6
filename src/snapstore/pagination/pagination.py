from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from snapstore.config import config


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value) -> SortOrder:
        """Accept a SortOrder or a case-insensitive 'asc'/'desc'."""
        if isinstance(value, SortOrder):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Invalid sort order: {value!r}") from None

    def inverted(self) -> SortOrder:
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


@dataclass(frozen=True)
class Pagination:
    """
    Describes which page of results to fetch.

    Offset mode reads the 1-based page number from current_cursor. Cursor
    mode reads the opaque tokens of a previous PaginationResult: pass its
    next_cursor as next_cursor to move forward, or its previous_cursor as
    previous_cursor to move back.
    """

    cursor_pagination: bool = False
    max_results: int = field(default_factory=lambda: config.default_page_size)
    current_cursor: str | None = None
    next_cursor: str | None = None
    previous_cursor: str | None = None
    reverse_results: bool = False
    primary_sort_prop: str | None = None
    primary_order: SortOrder = SortOrder.ASC
    backup_sort_prop: str | None = None
    backup_order: SortOrder = SortOrder.ASC

    def __post_init__(self):
        object.__setattr__(self, "primary_order", SortOrder.parse(self.primary_order))
        object.__setattr__(self, "backup_order", SortOrder.parse(self.backup_order))

    @classmethod
    def offset(cls, page: int = 1, max_results: int = None, **sorting) -> Pagination:
        if max_results is None:
            max_results = config.default_page_size
        return cls(current_cursor=str(page), max_results=max_results, **sorting)

    @classmethod
    def cursor(
        cls, after: str = None, before: str = None, max_results: int = None, **options
    ) -> Pagination:
        if max_results is None:
            max_results = config.default_page_size
        return cls(
            cursor_pagination=True,
            next_cursor=after,
            previous_cursor=before,
            max_results=max_results,
            **options,
        )


@dataclass(frozen=True)
class PaginationResult:
    """Page metadata returned with a collection. total is only known in offset mode."""

    current_cursor: str | None = None
    next_cursor: str | None = None
    previous_cursor: str | None = None
    has_next: bool = False
    has_previous: bool = False
    total: int | None = None
    max_results: int | None = None
