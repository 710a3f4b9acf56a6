"""
Pagination strategies.

Each paginator wraps a copy of a SelectQuery. paginate() executes it
exactly once and returns the PaginationResult; items() then yields the
rows of the page.

- NullPaginator: the whole result, streamed, no bounds.
- OffsetPaginator: numbered pages with LIMIT/OFFSET and a total count.
- CursorPaginator: keyset pages over the sort columns, moving forward
  from an `after` token or backward from a `before` token.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterator, Sequence

from snapstore import db
from snapstore.errors import InvalidCursorError, PaginationError, SnapshotStoreError
from snapstore.pagination.cursor import decode_cursor, encode_cursor
from snapstore.pagination.pagination import Pagination, PaginationResult, SortOrder
from snapstore.query import SelectQuery, quote_identifier

logger = logging.getLogger(__name__)


class Paginator(ABC):
    def __init__(self, query: SelectQuery):
        self.query = query.copy()
        self.primary_sort: tuple[str, SortOrder] | None = None
        self.backup_sort: tuple[str, SortOrder] | None = None
        self._rows: Iterator[dict[str, Any]] | None = None

    def set_primary_sort(self, prop: str, order=SortOrder.ASC) -> None:
        self.primary_sort = (prop, SortOrder.parse(order))

    def set_backup_sort(self, prop: str, order=SortOrder.ASC) -> None:
        self.backup_sort = (prop, SortOrder.parse(order))

    @property
    def sorts(self) -> list[tuple[str, SortOrder]]:
        return [sort for sort in (self.primary_sort, self.backup_sort) if sort]

    def _ordered_query(self) -> SelectQuery:
        """The query with the configured sorts ahead of any existing ordering."""
        query = self.query.copy()
        existing = query.ordering
        query.reset_order()
        for prop, order in self.sorts:
            query.order_by(quote_identifier(prop), order)
        sorted_props = {prop for prop, _ in self.sorts}
        for column, direction in existing:
            if column not in sorted_props:
                query.order_by(column, direction)
        return query

    @abstractmethod
    def paginate(self) -> PaginationResult:
        """Execute the query and return the page metadata."""

    def items(self) -> Iterator[dict[str, Any]]:
        if self._rows is None:
            raise SnapshotStoreError("paginate() must be called before items()")
        return self._rows


class NullPaginator(Paginator):
    """Single unbounded page. Rows are streamed as they are consumed."""

    def paginate(self) -> PaginationResult:
        sql, params = self._ordered_query().to_sql()
        self._rows = db.stream(sql, params)
        return PaginationResult()


class OffsetPaginator(Paginator):
    def __init__(self, query: SelectQuery, current_cursor=None, max_results: int = None):
        super().__init__(query)
        self.page = self._parse_page(current_cursor)
        if max_results is None or max_results < 1:
            raise PaginationError(f"max_results must be a positive integer, got {max_results!r}")
        self.max_results = max_results

    @staticmethod
    def _parse_page(cursor) -> int:
        if cursor is None or cursor == "":
            return 1
        try:
            page = int(cursor)
        except (TypeError, ValueError):
            raise PaginationError(f"Offset page must be a number, got {cursor!r}") from None
        if page < 1:
            raise PaginationError(f"Offset page must be 1 or greater, got {page}")
        return page

    def paginate(self) -> PaginationResult:
        total = db.fetch_one(*self.query.count_sql())["total"]

        query = self._ordered_query()
        query.limit(self.max_results).offset((self.page - 1) * self.max_results)
        self._rows = iter(db.fetch_all(*query.to_sql()))

        has_next = self.page * self.max_results < total
        has_previous = self.page > 1
        return PaginationResult(
            current_cursor=str(self.page),
            next_cursor=str(self.page + 1) if has_next else None,
            previous_cursor=str(self.page - 1) if has_previous else None,
            has_next=has_next,
            has_previous=has_previous,
            total=total,
            max_results=self.max_results,
        )


class CursorPaginator(Paginator):
    def __init__(self, query: SelectQuery):
        super().__init__(query)
        self.max_results: int | None = None
        self.after: str | None = None
        self.before: str | None = None
        self._reverse = False

    def set_max_results(self, max_results: int) -> None:
        if max_results is None or max_results < 1:
            raise PaginationError(f"max_results must be a positive integer, got {max_results!r}")
        self.max_results = max_results

    def set_after(self, cursor: str | None) -> None:
        self.after = cursor or None

    def set_before(self, cursor: str | None) -> None:
        self.before = cursor or None

    def reverse_results(self) -> None:
        """
        Return forward pages in inverted order.

        Pages read backward from a `before` token already come back in
        natural order and are left as they are.
        """
        self._reverse = True

    def _boundary(self, token: str) -> list[Any]:
        values = decode_cursor(token)
        if len(values) != len(self.sorts):
            raise InvalidCursorError(token)
        return values

    def _keyset(self, values: Sequence[Any], forward: bool) -> tuple[str, list[Any]]:
        """
        Predicate selecting rows strictly past the boundary values.

        For sorts (a, b) moving forward in ascending order this renders
        (a > %s) OR (a = %s AND b > %s).
        """
        clauses = []
        params: list[Any] = []
        for i, (prop, order) in enumerate(self.sorts):
            parts = [f"{quote_identifier(p)} = %s" for p, _ in self.sorts[:i]]
            params.extend(values[:i])
            op = ">" if (order is SortOrder.ASC) == forward else "<"
            parts.append(f"{quote_identifier(prop)} {op} %s")
            params.append(values[i])
            clauses.append("(" + " AND ".join(parts) + ")")
        return " OR ".join(clauses), params

    def _token(self, row: dict[str, Any]) -> str:
        values = []
        for prop, _ in self.sorts:
            if prop in row:
                values.append(row[prop])
                continue
            column = prop.rsplit(".", 1)[-1]
            if column not in row:
                raise PaginationError(f"Sort property '{prop}' is missing from the result rows")
            values.append(row[column])
        return encode_cursor(values)

    def paginate(self) -> PaginationResult:
        if not self.sorts:
            raise PaginationError("Cursor pagination requires a sort property")
        if self.max_results is None:
            raise PaginationError("Cursor pagination requires max_results")

        query = self.query.copy()
        query.reset_order()
        if self.after:
            condition, params = self._keyset(self._boundary(self.after), forward=True)
            query.where(condition, *params)
        if self.before:
            condition, params = self._keyset(self._boundary(self.before), forward=False)
            query.where(condition, *params)

        # Walking backward reads the rows nearest the boundary first
        backward = self.before is not None and self.after is None
        for prop, order in self.sorts:
            query.order_by(quote_identifier(prop), order.inverted() if backward else order)
        query.limit(self.max_results + 1)

        rows = db.fetch_all(*query.to_sql())
        more = len(rows) > self.max_results
        rows = rows[: self.max_results]

        if backward:
            rows.reverse()
            has_next, has_previous = True, more
        else:
            has_next, has_previous = more, self.after is not None

        result = PaginationResult(
            current_cursor=self.before if backward else self.after,
            next_cursor=self._token(rows[-1]) if rows and has_next else None,
            previous_cursor=self._token(rows[0]) if rows and has_previous else None,
            has_next=has_next,
            has_previous=has_previous,
            max_results=self.max_results,
        )

        # Backward pages are already in natural order
        if self._reverse and not backward:
            rows.reverse()
        self._rows = iter(rows)
        return result


def _qualify(prop: str, alias: str | None) -> str:
    if alias and "." not in prop:
        return f"{alias}.{prop}"
    return prop


def make_paginator(
    query: SelectQuery, pagination: Pagination | None, primary_alias: str = None
) -> Paginator:
    """
    Choose and configure the paginator a descriptor asks for.

    No descriptor gives a NullPaginator. A cursor-mode descriptor gives a
    CursorPaginator, anything else an OffsetPaginator. Sort properties
    without a table alias are qualified with primary_alias. A backup sort
    given without a primary sort is promoted to primary.
    """
    if pagination is None:
        return NullPaginator(query)

    if pagination.cursor_pagination:
        paginator = CursorPaginator(query)
        paginator.set_max_results(pagination.max_results)
        paginator.set_after(pagination.next_cursor)
        paginator.set_before(pagination.previous_cursor)
        if pagination.reverse_results:
            paginator.reverse_results()
    else:
        paginator = OffsetPaginator(query, pagination.current_cursor, pagination.max_results)

    primary = (pagination.primary_sort_prop, pagination.primary_order)
    backup = (pagination.backup_sort_prop, pagination.backup_order)
    if backup[0] and not primary[0]:
        logger.warning("Backup sort '%s' given without a primary sort; using it as primary", backup[0])
        primary, backup = backup, (None, None)

    if primary[0]:
        paginator.set_primary_sort(_qualify(primary[0], primary_alias), primary[1])
    if backup[0]:
        paginator.set_backup_sort(_qualify(backup[0], primary_alias), backup[1])

    return paginator
