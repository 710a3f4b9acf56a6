"""
Select query builder.

A SelectQuery is assembled step by step (columns, joins, predicates,
ordering, bounds) and rendered once into SQL text with %s placeholders
plus a parameter tuple, ready for the helpers in snapstore.db.
"""

from __future__ import annotations

import copy
from typing import Any, Iterable


def quote_identifier(name: str) -> str:
    """Double-quote an identifier, quoting each part of a dotted name."""
    return ".".join('"' + part.replace('"', '""') + '"' for part in name.split("."))


class SelectQuery:
    """
    Mutable builder for a single SELECT statement.

    Predicates added with where() are always AND-composed, in the order
    they were added. Nothing here talks to the database.
    """

    def __init__(self, table: str, alias: str = None, columns: Iterable[str] = None):
        self.table = table
        self.alias = alias
        self._columns: list[str] = list(columns) if columns else [f"{alias}.*" if alias else "*"]
        self._joins: list[tuple[str, tuple]] = []
        self._join_tables: list[str] = []
        self._where: list[tuple[str, tuple]] = []
        self._order: list[tuple[str, str]] = []
        self._limit: int | None = None
        self._offset: int | None = None

    # Columns

    def select(self, *columns: str) -> SelectQuery:
        self._columns = list(columns)
        return self

    def add_select(self, *columns: str) -> SelectQuery:
        self._columns.extend(columns)
        return self

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    # Joins

    def join(self, table: str, alias: str, condition: str, *params: Any) -> SelectQuery:
        return self._add_join("JOIN", table, alias, condition, params)

    def left_join(self, table: str, alias: str, condition: str, *params: Any) -> SelectQuery:
        return self._add_join("LEFT JOIN", table, alias, condition, params)

    def _add_join(self, kind: str, table: str, alias: str, condition: str, params: tuple):
        self._joins.append((f"{kind} {quote_identifier(table)} AS {alias} ON {condition}", params))
        self._join_tables.append(table)
        return self

    @property
    def tables(self) -> list[str]:
        """The primary table followed by every joined table."""
        return [self.table, *self._join_tables]

    # Predicates

    def where(self, condition: str, *params: Any) -> SelectQuery:
        """AND a predicate onto the query; params bind its %s placeholders."""
        self._where.append((condition, params))
        return self

    @property
    def predicates(self) -> list[str]:
        return [condition for condition, _ in self._where]

    # Ordering and bounds

    def order_by(self, column: str, direction: Any = "ASC") -> SelectQuery:
        direction = str(getattr(direction, "value", direction)).upper()
        if direction not in ("ASC", "DESC"):
            raise ValueError(f"Invalid sort direction: {direction}")
        self._order.append((column, direction))
        return self

    def reset_order(self) -> SelectQuery:
        self._order = []
        return self

    @property
    def ordering(self) -> list[tuple[str, str]]:
        return list(self._order)

    def limit(self, n: int | None) -> SelectQuery:
        self._limit = n
        return self

    def offset(self, n: int | None) -> SelectQuery:
        self._offset = n
        return self

    def copy(self) -> SelectQuery:
        return copy.deepcopy(self)

    # Rendering

    def _body(self) -> tuple[list[str], list[Any]]:
        parts = [f"SELECT {', '.join(self._columns)}", f"FROM {quote_identifier(self.table)}"]
        if self.alias:
            parts[-1] += f" AS {self.alias}"
        params: list[Any] = []

        for clause, join_params in self._joins:
            parts.append(clause)
            params.extend(join_params)

        if self._where:
            parts.append("WHERE " + " AND ".join(f"({c})" for c, _ in self._where))
            for _, where_params in self._where:
                params.extend(where_params)

        return parts, params

    def to_sql(self) -> tuple[str, tuple]:
        """Render the statement as (sql, params)."""
        parts, params = self._body()

        if self._order:
            parts.append("ORDER BY " + ", ".join(f"{c} {d}" for c, d in self._order))
        if self._limit is not None:
            parts.append("LIMIT %s")
            params.append(self._limit)
        if self._offset is not None:
            parts.append("OFFSET %s")
            params.append(self._offset)

        return " ".join(parts), tuple(params)

    def count_sql(self) -> tuple[str, tuple]:
        """Render a COUNT(*) over the unordered, unbounded statement."""
        parts, params = self._body()
        return f"SELECT COUNT(*) AS total FROM ({' '.join(parts)}) AS counted", tuple(params)

    def __repr__(self) -> str:
        sql, params = self.to_sql()
        return f"SelectQuery({sql!r}, {params!r})"
