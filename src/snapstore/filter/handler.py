import copy
from abc import ABC, abstractmethod
from typing import Sequence

from snapstore.errors import SnapshotStoreError
from snapstore.filter.filters import Filter
from snapstore.query import SelectQuery


class FilterHandler(ABC):
    """
    Base class for handlers that turn one filter into query predicates.

    Before a handler runs, the store binds it to the pending query, the
    participating tables and the primary table alias with with_context().
    Binding works on a copy, so the instance held by the registry stays
    untouched and can be shared.

        class StatusHandler(FilterHandler):
            def apply(self, filter: StatusFilter) -> None:
                self.query.where(f"{self.qualify('status')} = %s", filter.status)

    apply() must only add to the query. Predicates added by earlier
    filters stay in place.
    """

    _query: SelectQuery | None = None
    _tables: tuple[str, ...] = ()
    _primary_alias: str | None = None

    def with_context(self, query: SelectQuery, tables: Sequence[str], primary_alias: str | None):
        bound = copy.copy(self)
        bound._query = query
        bound._tables = tuple(tables)
        bound._primary_alias = primary_alias
        return bound

    @property
    def query(self) -> SelectQuery:
        if self._query is None:
            raise SnapshotStoreError(f"{type(self).__name__} is not bound to a query")
        return self._query

    @property
    def tables(self) -> tuple[str, ...]:
        return self._tables

    @property
    def primary_alias(self) -> str | None:
        return self._primary_alias

    def qualify(self, column: str) -> str:
        """Prefix column with the primary alias, when there is one."""
        return f"{self._primary_alias}.{column}" if self._primary_alias else column

    @abstractmethod
    def apply(self, filter: Filter) -> None:
        """Add the predicates for filter to self.query."""

    def __call__(self, filter: Filter) -> None:
        self.apply(filter)
