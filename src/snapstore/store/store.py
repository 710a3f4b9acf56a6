import logging
from enum import Enum
from typing import Any, ClassVar, Iterable, Iterator, Mapping, Sequence

from snapstore import db
from snapstore.codec import aliases
from snapstore.entity import Snapshot, SnapshotCollection
from snapstore.errors import NoActiveQueryError
from snapstore.filter import Filter, FilterHandler, FilterHandlerRegistry
from snapstore.pagination import Pagination, Paginator, make_paginator
from snapstore.query import SelectQuery

logger = logging.getLogger(__name__)


class IdentifierType(str, Enum):
    """PostgreSQL type the identifier column is bound as."""

    INTEGER = "bigint"
    TEXT = "text"


class PendingQuery:
    """
    A selection made on a store, waiting for filters and a fetch.

    Returned by SnapshotStore.select_all() and select_by_ids(). It can be
    fetched once; after that every call raises NoActiveQueryError.
    """

    def __init__(self, store: "SnapshotStore", query: SelectQuery):
        self.store = store
        self._query: SelectQuery | None = query

    @property
    def query(self) -> SelectQuery:
        if self._query is None:
            raise NoActiveQueryError()
        return self._query

    @property
    def active(self) -> bool:
        return self._query is not None

    def apply_filters(self, filters: Iterable[Filter]) -> "PendingQuery":
        self.store.apply_filters(self.query, filters)
        return self

    def fetch(self, pagination: Pagination = None) -> SnapshotCollection:
        query = self.query
        self._query = None
        return self.store.fetch(query, pagination)

    def __repr__(self) -> str:
        state = repr(self._query) if self._query is not None else "fetched"
        return f"<PendingQuery on {self.store.table}: {state}>"


class SnapshotStore:
    """
    Base class for stores that read snapshots from one primary table.

    Subclasses name the table and the collection they return:

        class ArticleStore(SnapshotStore):
            table = "articles"
            collection_type = ArticleCollection

        articles = (
            ArticleStore(registry)
            .select_all()
            .apply_filters(Filters.of(StatusFilter("published")))
            .fetch(Pagination.cursor(max_results=20, primary_sort_prop="created_at"))
        )

    Stores that join other tables set `columns` to an alias spec
    ({"t": [...], "a": [...]}) and add the joins in add_joins(). Rows are
    then decoded and the joined aliases nested into the primary row.

    A store keeps no state between calls. Each selection returns its own
    PendingQuery.
    """

    table: ClassVar[str]
    primary_alias: ClassVar[str] = "t"
    identifier_name: ClassVar[str] = "id"
    identifier_type: ClassVar[IdentifierType] = IdentifierType.INTEGER
    collection_type: ClassVar[type[SnapshotCollection]] = SnapshotCollection
    columns: ClassVar[Mapping[str, Sequence] | None] = None

    def __init__(self, filter_handler_registry: FilterHandlerRegistry = None):
        self.filter_handler_registry = filter_handler_registry or FilterHandlerRegistry()

    # =========================================================================
    # Query construction
    # =========================================================================

    def qualify(self, column: str) -> str:
        return f"{self.primary_alias}.{column}" if self.primary_alias else column

    def add_joins(self, query: SelectQuery) -> SelectQuery:
        """Hook for stores that read from more than one table."""
        return query

    def base_select(self, columns: str | Sequence[str] = None, alias: str = None) -> SelectQuery:
        alias = alias or self.primary_alias
        if columns is None and self.columns:
            columns = aliases.encode(self.columns)
        if isinstance(columns, str):
            columns = [columns]
        return self.add_joins(SelectQuery(self.table, alias, columns))

    def select_all(self) -> PendingQuery:
        return PendingQuery(self, self.base_select())

    def select_by_ids(self, ids: Iterable[Any]) -> PendingQuery:
        """Select the rows whose identifier is in ids. No ids selects nothing."""
        query = self.base_select().where(
            f"{self.qualify(self.identifier_name)} = ANY(%s::{self.identifier_type.value}[])",
            list(ids),
        )
        return PendingQuery(self, query)

    def apply_filters(self, query: SelectQuery | None, filters: Iterable[Filter]) -> SelectQuery:
        """Apply each filter to query, in order, through its registered handler."""
        if query is None:
            raise NoActiveQueryError()

        for filter in filters:
            handler = self.filter_handler_registry.resolve(filter.kind)
            if isinstance(handler, FilterHandler):
                handler = handler.with_context(query, query.tables, self.primary_alias)
            handler(filter)

        return query

    # =========================================================================
    # Execution
    # =========================================================================

    def make_paginator(self, query: SelectQuery, pagination: Pagination = None) -> Paginator:
        return make_paginator(query, pagination, self.primary_alias)

    def fetch(self, query: SelectQuery | None, pagination: Pagination = None) -> SnapshotCollection:
        """
        Execute query through the paginator pagination describes.

        The page is executed right away and its PaginationResult attached
        to the collection. Without pagination the rows are streamed, and
        the query only reaches the database once iteration starts.
        """
        if query is None:
            raise NoActiveQueryError()

        paginator = self.make_paginator(query, pagination)
        logger.debug("Fetching from %s with %s", self.table, type(paginator).__name__)

        def produce(collection: SnapshotCollection):
            collection.set_pagination_result(paginator.paginate())
            return self._snapshots(paginator.items())

        return self.collection_type.create(produce)

    def get(self, identifier: Any) -> Snapshot | None:
        """Fetch a single snapshot by identifier."""
        return self.select_by_ids([identifier]).fetch().first()

    def row_to_snapshot(self, row: Mapping[str, Any]) -> Snapshot:
        return self.collection_type.item_type.from_row(row)

    def _snapshots(self, rows: Iterator[dict[str, Any]]) -> Iterator[tuple[Any, Snapshot]]:
        try:
            for index, row in enumerate(rows):
                if self.columns:
                    row = aliases.decode(row, merge_into=self.primary_alias)
                key = row.get(self.identifier_name)
                yield (index if key is None else key), self.row_to_snapshot(row)
        finally:
            close = getattr(rows, "close", None)
            if close is not None:
                close()

    # =========================================================================
    # Writes
    # =========================================================================

    def upsert(
        self,
        table: str,
        data: Mapping[str, Any],
        unique_key: Mapping[str, Any],
        type_hints: Mapping[str, str] = None,
    ) -> int:
        """
        Insert data, or update the rows matching unique_key if there are any.

        The existence check and the write are two separate statements, so
        two concurrent calls for the same key can both insert, or one can
        overwrite the other. Use upsert_atomic() when the table has a
        unique constraint over the key columns.

        Returns:
            Number of rows inserted or updated
        """
        if db.exists(table, unique_key, type_hints):
            logger.debug("Updating %s where %r", table, dict(unique_key))
            return db.update(table, data, unique_key, type_hints)

        logger.debug("Inserting into %s for %r", table, dict(unique_key))
        return db.insert(table, {**unique_key, **data}, type_hints)

    def upsert_atomic(
        self,
        table: str,
        data: Mapping[str, Any],
        unique_key: Mapping[str, Any],
        type_hints: Mapping[str, str] = None,
    ) -> int:
        """
        Single-statement upsert with INSERT ... ON CONFLICT.

        Requires a unique constraint or index over the unique_key columns.
        """
        return db.insert_or_update_on_conflict(
            table, {**unique_key, **data}, list(unique_key), type_hints
        )
