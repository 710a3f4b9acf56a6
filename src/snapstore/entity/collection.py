from typing import Any, Callable, ClassVar, Iterable, Iterator

from snapstore.entity.snapshot import Snapshot
from snapstore.errors import CollectionConsumedError, SnapshotStoreError


class SnapshotCollection:
    """
    Ordered, lazily populated sequence of snapshots keyed by identifier.

    The collection is single-pass: snapshots are built while iterating and
    a second iteration raises CollectionConsumedError. Use to_list() or
    to_dict() to keep them. The backend cursor behind a lazy collection is
    released when iteration finishes, when close() is called, or when a
    `with` block around the collection exits.

    Subclasses declare the snapshot type they hold:

        class ArticleCollection(SnapshotCollection):
            item_type = Article
    """

    item_type: ClassVar[type[Snapshot]] = Snapshot

    def __init__(self, pairs: Iterable[tuple[Any, Snapshot]] = None):
        self._pairs: Iterator[tuple[Any, Snapshot]] = iter(pairs if pairs is not None else ())
        self._pagination_result = None
        self._consumed = False

    @classmethod
    def create(cls, producer: Callable[["SnapshotCollection"], Iterable[tuple[Any, Snapshot]]]):
        """
        Build a collection from a producer.

        The producer is called once with the new collection. It attaches the
        pagination result and returns the (key, snapshot) pairs.
        """
        collection = cls()
        collection._pairs = iter(producer(collection))
        return collection

    @property
    def pagination_result(self):
        return self._pagination_result

    def set_pagination_result(self, result) -> None:
        if self._pagination_result is not None:
            raise SnapshotStoreError("Pagination result was already set")
        self._pagination_result = result

    def items(self) -> Iterator[tuple[Any, Snapshot]]:
        """Yield (key, snapshot) pairs."""
        if self._consumed:
            raise CollectionConsumedError()
        self._consumed = True
        return self._drain()

    def _drain(self) -> Iterator[tuple[Any, Snapshot]]:
        try:
            yield from self._pairs
        finally:
            self.close()

    def __iter__(self) -> Iterator[Snapshot]:
        return (snapshot for _, snapshot in self.items())

    def to_dict(self) -> dict[Any, Snapshot]:
        return dict(self.items())

    def to_list(self) -> list[Snapshot]:
        return list(self)

    def first(self) -> Snapshot | None:
        """Return the first snapshot and release the rest."""
        pairs = self.items()
        try:
            return next(pairs)[1]
        except StopIteration:
            return None
        finally:
            pairs.close()

    def close(self) -> None:
        close = getattr(self._pairs, "close", None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else "pending"
        return f"<{type(self).__name__} of {self.item_type.__name__} ({state})>"
