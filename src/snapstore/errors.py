"""Error types raised by snapstore.

Backend failures are not wrapped; psycopg errors reach the caller unchanged.
"""


class SnapshotStoreError(Exception):
    """Base error for all snapstore errors."""


class NoActiveQueryError(SnapshotStoreError):
    """Raised when filters or a fetch are requested without a pending query."""

    def __init__(self, message: str = "No query was selected, or it was already fetched") -> None:
        super().__init__(message)


class UnregisteredFilterKindError(SnapshotStoreError):
    """Raised when no handler is registered for a filter kind."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"No filter handler registered for kind '{kind}'")


class PaginationError(SnapshotStoreError):
    """Raised for a pagination descriptor that cannot be executed."""


class InvalidCursorError(PaginationError):
    """Raised when a cursor token cannot be decoded."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Invalid pagination cursor: {token!r}")


class CollectionConsumedError(SnapshotStoreError):
    """Raised when a single-pass snapshot collection is iterated twice."""

    def __init__(self) -> None:
        super().__init__("Snapshot collection was already consumed")
