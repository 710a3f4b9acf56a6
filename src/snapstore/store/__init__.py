"""
Store

SnapshotStore reads snapshots from a table: select, filter, fetch a page.
It also carries the upsert helpers used to write them back.
"""

from snapstore.store.store import IdentifierType, PendingQuery, SnapshotStore

__all__ = ["IdentifierType", "PendingQuery", "SnapshotStore"]
