"""
Entity

Snapshot base class and the collection type stores return.
"""

from snapstore.entity.collection import SnapshotCollection
from snapstore.entity.snapshot import Snapshot

__all__ = ["Snapshot", "SnapshotCollection"]
