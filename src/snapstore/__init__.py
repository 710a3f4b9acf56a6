"""
snapstore: a data-access layer that reads PostgreSQL rows as immutable
domain snapshots.

- `snapstore.store`: SnapshotStore, the select / filter / fetch pipeline
- `snapstore.filter`: filters, filter handlers and their registry
- `snapstore.pagination`: pagination descriptors and paginators
- `snapstore.entity`: Snapshot and SnapshotCollection
- `snapstore.codec`: alias and snapshot codecs
- `snapstore.db`: psycopg connection and query helpers

Nothing is imported here, so that the environment can be set before
snapstore.config is first loaded.
"""

__version__ = "0.1.0"
