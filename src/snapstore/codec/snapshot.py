"""
Normalization of snapshot exports into storable primitives.

Everything handed to a write ends up as a string, None, or (for nested
snapshots) a dict of the same.
"""

from datetime import date, datetime
from typing import Any, Mapping

from snapstore.entity.snapshot import Snapshot

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def normalize_value(value: Any) -> Any:
    """Normalize a single exported value."""
    if value is None:
        return None
    # bool before anything numeric, datetime before date
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, Snapshot):
        return to_row(value)
    if isinstance(value, Mapping):
        return normalize(value)
    return str(value)


def normalize(values: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize every value of an exported field map."""
    return {key: normalize_value(value) for key, value in values.items()}


def to_row(snapshot: Snapshot) -> dict[str, Any]:
    """Export a snapshot (without derived fields) and normalize it."""
    return normalize(snapshot.to_dict(include_derived=False))
