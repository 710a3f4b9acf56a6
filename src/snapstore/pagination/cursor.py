"""
Opaque cursor tokens.

A token is the url-safe base64 (unpadded) of a JSON list holding the sort
key values of the row at a page boundary. Values JSON cannot carry
natively are tagged so they come back with their original type.
"""

import base64
import binascii
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Sequence
from uuid import UUID

from snapstore.errors import InvalidCursorError

_TAGS = {
    "$dt": datetime.fromisoformat,
    "$d": date.fromisoformat,
    "$dec": Decimal,
    "$uuid": UUID,
}


def _default(value: Any):
    # datetime is a date subclass
    if isinstance(value, datetime):
        return {"$dt": value.isoformat()}
    if isinstance(value, date):
        return {"$d": value.isoformat()}
    if isinstance(value, Decimal):
        return {"$dec": str(value)}
    if isinstance(value, UUID):
        return {"$uuid": str(value)}
    raise TypeError(f"Cannot encode {type(value).__name__} in a cursor")


def _object_hook(obj: dict):
    if len(obj) == 1:
        ((tag, raw),) = obj.items()
        if tag in _TAGS:
            return _TAGS[tag](raw)
    return obj


def encode_cursor(values: Sequence[Any]) -> str:
    payload = json.dumps(list(values), default=_default, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")


def decode_cursor(token: str) -> list[Any]:
    try:
        padded = token + "=" * (-len(token) % 4)
        values = json.loads(base64.urlsafe_b64decode(padded), object_hook=_object_hook)
    except (binascii.Error, ValueError, TypeError, ArithmeticError):
        raise InvalidCursorError(token) from None
    if not isinstance(values, list):
        raise InvalidCursorError(token)
    return values
