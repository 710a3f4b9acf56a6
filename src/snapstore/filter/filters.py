from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar, Iterable


@dataclass(frozen=True)
class Filter:
    """
    Base class for filter value objects.

    Each concrete filter carries the kind its handler is registered under:

        @dataclass(frozen=True)
        class StatusFilter(Filter, kind="status"):
            status: str

    A subclass that names no kind is registered under its class name.
    """

    kind: ClassVar[str] = ""

    def __init_subclass__(cls, kind: str = None, **kwargs):
        super().__init_subclass__(**kwargs)
        if kind is not None:
            cls.kind = kind
        elif "kind" not in cls.__dict__:
            cls.kind = cls.__name__


class Filters(Sequence):
    """Ordered, immutable sequence of filters. Order is application order."""

    def __init__(self, filters: Iterable[Filter] = ()):
        self._filters: tuple[Filter, ...] = tuple(filters)

    @classmethod
    def of(cls, *filters: Filter) -> Filters:
        return cls(filters)

    def add(self, filter: Filter) -> Filters:
        """Return a new Filters with filter appended."""
        return Filters((*self._filters, filter))

    def __getitem__(self, index):
        return self._filters[index]

    def __len__(self) -> int:
        return len(self._filters)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Filters):
            return NotImplemented
        return self._filters == other._filters

    def __hash__(self) -> int:
        return hash(self._filters)

    def __repr__(self) -> str:
        return f"Filters({list(self._filters)!r})"
