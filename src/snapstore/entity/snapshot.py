from dataclasses import fields, is_dataclass
from typing import Any, ClassVar, Mapping, get_args, get_type_hints


def _snapshot_type(hint: Any) -> type | None:
    """Return the Snapshot subclass named by a field annotation, if any."""
    candidates = (hint, *get_args(hint))
    for candidate in candidates:
        if isinstance(candidate, type) and issubclass(candidate, Snapshot):
            return candidate
    return None


class Snapshot:
    """
    Base class for immutable domain snapshots.

    Subclasses are frozen dataclasses:

        @dataclass(frozen=True)
        class Article(Snapshot):
            id: int
            title: str
            published: bool = False

    A snapshot is rebuilt from a flat row with from_row() and exported back
    with to_dict(). Fields annotated with another Snapshot type are rebuilt
    from nested mappings. Properties listed in derived_fields are exported
    only when asked for.
    """

    derived_fields: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        if not is_dataclass(cls):
            raise TypeError(f"{cls.__name__} must be a dataclass")

        hints = get_type_hints(cls)
        values = {}
        for field in fields(cls):
            if field.name not in row:
                continue
            value = row[field.name]
            nested = _snapshot_type(hints.get(field.name))
            if nested is not None and isinstance(value, Mapping):
                # An unmatched outer join decodes to a bucket of NULLs
                if all(v is None for v in value.values()):
                    value = None
                else:
                    value = nested.from_row(value)
            values[field.name] = value
        return cls(**values)

    def to_dict(self, include_derived: bool = False) -> dict[str, Any]:
        data = {field.name: getattr(self, field.name) for field in fields(self)}
        if include_derived:
            for name in self.derived_fields:
                data[name] = getattr(self, name)
        return data
