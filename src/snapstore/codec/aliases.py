"""
Namespaced column aliases for join queries.

encode() turns {"t": ["id", "title"], "a": [{"name": "author_name"}]} into

    t."id" AS "t.id", t."title" AS "t.title", a."name" AS "a.author_name"

and decode() turns a result row keyed by those names back into per-alias
dicts. Two descriptors producing the same output name are the caller's
problem; the later one wins in the row.
"""

from typing import Any, Mapping, Sequence

from snapstore.query import quote_identifier

SEPARATOR = "."

ColumnDescriptor = str | Mapping[str, str]


def encode(spec: Mapping[str, Sequence[ColumnDescriptor]]) -> list[str]:
    """
    Convert a per-alias column spec into namespaced select expressions.

    A descriptor is either a column name or a one-item mapping
    {source_column: output_name} to read source_column under another name.
    """
    columns = []
    for alias, descriptors in spec.items():
        for descriptor in descriptors:
            if isinstance(descriptor, Mapping):
                ((column, name),) = descriptor.items()
            else:
                column = name = descriptor
            output = f"{alias}{SEPARATOR}{name}".replace('"', '""')
            columns.append(f'{alias}.{quote_identifier(column)} AS "{output}"')
    return columns


def decode(row: Mapping[str, Any], merge_into: str = None) -> dict[str, Any]:
    """
    Split a namespaced row into {alias: {column: value}}.

    Keys without a separator are dropped. With merge_into, every other
    alias is nested under its own key inside the merge_into bucket, and
    only that bucket is returned.
    """
    buckets: dict[str, dict[str, Any]] = {}
    for key, value in row.items():
        if SEPARATOR not in key:
            continue
        alias, column = key.split(SEPARATOR, 1)
        buckets.setdefault(alias, {})[column] = value

    if merge_into is None:
        return buckets

    merged = buckets.pop(merge_into, {})
    for alias, values in buckets.items():
        merged[alias] = values
    return merged
