"""
Codecs between rows and snapshots.

- `aliases`: namespaced column aliases for join queries, and back.
- `snapshot`: snapshot exports normalized to storable primitives.
"""
