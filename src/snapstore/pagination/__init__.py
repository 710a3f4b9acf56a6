"""
Pagination

Pagination descriptors and results, opaque cursor tokens, and the
paginators that execute a query one page at a time.
"""

from snapstore.pagination.pagination import Pagination, PaginationResult, SortOrder
from snapstore.pagination.paginator import (
    CursorPaginator,
    NullPaginator,
    OffsetPaginator,
    Paginator,
    make_paginator,
)

__all__ = [
    "CursorPaginator",
    "NullPaginator",
    "OffsetPaginator",
    "Pagination",
    "PaginationResult",
    "Paginator",
    "SortOrder",
    "make_paginator",
]
