"""
Filter

Filter value objects, the handlers that apply them to a query, and the
registry that maps one to the other.
"""

from snapstore.filter.filters import Filter, Filters
from snapstore.filter.handler import FilterHandler
from snapstore.filter.registry import FilterHandlerRegistry

__all__ = ["Filter", "FilterHandler", "FilterHandlerRegistry", "Filters"]
