import logging
from typing import Any, Callable, Mapping

from snapstore.errors import UnregisteredFilterKindError
from snapstore.filter.filters import Filter

logger = logging.getLogger(__name__)

Handler = Callable[[Filter], Any]


def _kind_of(kind) -> str:
    if isinstance(kind, type) and issubclass(kind, Filter):
        return kind.kind
    if isinstance(kind, Filter):
        return kind.kind
    return kind


class FilterHandlerRegistry:
    """
    Lookup from filter kind to the handler that applies it.

    Populated once while the application is wired up and only read after
    that. Handlers are shared by every store that uses the registry.
    """

    def __init__(self, handlers: Mapping[Any, Handler] = None):
        self._handlers: dict[str, Handler] = {}
        for kind, handler in (handlers or {}).items():
            self.register(kind, handler)

    def register(self, kind, handler: Handler) -> None:
        """Register handler for a kind string or Filter subclass. Last write wins."""
        kind = _kind_of(kind)
        if kind in self._handlers:
            logger.debug("Replacing filter handler for kind %r", kind)
        self._handlers[kind] = handler

    def resolve(self, kind) -> Handler:
        """Return the handler for a kind, Filter subclass or filter instance."""
        kind = _kind_of(kind)
        try:
            return self._handlers[kind]
        except KeyError:
            raise UnregisteredFilterKindError(kind) from None

    def kinds(self) -> list[str]:
        return list(self._handlers)

    def __contains__(self, kind) -> bool:
        return _kind_of(kind) in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
