from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .logger import get_logger
from .protocol import Message, MessageKind, ResourceProfile, decode_message
from .widgets import Loader

_logger = get_logger("dispatcher")

Handler = Callable[[Message], None]


class MessageDispatcher:
    """Routes inbound messages to handlers by kind.

    The arrival of any message, errors included, means the previous request
    finished, so the loader is hidden before anything else. Kinds without a
    route (``UNKNOWN`` in particular) are dropped without a trace.
    """

    def __init__(self, loader: Loader, profile: ResourceProfile, routes: Mapping[MessageKind, Handler]) -> None:
        self._loader = loader
        self._profile = profile
        self._routes = dict(routes)
        self._routes.pop(MessageKind.UNKNOWN, None)

    def dispatch(self, raw: Any) -> None:
        self._loader.hide()
        message = decode_message(raw, self._profile)
        handler = self._routes.get(message.kind)
        if handler is None:
            return
        try:
            handler(message)
        except Exception:
            _logger.exception("handler for %r failed", message.name)
