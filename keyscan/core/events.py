"""
Named-event broadcasting for scan results.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

SCAN_EVENT = "scan"


class EventDispatcher:
    """
    Minimal publish/subscribe hub.

    Handlers are called synchronously in registration order with the
    event detail as single argument. Adding the same handler twice for
    the same event has no effect.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable[[Any], None]]] = {}
        self._lock = threading.Lock()

    def add_listener(self, event_name: str, handler: Callable[[Any], None]) -> None:
        with self._lock:
            handlers = self._listeners.setdefault(event_name, [])
            if handler not in handlers:
                handlers.append(handler)

    def remove_listener(self, event_name: str, handler: Callable[[Any], None]) -> None:
        with self._lock:
            handlers = self._listeners.get(event_name, [])
            if handler in handlers:
                handlers.remove(handler)

    def listeners(self, event_name: str) -> List[Callable[[Any], None]]:
        with self._lock:
            return list(self._listeners.get(event_name, []))

    def dispatch(self, event_name: str, detail: Any) -> int:
        """Call every handler of ``event_name``. Returns handlers called."""
        handlers = self.listeners(event_name)
        logger.debug("Dispatching %r to %d listener(s)", event_name, len(handlers))
        for handler in handlers:
            handler(detail)
        return len(handlers)
