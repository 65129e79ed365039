"""Publish/subscribe event emitter used by items, histories and controllers."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable

Handler = Callable[..., Any]


class EventEmitter:
    """Named-event subscriber lists.

    Components own an instance rather than inheriting from it, so every
    component keeps its own subscribers.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def on(self, event: str, handler: Handler) -> None:
        """Register a handler for an event."""
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Handler) -> None:
        """Remove a previously registered handler (no-op if absent)."""
        handlers = self._handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def once(self, event: str, handler: Handler) -> None:
        """Register a handler that is removed after its first call."""

        def wrapper(*args: Any) -> None:
            self.off(event, wrapper)
            handler(*args)

        self.on(event, wrapper)

    def emit(self, event: str, *args: Any) -> None:
        """Call every handler registered for an event, in registration order."""
        # Copy so handlers may unsubscribe while we iterate
        for handler in list(self._handlers.get(event, ())):
            handler(*args)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))
