"""Convenience base class for navigable items."""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Any, Callable, Mapping

from .events import EventEmitter

if TYPE_CHECKING:
    from .controller import NavigationController


class Screen:
    """An item with its own event emitter and a weak link to its controller.

    Subclasses override :meth:`create`, :meth:`open`, :meth:`close` and
    optionally define ``beforeopen``. Set ``async_close = True`` and accept a
    ``done`` callback in :meth:`close` for closes that finish later.
    """

    async_close = False

    def __init__(self) -> None:
        self.events = EventEmitter()
        self.nav_id: str | None = None
        self.params: Any = None
        self.is_open = False
        self._controller_ref: weakref.ref[NavigationController] | None = None

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.events.on(event, handler)

    def off(self, event: str, handler: Callable[..., Any]) -> None:
        self.events.off(event, handler)

    def emit(self, event: str, *args: Any) -> None:
        self.events.emit(event, *args)

    def bind_controller(self, controller: NavigationController) -> None:
        self._controller_ref = weakref.ref(controller)

    @property
    def controller(self) -> NavigationController | None:
        """The controller that registered or last opened this screen."""
        if self._controller_ref is None:
            return None
        return self._controller_ref()

    def create(self, creation_options: Mapping[str, Any], name: str) -> None:
        pass

    def open(self, params: Any) -> None:
        self.params = params
        self.is_open = True

    def close(self, params: Any) -> None:
        self.is_open = False
