"""Type protocols for the collaborators of the navigation controller.

Items and schedulers are supplied by the caller. These protocols describe
what the controller calls on them.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class Item(Protocol):
    """A registered screen.

    Only ``emit`` is expected; ``create(creation_options, name)``,
    ``open(params)``, ``close(params)`` and ``beforeopen(params)`` are
    optional and checked before each call. Items with ``async_close = True``
    are closed via ``close(params, done)`` and must call ``done()`` once.
    """

    def emit(self, event: str, *args: Any) -> None: ...


@runtime_checkable
class Scheduler(Protocol):
    """Runs callbacks on a later turn, in the order they were deferred."""

    def defer(self, callback: Callable[[], None]) -> None: ...


TokenListener = Callable[[int], None]
