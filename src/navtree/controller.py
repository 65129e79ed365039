"""Navigation controller: registry, pending queue and transition choreography."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .config import NavConfig
from .events import EventEmitter
from .history import NavigationHistory
from .host import HostNavigator, make_host
from .node import Node, NodeState
from .protocols import Item, Scheduler
from .registry import Registry
from .scheduler import default_scheduler

logger = logging.getLogger(__name__)

Transition = Callable[[Any, Any, Callable[[], None]], None]
CloseCallback = Callable[[Any], None]


@dataclass
class PendingEntry:
    """A queued navigation: the node to open and the transition to use."""

    node: Node
    transition: Transition | None = None


def _emit(item: Any, event: str, *args: Any) -> None:
    emit = getattr(item, "emit", None)
    if emit is not None:
        emit(event, *args)


class NavigationController:
    """Opens and closes registered items, keeping a back/forward history.

    Only one navigation runs at a time: ``open``, ``replace``, ``back`` and
    ``forward`` return False while a previous one has not finished opening
    its target.

    Events: ``open(name, params)``, ``close(name)``, ``collapse()``.
    """

    def __init__(
        self,
        config: NavConfig | None = None,
        creation_options: Mapping[str, Any] | None = None,
        *,
        scheduler: Scheduler | None = None,
        host: HostNavigator | None = None,
        registry: Registry | None = None,
        on_collapse: Callable[[], None] | None = None,
    ) -> None:
        self.config = config if config is not None else NavConfig()
        self.creation_options: dict[str, Any] = dict(creation_options or {})
        self.scheduler: Scheduler = scheduler if scheduler is not None else default_scheduler()
        self.events = EventEmitter()
        self._registry = registry if registry is not None else Registry()
        self._queue: deque[PendingEntry] = deque()
        self._busy = False
        self._response: Any = None
        self._on_collapse = on_collapse

        if host is None and self.config.bind_to_host:
            host = make_host(
                self.config.get_host_path(),
                deliver=getattr(self.scheduler, "defer_threadsafe", None),
            )
        self._history = NavigationHistory(host)
        self._history.on("forward", self._on_host_forward)
        self._history.on("backward", self._on_host_backward)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------
    @property
    def history(self) -> NavigationHistory:
        return self._history

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def is_busy(self) -> bool:
        """True while a navigation is waiting for its target to open."""
        return self._busy

    @property
    def pending(self) -> tuple[Node, ...]:
        """Queued nodes, oldest first."""
        return tuple(entry.node for entry in self._queue)

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.events.on(event, handler)

    def off(self, event: str, handler: Callable[..., Any]) -> None:
        self.events.off(event, handler)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------
    def register(
        self,
        name: str,
        item: Item,
        options: Mapping[str, Any] | None = None,
    ) -> bool:
        """Register an item under ``name``.

        ``options["create"]`` forces (True) or suppresses (False) creation at
        registration; otherwise ``config.create_on_register`` decides.
        """
        if not self._registry.add(name, item):
            return False

        nav_id = getattr(item, "nav_id", None)
        if nav_id:
            logger.warning("Item %r already has nav_id %r", name, nav_id)
        else:
            try:
                item.nav_id = name
            except AttributeError:
                logger.warning("Cannot set nav_id on item %r", name)

        self._bind_item(item)

        options = options or {}
        create = options.get("create")
        if create or (self.config.create_on_register and create is not False):
            self._create_item(name)
        return True

    def get_item(self, name: str) -> Item | None:
        return self._registry.get(name)

    def get_opened_item(self) -> Item | None:
        """Item of the current history node."""
        node = self._history.current()
        return node.item if node is not None else None

    def _bind_item(self, item: Any) -> None:
        bind = getattr(item, "bind_controller", None)
        if bind is not None:
            bind(self)

    def _create_item(self, name: str) -> None:
        item = self._registry.get(name)
        self._registry.mark_created(name)
        create = getattr(item, "create", None)
        if create is None:
            return
        try:
            create(self.creation_options, name)
        except Exception:
            logger.exception("Creating item %r failed", name)
        else:
            logger.debug("Created item %r", name)

    def _create_node(
        self,
        name: str,
        params: Any = None,
        close_cb: CloseCallback | None = None,
    ) -> Node | None:
        item = self._registry.get(name)
        if item is None:
            logger.error("Navigation item %r not found", name)
            return None

        if not self._registry.is_created(name):
            self._create_item(name)

        return Node(name=name, params=params, item=item, close_cb=close_cb)

    # ------------------------------------------------------------------
    # Node lifecycle
    # ------------------------------------------------------------------
    def _close_node(self, node: Node | None, callback: Callable[[], None]) -> None:
        if node is None or node.state is NodeState.CLOSED:
            callback()
            return

        finished = False

        def close_item_cb() -> None:
            nonlocal finished
            if finished:
                logger.warning("Close of %r completed more than once", node.name)
                return
            finished = True

            node.state = NodeState.CLOSED
            self.events.emit("close", node.name)

            close_cb, response = node.close_cb, self._response
            node.close_cb = None
            self._response = None
            if close_cb is not None:
                close_cb(response)
            callback()

        close = getattr(node.item, "close", None)
        if close is not None:
            if getattr(node.item, "async_close", False):
                close(node.params, close_item_cb)
                return
            close(node.params)

        close_item_cb()

    def _resolve_redirect(self, result: Any) -> Node | None:
        if not result:
            return None
        if isinstance(result, Mapping):
            name, params = result.get("name"), result.get("params")
        else:
            name, params = result.name, result.params
        return self._create_node(name, params)

    def _open_node(self, node: Node) -> Node:
        """Open ``node``, following ``beforeopen`` redirects.

        A redirect parks the node (PREPARED) at the front of the queue, puts
        the replacement in its history slot and opens the replacement
        instead. Returns the node that was actually opened.
        """
        redirects = 0
        while node.state is NodeState.CLOSED:
            beforeopen = getattr(node.item, "beforeopen", None)
            if beforeopen is None:
                break
            if redirects >= self.config.max_redirects:
                logger.error(
                    "Too many beforeopen redirects (%d), opening %r",
                    redirects, node.name,
                )
                break

            replacement = self._resolve_redirect(beforeopen(node.params))
            if replacement is None:
                break

            logger.debug("Redirecting %r to %r", node.name, replacement.name)
            node.state = NodeState.PREPARED
            self._queue.appendleft(PendingEntry(node))
            if self._history.current() is node:
                self._history.replace(replacement, protect_future=True)
            _emit(replacement.item, "opening", replacement.params)
            node = replacement
            redirects += 1

        node.state = NodeState.OPENED
        self._bind_item(node.item)

        open_item = getattr(node.item, "open", None)
        if open_item is not None:
            open_item(node.params)

        self.events.emit("open", node.name, node.params)
        self._busy = False
        return node

    def _defer(self, callback: Callable[[], None]) -> None:
        try:
            self.scheduler.defer(callback)
        except Exception:
            logger.exception("Scheduler rejected deferred navigation work")
            self._busy = False

    def _transition_nodes(
        self,
        from_node: Node | None,
        to_node: Node,
        transition: Transition | None = None,
    ) -> None:
        if from_node is not None and from_node.name == to_node.name:
            # Same screen: refresh in place
            _emit(from_node.item, "closing", from_node.params)
            _emit(from_node.item, "closed", from_node.params)
            self._response = None
            from_node = None

        if from_node is None:
            _emit(to_node.item, "opening", to_node.params)
            opened = self._open_node(to_node)
            self._defer(lambda: _emit(opened.item, "opened", opened.params))
            return

        _emit(from_node.item, "closing", from_node.params)
        _emit(to_node.item, "opening", to_node.params)

        def after_close() -> None:
            _emit(from_node.item, "closed", from_node.params)
            opened = self._open_node(to_node)
            _emit(opened.item, "opened", opened.params)

        def close_then_open() -> None:
            self._close_node(from_node, after_close)

        def on_transition_done() -> None:
            _emit(from_node.item, "moved", from_node.params)
            _emit(to_node.item, "moved", to_node.params)
            self._defer(close_then_open)

        def start() -> None:
            if transition is None:
                close_then_open()
                return
            _emit(from_node.item, "moving", from_node.params)
            _emit(to_node.item, "moving", to_node.params)
            transition(from_node.item, to_node.item, on_transition_done)

        self._defer(start)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def _navigate(
        self,
        name: str,
        params: Any,
        transition: Transition | None,
        close_cb: CloseCallback | None,
        place: Callable[[Node], None],
    ) -> bool:
        if self._busy:
            return False

        self._busy = True
        from_node = self._history.current()
        to_node = self._create_node(name, params, close_cb)
        if to_node is None:
            self._busy = False
            return False

        place(to_node)
        self._transition_nodes(from_node, to_node, transition)
        return True

    def open(
        self,
        name: str,
        params: Any = None,
        transition: Transition | None = None,
        close_cb: CloseCallback | None = None,
    ) -> bool:
        """Open ``name``, closing the current item. ``close_cb`` gets the close response."""
        return self._navigate(name, params, transition, close_cb, self._history.add)

    def replace(
        self,
        name: str,
        params: Any = None,
        transition: Transition | None = None,
        close_cb: CloseCallback | None = None,
    ) -> bool:
        """Like :meth:`open`, but overwrite the current history entry."""
        return self._navigate(name, params, transition, close_cb, self._history.replace)

    def enqueue(
        self,
        name: str,
        params: Any = None,
        transition: Transition | None = None,
        close_cb: CloseCallback | None = None,
    ) -> bool:
        """Open now if nothing is open, otherwise queue until :meth:`close`."""
        if self._history.is_empty():
            return self.open(name, params, transition, close_cb)

        node = self._create_node(name, params, close_cb)
        if node is None:
            return False
        self._queue.append(PendingEntry(node, transition))
        return True

    def back(self, transition: Transition | None = None) -> bool:
        if self._busy:
            return False

        self._busy = True
        from_node = self._history.current()
        before = self._history.index
        to_node = self._history.back()

        if to_node is not None:
            self._transition_nodes(from_node, to_node, transition)
            return True

        # Undo the cursor step past the start, if one was taken
        if self._history.index < before:
            self._history.forward()
        self._busy = False
        return False

    def forward(self, transition: Transition | None = None) -> bool:
        if self._busy:
            return False

        self._busy = True
        from_node = self._history.current()
        to_node = self._history.forward()

        if to_node is not None:
            self._transition_nodes(from_node, to_node, transition)
            return True

        self._busy = False
        return False

    def close(self, response: Any = None) -> None:
        """Close the current item.

        Opens the oldest queued node in its place if there is one. Otherwise
        goes back, delivering ``response`` to the closed node's callback, and
        drops the forward history. With nothing to go back to the current item
        is closed and the controller collapses.
        """
        if self._busy:
            return

        if self._queue:
            entry = self._queue.popleft()
            self._busy = True
            from_node = self._history.current()
            self._history.replace(entry.node)
            self._transition_nodes(from_node, entry.node, entry.transition)
            return

        self._response = response
        went_back = self.back()

        self._history.clear_future()

        if went_back:
            return

        current = self._history.current()
        self._history.clear()

        if current is not None:
            _emit(current.item, "closing", current.params)
            self._close_node(current, lambda: _emit(current.item, "closed", current.params))
        else:
            self._response = None
        self._collapse()

    def clear_history(self) -> None:
        """Forget everything but the current node, e.g. on a main screen."""
        self._history.reset_to_current()

    def _collapse(self) -> None:
        logger.debug("Navigation controller collapsed")
        self.events.emit("collapse")
        if self._on_collapse is not None:
            self._on_collapse()

    # ------------------------------------------------------------------
    # Branching and host events
    # ------------------------------------------------------------------
    def branch(
        self,
        creation_options: Mapping[str, Any] | None = None,
        on_collapse: Callable[[], None] | None = None,
    ) -> "NavigationController":
        """Create a controller over the same registry with its own history and queue."""
        return NavigationController(
            self.config.for_branch(),
            creation_options,
            scheduler=self.scheduler,
            registry=self._registry,
            on_collapse=on_collapse,
        )

    def _on_host_forward(self) -> None:
        self.forward()

    def _on_host_backward(self) -> None:
        self.back()
