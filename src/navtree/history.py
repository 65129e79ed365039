"""Navigation history: visited nodes with a movable cursor.

When bound to a host, every :meth:`NavigationHistory.add` writes a fresh
position token to the host. Token changes the history did not write itself
are reported as ``forward`` (token increased) or ``backward`` events; the
history never moves its own cursor in response.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from .errors import HostAlreadyBoundError
from .events import EventEmitter
from .host import HostNavigator
from .node import Node

logger = logging.getLogger(__name__)


def _now_token() -> int:
    return time.time_ns() // 1_000_000


class NavigationHistory:
    """Ordered list of nodes with a cursor in ``[-1, len - 1]``.

    Events: ``move(index, node)``, ``forward()``, ``backward()``.
    """

    def __init__(self, host: HostNavigator | None = None) -> None:
        self.events = EventEmitter()
        self._nodes: list[Node] = []
        self._index = -1
        self._current_token = 0
        self._suppress_host_change = False
        self._host: HostNavigator | None = None

        if host is not None:
            self._bind(host)

    def _bind(self, host: HostNavigator) -> None:
        try:
            host.claim(self)
        except HostAlreadyBoundError as e:
            logger.error("Host navigation not bound: %s", e)
            return
        self._host = host
        host.subscribe(self._on_host_change)
        logger.info("History bound to host %s", type(host).__name__)

    @property
    def is_host_bound(self) -> bool:
        return self._host is not None

    def close(self) -> None:
        """Release the host binding, if any."""
        if self._host is not None:
            self._host.unsubscribe(self._on_host_change)
            self._host.release(self)
            self._host = None

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.events.on(event, handler)

    def off(self, event: str, handler: Callable[..., Any]) -> None:
        self.events.off(event, handler)

    @property
    def index(self) -> int:
        return self._index

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def _node_at(self, index: int) -> Node | None:
        if 0 <= index < len(self._nodes):
            return self._nodes[index]
        return None

    def _move_to(self, index: int) -> None:
        self._index = index
        self.events.emit("move", index, self._node_at(index))

    def current(self) -> Node | None:
        """Return the node at the cursor, or None."""
        return self._node_at(self._index)

    def is_empty(self) -> bool:
        return len(self._nodes) == 0

    def clear(self) -> None:
        self._nodes = []
        self._move_to(-1)
        self._current_token = 0

    def clear_past(self) -> None:
        """Drop every node before the cursor."""
        if self._index > 0:
            del self._nodes[: self._index]
            self._move_to(0)
            self._current_token = 0

    def clear_future(self) -> None:
        """Drop every node after the cursor."""
        del self._nodes[self._index + 1:]
        self._current_token = _now_token()

    def reset_to_current(self) -> None:
        """Collapse the history to the current node only."""
        node = self.current()
        if node is not None:
            self._nodes = [node]
            self._move_to(0)
        else:
            self.clear()
        self._current_token = 0

    def add(self, node: Node) -> None:
        """Drop everything after the cursor, append ``node`` and move to it."""
        index = self._index + 1
        del self._nodes[index:]
        self._nodes.append(node)
        self._move_to(index)
        self._write_host_token()

    def replace(self, node: Node, protect_future: bool = False) -> None:
        """Put ``node`` at the cursor.

        With ``protect_future`` only the current slot is overwritten;
        otherwise everything from the cursor on is dropped first.
        """
        index = max(self._index, 0)
        if protect_future and index < len(self._nodes):
            self._nodes[index] = node
        else:
            del self._nodes[index:]
            self._nodes.append(node)
        self._move_to(index)

    def back(self) -> Node | None:
        """Step the cursor back.

        The cursor may reach -1, in which case None is returned and the
        caller is expected to step forward again if it wants to stay put.
        """
        index = self._index - 1
        if index < -1:
            return None
        node = self._node_at(index)
        self._move_to(index)
        return node

    def forward(self) -> Node | None:
        """Step the cursor forward if there is a node there."""
        index = self._index + 1
        node = self._node_at(index)
        if node is None:
            return None
        self._move_to(index)
        return node

    def _write_host_token(self) -> None:
        if self._host is None:
            return
        self._current_token = max(_now_token(), self._current_token + 1)
        self._suppress_host_change = True
        self._host.write_token(self._current_token)

    def _on_host_change(self, token: int) -> None:
        if self._suppress_host_change:
            self._suppress_host_change = False
            return

        if token > self._current_token:
            self.events.emit("forward")
        else:
            self.events.emit("backward")
        self._current_token = token
