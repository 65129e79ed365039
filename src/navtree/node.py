"""Navigation nodes: one instantiated navigation act."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, NamedTuple


class NodeState(IntEnum):
    """Lifecycle state of a node."""

    CLOSED = 0
    PREPARED = 1
    OPENED = 2


class Redirect(NamedTuple):
    """Result of an item's ``beforeopen`` hook: open this screen first."""

    name: str
    params: Any = None


@dataclass(eq=False)
class Node:
    """A screen name, its params and its lifecycle state.

    Nodes compare by identity: two visits to the same screen are two nodes.
    """

    name: str
    params: Any
    item: Any
    state: NodeState = NodeState.CLOSED
    close_cb: Callable[[Any], None] | None = None

    def __repr__(self) -> str:
        return f"Node({self.name!r}, state={self.state.name})"
