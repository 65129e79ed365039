"""navtree: screen registry, navigation history and transition lifecycle."""

from .config import NavConfig
from .controller import NavigationController, PendingEntry
from .errors import ConfigError, HostAlreadyBoundError, NavTreeError
from .events import EventEmitter
from .history import NavigationHistory
from .host import FileHost, HostNavigator, MemoryHost, make_host
from .node import Node, NodeState, Redirect
from .registry import Registry
from .scheduler import AsyncioScheduler, ManualScheduler, TextualScheduler, default_scheduler
from .screen import Screen

__all__ = [
    "AsyncioScheduler",
    "ConfigError",
    "EventEmitter",
    "FileHost",
    "HostAlreadyBoundError",
    "HostNavigator",
    "ManualScheduler",
    "MemoryHost",
    "NavConfig",
    "NavTreeError",
    "NavigationController",
    "NavigationHistory",
    "Node",
    "NodeState",
    "PendingEntry",
    "Redirect",
    "Registry",
    "Screen",
    "TextualScheduler",
    "default_scheduler",
    "make_host",
]
