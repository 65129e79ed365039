"""Schedulers that defer lifecycle work to a later turn.

The controller never runs ``opened``/``closed``/``moved`` work in the turn
that triggered it. Every scheduler here runs deferred callbacks in FIFO
order, so a callback deferred from inside a deferred callback always runs
after everything that was already waiting.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from textual.app import App

logger = logging.getLogger(__name__)


class AsyncioScheduler:
    """Defer callbacks with ``loop.call_soon``."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def defer(self, callback: Callable[[], None]) -> None:
        self.loop.call_soon(callback)

    def defer_threadsafe(self, callback: Callable[[], None]) -> None:
        """Defer from another thread (e.g. a file watcher)."""
        self.loop.call_soon_threadsafe(callback)


class TextualScheduler:
    """Defer callbacks until a Textual app has processed its pending messages."""

    def __init__(self, app: "App") -> None:
        self.app = app

    def defer(self, callback: Callable[[], None]) -> None:
        self.app.call_later(callback)

    def defer_threadsafe(self, callback: Callable[[], None]) -> None:
        self.app.call_from_thread(self.app.call_later, callback)


class ManualScheduler:
    """Scheduler driven explicitly by the caller.

    Each call to :meth:`run_once` is one turn: it runs the callbacks that were
    waiting when the turn started. Callbacks deferred during the turn wait for
    the next one.
    """

    def __init__(self) -> None:
        self._queue: deque[Callable[[], None]] = deque()

    def defer(self, callback: Callable[[], None]) -> None:
        self._queue.append(callback)

    # deque.append is atomic
    defer_threadsafe = defer

    @property
    def pending(self) -> int:
        return len(self._queue)

    def run_once(self) -> int:
        """Run one turn. Returns the number of callbacks run."""
        count = len(self._queue)
        for _ in range(count):
            callback = self._queue.popleft()
            callback()
        return count

    def run_all(self, limit: int = 1000) -> int:
        """Run turns until nothing is pending. Returns the number of turns."""
        turns = 0
        while self._queue:
            if turns >= limit:
                logger.warning("Scheduler still busy after %d turns", limit)
                break
            self.run_once()
            turns += 1
        return turns


def default_scheduler() -> AsyncioScheduler | ManualScheduler:
    """Scheduler for a controller built without one.

    Uses the running asyncio loop when there is one. Outside a loop the
    caller drives the returned :class:`ManualScheduler` itself.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.debug("No running event loop, using a manual scheduler")
        return ManualScheduler()
    return AsyncioScheduler(loop)
