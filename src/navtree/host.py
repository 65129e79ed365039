"""Host navigation affordances: the position token a history mirrors into.

A host is the outside back/forward mechanism (a browser URL fragment, a
token file shared with a launcher). It exposes a comparable token, lets the
history write a fresh one, and reports changes it did not originate.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import HostAlreadyBoundError
from .protocols import TokenListener

logger = logging.getLogger(__name__)


class HostNavigator:
    """Base class for hosts: listener bookkeeping and single ownership.

    Only one history may be bound to a host at a time. :meth:`claim` raises
    :class:`HostAlreadyBoundError` for a second owner.
    """

    def __init__(self) -> None:
        self._listeners: list[TokenListener] = []
        self._owner: Any = None

    @property
    def owner(self) -> Any:
        return self._owner

    def claim(self, owner: Any) -> None:
        """Hand the host to ``owner``."""
        if self._owner is not None and self._owner is not owner:
            raise HostAlreadyBoundError(
                f"{type(self).__name__} is already bound to {self._owner!r}"
            )
        self._owner = owner

    def release(self, owner: Any) -> None:
        if self._owner is owner:
            self._owner = None

    def subscribe(self, callback: TokenListener) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: TokenListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, token: int) -> None:
        for callback in list(self._listeners):
            callback(token)

    def read_token(self) -> int:
        raise NotImplementedError

    def write_token(self, token: int) -> None:
        raise NotImplementedError


class MemoryHost(HostNavigator):
    """In-process host with browser-like back/forward over written tokens.

    Every write notifies listeners, the way a browser fires ``hashchange``
    for programmatic changes too.
    """

    def __init__(self, token: int = 0) -> None:
        super().__init__()
        self._entries: list[int] = [token]
        self._index = 0

    def read_token(self) -> int:
        return self._entries[self._index]

    def write_token(self, token: int) -> None:
        del self._entries[self._index + 1:]
        self._entries.append(token)
        self._index += 1
        self._notify(token)

    def go_back(self) -> bool:
        """Move back one entry, as the user pressing the host's back button."""
        if self._index == 0:
            return False
        self._index -= 1
        self._notify(self.read_token())
        return True

    def go_forward(self) -> bool:
        """Move forward one entry, as the user pressing the host's forward button."""
        if self._index + 1 >= len(self._entries):
            return False
        self._index += 1
        self._notify(self.read_token())
        return True


class TokenFileHandler(FileSystemEventHandler):
    """Debounces changes to a single token file."""

    def __init__(
        self,
        path: Path,
        on_change: Callable[[], None],
        debounce_seconds: float = 0.2,
    ):
        super().__init__()
        self.path = path
        self.on_change = on_change
        self.debounce_seconds = debounce_seconds
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None

    def _matches(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode()
        return Path(path) == self.path

    def _schedule_update(self) -> None:
        with self._lock:
            if self._timer:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
        self.on_change()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._schedule_update()

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self._schedule_update()

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save atomically move a temp file over the target
        dest = getattr(event, "dest_path", "")
        if not event.is_directory and dest and self._matches(dest):
            self._schedule_update()

    def cancel(self) -> None:
        with self._lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None


class FileHost(HostNavigator):
    """Host whose position token lives in a text file.

    Changes to the file are picked up with watchdog on a background thread.
    ``deliver`` moves the notification onto the thread that owns the
    navigation controller, e.g. ``loop.call_soon_threadsafe`` or
    ``App.call_from_thread``. Without it listeners run on the watcher thread.
    """

    def __init__(
        self,
        path: Path | str,
        deliver: Callable[[Callable[[], None]], Any] | None = None,
        debounce_seconds: float = 0.2,
    ):
        super().__init__()
        self.path = Path(path).expanduser().resolve()
        self.deliver = deliver
        self.debounce_seconds = debounce_seconds
        self._observer: Observer | None = None
        self._handler: TokenFileHandler | None = None

    def read_token(self) -> int:
        try:
            return int(self.path.read_text().strip() or 0)
        except FileNotFoundError:
            return 0
        except ValueError:
            logger.warning("Ignoring malformed token in %s", self.path)
            return 0

    def write_token(self, token: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(f"{token}\n")

    def claim(self, owner: Any) -> None:
        super().claim(owner)
        self.start()

    def release(self, owner: Any) -> None:
        if self.owner is owner:
            self.stop()
        super().release(owner)

    def _on_file_change(self) -> None:
        if self.deliver is not None:
            self.deliver(self._emit_current)
        else:
            self._emit_current()

    def _emit_current(self) -> None:
        self._notify(self.read_token())

    def start(self) -> None:
        """Start watching the token file."""
        if self._observer is not None:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handler = TokenFileHandler(
            self.path,
            self._on_file_change,
            debounce_seconds=self.debounce_seconds,
        )
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self.path.parent), recursive=False)
        self._observer.daemon = True
        self._observer.start()
        logger.info("Watching host token file: %s", self.path)

    def stop(self) -> None:
        """Stop watching."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=1.0)
            self._observer = None
        if self._handler is not None:
            self._handler.cancel()
            self._handler = None

    def __enter__(self) -> "FileHost":
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.stop()


# Process-wide hosts handed out by make_host
_memory_host: MemoryHost | None = None
_file_hosts: dict[Path, FileHost] = {}


def make_host(
    host_path: Path | None,
    deliver: Callable[[Callable[[], None]], Any] | None = None,
) -> HostNavigator:
    """Return the process's host for a config.

    Every call with the same token file (or with none) returns the same
    object, so only the first history to claim it gets bound.
    """
    global _memory_host

    if host_path is not None:
        resolved = Path(host_path).expanduser().resolve()
        host = _file_hosts.get(resolved)
        if host is None:
            host = FileHost(resolved, deliver=deliver)
            _file_hosts[resolved] = host
        return host

    if _memory_host is None:
        _memory_host = MemoryHost()
    return _memory_host
