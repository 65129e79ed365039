"""Shared fixtures for navtree tests."""

import pytest

from navtree import ManualScheduler, NavigationController, Screen
from navtree import host as host_module


class RecordingScreen(Screen):
    """Screen that appends every lifecycle call and event to a shared log."""

    def __init__(self, log: list, name: str):
        super().__init__()
        self.log = log
        self.name = name
        self.create_calls = 0
        self.open_calls = 0
        self.close_calls = 0
        for event in ("opening", "opened", "closing", "closed", "moving", "moved"):
            self.on(event, self._recorder(event))

    def _recorder(self, event):
        def record(*args):
            self.log.append((event, self.name))
        return record

    def create(self, creation_options, name):
        self.create_calls += 1
        self.creation_options = creation_options

    def open(self, params):
        super().open(params)
        self.open_calls += 1
        self.log.append(("open", self.name))

    def close(self, params):
        super().close(params)
        self.close_calls += 1
        self.log.append(("close", self.name))


class AsyncCloseScreen(RecordingScreen):
    """Screen whose close finishes only when ``finish_close`` is called."""

    async_close = True

    def __init__(self, log: list, name: str):
        super().__init__(log, name)
        self.pending_done = None

    def close(self, params, done):
        self.close_calls += 1
        self.log.append(("close", self.name))
        self.pending_done = done

    def finish_close(self):
        done, self.pending_done = self.pending_done, None
        done()


class GateScreen(RecordingScreen):
    """Screen that redirects to ``target`` until ``allowed`` is set."""

    def __init__(self, log: list, name: str, target: str):
        super().__init__(log, name)
        self.target = target
        self.allowed = False

    def beforeopen(self, params):
        if self.allowed:
            return None
        return {"name": self.target, "params": {"next": self.name}}


@pytest.fixture(autouse=True)
def fresh_hosts(monkeypatch):
    """Give each test its own process-wide hosts."""
    monkeypatch.setattr(host_module, "_memory_host", None)
    monkeypatch.setattr(host_module, "_file_hosts", {})
    yield
    for host in host_module._file_hosts.values():
        host.stop()


@pytest.fixture
def log():
    return []


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def controller(scheduler):
    return NavigationController(scheduler=scheduler)


@pytest.fixture
def screens(log, controller):
    """Register home, settings and about screens."""
    items = {name: RecordingScreen(log, name) for name in ("home", "settings", "about")}
    for name, item in items.items():
        controller.register(name, item)
    return items
