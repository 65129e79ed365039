"""Tests for navtree.history module."""

import pytest

from navtree.history import NavigationHistory
from navtree.host import MemoryHost
from navtree.node import Node


def make_nodes(*names):
    return [Node(name=name, params=None, item=object()) for name in names]


@pytest.fixture
def history():
    return NavigationHistory()


@pytest.fixture
def filled(history):
    """History [n0, n1, n2] with the cursor at 1."""
    nodes = make_nodes("n0", "n1", "n2")
    for node in nodes:
        history.add(node)
    history.back()
    return history, nodes


class TestEmptyHistory:
    def test_is_empty(self, history):
        assert history.is_empty()
        assert history.current() is None
        assert history.index == -1

    def test_back_stays_at_floor(self, history):
        assert history.back() is None
        assert history.index == -1

    def test_forward_on_empty(self, history):
        assert history.forward() is None
        assert history.index == -1


class TestAdd:
    def test_add_moves_cursor(self, history):
        (n0,) = make_nodes("n0")
        history.add(n0)
        assert history.current() is n0
        assert history.index == 0
        assert not history.is_empty()

    def test_add_truncates_future(self, filled):
        history, (n0, n1, n2) = filled
        (n3,) = make_nodes("n3")
        history.add(n3)
        assert history.nodes == (n0, n1, n3)
        assert history.index == 2

    def test_add_emits_move(self, history):
        moves = []
        history.on("move", lambda index, node: moves.append((index, node)))
        (n0,) = make_nodes("n0")
        history.add(n0)
        assert moves == [(0, n0)]


class TestReplace:
    def test_protect_future_overwrites_slot(self, filled):
        history, (n0, n1, n2) = filled
        (n1b,) = make_nodes("n1b")
        history.replace(n1b, protect_future=True)
        assert history.nodes == (n0, n1b, n2)
        assert history.index == 1

    def test_replace_truncates_future(self, filled):
        history, (n0, n1, n2) = filled
        (n1b,) = make_nodes("n1b")
        history.replace(n1b)
        assert history.nodes == (n0, n1b)
        assert history.index == 1

    def test_replace_on_empty_writes_index_zero(self, history):
        (n0,) = make_nodes("n0")
        history.replace(n0, protect_future=True)
        assert history.nodes == (n0,)
        assert history.index == 0


class TestBackForward:
    def test_back_and_forward(self, filled):
        history, (n0, n1, n2) = filled
        assert history.back() is n0
        assert history.back() is None
        assert history.index == -1
        assert history.forward() is n0
        assert history.forward() is n1
        assert history.forward() is n2
        assert history.forward() is None
        assert history.index == 2

    def test_back_below_floor_does_not_move(self, history):
        (n0,) = make_nodes("n0")
        history.add(n0)
        history.back()
        assert history.back() is None
        assert history.index == -1


class TestTruncation:
    def test_clear(self, filled):
        history, _ = filled
        history.clear()
        assert history.is_empty()
        assert history.index == -1

    def test_clear_past(self, filled):
        history, (n0, n1, n2) = filled
        history.clear_past()
        assert history.nodes == (n1, n2)
        assert history.index == 0
        assert history.current() is n1

    def test_clear_past_at_start_is_noop(self, history):
        nodes = make_nodes("n0", "n1")
        for node in nodes:
            history.add(node)
        history.back()
        history.clear_past()
        assert history.nodes == tuple(nodes)
        assert history.index == 0

    def test_clear_future(self, filled):
        history, (n0, n1, n2) = filled
        history.clear_future()
        assert history.nodes == (n0, n1)
        assert history.current() is n1

    def test_reset_to_current(self, filled):
        history, (n0, n1, n2) = filled
        history.reset_to_current()
        assert history.nodes == (n1,)
        assert history.index == 0

    def test_reset_to_current_then_back_finds_nothing(self, filled):
        history, _ = filled
        history.reset_to_current()
        assert history.back() is None

    def test_reset_to_current_when_empty(self, history):
        history.reset_to_current()
        assert history.is_empty()
        assert history.index == -1


class TestHostBinding:
    def test_add_writes_token_without_events(self):
        host = MemoryHost()
        history = NavigationHistory(host)
        events = []
        history.on("forward", lambda: events.append("forward"))
        history.on("backward", lambda: events.append("backward"))

        n0, n1 = make_nodes("n0", "n1")
        history.add(n0)
        first = host.read_token()
        history.add(n1)

        assert host.read_token() > first > 0
        assert events == []

    def test_replace_does_not_write_token(self):
        host = MemoryHost()
        history = NavigationHistory(host)
        n0, n1 = make_nodes("n0", "n1")
        history.add(n0)
        token = host.read_token()
        history.replace(n1)
        assert host.read_token() == token

    def test_host_back_and_forward_emit_events(self):
        host = MemoryHost()
        history = NavigationHistory(host)
        events = []
        history.on("forward", lambda: events.append("forward"))
        history.on("backward", lambda: events.append("backward"))

        for node in make_nodes("n0", "n1"):
            history.add(node)

        host.go_back()
        host.go_forward()
        assert events == ["backward", "forward"]

    def test_history_does_not_move_itself(self):
        host = MemoryHost()
        history = NavigationHistory(host)
        for node in make_nodes("n0", "n1"):
            history.add(node)
        host.go_back()
        assert history.index == 1

    def test_second_binding_is_rejected(self, caplog):
        host = MemoryHost()
        first = NavigationHistory(host)
        second = NavigationHistory(host)
        assert first.is_host_bound
        assert not second.is_host_bound
        assert host.owner is first
        assert "already bound" in caplog.text

    def test_close_releases_host(self):
        host = MemoryHost()
        first = NavigationHistory(host)
        first.close()
        second = NavigationHistory(host)
        assert second.is_host_bound

    def test_unbound_history_ignores_host(self):
        history = NavigationHistory()
        (n0,) = make_nodes("n0")
        history.add(n0)
        assert not history.is_host_bound
