"""Tests for the pending status store."""

from core.pending_status import PendingStatusStore, pending_key


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_consumed_once():
    store = PendingStatusStore(clock=FakeClock())
    store.set_pending("c::u", 120)

    assert store.consume_if_pending("c::u") is True
    assert store.consume_if_pending("c::u") is False


def test_expired_marker_is_dropped():
    clock = FakeClock()
    store = PendingStatusStore(clock=clock)
    store.set_pending("c::u", 120)

    clock.now += 121
    assert store.consume_if_pending("c::u") is False
    clock.now -= 121
    assert store.consume_if_pending("c::u") is False


def test_markers_are_per_key():
    store = PendingStatusStore(clock=FakeClock())
    store.set_pending(pending_key("chat-1", "u1"), 120)

    assert store.consume_if_pending(pending_key("chat-1", "u2")) is False
    assert store.consume_if_pending(pending_key("chat-2", "u1")) is False
    assert store.consume_if_pending(pending_key("chat-1", "u1")) is True


def test_pending_key_without_chat():
    assert pending_key(None, "u1") == "private::u1"
    assert pending_key("C42", "u1") == "C42::u1"
