"""Tests for provider-neutral message handling."""

from datetime import timedelta

import pytest

from conftest import utc
from core.database import fetch_events_between
from core.pending_status import PendingStatusStore
from models.events import EventType
from services.messaging import MENU_PROMPT, STATUS_PROMPT, IncomingMessage, handle_incoming_message

NOW = utc("2026-01-01T08:00:00Z")


class Replies:
    """Collects send_message calls."""

    def __init__(self):
        self.sent = []

    def __call__(self, conversation_id, text, show_menu):
        self.sent.append((conversation_id, text, show_menu))


@pytest.fixture
def handler(conn):
    pending = PendingStatusStore()
    seen = set()
    replies = Replies()
    counter = iter(range(1, 1000))

    def handle(text, chat_id="chat-1", user_id="u1", source_message_id=None):
        message = IncomingMessage(
            provider="viber",
            provider_user_id=user_id,
            user_name="Alice",
            provider_chat_id=chat_id,
            conversation_id=chat_id or user_id,
            message_text=text,
            source_message_id=source_message_id or f"m{next(counter)}",
            created_at=NOW,
        )
        handle_incoming_message(conn, message, pending, seen, replies)

    handle.replies = replies
    return handle


def stored(conn):
    return fetch_events_between(conn, NOW - timedelta(days=1), NOW + timedelta(days=1))


def test_event_is_recorded_and_confirmed(conn, handler):
    handler("/start")

    events = stored(conn)
    assert [e.event_type for e in events] == [EventType.SHIFT_START]
    assert handler.replies.sent == [("chat-1", "✅ Shift started.", True)]


def test_redelivered_message_is_recorded_once(conn, handler):
    handler("☕ Break start", source_message_id="same")
    handler("☕ Break start", source_message_id="same")

    assert len(stored(conn)) == 1


def test_inline_status_is_recorded(conn, handler):
    handler("/status Loading Bay 2")

    events = stored(conn)
    assert events[0].event_type is EventType.STATUS
    assert events[0].text == "Loading Bay 2"
    assert handler.replies.sent[-1][1] == '📝 Status saved: "Loading Bay 2"'


def test_status_prompt_then_follow_up(conn, handler):
    handler("📝 Status update")
    assert handler.replies.sent[-1] == ("chat-1", STATUS_PROMPT, False)
    assert stored(conn) == []

    # The follow-up is stored verbatim, even though it looks like a command
    handler("  /end of aisle 4  ")
    events = stored(conn)
    assert [(e.event_type, e.text) for e in events] == [(EventType.STATUS, "  /end of aisle 4  ")]
    assert handler.replies.sent[-1] == ("chat-1", '✅ Status saved: "/end of aisle 4"', True)

    # Marker is consumed: the next message is classified normally
    handler("/end")
    assert stored(conn)[-1].event_type is EventType.SHIFT_END


def test_pending_status_is_per_user(conn, handler):
    handler("/status", user_id="u1")
    handler("/start", user_id="u2")

    assert stored(conn)[0].event_type is EventType.SHIFT_START


def test_menu(conn, handler):
    handler("menu")
    assert handler.replies.sent == [("chat-1", MENU_PROMPT, True)]
    assert stored(conn) == []


def test_unrecognised_text_shows_menu_once(conn, handler):
    handler("hello")
    handler("hello?")

    assert handler.replies.sent == [("chat-1", MENU_PROMPT, True)]
    assert stored(conn) == []
