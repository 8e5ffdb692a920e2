"""
Provider-neutral handling of inbound chat messages.

Both webhooks reduce their payloads to an IncomingMessage and hand it here,
together with a callback that replies through the right provider.
"""

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from core.classifier import classify, detect_source
from core.config import PENDING_STATUS_TTL_SECONDS
from core.database import insert_event_idempotent, upsert_chat, upsert_user
from core.pending_status import PendingStatusStore, pending_key
from models.events import EventResult, EventType, MenuResult, StatusPendingResult

# send_message(conversation_id, text, show_menu)
SendMessage = Callable[[str, str, bool], None]

MENU_PROMPT = "Choose an action:"
STATUS_PROMPT = "What's your status? Reply with a short message."

CONFIRMATIONS = {
    EventType.SHIFT_START: "✅ Shift started.",
    EventType.BREAK_START: "☕ Break started.",
    EventType.BREAK_END: "✅ Break ended.",
    EventType.SHIFT_END: "🏁 Shift ended.",
}


@dataclass
class IncomingMessage:
    """One chat message as received from a provider webhook."""

    provider: str  # "viber" or "slack"
    provider_user_id: str
    user_name: str
    conversation_id: str  # where replies go
    message_text: str
    source_message_id: str
    created_at: datetime
    provider_chat_id: str | None = None
    avatar_url: str | None = None
    raw_payload: dict[str, Any] = field(default_factory=dict)


def format_confirmation(event_type: EventType, text: str | None = None) -> str:
    if event_type is EventType.STATUS:
        return f'📝 Status saved: "{text}"' if text else "📝 Status saved."
    return CONFIRMATIONS.get(event_type, f"Recorded: {event_type.value}")


def record_event(
    conn: sqlite3.Connection,
    message: IncomingMessage,
    event_type: EventType,
    text: str | None = None,
) -> bool:
    """Upsert the sender and chat, then store the event once per source message."""
    user_id = upsert_user(
        conn,
        message.provider,
        message.provider_user_id,
        message.user_name,
        message.avatar_url,
    )
    chat_id = upsert_chat(
        conn, message.provider, message.provider_chat_id, message.provider_user_id
    )
    return insert_event_idempotent(
        conn,
        user_id=user_id,
        chat_id=chat_id,
        event_type=event_type,
        provider=message.provider,
        source_message_id=message.source_message_id,
        created_at=message.created_at,
        text=text,
        raw_payload=message.raw_payload,
    )


def handle_incoming_message(
    conn: sqlite3.Connection,
    message: IncomingMessage,
    pending_status: PendingStatusStore,
    seen_user_chats: set[str],
    send_message: SendMessage,
) -> None:
    """
    Classify one message, persist any resulting event and reply.

    A consumed pending-status marker takes priority over classification: the
    whole message, unmodified, becomes the status text.
    """
    key = pending_key(message.provider_chat_id, message.provider_user_id)

    if pending_status.consume_if_pending(key):
        record_event(conn, message, EventType.STATUS, message.message_text)
        shown = message.message_text.strip()
        reply = f'✅ Status saved: "{shown}"' if shown else "✅ Status saved."
        send_message(message.conversation_id, reply, True)
        return

    result = classify(message.message_text, detect_source(message.message_text))

    if isinstance(result, MenuResult):
        send_message(message.conversation_id, MENU_PROMPT, True)
        return

    if isinstance(result, StatusPendingResult):
        pending_status.set_pending(key, PENDING_STATUS_TTL_SECONDS)
        send_message(message.conversation_id, STATUS_PROMPT, False)
        return

    if not isinstance(result, EventResult):
        # Unrecognised text: show the menu once per user and chat
        seen_key = f"{message.provider}::{message.provider_chat_id or 'private'}::{message.provider_user_id}"
        if seen_key not in seen_user_chats:
            seen_user_chats.add(seen_key)
            send_message(message.conversation_id, MENU_PROMPT, True)
        return

    record_event(conn, message, result.event_type, result.text)
    send_message(
        message.conversation_id,
        format_confirmation(result.event_type, result.text),
        True,
    )
