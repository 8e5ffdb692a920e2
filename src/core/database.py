"""
SQLite database operations for users, chats and attendance events.
"""

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from core.config import DB_PATH
from models.events import EventType, PersistedEvent


def get_connection(db_path: Path = DB_PATH) -> sqlite3.Connection:
    """Get a database connection usable from worker threads."""
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_schema(conn: sqlite3.Connection):
    """Create tables and indexes if they don't exist."""
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            provider TEXT NOT NULL CHECK(provider IN ('viber', 'slack')),
            provider_user_id TEXT NOT NULL,
            name TEXT NOT NULL,
            avatar_url TEXT,
            create_date TEXT DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (provider, provider_user_id)
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS chats (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            provider TEXT NOT NULL CHECK(provider IN ('viber', 'slack')),
            provider_chat_id TEXT NOT NULL,
            create_date TEXT DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (provider, provider_chat_id)
        )
    """)

    # One row per (provider, source message): webhook redeliveries are rejected here
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            chat_id INTEGER NOT NULL,
            event_type TEXT NOT NULL CHECK(event_type IN (
                'SHIFT_START', 'BREAK_START', 'BREAK_END', 'SHIFT_END', 'STATUS'
            )),
            text TEXT,
            provider TEXT NOT NULL,
            source_message_id TEXT NOT NULL,
            raw_payload TEXT,
            created_at TEXT NOT NULL,
            UNIQUE (provider, source_message_id),
            FOREIGN KEY (user_id) REFERENCES users(id),
            FOREIGN KEY (chat_id) REFERENCES chats(id)
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS api_requests (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            request_id TEXT UNIQUE NOT NULL,
            timestamp TEXT NOT NULL,
            endpoint TEXT NOT NULL,
            method TEXT NOT NULL,
            client_ip TEXT,
            provider TEXT,
            source_message_id TEXT,
            status_code INTEGER NOT NULL,
            error_code TEXT,
            error_message TEXT,
            processing_time_ms INTEGER NOT NULL,
            events_exported INTEGER
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_events_created_at ON events(created_at)")
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)"
    )

    conn.commit()


def format_instant(instant: datetime) -> str:
    """
    Serialize an instant as fixed-width UTC ISO-8601.

    Always includes microseconds so that string order equals time order.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc).isoformat(timespec="microseconds")


def upsert_user(
    conn: sqlite3.Connection,
    provider: str,
    provider_user_id: str,
    name: str,
    avatar_url: str | None = None,
) -> int:
    """Create or refresh a user and return its id."""
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO users (provider, provider_user_id, name, avatar_url)
        VALUES (?, ?, ?, ?)
        ON CONFLICT (provider, provider_user_id)
        DO UPDATE SET name = excluded.name, avatar_url = excluded.avatar_url
        """,
        (provider, provider_user_id, name, avatar_url),
    )
    cursor.execute(
        "SELECT id FROM users WHERE provider = ? AND provider_user_id = ?",
        (provider, provider_user_id),
    )
    conn.commit()
    return cursor.fetchone()[0]


def upsert_chat(
    conn: sqlite3.Connection,
    provider: str,
    provider_chat_id: str | None,
    provider_user_id: str,
) -> int:
    """Create the chat if needed and return its id. Direct messages map to 'private:<user>'."""
    chat_id = provider_chat_id or f"private:{provider_user_id}"
    cursor = conn.cursor()
    cursor.execute(
        "INSERT OR IGNORE INTO chats (provider, provider_chat_id) VALUES (?, ?)",
        (provider, chat_id),
    )
    cursor.execute(
        "SELECT id FROM chats WHERE provider = ? AND provider_chat_id = ?",
        (provider, chat_id),
    )
    conn.commit()
    return cursor.fetchone()[0]


def insert_event_idempotent(
    conn: sqlite3.Connection,
    user_id: int,
    chat_id: int,
    event_type: EventType,
    provider: str,
    source_message_id: str,
    created_at: datetime,
    text: str | None = None,
    raw_payload: dict | None = None,
) -> bool:
    """
    Insert an event unless this provider message was already stored.

    Returns:
        True if a row was written, False for a redelivered message.
    """
    try:
        conn.execute(
            """
            INSERT INTO events (
                user_id, chat_id, event_type, text, provider,
                source_message_id, raw_payload, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                chat_id,
                event_type.value,
                text,
                provider,
                source_message_id,
                json.dumps(raw_payload) if raw_payload is not None else None,
                format_instant(created_at),
            ),
        )
    except sqlite3.IntegrityError as e:
        if "UNIQUE constraint failed: events." not in str(e):
            raise
        conn.rollback()
        return False
    conn.commit()
    return True


def fetch_events_between(
    conn: sqlite3.Connection, start: datetime, end: datetime
) -> list[PersistedEvent]:
    """Events with start <= created_at < end, oldest first."""
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT e.created_at, e.event_type, u.name, e.text
        FROM events e
        JOIN users u ON u.id = e.user_id
        WHERE e.created_at >= ? AND e.created_at < ?
        ORDER BY e.created_at, e.id
        """,
        (format_instant(start), format_instant(end)),
    )
    return [
        PersistedEvent(
            created_at=datetime.fromisoformat(created_at),
            event_type=EventType(event_type),
            user_name=name,
            text=text,
        )
        for created_at, event_type, name, text in cursor.fetchall()
    ]
