"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src (and tests, for fixtures/) to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from core.database import get_connection, init_schema  # noqa: E402
from models.events import EventType, PersistedEvent  # noqa: E402


def utc(iso: str) -> datetime:
    """Parse an ISO timestamp ending in Z."""
    return datetime.fromisoformat(iso.replace("Z", "+00:00")).astimezone(timezone.utc)


@pytest.fixture
def db_path(tmp_path):
    """Fresh database file with the schema in place."""
    path = tmp_path / "attendance.db"
    conn = get_connection(path)
    init_schema(conn)
    conn.close()
    return path


@pytest.fixture
def conn(db_path):
    connection = get_connection(db_path)
    yield connection
    connection.close()


@pytest.fixture
def sample_events():
    """A full shift with one break for user A (UTC)."""
    return [
        PersistedEvent(utc("2026-01-01T03:30:00Z"), EventType.SHIFT_START, "A"),
        PersistedEvent(utc("2026-01-01T05:00:00Z"), EventType.BREAK_START, "A"),
        PersistedEvent(utc("2026-01-01T05:30:00Z"), EventType.BREAK_END, "A"),
        PersistedEvent(utc("2026-01-01T06:00:00Z"), EventType.STATUS, "A", "Stocktake, aisle 3"),
        PersistedEvent(utc("2026-01-01T07:30:00Z"), EventType.SHIFT_END, "A"),
    ]


@pytest.fixture
def client(db_path, monkeypatch):
    """API test client against a temporary database with fresh in-process state."""
    from fastapi.testclient import TestClient

    import api.dependencies
    import api.routes.exports
    import api.routes.webhooks
    from api.main import app
    from core.pending_status import PendingStatusStore
    from services.slack import UserProfileCache

    monkeypatch.setattr(api.dependencies, "ADMIN_API_KEY", "secret")
    monkeypatch.setattr(api.routes.exports, "TIMEZONE", "UTC")
    monkeypatch.setattr(api.routes.webhooks, "VIBER_BOT_TOKEN", "")
    monkeypatch.setattr(api.routes.webhooks, "SLACK_BOT_TOKEN", "")
    monkeypatch.setattr(api.routes.webhooks, "SLACK_SIGNING_SECRET", "")

    app.state.db_path = db_path
    app.state.pending_status = PendingStatusStore()
    app.state.seen_user_chats = set()
    app.state.slack_profiles = UserProfileCache()

    return TestClient(app)
