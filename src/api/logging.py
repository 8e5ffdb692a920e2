"""SQLite request logging for API."""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from core.database import get_connection


@dataclass
class RequestLog:
    """Captured request/response data for logging."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    started: float = field(default_factory=time.time)
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    provider: str | None = None
    source_message_id: str | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    events_exported: int | None = None

    def finish(self, status_code: int, error_code: str | None = None, error_message: str | None = None):
        """Record the outcome and elapsed time."""
        self.status_code = status_code
        self.error_code = error_code
        self.error_message = error_message
        self.processing_time_ms = int((time.time() - self.started) * 1000)


def log_request(db_path: Path, log: RequestLog) -> None:
    """Write request log to SQLite database."""
    conn = get_connection(db_path)
    try:
        conn.execute(
            """
            INSERT INTO api_requests (
                request_id, timestamp, endpoint, method, client_ip,
                provider, source_message_id, status_code, error_code,
                error_message, processing_time_ms, events_exported
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
            (
                log.request_id,
                log.timestamp,
                log.endpoint,
                log.method,
                log.client_ip,
                log.provider,
                log.source_message_id,
                log.status_code,
                log.error_code,
                log.error_message,
                log.processing_time_ms,
                log.events_exported,
            ),
        )
        conn.commit()
    finally:
        conn.close()


def log_request_safely(db_path: Path, log: RequestLog) -> None:
    """Log without ever failing the request being logged."""
    try:
        log_request(db_path, log)
    except Exception as e:
        print(f"Failed to log request {log.request_id}: {e}")
