"""
Short-lived "awaiting status text" markers per chat and user.
"""

import threading
import time
from typing import Callable


def pending_key(provider_chat_id: str | None, provider_user_id: str) -> str:
    """Key pending state to chat + user so group chats don't cross over."""
    return f"{provider_chat_id or 'private'}::{provider_user_id}"


class PendingStatusStore:
    """In-process marker store. Each marker is consumed at most once."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._expires_at: dict[str, float] = {}
        self._lock = threading.Lock()

    def set_pending(self, key: str, ttl_seconds: float) -> None:
        with self._lock:
            self._expires_at[key] = self._clock() + ttl_seconds

    def consume_if_pending(self, key: str) -> bool:
        """Remove the marker for key; True only if it existed and had not expired."""
        with self._lock:
            expires_at = self._expires_at.pop(key, None)
        if expires_at is None:
            return False
        return self._clock() <= expires_at
