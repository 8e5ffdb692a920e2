"""
Slack Events API helpers: request signatures, replies, user profiles.
"""

import threading
import time
import traceback
from dataclasses import dataclass

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from slack_sdk.signature import SignatureVerifier

from core.classifier import BUTTON_LABELS
from core.config import HTTP_TIMEOUT_SECONDS, SLACK_USER_CACHE_TTL_SECONDS
from services.messaging import MENU_PROMPT


@dataclass(frozen=True)
class SlackProfile:
    name: str
    avatar_url: str | None = None


def verify_signature(
    signing_secret: str, body: bytes, timestamp: str | None, signature: str | None
) -> bool:
    """Check X-Slack-Signature; requests older than five minutes are rejected."""
    if not signing_secret:
        return False
    try:
        return SignatureVerifier(signing_secret).is_valid(
            body=body, timestamp=timestamp, signature=signature
        )
    except ValueError:
        # Non-numeric timestamp header
        return False


def build_menu_text() -> str:
    """Plain-text action list (Slack has no reply keyboard)."""
    labels = [label.split(" ", 1)[1] for label in BUTTON_LABELS]
    return "\n".join(f"- {label}" for label in labels + ["menu"])


def format_reply(text: str, show_menu: bool = False) -> str:
    if show_menu and text.strip().lower() == MENU_PROMPT.lower():
        return f"{text}\n{build_menu_text()}"
    if show_menu:
        return f'{text}\n\nType "menu" to see options.'
    return text


def send_message(token: str, channel: str, text: str, show_menu: bool = False) -> None:
    """Post a reply to a channel or DM."""
    client = WebClient(token=token, timeout=int(HTTP_TIMEOUT_SECONDS))
    client.chat_postMessage(channel=channel, text=format_reply(text, show_menu))


class UserProfileCache:
    """Display names from users.info, cached per user id (misses included)."""

    def __init__(self, ttl_seconds: float = SLACK_USER_CACHE_TTL_SECONDS, clock=time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[SlackProfile | None, float]] = {}
        self._lock = threading.Lock()

    def get(self, token: str, user_id: str) -> SlackProfile | None:
        if not token:
            return None
        now = self._clock()
        with self._lock:
            cached = self._entries.get(user_id)
        if cached and cached[1] > now:
            return cached[0]

        profile = fetch_profile(token, user_id)
        with self._lock:
            self._entries[user_id] = (profile, now + self._ttl)
        return profile


def fetch_profile(token: str, user_id: str) -> SlackProfile | None:
    """Look up a user's display name and avatar; None if Slack refuses."""
    client = WebClient(token=token, timeout=int(HTTP_TIMEOUT_SECONDS))
    try:
        response = client.users_info(user=user_id)
    except SlackApiError as e:
        print(f"Slack users.info failed for {user_id}: {e.response.get('error')}")
        return None
    except Exception:
        traceback.print_exc()
        return None

    user = response["user"]
    profile = user.get("profile") or {}
    name = next(
        (
            value.strip()
            for value in (
                profile.get("display_name"),
                profile.get("real_name"),
                user.get("real_name"),
                user.get("name"),
            )
            if value and value.strip()
        ),
        user_id,
    )
    return SlackProfile(name=name, avatar_url=profile.get("image_192") or profile.get("image_72"))
