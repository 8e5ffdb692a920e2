"""
Viber bot API: reply keyboard, message sending, webhook registration.
"""

import httpx

from core.classifier import BUTTON_LABELS
from core.config import HTTP_TIMEOUT_SECONDS, VIBER_API_URL


class ViberError(Exception):
    """Viber API call failed."""


def build_menu_keyboard() -> dict:
    """Reply keyboard with one full-width button per action."""
    return {
        "Type": "keyboard",
        "DefaultHeight": True,
        "Buttons": [
            {
                "ActionType": "reply",
                "ActionBody": label,
                "Text": label,
                "TextSize": "regular",
                "Columns": 6,
                "Rows": 1,
            }
            for label in BUTTON_LABELS
        ],
    }


def _post(token: str, method: str, payload: dict) -> dict:
    response = httpx.post(
        f"{VIBER_API_URL}/{method}",
        json=payload,
        headers={"X-Viber-Auth-Token": token},
        timeout=HTTP_TIMEOUT_SECONDS,
    )
    if not response.is_success:
        raise ViberError(
            f"Viber {method} failed: {response.status_code} {response.reason_phrase} {response.text}"
        )
    body = response.json()
    # Viber answers 200 with a non-zero status on logical errors
    if body.get("status", 0) != 0:
        raise ViberError(f"Viber {method} failed: {body.get('status_message', body)}")
    return body


def send_message(token: str, receiver: str, text: str, keyboard: dict | None = None) -> None:
    """Send a text message, optionally with the reply keyboard."""
    payload = {"receiver": receiver, "type": "text", "text": text}
    if keyboard:
        payload["keyboard"] = keyboard
    _post(token, "send_message", payload)


def set_webhook(token: str, url: str) -> dict:
    """Point the bot's webhook at url."""
    return _post(
        token,
        "set_webhook",
        {"url": url, "event_types": ["delivered", "seen", "failed", "conversation_started"]},
    )
