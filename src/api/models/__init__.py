"""API Pydantic models."""

from .responses import (
    AckResponse,
    ErrorCodes,
    ErrorResponse,
    HealthResponse,
    SlackChallengeResponse,
)
from .webhooks import SlackEventPayload, ViberWebhook

__all__ = [
    "AckResponse",
    "ErrorCodes",
    "ErrorResponse",
    "HealthResponse",
    "SlackChallengeResponse",
    "SlackEventPayload",
    "ViberWebhook",
]
