"""FastAPI dependencies for authentication and shared resources."""

import secrets
from pathlib import Path

from fastapi import Header, HTTPException, Request, status

from api.models.responses import ErrorCodes
from core.config import ADMIN_API_KEY
from core.pending_status import PendingStatusStore
from services.slack import UserProfileCache


async def verify_api_key(x_api_key: str | None = Header(None, alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": ErrorCodes.INTERNAL_ERROR,
                "details": [],
            },
        )

    # Use constant-time comparison to prevent timing attacks
    if not x_api_key or not secrets.compare_digest(x_api_key.encode(), ADMIN_API_KEY.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": ErrorCodes.UNAUTHORIZED,
                "details": [],
            },
        )

    return x_api_key


def get_db_path(request: Request) -> Path:
    return request.app.state.db_path


def get_pending_status(request: Request) -> PendingStatusStore:
    return request.app.state.pending_status


def get_seen_user_chats(request: Request) -> set[str]:
    return request.app.state.seen_user_chats


def get_slack_profiles(request: Request) -> UserProfileCache:
    return request.app.state.slack_profiles


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
