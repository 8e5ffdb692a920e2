"""Chat provider webhooks (Viber, Slack)."""

import asyncio
import traceback
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from pydantic import ValidationError

from api.dependencies import (
    get_client_ip,
    get_db_path,
    get_pending_status,
    get_seen_user_chats,
    get_slack_profiles,
)
from api.logging import RequestLog, log_request_safely
from api.models.responses import AckResponse, ErrorCodes, SlackChallengeResponse
from api.models.webhooks import SlackEventPayload, ViberWebhook
from core.config import SLACK_BOT_TOKEN, SLACK_SIGNING_SECRET, VIBER_BOT_TOKEN
from core.database import get_connection
from core.pending_status import PendingStatusStore
from services import slack, viber
from services.messaging import IncomingMessage, SendMessage, handle_incoming_message
from services.slack import UserProfileCache

router = APIRouter(prefix="/webhook")


def _bad_request(message: str, code: str = ErrorCodes.INVALID_PAYLOAD) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": message, "code": code, "details": []},
    )


def _handle_in_thread(
    db_path: Path,
    message: IncomingMessage,
    pending_status: PendingStatusStore,
    seen_user_chats: set[str],
    send_message: SendMessage,
) -> None:
    conn = get_connection(db_path)
    try:
        handle_incoming_message(conn, message, pending_status, seen_user_chats, send_message)
    finally:
        conn.close()


# =============================================================================
# VIBER
# =============================================================================


def send_viber(conversation_id: str, text: str, show_menu: bool) -> None:
    # Without a token we still record events, we just can't reply
    if not VIBER_BOT_TOKEN:
        return
    keyboard = viber.build_menu_keyboard() if show_menu else None
    viber.send_message(VIBER_BOT_TOKEN, conversation_id, text, keyboard)


@router.post("/viber", response_model=AckResponse)
async def viber_webhook(
    request: Request,
    db_path: Path = Depends(get_db_path),
    pending_status: PendingStatusStore = Depends(get_pending_status),
    seen_user_chats: set[str] = Depends(get_seen_user_chats),
):
    """Receive a Viber callback and record any attendance action in it."""
    request_log = RequestLog(
        endpoint="/webhook/viber",
        method="POST",
        client_ip=get_client_ip(request),
        provider="viber",
    )

    try:
        try:
            payload = ViberWebhook.model_validate(await request.json())
        except (ValueError, ValidationError):
            raise _bad_request("Invalid payload")

        if payload.event != "message":
            request_log.finish(200)
            return AckResponse()

        sender_id = payload.sender.id if payload.sender else None
        if payload.message_token is None or not sender_id:
            raise _bad_request("Missing sender or message id")

        source_message_id = str(payload.message_token)
        request_log.source_message_id = source_message_id

        if payload.timestamp is not None:
            created_at = datetime.fromtimestamp(payload.timestamp / 1000, tz=timezone.utc)
        else:
            created_at = datetime.now(timezone.utc)

        message = IncomingMessage(
            provider="viber",
            provider_user_id=sender_id,
            user_name=payload.sender.name or "Unknown",
            avatar_url=payload.sender.avatar,
            provider_chat_id=payload.chat_id,
            conversation_id=payload.chat_id or sender_id,
            message_text=(payload.message.text if payload.message else None) or "",
            source_message_id=source_message_id,
            created_at=created_at,
            raw_payload=payload.model_dump(mode="json"),
        )

        await asyncio.to_thread(
            _handle_in_thread, db_path, message, pending_status, seen_user_chats, send_viber
        )

        request_log.finish(200)
        return AckResponse()

    except HTTPException as e:
        detail = e.detail if isinstance(e.detail, dict) else {}
        request_log.finish(e.status_code, detail.get("code"), detail.get("error"))
        raise

    except Exception as e:
        request_log.finish(500, ErrorCodes.INTERNAL_ERROR, str(e))
        raise

    finally:
        log_request_safely(db_path, request_log)


# =============================================================================
# SLACK
# =============================================================================


def send_slack(conversation_id: str, text: str, show_menu: bool) -> None:
    if not SLACK_BOT_TOKEN:
        return
    slack.send_message(SLACK_BOT_TOKEN, conversation_id, text, show_menu)


def process_slack_event(
    db_path: Path,
    payload: SlackEventPayload,
    pending_status: PendingStatusStore,
    seen_user_chats: set[str],
    profiles: UserProfileCache,
) -> None:
    """Handle an already-acknowledged Slack message event (runs as a background task)."""
    event = payload.event
    source_message_id = payload.event_id or event.ts
    if not event.user or not event.channel or not source_message_id:
        return

    if payload.event_time is not None:
        created_at = datetime.fromtimestamp(payload.event_time, tz=timezone.utc)
    else:
        created_at = datetime.now(timezone.utc)

    try:
        profile = profiles.get(SLACK_BOT_TOKEN, event.user)
        message = IncomingMessage(
            provider="slack",
            provider_user_id=event.user,
            user_name=profile.name if profile else event.user,
            avatar_url=profile.avatar_url if profile else None,
            provider_chat_id=event.channel,
            conversation_id=event.channel,
            message_text=event.text or "",
            source_message_id=source_message_id,
            created_at=created_at,
            raw_payload=payload.model_dump(mode="json"),
        )
        _handle_in_thread(db_path, message, pending_status, seen_user_chats, send_slack)
    except Exception:
        # Slack already got its 200; nothing upstream to report to
        print(f"Failed to process Slack event {source_message_id}")
        traceback.print_exc()


@router.post("/slack")
async def slack_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    db_path: Path = Depends(get_db_path),
    pending_status: PendingStatusStore = Depends(get_pending_status),
    seen_user_chats: set[str] = Depends(get_seen_user_chats),
    profiles: UserProfileCache = Depends(get_slack_profiles),
):
    """
    Receive a Slack Events API request.

    Message events are acknowledged immediately and processed afterwards so
    Slack does not retry on slow handling.
    """
    request_log = RequestLog(
        endpoint="/webhook/slack",
        method="POST",
        client_ip=get_client_ip(request),
        provider="slack",
    )

    try:
        if not SLACK_SIGNING_SECRET:
            raise HTTPException(
                status_code=status.HTTP_501_NOT_IMPLEMENTED,
                detail={
                    "error": "Slack not configured",
                    "code": ErrorCodes.NOT_CONFIGURED,
                    "details": [],
                },
            )

        body = await request.body()
        if not slack.verify_signature(
            SLACK_SIGNING_SECRET,
            body,
            request.headers.get("X-Slack-Request-Timestamp"),
            request.headers.get("X-Slack-Signature"),
        ):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={
                    "error": "Invalid Slack signature",
                    "code": ErrorCodes.INVALID_SIGNATURE,
                    "details": [],
                },
            )

        try:
            payload = SlackEventPayload.model_validate_json(body)
        except ValidationError:
            raise _bad_request("Invalid payload")

        if payload.type == "url_verification" and payload.challenge:
            request_log.finish(200)
            return SlackChallengeResponse(challenge=payload.challenge)

        event = payload.event
        if (
            payload.type == "event_callback"
            and event is not None
            and event.type == "message"
            # Bot-authored messages would make us answer ourselves
            and not event.bot_id
            and not event.subtype
        ):
            request_log.source_message_id = payload.event_id or event.ts
            background_tasks.add_task(
                process_slack_event, db_path, payload, pending_status, seen_user_chats, profiles
            )

        request_log.finish(200)
        return AckResponse()

    except HTTPException as e:
        detail = e.detail if isinstance(e.detail, dict) else {}
        request_log.finish(e.status_code, detail.get("code"), detail.get("error"))
        raise

    except Exception as e:
        request_log.finish(500, ErrorCodes.INTERNAL_ERROR, str(e))
        raise

    finally:
        log_request_safely(db_path, request_log)
