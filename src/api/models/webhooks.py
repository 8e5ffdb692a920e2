"""Pydantic models for the subset of provider webhook payloads we use."""

from pydantic import BaseModel, ConfigDict


class ViberSender(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str | None = None
    avatar: str | None = None


class ViberMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: str | None = None
    type: str | None = None


class ViberWebhook(BaseModel):
    """Viber callback; only "message" events are acted on."""

    model_config = ConfigDict(extra="allow")

    event: str | None = None
    timestamp: int | None = None  # epoch milliseconds
    message_token: int | str | None = None
    chat_id: str | None = None
    sender: ViberSender | None = None
    message: ViberMessage | None = None


class SlackMessageEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    subtype: str | None = None
    user: str | None = None
    bot_id: str | None = None
    text: str | None = None
    channel: str | None = None
    ts: str | None = None


class SlackEventPayload(BaseModel):
    """Slack Events API envelope."""

    model_config = ConfigDict(extra="allow")

    type: str
    team_id: str | None = None
    api_app_id: str | None = None
    challenge: str | None = None
    event_id: str | None = None
    event_time: int | None = None  # epoch seconds
    event: SlackMessageEvent | None = None
