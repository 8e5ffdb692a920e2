"""
Data models for attendance events, parse results and summaries.

Parse results are a closed set of frozen dataclasses; callers branch on the
concrete class (or its ``kind``) rather than on optional fields.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar, Literal, Union


class EventType(str, Enum):
    """Canonical attendance actions."""

    SHIFT_START = "SHIFT_START"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"
    SHIFT_END = "SHIFT_END"
    STATUS = "STATUS"


# How a message reached us: slash command, tapped reply button, typed text,
# or text that followed an earlier unresolved prompt.
CommandSource = Literal["command", "button", "free_text", "unknown"]


# =============================================================================
# PARSE RESULTS
# =============================================================================


@dataclass(frozen=True)
class EventResult:
    """A recognised attendance action."""

    kind: ClassVar[str] = "event"

    event_type: EventType
    text: str | None = None

    def __post_init__(self):
        if self.text is not None and self.event_type is not EventType.STATUS:
            raise ValueError(f"Only STATUS events carry text, got {self.event_type.value}")


@dataclass(frozen=True)
class MenuResult:
    """The user asked for the list of actions."""

    kind: ClassVar[str] = "menu"


@dataclass(frozen=True)
class StatusPendingResult:
    """The next message from this user should be stored as status text."""

    kind: ClassVar[str] = "status_pending"


@dataclass(frozen=True)
class NoMatchResult:
    """Unrecognised input."""

    kind: ClassVar[str] = "none"


ParseResult = Union[EventResult, MenuResult, StatusPendingResult, NoMatchResult]


# =============================================================================
# PERSISTED EVENTS AND SUMMARIES
# =============================================================================


@dataclass(frozen=True)
class PersistedEvent:
    """Stored attendance event as read back for exports."""

    created_at: datetime  # aware, UTC
    event_type: EventType
    user_name: str
    text: str | None = None


@dataclass
class DailySummaryRow:
    """One user's reconstructed attendance for one local calendar day."""

    date: str  # YYYY-MM-DD, local
    user_name: str
    shift_start_time: str | None  # HH:MM, local
    shift_end_time: str | None
    total_break_minutes: int
    total_worked_minutes: int
    incomplete: bool
