"""
Message classification: chat text to canonical attendance events.

Rules are applied in a fixed priority order and the first match wins:
slash commands, the literal "menu", reply-button captions, then (for typed
text only) the status-update phrase and the free-text synonym table.
"""

import re

from models.events import (
    CommandSource,
    EventResult,
    EventType,
    MenuResult,
    NoMatchResult,
    ParseResult,
    StatusPendingResult,
)

# =============================================================================
# LOOKUP TABLES
# =============================================================================

# Slash command name (without the slash) -> event type.
# "status" is handled separately because it may carry inline text.
COMMANDS: dict[str, EventType] = {
    "start": EventType.SHIFT_START,
    "break_start": EventType.BREAK_START,
    "break_end": EventType.BREAK_END,
    "end": EventType.SHIFT_END,
    "status": EventType.STATUS,
}

# Reply button captions as shown to users, in menu order.
BUTTON_LABELS: list[str] = [
    "🟢 Start shift",
    "☕ Break start",
    "✅ Break end",
    "🔴 End shift",
    "📝 Status update",
]

BUTTONS: dict[str, EventType] = {
    "🟢 start shift": EventType.SHIFT_START,
    "☕ break start": EventType.BREAK_START,
    "✅ break end": EventType.BREAK_END,
    "🔴 end shift": EventType.SHIFT_END,
    "📝 status update": EventType.STATUS,
}

# Scanned top to bottom, words in order; the first word contained in the
# normalized text wins. Matching is plain substring containment, so entries
# whose words contain shorter words of other entries ("break start" vs
# "start", "break end" vs "break") must come first. No word boundaries either:
# "start team meeting" hits "tea" before "start" and is a BREAK_START.
FREE_TEXT_SYNONYMS: list[tuple[EventType, list[str]]] = [
    (EventType.BREAK_END, ["break end", "back", "resume"]),
    (EventType.BREAK_START, ["break start", "break", "lunch", "pause", "tea"]),
    (EventType.SHIFT_START, ["clock in", "started", "start", "login", "in"]),
    (EventType.SHIFT_END, ["clock out", "ended", "end", "logout", "out"]),
]

# "status update <text>", "status: <text>", "Status - <text>" ...
# Matched on the original text so the remainder keeps its casing.
STATUS_PHRASE = re.compile(
    r"^status(?:\s+update)?(?=$|[\s:\-])[\s:\-]*(?P<rest>.*)$",
    re.IGNORECASE | re.DOTALL,
)

_FREE_TEXT_SOURCES = {"free_text", "unknown"}


# =============================================================================
# CLASSIFICATION
# =============================================================================


def normalize(text: str) -> str:
    """Trim, collapse whitespace runs to one space, lowercase."""
    return " ".join(text.split()).lower()


def detect_source(message: str | None) -> CommandSource:
    """Work out how an inbound message arrived from its text alone."""
    raw = (message or "").strip()
    if raw.startswith("/"):
        return "command"
    normalized = normalize(raw)
    if normalized in BUTTONS:
        return "button"
    if normalized == "menu":
        return "unknown"
    return "free_text"


def _classify_command(raw: str) -> ParseResult:
    parts = raw.split(maxsplit=1)
    command = normalize(parts[0])[1:]
    tail = parts[1].strip() if len(parts) > 1 else ""

    event_type = COMMANDS.get(command)
    if event_type is None:
        return NoMatchResult()
    if event_type is EventType.STATUS:
        if tail:
            return EventResult(EventType.STATUS, text=tail)
        return StatusPendingResult()
    return EventResult(event_type)


def _classify_status_phrase(raw: str) -> ParseResult | None:
    match = STATUS_PHRASE.match(raw)
    if not match:
        return None
    rest = match.group("rest").strip()
    if rest:
        return EventResult(EventType.STATUS, text=rest)
    return StatusPendingResult()


def _classify_synonyms(normalized: str) -> ParseResult | None:
    for event_type, words in FREE_TEXT_SYNONYMS:
        for word in words:
            if normalized == word or word in normalized:
                return EventResult(event_type)
    return None


def classify(message: str | None, source: CommandSource) -> ParseResult:
    """
    Classify one inbound chat message.

    Args:
        message: Raw message text (may be empty).
        source: How the message arrived. Free-text rules only apply to
            "free_text" and "unknown" so that commands and button taps are
            never interpreted twice.

    Returns:
        Exactly one ParseResult variant; NoMatchResult for anything unrecognised.
    """
    raw = (message or "").strip()
    if not raw:
        return NoMatchResult()

    if raw.startswith("/"):
        return _classify_command(raw)

    normalized = normalize(raw)

    if normalized == "menu":
        return MenuResult()

    button = BUTTONS.get(normalized)
    if button is not None:
        if button is EventType.STATUS:
            return StatusPendingResult()
        return EventResult(button)

    if source in _FREE_TEXT_SOURCES:
        result = _classify_status_phrase(raw)
        if result is None:
            result = _classify_synonyms(normalized)
        if result is not None:
            return result

    return NoMatchResult()
