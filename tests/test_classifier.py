"""Tests for chat message classification."""

import pytest

from core.classifier import BUTTON_LABELS, classify, detect_source, normalize
from models.events import (
    EventResult,
    EventType,
    MenuResult,
    NoMatchResult,
    StatusPendingResult,
)


def test_button_labels():
    assert classify("🟢 Start shift", "button") == EventResult(EventType.SHIFT_START)
    assert classify("☕ Break start", "button") == EventResult(EventType.BREAK_START)
    assert classify("✅ Break end", "button") == EventResult(EventType.BREAK_END)
    assert classify("🔴 End shift", "button") == EventResult(EventType.SHIFT_END)


def test_status_button_waits_for_follow_up():
    assert classify("📝 Status update", "button") == StatusPendingResult()


def test_every_menu_label_is_recognised():
    for label in BUTTON_LABELS:
        assert not isinstance(classify(label, "button"), NoMatchResult)


def test_slash_commands():
    assert classify("/start", "command") == EventResult(EventType.SHIFT_START)
    assert classify("/break_start", "command") == EventResult(EventType.BREAK_START)
    assert classify("/break_end", "command") == EventResult(EventType.BREAK_END)
    assert classify("/end", "command") == EventResult(EventType.SHIFT_END)


def test_slash_command_name_is_normalized():
    assert classify("  /START  ", "command") == EventResult(EventType.SHIFT_START)


def test_status_command_with_text_keeps_case_and_spacing():
    result = classify("/status Working on X", "command")
    assert result == EventResult(EventType.STATUS, text="Working on X")

    result = classify("/status   Loading  BAY 2 ", "command")
    assert result.text == "Loading  BAY 2"


def test_status_command_without_text_is_pending():
    assert classify("/status", "command") == StatusPendingResult()


def test_unknown_command():
    assert classify("/dance", "command") == NoMatchResult()
    assert classify("/", "command") == NoMatchResult()


def test_menu():
    assert classify("menu", "unknown") == MenuResult()
    assert classify("  MENU ", "free_text") == MenuResult()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Break start", EventType.BREAK_START),
        ("Break end", EventType.BREAK_END),
        ("start", EventType.SHIFT_START),
        ("Started", EventType.SHIFT_START),
        ("break", EventType.BREAK_START),
        ("end", EventType.SHIFT_END),
        ("clock in", EventType.SHIFT_START),
        ("Clock   OUT", EventType.SHIFT_END),
        ("login", EventType.SHIFT_START),
        ("logout", EventType.SHIFT_END),
        ("lunch", EventType.BREAK_START),
        ("back", EventType.BREAK_END),
        ("resume", EventType.BREAK_END),
        ("ended", EventType.SHIFT_END),
    ],
)
def test_free_text_synonyms(text, expected):
    assert classify(text, "free_text") == EventResult(expected)


def test_synonyms_match_as_substrings():
    assert classify("going on lunch now", "free_text") == EventResult(EventType.BREAK_START)
    assert classify("I'm back", "free_text") == EventResult(EventType.BREAK_END)


def test_substring_matching_ignores_word_boundaries():
    # "team" contains "tea", and break synonyms are scanned before shift ones
    assert classify("start team meeting", "free_text") == EventResult(EventType.BREAK_START)
    assert classify("on my way in", "free_text") == EventResult(EventType.SHIFT_START)


def test_synonyms_also_apply_to_unknown_source():
    assert classify("break", "unknown") == EventResult(EventType.BREAK_START)


@pytest.mark.parametrize("source", ["command", "button"])
def test_synonyms_never_apply_to_commands_or_buttons(source):
    assert classify("start", source) == NoMatchResult()
    assert classify("break end", source) == NoMatchResult()
    assert classify("Status update going out", source) == NoMatchResult()


def test_status_update_phrase_keeps_remainder_case():
    result = classify("Status update going out for a while", "free_text")
    assert result == EventResult(EventType.STATUS, text="going out for a while")


def test_status_phrase_with_separator():
    assert classify("status: At the Depot", "free_text") == EventResult(
        EventType.STATUS, text="At the Depot"
    )


def test_bare_status_phrase_is_pending():
    assert classify("status", "free_text") == StatusPendingResult()
    assert classify("Status update", "free_text") == StatusPendingResult()


def test_status_prefix_inside_a_word_is_not_a_status():
    # "statuses" is not the "status" trigger; falls through to synonyms/no match
    assert not isinstance(classify("statuses", "free_text"), StatusPendingResult)


@pytest.mark.parametrize("text", ["", "   ", None])
def test_empty_input(text):
    assert classify(text, "free_text") == NoMatchResult()


def test_unrecognised_text():
    assert classify("hello there", "free_text") == NoMatchResult()


def test_only_status_events_carry_text():
    with pytest.raises(ValueError):
        EventResult(EventType.SHIFT_START, text="oops")


def test_every_result_is_one_variant():
    variants = (EventResult, MenuResult, StatusPendingResult, NoMatchResult)
    for text in ["x", "menu", "/status", "/start", "start", "📝 Status update", "??"]:
        result = classify(text, "free_text")
        assert sum(isinstance(result, v) for v in variants) == 1
        if isinstance(result, NoMatchResult):
            assert not hasattr(result, "text")


def test_normalize():
    assert normalize("  Break \t  START \n") == "break start"


def test_detect_source():
    assert detect_source("/start") == "command"
    assert detect_source("  /status hi") == "command"
    assert detect_source("🟢 Start shift") == "button"
    assert detect_source("Menu") == "unknown"
    assert detect_source("started") == "free_text"
    assert detect_source(None) == "free_text"
