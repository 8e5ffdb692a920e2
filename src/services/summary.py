"""
Daily attendance summaries reconstructed from the event log.
"""

import math
from collections import defaultdict
from datetime import datetime

from core.timeutils import to_iso_date, to_local_hhmm
from models.events import DailySummaryRow, EventType, PersistedEvent

# Tie-break for events sharing an instant, so input order never matters.
# A break that ends as another starts closes first.
EVENT_ORDER = {
    EventType.SHIFT_START: 0,
    EventType.BREAK_END: 1,
    EventType.BREAK_START: 2,
    EventType.SHIFT_END: 3,
    EventType.STATUS: 4,
}


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, rounded half up, never negative."""
    minutes = (end - start).total_seconds() / 60
    return max(0, math.floor(minutes + 0.5))


def clamp_interval(
    start: datetime, end: datetime, lower: datetime, upper: datetime
) -> tuple[datetime, datetime] | None:
    """Clip [start, end] to [lower, upper]; None if nothing overlaps."""
    start = max(start, lower)
    end = min(end, upper)
    if end <= start:
        return None
    return start, end


def pair_breaks(events: list[PersistedEvent]) -> list[tuple[datetime, datetime]]:
    """
    Pair BREAK_START/BREAK_END into closed intervals.

    Events must already be sorted. A BREAK_END with no open break is ignored,
    a trailing unmatched BREAK_START is dropped, and a repeated BREAK_START
    moves the open break's start forward.
    """
    intervals = []
    open_break = None
    for event in events:
        if event.event_type is EventType.BREAK_START:
            open_break = event.created_at
        elif event.event_type is EventType.BREAK_END and open_break is not None:
            intervals.append((open_break, event.created_at))
            open_break = None
    return intervals


def summarize_day(
    date_str: str, user_name: str, events: list[PersistedEvent], tz_name: str
) -> DailySummaryRow:
    """Build the summary row for one user's events on one local day."""
    events = sorted(events, key=lambda e: (e.created_at, EVENT_ORDER[e.event_type]))

    shift_start = next(
        (e.created_at for e in events if e.event_type is EventType.SHIFT_START), None
    )
    shift_end = next(
        (e.created_at for e in reversed(events) if e.event_type is EventType.SHIFT_END), None
    )

    total_break = 0
    total_worked = 0
    if shift_start is not None and shift_end is not None:
        for start, end in pair_breaks(events):
            clamped = clamp_interval(start, end, shift_start, shift_end)
            if clamped is None:
                continue
            total_break += minutes_between(*clamped)
        total_worked = max(0, minutes_between(shift_start, shift_end) - total_break)

    return DailySummaryRow(
        date=date_str,
        user_name=user_name,
        shift_start_time=to_local_hhmm(shift_start, tz_name) if shift_start else None,
        shift_end_time=to_local_hhmm(shift_end, tz_name) if shift_end else None,
        total_break_minutes=total_break,
        total_worked_minutes=total_worked,
        incomplete=shift_start is None or shift_end is None,
    )


def build_daily_summary(events: list[PersistedEvent], tz_name: str) -> list[DailySummaryRow]:
    """
    Summarize events per local calendar day and user.

    Rows missing a shift start or end are still emitted, flagged incomplete
    with zero durations.

    Returns:
        Rows sorted by date, then user name.
    """
    groups: dict[tuple[str, str], list[PersistedEvent]] = defaultdict(list)
    for event in events:
        groups[(to_iso_date(event.created_at, tz_name), event.user_name)].append(event)

    return [
        summarize_day(date_str, user_name, groups[(date_str, user_name)], tz_name)
        for date_str, user_name in sorted(groups)
    ]
