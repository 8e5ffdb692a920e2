"""
Timezone-aware date and time helpers shared by exports and summaries.
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


def to_zoned(instant: datetime, tz_name: str) -> datetime:
    """Convert an instant to the given zone. Naive datetimes are taken as UTC."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(ZoneInfo(tz_name))


def to_iso_date(instant: datetime, tz_name: str) -> str:
    """Local calendar date as YYYY-MM-DD."""
    return to_zoned(instant, tz_name).date().isoformat()


def to_local_hhmm(instant: datetime, tz_name: str) -> str:
    """Local 24h clock time as HH:MM."""
    return to_zoned(instant, tz_name).strftime("%H:%M")


def parse_iso_date(date_str: str) -> date:
    """Parse a strict YYYY-MM-DD string."""
    if len(date_str) != 10:
        raise ValueError(f"Expected YYYY-MM-DD, got '{date_str}'")
    return datetime.strptime(date_str, "%Y-%m-%d").date()


def local_range_to_utc(from_date: date, to_date: date, tz_name: str) -> tuple[datetime, datetime]:
    """
    UTC window covering whole local days.

    Returns:
        Tuple of (start, end) where start is local midnight of from_date and
        end is local midnight after to_date (exclusive), both in UTC.
    """
    tz = ZoneInfo(tz_name)
    start = datetime.combine(from_date, time.min, tzinfo=tz)
    end = datetime.combine(to_date + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
