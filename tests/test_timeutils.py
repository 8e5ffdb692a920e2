"""Tests for timezone helpers."""

from datetime import date, datetime, timezone

import pytest

from conftest import utc
from core.timeutils import local_range_to_utc, parse_iso_date, to_iso_date, to_local_hhmm, to_zoned


def test_to_iso_date_uses_local_calendar():
    instant = utc("2026-01-01T20:00:00Z")
    assert to_iso_date(instant, "UTC") == "2026-01-01"
    assert to_iso_date(instant, "Asia/Colombo") == "2026-01-02"
    assert to_iso_date(instant, "America/New_York") == "2026-01-01"


def test_to_local_hhmm():
    assert to_local_hhmm(utc("2026-01-01T03:30:00Z"), "Asia/Colombo") == "09:00"
    assert to_local_hhmm(utc("2026-07-01T16:05:00Z"), "America/New_York") == "12:05"


def test_naive_datetimes_are_utc():
    zoned = to_zoned(datetime(2026, 1, 1, 0, 0), "Asia/Colombo")
    assert zoned.hour == 5 and zoned.minute == 30


def test_parse_iso_date():
    assert parse_iso_date("2026-02-28") == date(2026, 2, 28)
    for bad in ["2026-2-28", "28/02/2026", "2026-02-30", ""]:
        with pytest.raises(ValueError):
            parse_iso_date(bad)


def test_local_range_to_utc_covers_whole_local_days():
    start, end = local_range_to_utc(date(2026, 1, 1), date(2026, 1, 2), "Asia/Colombo")
    assert start == datetime(2025, 12, 31, 18, 30, tzinfo=timezone.utc)
    assert end == datetime(2026, 1, 2, 18, 30, tzinfo=timezone.utc)


def test_local_range_to_utc_across_dst_change():
    # US clocks go forward on 2026-03-08, so that day is 23 hours long
    start, end = local_range_to_utc(date(2026, 3, 8), date(2026, 3, 8), "America/New_York")
    assert (end - start).total_seconds() == 23 * 3600
