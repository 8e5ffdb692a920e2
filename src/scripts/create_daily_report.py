#!/usr/bin/env python3
"""
Create the attendance workbook (event log + daily summary) for a date range.

Reads stored chat events, rebuilds per-user daily summaries and writes an
Excel file.

Usage:
    python src/scripts/create_daily_report.py --date 2026-01-15
    python src/scripts/create_daily_report.py --from 2026-01-01 --to 2026-01-31
"""

import argparse
import sys
from datetime import date
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH, OUTPUT_DIR, TIMEZONE
from core.database import fetch_events_between, get_connection
from core.timeutils import local_range_to_utc, parse_iso_date
from services.reports import create_summary_excel_report
from services.summary import build_daily_summary


# =============================================================================
# DATE UTILITIES
# =============================================================================


def get_report_date_range(
    date_str: str | None, from_str: str | None, to_str: str | None
) -> tuple[date, date]:
    """
    Resolve command-line dates to an inclusive range.

    Args:
        date_str: Single day (YYYY-MM-DD). Takes precedence.
        from_str / to_str: Range bounds (YYYY-MM-DD). A missing bound
            defaults to the other one; both missing means today.

    Returns:
        Tuple of (first_date, last_date)
    """
    if date_str:
        day = parse_iso_date(date_str)
        return day, day

    first = parse_iso_date(from_str) if from_str else None
    last = parse_iso_date(to_str) if to_str else None
    if first is None and last is None:
        first = last = date.today()
    first = first or last
    last = last or first

    if first > last:
        raise ValueError(f"--from {first} is after --to {last}")
    return first, last


def default_output_path(first: date, last: date) -> Path:
    name = f"attendance_{first:%Y_%m_%d}"
    if last != first:
        name += f"_to_{last:%Y_%m_%d}"
    return OUTPUT_DIR / "reports" / "daily" / f"{name}.xlsx"


# =============================================================================
# MAIN
# =============================================================================


def main(
    date_str: str | None = None,
    from_str: str | None = None,
    to_str: str | None = None,
    output: str | None = None,
    db_path: Path = DB_PATH,
) -> Path:
    """Main entry point."""
    # 1. Calculate date range
    first, last = get_report_date_range(date_str, from_str, to_str)
    print(f"Generating attendance report for {first} to {last} ({TIMEZONE})")

    # 2. Load events for the local days
    start, end = local_range_to_utc(first, last, TIMEZONE)
    conn = get_connection(db_path)
    try:
        events = fetch_events_between(conn, start, end)
    finally:
        conn.close()
    print(f"Total events: {len(events)}")

    # 3. Summaries, for the console
    rows = build_daily_summary(events, TIMEZONE)
    incomplete = [r for r in rows if r.incomplete]
    print(f"Daily rows: {len(rows)} ({len(incomplete)} incomplete)")
    for row in incomplete:
        print(f"  - {row.date} {row.user_name}: missing shift start or end")

    # 4. Write workbook
    output_path = Path(output) if output else default_output_path(first, last)
    create_summary_excel_report(events, TIMEZONE, output_path)

    print("\nDone!")
    return output_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate attendance report")
    parser.add_argument("--date", help="Single day (YYYY-MM-DD).")
    parser.add_argument(
        "--from", dest="from_date", help="First day (YYYY-MM-DD). Defaults to --to, or today."
    )
    parser.add_argument(
        "--to", dest="to_date", help="Last day (YYYY-MM-DD). Defaults to --from, or today."
    )
    parser.add_argument("--output", help="Output .xlsx path.")
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()

    main(args.date, args.from_date, args.to_date, args.output)
