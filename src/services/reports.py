"""
Report generation for CSV and Excel exports.
"""

import csv
import io
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.config import (
    EVENT_COLUMN_WIDTHS,
    EVENT_HEADERS,
    SUMMARY_COLUMN_WIDTHS,
    SUMMARY_HEADERS,
)
from core.timeutils import to_iso_date, to_local_hhmm
from models.events import DailySummaryRow, PersistedEvent
from services.summary import build_daily_summary

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def event_row(event: PersistedEvent, tz_name: str) -> list[str]:
    """Columns for one event: Date, User, Event type, Time (local), Notes."""
    return [
        to_iso_date(event.created_at, tz_name),
        event.user_name,
        event.event_type.value,
        to_local_hhmm(event.created_at, tz_name),
        event.text or "",
    ]


def summary_row(row: DailySummaryRow) -> list:
    return [
        row.date,
        row.user_name,
        row.shift_start_time or "",
        row.shift_end_time or "",
        row.total_break_minutes,
        row.total_worked_minutes,
        "Yes" if row.incomplete else "No",
    ]


def sort_events(events: list[PersistedEvent]) -> list[PersistedEvent]:
    return sorted(events, key=lambda e: e.created_at)


# =============================================================================
# CSV
# =============================================================================


def events_to_csv(events: list[PersistedEvent], tz_name: str) -> bytes:
    """Render the raw event log as UTF-8 CSV, oldest first."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EVENT_HEADERS)
    for event in sort_events(events):
        writer.writerow(event_row(event, tz_name))
    return buffer.getvalue().encode("utf-8")


# =============================================================================
# EXCEL
# =============================================================================


def write_excel_sheet(ws, headers: list[str], widths: list[int], rows: list[list]):
    """Write bold headers, fixed column widths and data rows to a worksheet."""
    for col_idx, (header, width) in enumerate(zip(headers, widths), start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    for row_idx, row_data in enumerate(rows, start=2):
        for col_idx, value in enumerate(row_data, start=1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            # Names and notes come from chat users: "=..." stays text, not a formula
            if isinstance(value, str):
                cell.data_type = "s"


def build_workbook(events: list[PersistedEvent], tz_name: str) -> Workbook:
    """
    Create the export workbook.

    Sheet 1: "Events" - one row per event in time order
    Sheet 2: "Daily Summary" - one row per user per local day
    """
    wb = Workbook()

    ws_events = wb.active
    ws_events.title = "Events"
    write_excel_sheet(
        ws_events,
        EVENT_HEADERS,
        EVENT_COLUMN_WIDTHS,
        [event_row(e, tz_name) for e in sort_events(events)],
    )

    ws_summary = wb.create_sheet(title="Daily Summary")
    write_excel_sheet(
        ws_summary,
        SUMMARY_HEADERS,
        SUMMARY_COLUMN_WIDTHS,
        [summary_row(r) for r in build_daily_summary(events, tz_name)],
    )

    return wb


def events_to_xlsx(events: list[PersistedEvent], tz_name: str) -> bytes:
    """Render the export workbook to bytes (for API usage)."""
    buffer = io.BytesIO()
    build_workbook(events, tz_name).save(buffer)
    buffer.seek(0)
    return buffer.getvalue()


def create_summary_excel_report(events: list[PersistedEvent], tz_name: str, output_path: Path):
    """Write the export workbook to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    build_workbook(events, tz_name).save(str(output_path))
    print(f"Saved Excel report to: {output_path}")
