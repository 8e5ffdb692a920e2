"""Attendance export endpoints (CSV event log, XLSX workbook)."""

import asyncio
from datetime import date
from pathlib import Path
from typing import Annotated, Callable

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response

from api.dependencies import get_client_ip, get_db_path, verify_api_key
from api.logging import RequestLog, log_request_safely
from api.models.responses import ErrorCodes
from core.config import TIMEZONE
from core.database import fetch_events_between, get_connection
from core.timeutils import local_range_to_utc, parse_iso_date
from models.events import PersistedEvent
from services.reports import CSV_MEDIA_TYPE, XLSX_MEDIA_TYPE, events_to_csv, events_to_xlsx

router = APIRouter(prefix="/export")

RANGE_HINT = "Provide either date=YYYY-MM-DD or from=YYYY-MM-DD&to=YYYY-MM-DD"


def _invalid_range(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "error": message,
            "code": ErrorCodes.INVALID_REQUEST,
            "details": [RANGE_HINT],
        },
    )


def parse_date_range(
    date_str: str | None, from_str: str | None, to_str: str | None
) -> tuple[date, date]:
    """Resolve the query to an inclusive (first, last) local date pair."""
    if date_str:
        from_str = to_str = date_str
    elif not (from_str and to_str):
        raise _invalid_range("Missing date range")

    try:
        first, last = parse_iso_date(from_str), parse_iso_date(to_str)
    except ValueError:
        raise _invalid_range("Invalid date format")

    if first > last:
        raise _invalid_range("'from' must not be after 'to'")
    return first, last


def _load_events(db_path: Path, first: date, last: date) -> list[PersistedEvent]:
    start, end = local_range_to_utc(first, last, TIMEZONE)
    conn = get_connection(db_path)
    try:
        return fetch_events_between(conn, start, end)
    finally:
        conn.close()


async def _export(
    request: Request,
    db_path: Path,
    endpoint: str,
    date_str: str | None,
    from_str: str | None,
    to_str: str | None,
    render: Callable[[list[PersistedEvent], str], bytes],
    media_type: str,
    filename: str,
) -> Response:
    request_log = RequestLog(endpoint=endpoint, method="GET", client_ip=get_client_ip(request))

    try:
        first, last = parse_date_range(date_str, from_str, to_str)

        events = await asyncio.to_thread(_load_events, db_path, first, last)
        content = await asyncio.to_thread(render, events, TIMEZONE)

        request_log.events_exported = len(events)
        request_log.finish(200)

        return Response(
            content=content,
            media_type=media_type,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    except HTTPException as e:
        detail = e.detail if isinstance(e.detail, dict) else {}
        request_log.finish(e.status_code, detail.get("code"), detail.get("error"))
        raise

    except Exception as e:
        request_log.finish(500, ErrorCodes.INTERNAL_ERROR, str(e))
        raise

    finally:
        log_request_safely(db_path, request_log)


@router.get("/csv")
async def export_csv(
    request: Request,
    date_str: Annotated[str | None, Query(alias="date")] = None,
    from_str: Annotated[str | None, Query(alias="from")] = None,
    to_str: Annotated[str | None, Query(alias="to")] = None,
    _api_key: str = Depends(verify_api_key),
    db_path: Path = Depends(get_db_path),
):
    """Raw event log for the requested local dates as CSV."""
    return await _export(
        request, db_path, "/export/csv", date_str, from_str, to_str,
        events_to_csv, CSV_MEDIA_TYPE, "events.csv",
    )


@router.get("/xlsx")
async def export_xlsx(
    request: Request,
    date_str: Annotated[str | None, Query(alias="date")] = None,
    from_str: Annotated[str | None, Query(alias="from")] = None,
    to_str: Annotated[str | None, Query(alias="to")] = None,
    _api_key: str = Depends(verify_api_key),
    db_path: Path = Depends(get_db_path),
):
    """Event log plus daily summary as an Excel workbook."""
    return await _export(
        request, db_path, "/export/xlsx", date_str, from_str, to_str,
        events_to_xlsx, XLSX_MEDIA_TYPE, "events.xlsx",
    )
