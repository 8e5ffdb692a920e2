"""Health check endpoint."""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_db_path
from api.models.responses import HealthResponse
from core.config import API_VERSION
from core.database import get_connection


def check_database(db_path: Path) -> str | None:
    """Return None if the events table is readable, else the reason it isn't."""
    # get_connection would create an empty file
    if not db_path.exists():
        return "Database not found"
    try:
        conn = get_connection(db_path)
        try:
            conn.execute("SELECT 1 FROM events LIMIT 1").fetchall()
        finally:
            conn.close()
    except sqlite3.Error as e:
        return f"Database unavailable: {e}"
    return None


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(db_path: Path = Depends(get_db_path)):
    """
    Health check endpoint for monitoring.

    Returns 200 if the event store is readable, 503 otherwise.
    """
    error = check_database(db_path)
    timestamp = datetime.now(timezone.utc).isoformat()

    if error:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                database_available=False,
                timestamp=timestamp,
                error=error,
            ).model_dump(),
        )

    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        database_available=True,
        timestamp=timestamp,
    )
