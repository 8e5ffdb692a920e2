"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(
    os.environ.get("ATTENDANCE_DB_PATH", str(PROJECT_ROOT / "data" / "db" / "attendance.db"))
)
OUTPUT_DIR = PROJECT_ROOT / "output"

# =============================================================================
# ATTENDANCE CONFIGURATION
# =============================================================================

TIMEZONE = os.environ.get("TIMEZONE", "Asia/Colombo")

# How long a "what's your status?" prompt waits for the follow-up message
PENDING_STATUS_TTL_SECONDS = 2 * 60

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

EVENT_HEADERS = ["Date", "User", "Event type", "Time (local)", "Notes/status text"]
EVENT_COLUMN_WIDTHS = [12, 24, 14, 12, 50]

SUMMARY_HEADERS = [
    "Date",
    "User",
    "Shift start time",
    "Shift end time",
    "Total break duration (min)",
    "Total worked duration (min)",
    "Incomplete",
]
SUMMARY_COLUMN_WIDTHS = [12, 24, 16, 16, 24, 24, 12]

# =============================================================================
# CHAT PROVIDERS (from environment)
# =============================================================================

VIBER_BOT_TOKEN = os.environ.get("VIBER_BOT_TOKEN", "")
VIBER_API_URL = "https://chatapi.viber.com/pa"

SLACK_SIGNING_SECRET = os.environ.get("SLACK_SIGNING_SECRET", "")
SLACK_BOT_TOKEN = os.environ.get("SLACK_BOT_TOKEN", "")
SLACK_USER_CACHE_TTL_SECONDS = 60 * 60

PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "")
HTTP_TIMEOUT_SECONDS = 15.0

# =============================================================================
# API CONFIGURATION
# =============================================================================

ADMIN_API_KEY = os.environ.get("ADMIN_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "3000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
