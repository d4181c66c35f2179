"""
Configuration constants for the Club Field Scheduler.
All configurable settings are defined here.
"""

from datetime import time
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _parse_clock(value: str, default: time) -> time:
    """Parse an HH:MM environment value, falling back to the default."""
    if not value:
        return default
    try:
        hours, minutes = value.strip().split(":")
        return time(int(hours), int(minutes))
    except ValueError:
        raise ValueError(f"Invalid clock value '{value}', expected HH:MM")


# Supabase Configuration
SUPABASE_URL = os.getenv("SUPABASE_URL", "http://localhost:54321")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", os.getenv("SUPABASE_ANON_KEY", ""))

# Store table names
TABLE_PERMITS = "permits"
TABLE_MATCHES = "matches"
TABLE_BLACKOUTS = "blackouts"
TABLE_AVAILABILITY = "availability"
TABLE_TEAMS = "teams"
TABLE_FIELDS = "fields"

# Redis connection URL for the Celery broker/backend
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Frontend origins allowed by CORS (comma separated)
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Club local timezone; aware instants from the store are converted to it
CLUB_TIMEZONE = os.getenv("CLUB_TIMEZONE", "America/Los_Angeles")

# Slot scan rules
SLOT_STEP_MINUTES = int(os.getenv("SLOT_STEP_MINUTES", "15"))
DAY_WINDOW_START = _parse_clock(os.getenv("DAY_WINDOW_START"), time(6, 0))   # 6:00 AM, inclusive
DAY_WINDOW_END = _parse_clock(os.getenv("DAY_WINDOW_END"), time(22, 0))      # 10:00 PM, exclusive
SLOT_FORMAT = "%H:%M"

# Match duration rules
DEFAULT_MATCH_DURATION_MINUTES = 90
MIN_MATCH_DURATION_MINUTES = 30
MAX_MATCH_DURATION_MINUTES = 180

# Sentinels used by the stores
CLUB_WIDE_SCOPE = "ALL"      # Blackout scope that applies to every team
TEMPORARY_ID = "TEMP"        # Opponent/venue not backed by a store record
EXTERNAL_FIELD_ID = "EXTERNAL"  # Away games played off club fields

# Validation error messages
ERROR_NO_PERMIT = "no permit for field/time"
ERROR_FIELD_CONFLICT = "field conflict with match {match_id}"
ERROR_TEAM_BLACKOUT = "team blackout conflict"
ERROR_INVALID_PROPOSAL = "invalid proposal"

# Celery task limits
TASK_TIME_LIMIT_SECONDS = 120
TASK_SOFT_TIME_LIMIT_SECONDS = 100
