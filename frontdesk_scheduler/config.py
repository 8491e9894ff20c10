"""Runtime settings read from the environment (and an optional .env file)."""
from __future__ import annotations
import logging
import os
from dotenv import load_dotenv

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL", "http://localhost:54321").rstrip("/")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")
FRONTDESK_API_KEY = os.getenv("FRONTDESK_API_KEY", "")

CLINIC_TIMEZONE = os.getenv("CLINIC_TIMEZONE", "UTC")
CLINIC_OPENS_AT = os.getenv("CLINIC_OPENS_AT", "09:00")
CLINIC_CLOSES_AT = os.getenv("CLINIC_CLOSES_AT", "17:00")

SLOT_GRANULARITY_MINUTES = int(os.getenv("SLOT_GRANULARITY_MINUTES", "30"))
DEFAULT_DURATION_MINUTES = int(os.getenv("DEFAULT_DURATION_MINUTES", "30"))

# room overlap is advisory unless this is switched on
ENFORCE_ROOM_CONFLICTS = os.getenv("ENFORCE_ROOM_CONFLICTS", "0") == "1"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def min_duration_minutes() -> int:
    """Length given to bookings with no usable end; falls back to 30 when unset or non-positive."""
    return DEFAULT_DURATION_MINUTES if DEFAULT_DURATION_MINUTES > 0 else 30


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
