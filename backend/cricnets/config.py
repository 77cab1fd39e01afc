"""
Static booking defaults.

Read once from the environment (a .env file is honoured). These are the fallback
values; live overrides stored in the system_configs table take precedence per key
(see cricnets.services.config_resolver).
"""
import os
from dataclasses import dataclass
from datetime import time
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

SLOT_DURATION_KEY = "slot_duration_minutes"
BUSINESS_HOURS_START_KEY = "business_hours_start"
BUSINESS_HOURS_END_KEY = "business_hours_end"
OPERATOR_COUNT_KEY = "operator_count"

CONFIG_KEYS = (SLOT_DURATION_KEY, BUSINESS_HOURS_START_KEY, BUSINESS_HOURS_END_KEY, OPERATOR_COUNT_KEY)


@dataclass(frozen=True)
class BookingDefaults:
    slot_duration_minutes: int = 30
    business_hours_start: time = time(7, 0)
    business_hours_end: time = time(23, 0)
    operator_count: int = 2
    lock_timeout_seconds: float = 10.0


def _env_time(name: str, default: time) -> time:
    raw = os.getenv(name)
    if not raw:
        return default
    return time.fromisoformat(raw.strip())


@lru_cache
def get_booking_defaults() -> BookingDefaults:
    """Build the static defaults from BOOKING_* environment variables."""
    base = BookingDefaults()
    return BookingDefaults(
        slot_duration_minutes=int(os.getenv("BOOKING_SLOT_DURATION_MINUTES", base.slot_duration_minutes)),
        business_hours_start=_env_time("BOOKING_BUSINESS_HOURS_START", base.business_hours_start),
        business_hours_end=_env_time("BOOKING_BUSINESS_HOURS_END", base.business_hours_end),
        operator_count=int(os.getenv("BOOKING_OPERATOR_COUNT", base.operator_count)),
        lock_timeout_seconds=float(os.getenv("BOOKING_LOCK_TIMEOUT_SECONDS", base.lock_timeout_seconds)),
    )
