"""
Half-open time range helpers shared by the slot grid, validator and conflict checks.

All booking times are naive local datetimes; ranges are [start, end).
"""
from datetime import datetime, time


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """True when [start_a, end_a) and [start_b, end_b) share any instant."""
    return start_a < end_b and end_a > start_b


def minutes_since_midnight(value) -> int:
    """Minutes since midnight for a time or datetime (seconds ignored)."""
    return value.hour * 60 + value.minute


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def to_naive_local(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through unchanged."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
