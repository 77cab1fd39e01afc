"""
Effective scheduling configuration.

Two-level resolution, per parameter: a live override (system_configs table) wins,
otherwise the static default from cricnets.config applies. Parameters resolve
independently; a bad override for one key never affects another.
"""
import logging
from dataclasses import dataclass
from datetime import time
from typing import Any, Callable, Dict, Optional

from sqlmodel import Session

from cricnets.config import (
    BUSINESS_HOURS_END_KEY,
    BUSINESS_HOURS_START_KEY,
    OPERATOR_COUNT_KEY,
    SLOT_DURATION_KEY,
    BookingDefaults,
)
from cricnets.models.system_config import SystemConfig
from cricnets.utils.time_ranges import format_hhmm, minutes_since_midnight

logger = logging.getLogger(__name__)

OverrideLookup = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class EffectiveConfig:
    slot_duration_minutes: int
    business_hours_start: time
    business_hours_end: time
    operator_count: int


def _parse_positive_int(raw: str) -> int:
    value = int(raw.strip())
    if value <= 0:
        raise ValueError(f"expected a positive integer, got {value}")
    return value


def _parse_non_negative_int(raw: str) -> int:
    value = int(raw.strip())
    if value < 0:
        raise ValueError(f"expected a non-negative integer, got {value}")
    return value


def _parse_time(raw: str) -> time:
    return time.fromisoformat(raw.strip())


_PARSERS: Dict[str, Callable[[str], Any]] = {
    SLOT_DURATION_KEY: _parse_positive_int,
    BUSINESS_HOURS_START_KEY: _parse_time,
    BUSINESS_HOURS_END_KEY: _parse_time,
    OPERATOR_COUNT_KEY: _parse_non_negative_int,
}


def parse_config_value(key: str, raw: str) -> Any:
    """Parse an override string for a known key. Raises KeyError / ValueError."""
    return _PARSERS[key](raw)


def resolve_parameter(lookup: OverrideLookup, key: str, default: Any) -> Any:
    raw = lookup(key)
    if raw is None:
        return default
    try:
        return parse_config_value(key, raw)
    except ValueError as exc:
        logger.warning(f"Ignoring invalid config override {key}={raw!r}: {exc}")
        return default


def resolve_config(lookup: OverrideLookup, defaults: BookingDefaults) -> EffectiveConfig:
    return EffectiveConfig(
        slot_duration_minutes=resolve_parameter(lookup, SLOT_DURATION_KEY, defaults.slot_duration_minutes),
        business_hours_start=resolve_parameter(lookup, BUSINESS_HOURS_START_KEY, defaults.business_hours_start),
        business_hours_end=resolve_parameter(lookup, BUSINESS_HOURS_END_KEY, defaults.business_hours_end),
        operator_count=resolve_parameter(lookup, OPERATOR_COUNT_KEY, defaults.operator_count),
    )


def check_config_consistency(config: EffectiveConfig) -> None:
    """
    Raise ValueError when the values cannot produce a bookable grid.

    Booking starts are aligned from midnight while the grid steps from the business-hours
    start, so the start must itself sit on a slot boundary.
    """
    start = minutes_since_midnight(config.business_hours_start)
    end = minutes_since_midnight(config.business_hours_end)
    if start >= end:
        raise ValueError(
            f"business hours start {format_hhmm(config.business_hours_start)} must be before "
            f"end {format_hhmm(config.business_hours_end)}"
        )
    if start % config.slot_duration_minutes != 0 or config.business_hours_start.second:
        raise ValueError(
            f"business hours start {format_hhmm(config.business_hours_start)} is not on a "
            f"{config.slot_duration_minutes}-minute boundary"
        )


def no_overrides(key: str) -> Optional[str]:
    return None


class SessionConfigStore:
    """Read side of the override store, backed by the system_configs table."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, key: str) -> Optional[str]:
        row = self.session.get(SystemConfig, key)
        return row.config_value if row else None
