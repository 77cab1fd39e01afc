from datetime import time

import pytest

from cricnets.services.booking_validator import validate_booking_time
from cricnets.services.config_resolver import EffectiveConfig
from cricnets.services.errors import BookingValidationError
from tests.conftest import NOW, at

CONFIG = EffectiveConfig(
    slot_duration_minutes=30,
    business_hours_start=time(7, 0),
    business_hours_end=time(23, 0),
    operator_count=2,
)


def test_valid_request_passes():
    validate_booking_time(at(10, 0), 30, CONFIG, NOW)
    validate_booking_time(at(7, 0), 60, CONFIG, NOW)
    validate_booking_time(at(22, 30), 30, CONFIG, NOW)


@pytest.mark.parametrize(
    "start, duration, message",
    [
        (at(7, 0, day=NOW.date()), 30, "Cannot book a session in the past."),
        (NOW, 30, "Cannot book a session in the past."),
        (at(10, 0), 45, "Duration must be a multiple of 30 minutes."),
        (at(10, 0), 0, "Duration must be a multiple of 30 minutes."),
        (at(10, 0), -30, "Duration must be a multiple of 30 minutes."),
        (at(6, 30), 30, "Bookings are only available from 07:00 to 23:00."),
        (at(23, 0), 30, "Bookings are only available from 07:00 to 23:00."),
        (at(22, 30), 60, "Bookings are only available from 07:00 to 23:00."),
        (at(10, 15), 30, "Bookings must align to 30-minute boundaries."),
    ],
)
def test_rejections_name_the_violated_rule(start, duration, message):
    with pytest.raises(BookingValidationError) as exc_info:
        validate_booking_time(start, duration, CONFIG, NOW)
    assert str(exc_info.value) == message


def test_seconds_off_the_grid_are_misaligned():
    with pytest.raises(BookingValidationError, match="align"):
        validate_booking_time(at(10, 0).replace(second=30), 30, CONFIG, NOW)


def test_first_failed_check_wins():
    # Both in the past and misaligned: the past check runs first
    with pytest.raises(BookingValidationError, match="past"):
        validate_booking_time(at(7, 15, day=NOW.date()), 45, CONFIG, NOW)

    # Bad duration and misaligned: duration check runs before alignment
    with pytest.raises(BookingValidationError, match="Duration"):
        validate_booking_time(at(10, 15), 45, CONFIG, NOW)


def test_range_running_past_midnight_is_outside_business_hours():
    late = EffectiveConfig(30, time(7, 0), time(23, 30), 2)
    with pytest.raises(BookingValidationError, match="only available"):
        validate_booking_time(at(23, 0), 120, late, NOW)


def test_alignment_uses_configured_slot():
    hourly = EffectiveConfig(60, time(7, 0), time(23, 0), 2)
    with pytest.raises(BookingValidationError, match="60-minute"):
        validate_booking_time(at(10, 30), 60, hourly, NOW)
    validate_booking_time(at(10, 0), 120, hourly, NOW)
