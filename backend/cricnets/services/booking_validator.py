from datetime import datetime

from cricnets.services.config_resolver import EffectiveConfig
from cricnets.services.errors import BookingValidationError
from cricnets.utils.time_ranges import format_hhmm, minutes_since_midnight


def validate_booking_time(start: datetime, duration_minutes: int, config: EffectiveConfig, now: datetime) -> None:
    """
    Reject a (start, duration) pair that is not bookable.

    Checks run in order and the first failure is raised:
    1. start is strictly in the future
    2. duration is a positive multiple of the slot duration
    3. the whole range sits inside business hours (same day)
    4. start sits on the slot grid, measured from midnight

    The grid itself steps from business-hours start, so that start must lie on a slot
    boundary for the two to agree (see check_config_consistency).

    Raises:
        BookingValidationError: naming the violated constraint
    """
    slot = config.slot_duration_minutes

    if start <= now:
        raise BookingValidationError("Cannot book a session in the past.")

    if duration_minutes <= 0 or duration_minutes % slot != 0:
        raise BookingValidationError(f"Duration must be a multiple of {slot} minutes.")

    start_minute = minutes_since_midnight(start)
    if (
        start_minute < minutes_since_midnight(config.business_hours_start)
        or start_minute + duration_minutes > minutes_since_midnight(config.business_hours_end)
    ):
        raise BookingValidationError(
            f"Bookings are only available from {format_hhmm(config.business_hours_start)} "
            f"to {format_hhmm(config.business_hours_end)}."
        )

    if start_minute % slot != 0 or start.second or start.microsecond:
        raise BookingValidationError(f"Bookings must align to {slot}-minute boundaries.")
