"""
Booking status transitions.

PENDING -> CANCELLED | DONE. Both targets are terminal. Re-applying the status a
booking already has is a no-op; any other move out of a terminal status is refused.
Cancellation keeps the row (status write), so cancelled bookings stay in history and
are ignored by every overlap check.
"""
from cricnets.models.booking import TERMINAL_STATUSES, Booking, BookingStatus
from cricnets.services.errors import StateTransitionError


def validate_status_transition(current: BookingStatus, new: BookingStatus) -> None:
    if new == BookingStatus.PENDING:
        raise StateTransitionError("Cannot revert a booking to PENDING")
    if current in TERMINAL_STATUSES and current != new:
        raise StateTransitionError(f"{current.value} is terminal; cannot change to {new.value}")


def apply_status(booking: Booking, new: BookingStatus) -> bool:
    """Move booking to the new status. Returns False when it already had it."""
    current = BookingStatus(booking.status)
    if current == new:
        return False
    validate_status_transition(current, new)
    booking.status = new
    return True
