"""
Booking engine errors.

Raised by the service layer and translated to HTTP responses by the routes
(see cricnets.utils.http_errors). Each error carries a stable code.
"""
from typing import List, Optional


class BookingError(Exception):
    """Base class for all booking engine errors."""

    code = "BOOKING_ERROR"
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        # Filled by multi-slot creation: groups committed before this error aborted the run
        self.committed: List = []


class BookingValidationError(BookingError):
    """Malformed or out-of-policy request (past start, misaligned, outside hours, bad duration)."""

    code = "VALIDATION_ERROR"


class BookingConflictError(BookingError):
    """The wicket is already booked for an overlapping time range."""

    code = "BOOKING_CONFLICT"


class OperatorCapacityError(BookingError):
    """No machine operator is free and the equipment cannot be self-operated."""

    code = "NO_OPERATORS_AVAILABLE"


class LockContentionError(BookingError):
    """The resource lock could not be obtained in time. Safe to retry the identical request."""

    code = "LOCK_CONTENTION"
    retryable = True

    def __init__(self, message: str, resource_key: Optional[str] = None):
        super().__init__(message)
        self.resource_key = resource_key


class BookingNotFoundError(BookingError):
    code = "BOOKING_NOT_FOUND"

    def __init__(self, booking_id: int):
        super().__init__(f"Booking not found with id: {booking_id}")
        self.booking_id = booking_id


class StateTransitionError(BookingError):
    """A terminal booking cannot move to a different status."""

    code = "INVALID_STATUS_TRANSITION"
