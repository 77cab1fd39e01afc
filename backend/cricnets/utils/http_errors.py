"""
Translate booking engine errors into HTTP errors.

Detail strings follow the "<CODE>: <message>" convention so clients can branch on
the code without parsing prose.
"""
from typing import Dict, Type

from fastapi import HTTPException

from cricnets.services.errors import (
    BookingConflictError,
    BookingError,
    BookingNotFoundError,
    BookingValidationError,
    LockContentionError,
    OperatorCapacityError,
    StateTransitionError,
)

STATUS_CODES: Dict[Type[BookingError], int] = {
    BookingValidationError: 400,
    BookingConflictError: 409,
    OperatorCapacityError: 409,
    StateTransitionError: 409,
    BookingNotFoundError: 404,
    LockContentionError: 503,
}


def booking_error_to_http(exc: BookingError) -> HTTPException:
    status_code = next((code for cls, code in STATUS_CODES.items() if isinstance(exc, cls)), 400)
    detail = f"{exc.code}: {exc.message}"
    if exc.committed:
        ids = ", ".join(str(b.id) for b in exc.committed)
        detail = f"{detail} (already committed booking ids: {ids})"
    # No Retry-After once part of a multi-slot request is committed
    headers = {"Retry-After": "1"} if exc.retryable and not exc.committed else None
    return HTTPException(status_code=status_code, detail=detail, headers=headers)
