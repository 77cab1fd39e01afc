"""
Overlap queries against the booking store.

Bookings are partitioned by wicket: two bookings conflict only when they share a
wicket and their [start, end) ranges overlap. Cancelled bookings never conflict.
Callers creating bookings must run find_conflicts() while holding the wicket's
resource lock (see cricnets.services.resource_lock).
"""
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, func, select

from cricnets.models.booking import Booking, BookingStatus, MachineType, WicketType
from cricnets.services.errors import BookingConflictError
from cricnets.utils.sql import scalar_int


def _active_overlap_query(statement, start: datetime, end: datetime):
    return statement.where(
        Booking.start_time < end,
        Booking.end_time > start,
        Booking.status != BookingStatus.CANCELLED.value,
    )


def find_overlapping_bookings(
    session: Session, start: datetime, end: datetime, wicket_type: Optional[WicketType] = None
) -> List[Booking]:
    """Non-cancelled bookings overlapping [start, end), on one wicket or (wicket_type=None) on all."""
    statement = _active_overlap_query(select(Booking), start, end)
    if wicket_type is not None:
        statement = statement.where(Booking.wicket_type == WicketType(wicket_type).value)
    return list(session.exec(statement.order_by(Booking.start_time, Booking.id)).all())


def find_conflicts(session: Session, start: datetime, end: datetime, wicket_type: WicketType) -> List[Booking]:
    return find_overlapping_bookings(session, start, end, wicket_type)


def ensure_no_conflict(session: Session, start: datetime, end: datetime, wicket_type: WicketType) -> None:
    """Raise BookingConflictError if the wicket already has an active booking in [start, end)."""
    if find_conflicts(session, start, end, wicket_type):
        raise BookingConflictError("This wicket is already booked for the selected time.")


def count_operated_machine_bookings(session: Session, start: datetime, end: datetime) -> int:
    """Operators busy during [start, end): machine bookings on any wicket that are not self-operated."""
    statement = _active_overlap_query(select(func.count()).select_from(Booking), start, end).where(
        Booking.machine_type != MachineType.NONE.value,
        Booking.self_operated == False,  # noqa: E712
    )
    return scalar_int(session.exec(statement).one())
