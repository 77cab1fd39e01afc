from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response
from pydantic import BaseModel, Field
from sqlmodel import Session

from cricnets.database import get_session
from cricnets.models.booking import BallType, BookingStatus, LeatherBallOption, MachineType, WicketType
from cricnets.services.booking_service import DEFAULT_WICKET, BookingListFilter, BookingRequest, BookingService
from cricnets.services.errors import BookingError
from cricnets.utils.http_errors import booking_error_to_http

router = APIRouter()


def get_booking_service(session: Session = Depends(get_session)) -> BookingService:
    return BookingService(session)


class BookingCreate(BaseModel):
    start_time: datetime
    duration_minutes: Optional[int] = None
    ball_type: BallType
    wicket_type: WicketType = DEFAULT_WICKET
    machine_type: Optional[MachineType] = None
    leather_ball_option: LeatherBallOption = LeatherBallOption.NONE
    self_operated: bool = False
    player_name: Optional[str] = None


class MultiBookingCreate(BaseModel):
    start_times: List[datetime] = Field(min_length=1)
    ball_type: BallType
    wicket_type: WicketType = DEFAULT_WICKET
    machine_type: Optional[MachineType] = None
    leather_ball_option: LeatherBallOption = LeatherBallOption.NONE
    self_operated: bool = False
    player_name: Optional[str] = None


class BookingResponse(BaseModel):
    id: int
    start_time: datetime
    end_time: datetime
    ball_type: BallType
    wicket_type: WicketType
    machine_type: MachineType
    leather_ball_option: LeatherBallOption
    self_operated: bool
    user_email: Optional[str]
    player_name: str
    status: BookingStatus

    class Config:
        from_attributes = True


class SlotStatusResponse(BaseModel):
    start_time: datetime
    status: str
    available: bool

    class Config:
        from_attributes = True


@router.get("/bookings/slots", response_model=List[SlotStatusResponse])
def get_slots(
    date: date,
    wicket_type: WicketType = DEFAULT_WICKET,
    service: BookingService = Depends(get_booking_service),
):
    """Slot grid for one day and wicket"""
    return service.resolve_slots(date, wicket_type)


@router.post("/bookings", response_model=BookingResponse, status_code=201)
def create_booking(
    payload: BookingCreate,
    x_user_email: Optional[str] = Header(default=None),
    service: BookingService = Depends(get_booking_service),
):
    """Book one session (one or more contiguous slots via duration_minutes)"""
    request = BookingRequest(
        start_time=payload.start_time,
        ball_type=payload.ball_type,
        duration_minutes=payload.duration_minutes,
        wicket_type=payload.wicket_type,
        machine_type=payload.machine_type,
        leather_ball_option=payload.leather_ball_option,
        self_operate_requested=payload.self_operated,
        user_email=x_user_email,
        player_name=payload.player_name,
    )
    try:
        return service.create_booking(request)
    except BookingError as exc:
        raise booking_error_to_http(exc)


@router.post("/bookings/multi", response_model=List[BookingResponse], status_code=201)
def create_multi_booking(
    payload: MultiBookingCreate,
    x_user_email: Optional[str] = Header(default=None),
    service: BookingService = Depends(get_booking_service),
):
    """Book several slots; contiguous ones are merged into a single booking.

    Not atomic: on failure the error detail lists the bookings already committed."""
    template = BookingRequest(
        start_time=payload.start_times[0],
        ball_type=payload.ball_type,
        wicket_type=payload.wicket_type,
        machine_type=payload.machine_type,
        leather_ball_option=payload.leather_ball_option,
        self_operate_requested=payload.self_operated,
        user_email=x_user_email,
        player_name=payload.player_name,
    )
    try:
        return service.create_multi_booking(payload.start_times, template)
    except BookingError as exc:
        raise booking_error_to_http(exc)


@router.get("/bookings", response_model=List[BookingResponse])
def list_all_bookings(service: BookingService = Depends(get_booking_service)):
    return service.list_bookings(BookingListFilter.ALL)


@router.get("/bookings/my", response_model=List[BookingResponse])
def list_my_bookings(
    x_user_email: Optional[str] = Header(default=None),
    service: BookingService = Depends(get_booking_service),
):
    if not x_user_email:
        raise HTTPException(status_code=401, detail="X-User-Email header is required")
    return service.list_bookings(BookingListFilter.BY_REQUESTER, user_email=x_user_email)


@router.get("/bookings/upcoming", response_model=List[BookingResponse])
def list_upcoming_bookings(service: BookingService = Depends(get_booking_service)):
    return service.list_bookings(BookingListFilter.UPCOMING)


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    try:
        return service.get_booking(booking_id)
    except BookingError as exc:
        raise booking_error_to_http(exc)


@router.delete("/bookings/{booking_id}", status_code=204)
def cancel_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    """Cancel a booking (status write; the row is kept). Cancelling twice is a no-op."""
    try:
        service.cancel_booking(booking_id)
    except BookingError as exc:
        raise booking_error_to_http(exc)
    return Response(status_code=204)


@router.put("/bookings/{booking_id}/done", response_model=BookingResponse)
def mark_booking_done(booking_id: int, service: BookingService = Depends(get_booking_service)):
    try:
        return service.mark_done(booking_id)
    except BookingError as exc:
        raise booking_error_to_http(exc)
