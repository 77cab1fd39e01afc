"""
Typed booking commands.

Each command has a pydantic parameter model and exactly one handler that calls one
BookingService method. The command table below is the whole dispatch: there is no
name-to-method lookup on the service itself.
"""
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, Field

from cricnets.models.booking import BallType, LeatherBallOption, MachineType, WicketType
from cricnets.services.booking_service import (
    DEFAULT_WICKET,
    BookingListFilter,
    BookingRequest,
    BookingService,
)


class BookingCommand(str, Enum):
    GET_AVAILABLE_SLOTS = "get_available_slots"
    BOOK_SESSION = "book_session"
    BOOK_MULTIPLE_SLOTS = "book_multiple_slots"
    GET_USER_BOOKINGS = "get_user_bookings"
    CANCEL_BOOKING = "cancel_booking"
    GET_UPCOMING_BOOKINGS = "get_upcoming_bookings"
    LIST_ALL_BOOKINGS = "list_all_bookings"
    MARK_BOOKING_AS_DONE = "mark_booking_as_done"
    GET_SYSTEM_CONFIGS = "get_system_configs"
    UPDATE_SYSTEM_CONFIG = "update_system_config"


class GetAvailableSlotsParams(BaseModel):
    date: date
    wicket_type: WicketType = DEFAULT_WICKET


class BookSessionParams(BaseModel):
    start_time: datetime
    duration_minutes: Optional[int] = None
    ball_type: BallType
    wicket_type: WicketType = DEFAULT_WICKET
    machine_type: Optional[MachineType] = None
    leather_ball_option: LeatherBallOption = LeatherBallOption.NONE
    self_operated: bool = False
    email: Optional[str] = None


class BookMultipleSlotsParams(BaseModel):
    start_times: List[datetime] = Field(min_length=1)
    ball_type: BallType
    email: Optional[str] = None


class GetUserBookingsParams(BaseModel):
    email: str


class CancelBookingParams(BaseModel):
    booking_id: int


class GetUpcomingBookingsParams(BaseModel):
    pass


class ListAllBookingsParams(BaseModel):
    pass


class MarkBookingAsDoneParams(BaseModel):
    booking_id: int


class GetSystemConfigsParams(BaseModel):
    pass


class UpdateSystemConfigParams(BaseModel):
    config_key: str
    config_value: str


def _get_available_slots(service: BookingService, params: GetAvailableSlotsParams):
    return service.resolve_slots(params.date, params.wicket_type)


def _book_session(service: BookingService, params: BookSessionParams):
    return service.create_booking(
        BookingRequest(
            start_time=params.start_time,
            ball_type=params.ball_type,
            duration_minutes=params.duration_minutes,
            wicket_type=params.wicket_type,
            machine_type=params.machine_type,
            leather_ball_option=params.leather_ball_option,
            self_operate_requested=params.self_operated,
            user_email=params.email,
        )
    )


def _book_multiple_slots(service: BookingService, params: BookMultipleSlotsParams):
    template = BookingRequest.for_ball_type(params.start_times[0], params.ball_type, user_email=params.email)
    return service.create_multi_booking(params.start_times, template)


def _get_user_bookings(service: BookingService, params: GetUserBookingsParams):
    return service.list_bookings(BookingListFilter.BY_REQUESTER, user_email=params.email)


def _cancel_booking(service: BookingService, params: CancelBookingParams):
    service.cancel_booking(params.booking_id)
    return f"Booking {params.booking_id} cancelled successfully."


def _get_upcoming_bookings(service: BookingService, params: GetUpcomingBookingsParams):
    return service.list_bookings(BookingListFilter.UPCOMING)


def _list_all_bookings(service: BookingService, params: ListAllBookingsParams):
    return service.list_bookings(BookingListFilter.ALL)


def _mark_booking_as_done(service: BookingService, params: MarkBookingAsDoneParams):
    return service.mark_done(params.booking_id)


def _get_system_configs(service: BookingService, params: GetSystemConfigsParams):
    return service.list_config_overrides()


def _update_system_config(service: BookingService, params: UpdateSystemConfigParams):
    return service.update_config_override(params.config_key, params.config_value)


@dataclass(frozen=True)
class CommandSpec:
    command: BookingCommand
    description: str
    params_model: Type[BaseModel]
    handler: Callable[[BookingService, Any], Any]


COMMANDS: Dict[BookingCommand, CommandSpec] = {
    spec.command: spec
    for spec in (
        CommandSpec(
            BookingCommand.GET_AVAILABLE_SLOTS,
            "Get cricket net booking slots for a date and wicket type "
            "(INDOOR_ASTRO_TURF, OUTDOOR_CEMENT, OUTDOOR_TURF)",
            GetAvailableSlotsParams,
            _get_available_slots,
        ),
        CommandSpec(BookingCommand.BOOK_SESSION, "Book a cricket net session", BookSessionParams, _book_session),
        CommandSpec(
            BookingCommand.BOOK_MULTIPLE_SLOTS,
            "Book multiple cricket net sessions at once; contiguous slots are merged",
            BookMultipleSlotsParams,
            _book_multiple_slots,
        ),
        CommandSpec(
            BookingCommand.GET_USER_BOOKINGS,
            "Get all bookings for a specific user email",
            GetUserBookingsParams,
            _get_user_bookings,
        ),
        CommandSpec(
            BookingCommand.CANCEL_BOOKING,
            "Cancel an existing cricket net booking by ID",
            CancelBookingParams,
            _cancel_booking,
        ),
        CommandSpec(
            BookingCommand.GET_UPCOMING_BOOKINGS,
            "Get all upcoming cricket net bookings",
            GetUpcomingBookingsParams,
            _get_upcoming_bookings,
        ),
        CommandSpec(
            BookingCommand.LIST_ALL_BOOKINGS,
            "List all bookings in the system",
            ListAllBookingsParams,
            _list_all_bookings,
        ),
        CommandSpec(
            BookingCommand.MARK_BOOKING_AS_DONE,
            "Mark a booking as completed by its ID",
            MarkBookingAsDoneParams,
            _mark_booking_as_done,
        ),
        CommandSpec(
            BookingCommand.GET_SYSTEM_CONFIGS,
            "List all stored system configuration overrides",
            GetSystemConfigsParams,
            _get_system_configs,
        ),
        CommandSpec(
            BookingCommand.UPDATE_SYSTEM_CONFIG,
            "Update or create a system configuration setting "
            "(slot_duration_minutes, business_hours_start, business_hours_end, operator_count)",
            UpdateSystemConfigParams,
            _update_system_config,
        ),
    )
}


def parse_command_params(command: BookingCommand, payload: Optional[Dict[str, Any]]) -> BaseModel:
    """Validate a raw argument dict into the command's parameter model (pydantic.ValidationError on bad input)."""
    return COMMANDS[BookingCommand(command)].params_model.model_validate(payload or {})


def execute_command(service: BookingService, command: BookingCommand, params: BaseModel) -> Any:
    spec = COMMANDS[BookingCommand(command)]
    if not isinstance(params, spec.params_model):
        raise TypeError(f"{spec.command.value} expects {spec.params_model.__name__}, got {type(params).__name__}")
    return spec.handler(service, params)
