"""
Booking engine entry point.

BookingService ties the pieces together for one database session:

    create_booking:  config -> validate -> lock(wicket[, operator pool]) -> conflicts
                     -> operator allocation -> insert + commit -> unlock
    create_multi_booking: merge contiguous starts, then create_booking per group
                     (not atomic across groups)
    resolve_slots:   config -> slot grid (read-only, no lock)

Routes and the command layer build a BookingService per request; everything that
is deployment-specific (defaults, override store, clock, lock manager, player name
lookup) is injected.
"""
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from enum import Enum
from functools import lru_cache
from typing import Callable, Iterable, List, Optional

from sqlmodel import Session, select

from cricnets.config import CONFIG_KEYS, BookingDefaults, get_booking_defaults
from cricnets.models.booking import (
    BallType,
    Booking,
    BookingStatus,
    LeatherBallOption,
    MachineType,
    WicketType,
)
from cricnets.models.system_config import SystemConfig
from cricnets.services.booking_lifecycle import apply_status
from cricnets.services.booking_validator import validate_booking_time
from cricnets.services.capacity_allocator import allocate_operator, plan_machine_allocation
from cricnets.services.config_resolver import (
    EffectiveConfig,
    OverrideLookup,
    SessionConfigStore,
    check_config_consistency,
    parse_config_value,
    resolve_config,
)
from cricnets.services.conflict_detector import ensure_no_conflict
from cricnets.services.errors import BookingError, BookingNotFoundError, BookingValidationError
from cricnets.services.multi_slot import merge_contiguous_slots
from cricnets.services.resource_lock import OPERATOR_POOL_LOCK, ResourceLockManager, wicket_lock_key
from cricnets.services.slot_grid import SlotStatus, build_slot_grid
from cricnets.utils.time_ranges import to_naive_local

logger = logging.getLogger(__name__)

DEFAULT_WICKET = WicketType.INDOOR_ASTRO_TURF
GUEST_PLAYER_NAME = "Guest"

PlayerNameLookup = Callable[[str], Optional[str]]


class BookingListFilter(str, Enum):
    ALL = "ALL"
    BY_REQUESTER = "BY_REQUESTER"
    UPCOMING = "UPCOMING"


def default_machine_for_ball(ball_type: BallType) -> MachineType:
    ball_type = BallType(ball_type)
    if ball_type == BallType.TENNIS_MACHINE:
        return MachineType.TENNIS_BALL_MACHINE
    if ball_type == BallType.LEATHER_MACHINE:
        return MachineType.LEATHER_BALL_MACHINE
    return MachineType.NONE


@dataclass(frozen=True)
class BookingRequest:
    """Fully specified booking request. Optional fields fall back to engine defaults."""

    start_time: datetime
    ball_type: BallType
    duration_minutes: Optional[int] = None  # None: one slot
    wicket_type: WicketType = DEFAULT_WICKET
    machine_type: Optional[MachineType] = None  # None: derived from ball_type
    leather_ball_option: LeatherBallOption = LeatherBallOption.NONE
    self_operate_requested: bool = False
    user_email: Optional[str] = None
    player_name: Optional[str] = None

    @classmethod
    def for_ball_type(
        cls,
        start_time: datetime,
        ball_type: BallType,
        user_email: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ) -> "BookingRequest":
        """Older call shape: ball type only, default wicket, machine implied by the ball."""
        return cls(
            start_time=start_time,
            ball_type=ball_type,
            duration_minutes=duration_minutes,
            machine_type=default_machine_for_ball(ball_type),
            user_email=user_email,
        )

    def resolved_machine_type(self) -> MachineType:
        if self.machine_type is None:
            return default_machine_for_ball(self.ball_type)
        return MachineType(self.machine_type)

    def at(self, start_time: datetime, duration_minutes: int) -> "BookingRequest":
        return replace(self, start_time=start_time, duration_minutes=duration_minutes)


@lru_cache
def get_lock_manager() -> ResourceLockManager:
    """Process-wide lock manager; every BookingService in the process must share it."""
    return ResourceLockManager(timeout_seconds=get_booking_defaults().lock_timeout_seconds)


class BookingService:
    def __init__(
        self,
        session: Session,
        defaults: Optional[BookingDefaults] = None,
        overrides: Optional[OverrideLookup] = None,
        lock_manager: Optional[ResourceLockManager] = None,
        clock: Callable[[], datetime] = datetime.now,
        player_name_lookup: Optional[PlayerNameLookup] = None,
    ):
        self.session = session
        self.defaults = defaults or get_booking_defaults()
        self.overrides = overrides or SessionConfigStore(session).get
        self.locks = lock_manager or get_lock_manager()
        self.clock = clock
        self.player_name_lookup = player_name_lookup

    def effective_config(self) -> EffectiveConfig:
        return resolve_config(self.overrides, self.defaults)

    def list_config_overrides(self) -> List[SystemConfig]:
        return list(self.session.exec(select(SystemConfig).order_by(SystemConfig.config_key)).all())

    def update_config_override(self, key: str, value: str) -> SystemConfig:
        """
        Create or replace one override.

        The value is checked together with the other effective values, so an override
        that would leave no bookable slot is refused.

        Raises:
            BookingValidationError: unknown key, unparseable value or inconsistent combination
        """
        key, value = key.strip(), value.strip()
        if key not in CONFIG_KEYS:
            raise BookingValidationError(f"Unknown config key {key!r}; expected one of {', '.join(CONFIG_KEYS)}.")
        try:
            parse_config_value(key, value)
            candidate = resolve_config(lambda k: value if k == key else self.overrides(k), self.defaults)
            check_config_consistency(candidate)
        except ValueError as exc:
            raise BookingValidationError(f"Invalid value for {key}: {exc}") from exc

        row = self.session.get(SystemConfig, key)
        if row:
            row.config_value = value
            row.updated_at = datetime.utcnow()
        else:
            row = SystemConfig(config_key=key, config_value=value)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        logger.info(f"Config override {key} set to {value!r}")
        return row

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def resolve_slots(self, day: date, wicket_type: WicketType) -> List[SlotStatus]:
        config = self.effective_config()
        return list(build_slot_grid(self.session, day, WicketType(wicket_type), config, self.clock()))

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _player_name(self, request: BookingRequest) -> str:
        if request.player_name:
            return request.player_name
        if request.user_email and self.player_name_lookup:
            name = self.player_name_lookup(request.user_email)
            if name:
                return name
        return GUEST_PLAYER_NAME

    def create_booking(self, request: BookingRequest) -> Booking:
        """
        Create one booking.

        Raises:
            BookingValidationError: bad time, duration, alignment or missing leather ball option
            BookingConflictError: the wicket is taken for an overlapping range
            OperatorCapacityError: leather machine requested and no operator free
            LockContentionError: the wicket (or operator pool) lock could not be obtained
        """
        config = self.effective_config()
        start = to_naive_local(request.start_time)
        duration = request.duration_minutes if request.duration_minutes is not None else config.slot_duration_minutes
        validate_booking_time(start, duration, config, self.clock())

        plan = plan_machine_allocation(
            request.resolved_machine_type(), request.leather_ball_option, request.self_operate_requested
        )
        end = start + timedelta(minutes=duration)
        wicket = WicketType(request.wicket_type)

        lock_keys = [wicket_lock_key(wicket)]
        if plan.requires_operator:
            lock_keys.append(OPERATOR_POOL_LOCK)

        try:
            with self.locks.acquire(self.session, *lock_keys):
                ensure_no_conflict(self.session, start, end, wicket)
                allocation = allocate_operator(self.session, start, end, plan, config.operator_count)
                booking = Booking(
                    start_time=start,
                    end_time=end,
                    ball_type=BallType(request.ball_type),
                    wicket_type=wicket,
                    machine_type=allocation.machine_type,
                    leather_ball_option=allocation.leather_ball_option,
                    self_operated=allocation.self_operated,
                    user_email=request.user_email,
                    player_name=self._player_name(request),
                    status=BookingStatus.PENDING,
                )
                self.session.add(booking)
                self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.session.refresh(booking)
        logger.info(
            f"Booking {booking.id} created: {wicket.value} {start:%Y-%m-%d %H:%M}-{end:%H:%M} "
            f"machine={allocation.machine_type.value} self_operated={allocation.self_operated}"
        )
        return booking

    def create_multi_booking(self, start_times: Iterable[datetime], template: BookingRequest) -> List[Booking]:
        """
        Book several slots with one configuration, merging contiguous starts.

        Each merged group is created independently. The first failing group aborts the
        rest; groups already created stay committed and are attached to the raised
        error as `committed`.
        """
        config = self.effective_config()
        groups = merge_contiguous_slots(
            (to_naive_local(s) for s in start_times), config.slot_duration_minutes
        )

        created: List[Booking] = []
        for group in groups:
            try:
                created.append(self.create_booking(template.at(group.start_time, group.duration_minutes)))
            except BookingError as exc:
                exc.committed = list(created)
                logger.warning(
                    f"Multi-slot booking stopped at {group.start_time:%Y-%m-%d %H:%M} ({exc.code}); "
                    f"{len(created)} of {len(groups)} group(s) already committed"
                )
                raise
        return created

    # ------------------------------------------------------------------
    # Lookup and lifecycle
    # ------------------------------------------------------------------

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.session.get(Booking, booking_id)
        if not booking:
            raise BookingNotFoundError(booking_id)
        return booking

    def _transition(self, booking_id: int, status: BookingStatus) -> Booking:
        booking = self.get_booking(booking_id)
        if apply_status(booking, status):
            self.session.add(booking)
            self.session.commit()
            self.session.refresh(booking)
            logger.info(f"Booking {booking_id} marked {status.value}")
        return booking

    def cancel_booking(self, booking_id: int) -> Booking:
        return self._transition(booking_id, BookingStatus.CANCELLED)

    def mark_done(self, booking_id: int) -> Booking:
        return self._transition(booking_id, BookingStatus.DONE)

    def list_bookings(
        self, booking_filter: BookingListFilter = BookingListFilter.ALL, user_email: Optional[str] = None
    ) -> List[Booking]:
        statement = select(Booking)
        booking_filter = BookingListFilter(booking_filter)

        if booking_filter == BookingListFilter.BY_REQUESTER:
            if not user_email:
                raise BookingValidationError("A requester email is required to list their bookings.")
            statement = statement.where(Booking.user_email == user_email)
        elif booking_filter == BookingListFilter.UPCOMING:
            statement = statement.where(
                Booking.start_time > self.clock(),
                Booking.status != BookingStatus.CANCELLED.value,
            )

        return list(self.session.exec(statement.order_by(Booking.start_time, Booking.id)).all())
