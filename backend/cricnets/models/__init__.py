from cricnets.models.booking import (
    BallType,
    Booking,
    BookingStatus,
    LeatherBallOption,
    MachineType,
    WicketType,
)
from cricnets.models.booking_lock import BookingLock
from cricnets.models.system_config import SystemConfig

__all__ = [
    "Booking",
    "BookingStatus",
    "BallType",
    "WicketType",
    "MachineType",
    "LeatherBallOption",
    "BookingLock",
    "SystemConfig",
]
