from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Index, String
from sqlmodel import Column, Field, SQLModel


class BallType(str, Enum):
    LEATHER = "LEATHER"
    TENNIS = "TENNIS"
    TENNIS_MACHINE = "TENNIS_MACHINE"
    LEATHER_MACHINE = "LEATHER_MACHINE"


class WicketType(str, Enum):
    INDOOR_ASTRO_TURF = "INDOOR_ASTRO_TURF"
    OUTDOOR_CEMENT = "OUTDOOR_CEMENT"
    OUTDOOR_TURF = "OUTDOOR_TURF"


class MachineType(str, Enum):
    NONE = "NONE"
    TENNIS_BALL_MACHINE = "TENNIS_BALL_MACHINE"
    LEATHER_BALL_MACHINE = "LEATHER_BALL_MACHINE"


class LeatherBallOption(str, Enum):
    NONE = "NONE"
    MACHINE_BALL = "MACHINE_BALL"
    ACTUAL_LEATHER_BALL = "ACTUAL_LEATHER_BALL"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CANCELLED = "CANCELLED"
    DONE = "DONE"


TERMINAL_STATUSES = (BookingStatus.CANCELLED, BookingStatus.DONE)


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    __table_args__ = (Index("idx_booking_times", "start_time", "end_time"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    start_time: datetime = Field(sa_type=DateTime(timezone=False), nullable=False)
    # Always start_time + duration, set by the booking service
    end_time: datetime = Field(sa_type=DateTime(timezone=False), nullable=False)
    ball_type: BallType = Field(sa_column=Column(String(20), nullable=False))
    wicket_type: WicketType = Field(sa_column=Column(String(20), nullable=False, index=True))
    machine_type: MachineType = Field(
        default=MachineType.NONE, sa_column=Column(String(24), nullable=False, default="NONE")
    )
    leather_ball_option: LeatherBallOption = Field(
        default=LeatherBallOption.NONE, sa_column=Column(String(24), nullable=False, default="NONE")
    )
    self_operated: bool = Field(default=False)
    user_email: Optional[str] = Field(default=None, index=True)
    player_name: str = Field(default="Guest")
    status: BookingStatus = Field(
        default=BookingStatus.PENDING, sa_column=Column(String(10), nullable=False, default="PENDING")
    )
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime(timezone=False))

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)
