"""
Day slot grid for one wicket.

The grid tiles [business start, business end) with fixed-size slots; each slot is
labelled Unavailable (already started), Booked (overlaps an active booking on the
wicket) or Available. Read-only and never cached: every call queries the store.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, List, Sequence, Tuple

from sqlmodel import Session

from cricnets.models.booking import Booking, WicketType
from cricnets.services.config_resolver import EffectiveConfig
from cricnets.services.conflict_detector import find_overlapping_bookings
from cricnets.utils.time_ranges import overlaps

SLOT_AVAILABLE = "Available"
SLOT_BOOKED = "Booked"
SLOT_UNAVAILABLE = "Unavailable"


@dataclass(frozen=True)
class SlotStatus:
    start_time: datetime
    status: str
    available: bool


class SlotGrid:
    """Lazy, finite and restartable: each iteration walks the grid again from the first slot."""

    def __init__(self, day: date, config: EffectiveConfig, bookings: Sequence[Booking], now: datetime):
        self.day_start = datetime.combine(day, config.business_hours_start)
        self.day_end = datetime.combine(day, config.business_hours_end)
        self.step = timedelta(minutes=config.slot_duration_minutes)
        self.now = now
        self._booked: List[Tuple[datetime, datetime]] = [(b.start_time, b.end_time) for b in bookings]

    def __iter__(self) -> Iterator[SlotStatus]:
        current = self.day_start
        while current + self.step <= self.day_end:
            slot_end = current + self.step
            if current < self.now:
                yield SlotStatus(start_time=current, status=SLOT_UNAVAILABLE, available=False)
            elif any(overlaps(start, end, current, slot_end) for start, end in self._booked):
                yield SlotStatus(start_time=current, status=SLOT_BOOKED, available=False)
            else:
                yield SlotStatus(start_time=current, status=SLOT_AVAILABLE, available=True)
            current = slot_end

    def __len__(self) -> int:
        if self.day_end <= self.day_start:
            return 0
        return int((self.day_end - self.day_start) // self.step)


def build_slot_grid(
    session: Session, day: date, wicket_type: WicketType, config: EffectiveConfig, now: datetime
) -> SlotGrid:
    day_start = datetime.combine(day, config.business_hours_start)
    day_end = datetime.combine(day, config.business_hours_end)
    bookings = find_overlapping_bookings(session, day_start, day_end, wicket_type)
    return SlotGrid(day, config, bookings, now)
