"""
Merge a bag of requested slot start times into contiguous booking groups.

[10:30, 10:00, 12:00] with 30-minute slots becomes (10:00, 60) and (12:00, 30).
Input order and exact duplicates do not affect the result.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List


@dataclass(frozen=True)
class SlotGroup:
    start_time: datetime
    duration_minutes: int


def merge_contiguous_slots(start_times: Iterable[datetime], slot_duration_minutes: int) -> List[SlotGroup]:
    ordered = sorted(set(start_times))
    if not ordered:
        return []

    groups: List[SlotGroup] = []
    current_start = ordered[0]
    current_duration = slot_duration_minutes

    for next_start in ordered[1:]:
        if next_start == current_start + timedelta(minutes=current_duration):
            current_duration += slot_duration_minutes
        else:
            groups.append(SlotGroup(current_start, current_duration))
            current_start = next_start
            current_duration = slot_duration_minutes

    groups.append(SlotGroup(current_start, current_duration))
    return groups
