"""
Machine operator allocation.

Operators are shared across every wicket. A booking holds an operator when it uses a
machine and is not self-operated.

- LEATHER_BALL_MACHINE: needs a leather ball option; always needs an operator. With no
  operator free the request is rejected.
- TENNIS_BALL_MACHINE: self-operation on request; otherwise needs an operator. With no
  operator free the booking silently falls back to self-operated.
- NONE: never needs an operator.
"""
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from sqlmodel import Session

from cricnets.models.booking import LeatherBallOption, MachineType
from cricnets.services.conflict_detector import count_operated_machine_bookings
from cricnets.services.errors import BookingValidationError, OperatorCapacityError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MachineAllocation:
    machine_type: MachineType
    leather_ball_option: LeatherBallOption
    self_operated: bool
    requires_operator: bool


def plan_machine_allocation(
    machine_type: MachineType,
    leather_ball_option: Optional[LeatherBallOption],
    self_operate_requested: bool,
) -> MachineAllocation:
    """Decide operator needs from the equipment request alone (no capacity lookup)."""
    machine_type = MachineType(machine_type)
    option = LeatherBallOption(leather_ball_option) if leather_ball_option else LeatherBallOption.NONE

    if machine_type == MachineType.LEATHER_BALL_MACHINE:
        if option == LeatherBallOption.NONE:
            raise BookingValidationError(
                "Leather ball machine requires a ball option (Machine ball or Actual leather ball)."
            )
        return MachineAllocation(machine_type, option, self_operated=False, requires_operator=True)

    if machine_type == MachineType.TENNIS_BALL_MACHINE:
        if self_operate_requested:
            return MachineAllocation(machine_type, LeatherBallOption.NONE, self_operated=True, requires_operator=False)
        return MachineAllocation(machine_type, LeatherBallOption.NONE, self_operated=False, requires_operator=True)

    return MachineAllocation(MachineType.NONE, LeatherBallOption.NONE, self_operated=False, requires_operator=False)


def apply_operator_capacity(allocation: MachineAllocation, busy_operators: int, operator_count: int) -> MachineAllocation:
    """Fit the allocation into the remaining operator capacity, falling back or rejecting when full."""
    if not allocation.requires_operator or busy_operators < operator_count:
        return allocation

    if allocation.machine_type == MachineType.TENNIS_BALL_MACHINE:
        return replace(allocation, self_operated=True, requires_operator=False)

    raise OperatorCapacityError("No machine operators available for this time slot.")


def allocate_operator(
    session: Session, start: datetime, end: datetime, allocation: MachineAllocation, operator_count: int
) -> MachineAllocation:
    if not allocation.requires_operator:
        return allocation

    busy = count_operated_machine_bookings(session, start, end)
    result = apply_operator_capacity(allocation, busy, operator_count)
    if result.self_operated and not allocation.self_operated:
        logger.info(
            f"No operator free for {start:%Y-%m-%d %H:%M}-{end:%H:%M} "
            f"({busy}/{operator_count} busy); tennis machine booking switched to self-operated"
        )
    return result
