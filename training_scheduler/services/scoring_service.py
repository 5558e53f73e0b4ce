"""Conflict scoring for scheduled sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from training_scheduler.services.equipment_service import EquipmentAllocation
from training_scheduler.services.timeslot_service import Placement


# Points per unmet equipment unit. One missing unit alone must push a
# schedule over the "clearly conflicted" threshold of 50.
EQUIPMENT_SHORTFALL_WEIGHT = 60.0
# Points per participant above facility capacity.
CAPACITY_OVERFLOW_WEIGHT = 2.0
# Points per minute a track changeover falls short of the required time.
TRANSITION_DEFICIT_WEIGHT = 3.0


@dataclass(frozen=True)
class ConflictBreakdown:
    session_id: str
    shortfall_units: int
    overflow_participants: int
    transition_deficit_minutes: int

    @property
    def equipment_points(self) -> float:
        return self.shortfall_units * EQUIPMENT_SHORTFALL_WEIGHT

    @property
    def capacity_points(self) -> float:
        return self.overflow_participants * CAPACITY_OVERFLOW_WEIGHT

    @property
    def transition_points(self) -> float:
        return self.transition_deficit_minutes * TRANSITION_DEFICIT_WEIGHT

    @property
    def total(self) -> float:
        return self.equipment_points + self.capacity_points + self.transition_points


def transition_deficit(placement: Placement) -> int:
    if placement.required_minutes is None:
        return 0
    return max(0, placement.required_minutes - placement.gap_minutes)


def score_placement(
    placement: Placement,
    session_id: str,
    equipment: EquipmentAllocation,
) -> ConflictBreakdown:
    return ConflictBreakdown(
        session_id=session_id,
        shortfall_units=equipment.shortfall_units(session_id),
        overflow_participants=placement.overflow_participants,
        transition_deficit_minutes=transition_deficit(placement),
    )


def score_schedule(
    placements: Sequence[Placement],
    session_ids: Sequence[str],
    equipment: EquipmentAllocation,
) -> tuple[list[ConflictBreakdown], float]:
    """Score every placement; the aggregate is the plain sum of per-session totals."""
    breakdowns = [
        score_placement(placement, session_ids[placement.index], equipment)
        for placement in placements
    ]
    return breakdowns, float(sum(item.total for item in breakdowns))
