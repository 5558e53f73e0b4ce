"""Equipment demand analysis and greedy unit allocation."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Sequence

from training_scheduler.domain.models import (
    EquipmentAvailability,
    EquipmentType,
    SessionConfiguration,
)
from training_scheduler.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class EquipmentAllocation:
    """Outcome of one greedy pass over the requested equipment units.

    ``assigned`` and ``shortfall`` are keyed by session id, then by
    equipment type. Types requested but absent from the availability
    list land in ``missing_types``; all of their units are shortfall.
    """

    demand: dict[EquipmentType, int]
    assigned: dict[str, dict[EquipmentType, int]]
    shortfall: dict[str, dict[EquipmentType, int]]
    missing_types: tuple[EquipmentType, ...]

    def shortfall_units(self, session_id: str) -> int:
        return sum(self.shortfall.get(session_id, {}).values())

    def shortfall_by_type(self) -> dict[EquipmentType, int]:
        totals: Counter[EquipmentType] = Counter()
        for per_type in self.shortfall.values():
            totals.update(per_type)
        return {
            equipment_type: totals[equipment_type]
            for equipment_type in self.demand
            if totals[equipment_type] > 0
        }

    def satisfied_by_type(self) -> dict[EquipmentType, int]:
        totals: Counter[EquipmentType] = Counter()
        for per_type in self.assigned.values():
            totals.update(per_type)
        return {equipment_type: totals[equipment_type] for equipment_type in self.demand}

    @property
    def total_shortfall(self) -> int:
        return sum(self.shortfall_by_type().values())


def analyze_equipment_demand(
    sessions: Sequence[SessionConfiguration],
) -> dict[EquipmentType, int]:
    """Tally requested units per equipment type in first-seen order."""
    demand: dict[EquipmentType, int] = {}
    for session in sessions:
        for equipment_type in session.equipment:
            demand[equipment_type] = demand.get(equipment_type, 0) + 1
    return demand


def allocate_equipment(
    sessions: Sequence[SessionConfiguration],
    equipment_availability: Sequence[EquipmentAvailability],
) -> EquipmentAllocation:
    """Assign units to sessions in input order without backtracking.

    Reserved units are never lent out: each per-type counter starts at
    ``available``. A unit that would drive the counter negative is
    recorded as shortfall against the requesting session.
    """
    demand = analyze_equipment_demand(sessions)
    remaining = {item.type: item.available for item in equipment_availability}

    assigned: dict[str, dict[EquipmentType, int]] = {}
    shortfall: dict[str, dict[EquipmentType, int]] = {}
    for session in sessions:
        session_assigned: dict[EquipmentType, int] = defaultdict(int)
        session_shortfall: dict[EquipmentType, int] = defaultdict(int)
        for equipment_type in session.equipment:
            if remaining.get(equipment_type, 0) > 0:
                remaining[equipment_type] -= 1
                session_assigned[equipment_type] += 1
            else:
                session_shortfall[equipment_type] += 1
        assigned[session.id] = dict(session_assigned)
        if session_shortfall:
            shortfall[session.id] = dict(session_shortfall)

    missing_types = tuple(
        equipment_type
        for equipment_type in demand
        if equipment_type not in remaining
    )

    result = EquipmentAllocation(
        demand=demand,
        assigned=assigned,
        shortfall=shortfall,
        missing_types=missing_types,
    )
    if result.total_shortfall:
        logger.warning(
            "Equipment shortfall detected | shortfall_by_type=%s | missing_types=%s",
            {item.value: units for item, units in result.shortfall_by_type().items()},
            [item.value for item in missing_types],
        )
    return result
