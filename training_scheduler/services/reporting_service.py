"""Utilization metrics, warnings and recommendations for a finished schedule."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Optional, Sequence

from training_scheduler.domain.models import (
    EquipmentAvailability,
    EquipmentType,
    Facility,
    FacilityStatus,
    SessionAllocation,
    WorkoutType,
)
from training_scheduler.services.equipment_service import EquipmentAllocation
from training_scheduler.services.sequencing_service import (
    TransitionTable,
    transition_minutes,
    type_grouped_order,
)
from training_scheduler.services.timeslot_service import MINUTES_PER_DAY


@dataclass(frozen=True)
class UtilizationReport:
    equipment_utilization: dict[EquipmentType, float]
    facility_utilization: float
    warnings: list[str]
    recommendations: list[str]


def _clamp_percent(value: float) -> float:
    return round(min(100.0, max(0.0, value)), 2)


def compute_equipment_utilization(
    allocations: Sequence[SessionAllocation],
    equipment_availability: Sequence[EquipmentAvailability],
) -> dict[EquipmentType, float]:
    """Percentage of each type's total units consumed by the assigned equipment."""
    used = Counter(item for allocation in allocations for item in allocation.equipment)
    utilization: dict[EquipmentType, float] = {}
    for availability in equipment_availability:
        if availability.total <= 0:
            utilization[availability.type] = 0.0
            continue
        utilization[availability.type] = _clamp_percent(
            used.get(availability.type, 0) / availability.total * 100.0
        )
    return utilization


def compute_facility_utilization(
    allocations: Sequence[SessionAllocation],
    facility_capacity: int,
) -> float:
    """Participant-minutes used over capacity-minutes across the schedule span."""
    if not allocations or facility_capacity <= 0:
        return 0.0
    span = max(item.end_minute for item in allocations) - min(item.start_minute for item in allocations)
    if span <= 0:
        return 0.0
    participant_minutes = sum(
        min(item.participants, facility_capacity) * (item.end_minute - item.start_minute)
        for item in allocations
    )
    return _clamp_percent(participant_minutes / (facility_capacity * span) * 100.0)


def _types_by_track(allocations: Sequence[SessionAllocation]) -> list[list[WorkoutType]]:
    by_track: dict[int, list[SessionAllocation]] = defaultdict(list)
    for allocation in allocations:
        by_track[allocation.track].append(allocation)
    return [
        [item.workout_type for item in sorted(by_track[track], key=lambda item: item.start_minute)]
        for track in sorted(by_track)
    ]


def _changeover_minutes(
    workout_types: Sequence[WorkoutType],
    table: Optional[TransitionTable],
) -> int:
    return sum(
        transition_minutes(previous, current, table)
        for previous, current in zip(workout_types, workout_types[1:])
    )


def reorder_savings(
    allocations: Sequence[SessionAllocation],
    transition_table: Optional[TransitionTable] = None,
) -> int:
    """Changeover minutes saved if each track ran its sessions grouped by type."""
    saved = 0
    for track_types in _types_by_track(allocations):
        grouped = [track_types[index] for index in type_grouped_order(track_types)]
        current = _changeover_minutes(track_types, transition_table)
        saved += max(0, current - _changeover_minutes(grouped, transition_table))
    return saved


def build_warnings(
    allocations: Sequence[SessionAllocation],
    equipment: EquipmentAllocation,
    facility: Facility,
    day_start_minute: int = 0,
) -> list[str]:
    warnings: list[str] = []
    for equipment_type, units in equipment.shortfall_by_type().items():
        if equipment_type in equipment.missing_types:
            warnings.append(f"{equipment_type.value} not available at facility")
        else:
            warnings.append(
                f"Equipment shortfall: {units} {equipment_type.value} unit(s) "
                "requested beyond availability"
            )

    for allocation in allocations:
        if allocation.overflow_participants:
            warnings.append(
                f"Session '{allocation.session_id}' exceeds facility capacity by "
                f"{allocation.overflow_participants} participant(s)"
            )
    for allocation in allocations:
        if allocation.transition_deficit_minutes:
            required = allocation.transition_buffer + allocation.transition_deficit_minutes
            warnings.append(
                f"Session '{allocation.session_id}' has a {allocation.transition_buffer}-minute "
                f"changeover; {required} minutes required"
            )

    past_midnight = [
        item for item in allocations if day_start_minute + item.end_minute >= MINUTES_PER_DAY
    ]
    if past_midnight:
        warnings.append(
            f"Schedule runs past midnight; {len(past_midnight)} session(s) end on the following day"
        )

    if facility.availability == FacilityStatus.UNAVAILABLE:
        warnings.append(f"Facility '{facility.name}' is marked unavailable")
    elif facility.availability == FacilityStatus.PARTIALLY_BOOKED:
        warnings.append(
            f"Facility '{facility.name}' is partially booked; sessions may collide "
            "with existing bookings"
        )
    return warnings


def build_recommendations(
    allocations: Sequence[SessionAllocation],
    equipment: EquipmentAllocation,
    *,
    transition_table: Optional[TransitionTable] = None,
) -> list[str]:
    recommendations: list[str] = []
    for equipment_type, units in equipment.shortfall_by_type().items():
        recommendations.append(
            f"Consider adding {units} more {equipment_type.value} units to eliminate conflicts"
        )

    worst_overflow = max((item.overflow_participants for item in allocations), default=0)
    if worst_overflow:
        recommendations.append(
            f"Split oversized sessions or raise facility capacity by {worst_overflow} "
            "to remove capacity overflow"
        )

    worst_deficit = max((item.transition_deficit_minutes for item in allocations), default=0)
    if worst_deficit:
        recommendations.append(
            f"Increase the transition buffer by {worst_deficit} minutes to allow "
            "equipment changeover"
        )

    saved = reorder_savings(allocations, transition_table)
    if saved > 0:
        recommendations.append(
            f"Reordering sessions by type could reduce transitions by {saved} minutes"
        )
    return recommendations


def build_report(
    *,
    allocations: Sequence[SessionAllocation],
    equipment: EquipmentAllocation,
    equipment_availability: Sequence[EquipmentAvailability],
    facility: Facility,
    facility_capacity: int,
    transition_table: Optional[TransitionTable] = None,
    day_start_minute: int = 0,
) -> UtilizationReport:
    return UtilizationReport(
        equipment_utilization=compute_equipment_utilization(allocations, equipment_availability),
        facility_utilization=compute_facility_utilization(allocations, facility_capacity),
        warnings=build_warnings(allocations, equipment, facility, day_start_minute),
        recommendations=build_recommendations(
            allocations,
            equipment,
            transition_table=transition_table,
        ),
    )
