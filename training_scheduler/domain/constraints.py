"""Domain-level validation rules for session allocation inputs."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from training_scheduler.domain.models import (
    EquipmentAvailability,
    Facility,
    SchedulingConstraints,
    SessionConfiguration,
)


def validate_sessions(
    sessions: Sequence[SessionConfiguration],
    *,
    allow_empty: bool = True,
) -> None:
    if not sessions and not allow_empty:
        raise ValueError("sessions must not be empty")

    duplicates = sorted(
        session_id
        for session_id, count in Counter(session.id for session in sessions).items()
        if count > 1
    )
    if duplicates:
        raise ValueError(f"session ids must be unique, duplicated: {duplicates}")

    for session in sessions:
        if not str(session.id).strip():
            raise ValueError("session id must be non-empty")
        if session.duration <= 0:
            raise ValueError(f"session '{session.id}' duration must be > 0")
        if not session.player_ids and not session.team_ids:
            raise ValueError(f"session '{session.id}' must include players or teams")


def validate_equipment_availability(items: Sequence[EquipmentAvailability]) -> None:
    seen: set[str] = set()
    for item in items:
        label = item.type.value
        if label in seen:
            raise ValueError(f"equipment availability for '{label}' is listed twice")
        seen.add(label)
        if item.total < 0:
            raise ValueError(f"equipment '{label}' total must be >= 0")
        if item.available < 0:
            raise ValueError(f"equipment '{label}' available must be >= 0")
        if item.available > item.total:
            raise ValueError(f"equipment '{label}' available cannot exceed total")
        if item.reserved != item.total - item.available:
            raise ValueError(f"equipment '{label}' reserved must equal total - available")


def validate_scheduling_constraints(constraints: SchedulingConstraints) -> None:
    if constraints.facility_capacity <= 0:
        raise ValueError("facility_capacity must be > 0")
    if constraints.transition_time_minutes < 0:
        raise ValueError("transition_time_minutes must be >= 0")
    if constraints.max_concurrent_sessions < 1:
        raise ValueError("max_concurrent_sessions must be >= 1")
    validate_equipment_availability(constraints.equipment_availability)


def validate_facility(facility: Facility) -> None:
    if facility.capacity < 0:
        raise ValueError("facility capacity must be >= 0")
