"""Tests for allocation input validation logic.

Covers the validation branches in training_scheduler.domain.constraints and
the service-level wrapping into AllocationValidationError.
"""

from __future__ import annotations

import pytest

from training_scheduler.domain.constraints import (
    validate_equipment_availability,
    validate_facility,
    validate_scheduling_constraints,
    validate_sessions,
)
from training_scheduler.domain.models import (
    EquipmentAvailability,
    EquipmentType,
    Facility,
    SchedulingConstraints,
    SessionConfiguration,
    WorkoutType,
)
from training_scheduler.services.allocation_service import (
    AllocationValidationError,
    allocate,
)


def valid_session(**overrides) -> SessionConfiguration:
    """Return a valid baseline session, optionally overriding fields."""
    defaults = {
        "id": "session-1",
        "name": "Strength Session",
        "workout_type": "strength",
        "player_ids": ("player-1", "player-2"),
        "duration": 60,
    }
    defaults.update(overrides)
    return SessionConfiguration(**defaults)


def valid_constraints(**overrides) -> SchedulingConstraints:
    defaults = {
        "facility_capacity": 50,
        "equipment_availability": (
            EquipmentAvailability(type="bike_erg", total=10, available=8),
        ),
        "transition_time_minutes": 10,
        "max_concurrent_sessions": 2,
    }
    defaults.update(overrides)
    return SchedulingConstraints(**defaults)


FACILITY = Facility(id="facility-1", name="Main Gym", capacity=50)


# --- Baseline pass ---

def test_valid_inputs_pass() -> None:
    """Fully valid inputs must not raise."""
    validate_sessions([valid_session()])
    validate_scheduling_constraints(valid_constraints())
    validate_facility(FACILITY)


# --- Enum coercion at construction ---

def test_session_coerces_string_enums() -> None:
    session = valid_session(equipment=("bike_erg", "rowing"))
    assert session.workout_type is WorkoutType.STRENGTH
    assert session.equipment == (EquipmentType.BIKE_ERG, EquipmentType.ROWING)


def test_unknown_workout_type_rejected_at_construction() -> None:
    with pytest.raises(ValueError):
        valid_session(workout_type="pilates")


def test_unknown_equipment_rejected_at_construction() -> None:
    with pytest.raises(ValueError):
        valid_session(equipment=("dumbbell",))


def test_reserved_defaults_to_total_minus_available() -> None:
    item = EquipmentAvailability(type="rowing", total=6, available=4)
    assert item.reserved == 2


# --- sessions ---

def test_zero_duration_raises() -> None:
    with pytest.raises(ValueError):
        validate_sessions([valid_session(duration=0)])


def test_negative_duration_raises() -> None:
    with pytest.raises(ValueError):
        validate_sessions([valid_session(duration=-15)])


def test_duplicate_session_ids_raise() -> None:
    with pytest.raises(ValueError, match="unique"):
        validate_sessions([valid_session(), valid_session(name="Again")])


def test_session_without_participants_raises() -> None:
    with pytest.raises(ValueError):
        validate_sessions([valid_session(player_ids=(), team_ids=())])


def test_session_with_teams_only_passes() -> None:
    validate_sessions([valid_session(player_ids=(), team_ids=("team-a",))])


def test_empty_sessions_allowed_by_default() -> None:
    validate_sessions([])


def test_empty_sessions_rejected_when_required() -> None:
    with pytest.raises(ValueError):
        validate_sessions([], allow_empty=False)


# --- equipment availability ---

def test_negative_total_raises() -> None:
    with pytest.raises(ValueError):
        validate_equipment_availability(
            [EquipmentAvailability(type="bike_erg", total=-1, available=0)]
        )


def test_negative_available_raises() -> None:
    with pytest.raises(ValueError):
        validate_equipment_availability(
            [EquipmentAvailability(type="bike_erg", total=4, available=-1)]
        )


def test_available_above_total_raises() -> None:
    with pytest.raises(ValueError, match="exceed"):
        validate_equipment_availability(
            [EquipmentAvailability(type="bike_erg", total=4, available=5)]
        )


def test_inconsistent_reserved_raises() -> None:
    with pytest.raises(ValueError, match="reserved"):
        validate_equipment_availability(
            [EquipmentAvailability(type="bike_erg", total=10, available=8, reserved=5)]
        )


def test_duplicate_equipment_type_raises() -> None:
    with pytest.raises(ValueError):
        validate_equipment_availability(
            [
                EquipmentAvailability(type="bike_erg", total=10, available=8),
                EquipmentAvailability(type="bike_erg", total=2, available=2),
            ]
        )


def test_zero_total_passes() -> None:
    """Exact lower boundary must pass."""
    validate_equipment_availability([EquipmentAvailability(type="sled", total=0, available=0)])


# --- scheduling constraints ---

def test_zero_facility_capacity_raises() -> None:
    with pytest.raises(ValueError):
        validate_scheduling_constraints(valid_constraints(facility_capacity=0))


def test_negative_transition_time_raises() -> None:
    with pytest.raises(ValueError):
        validate_scheduling_constraints(valid_constraints(transition_time_minutes=-1))


def test_zero_transition_time_passes() -> None:
    validate_scheduling_constraints(valid_constraints(transition_time_minutes=0))


def test_zero_max_concurrent_sessions_raises() -> None:
    with pytest.raises(ValueError):
        validate_scheduling_constraints(valid_constraints(max_concurrent_sessions=0))


def test_negative_facility_capacity_raises() -> None:
    with pytest.raises(ValueError):
        validate_facility(Facility(id="f", name="Broken", capacity=-5))


# --- service wrapping ---

def test_allocate_wraps_validation_errors() -> None:
    with pytest.raises(AllocationValidationError, match="duration"):
        allocate([valid_session(duration=-30)], valid_constraints(), FACILITY)


def test_allocate_rejects_empty_when_required() -> None:
    with pytest.raises(AllocationValidationError):
        allocate([], valid_constraints(), FACILITY, allow_empty=False)


def test_allocate_rejects_negative_transition_override() -> None:
    with pytest.raises(AllocationValidationError):
        allocate(
            [valid_session()],
            valid_constraints(),
            FACILITY,
            transition_table={(WorkoutType.STRENGTH, WorkoutType.AGILITY): -1},
        )
