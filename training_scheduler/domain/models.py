"""Domain models for training session allocation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class WorkoutType(str, Enum):
    STRENGTH = "strength"
    CONDITIONING = "conditioning"
    HYBRID = "hybrid"
    AGILITY = "agility"
    RECOVERY = "recovery"


class EquipmentType(str, Enum):
    # Conditioning
    RUNNING = "running"
    ROWING = "rowing"
    SKIERG = "skierg"
    BIKE_ERG = "bike_erg"
    WATTBIKE = "wattbike"
    AIRBIKE = "airbike"
    ROPE_JUMP = "rope_jump"
    TREADMILL = "treadmill"
    # Recovery
    FOAM_ROLLER = "foam_roller"
    YOGA_MAT = "yoga_mat"
    LIGHT_CARDIO = "light_cardio"
    WALK = "walk"
    SWIM = "swim"
    # Sprint
    TRACK = "track"
    HILL = "hill"
    RESISTANCE_PARACHUTE = "resistance_parachute"
    SPRINT_LANES = "sprint_lanes"
    SLED = "sled"


class FacilityStatus(str, Enum):
    AVAILABLE = "available"
    PARTIALLY_BOOKED = "partially_booked"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class SessionConfiguration:
    """One requested training session.

    Enum-typed fields accept their string values and are coerced on
    construction, so an unknown workout or equipment token raises
    ``ValueError`` here instead of slipping through as a silent mismatch.
    A ``workout_type`` of ``None`` asks the sequencer to infer it.
    """

    id: str
    name: str
    workout_type: Optional[WorkoutType] = None
    equipment: tuple[EquipmentType, ...] = ()
    player_ids: tuple[str, ...] = ()
    team_ids: tuple[str, ...] = ()
    duration: int = 60

    def __post_init__(self) -> None:
        if self.workout_type is not None:
            object.__setattr__(self, "workout_type", WorkoutType(self.workout_type))
        object.__setattr__(
            self,
            "equipment",
            tuple(EquipmentType(item) for item in self.equipment),
        )
        object.__setattr__(self, "player_ids", tuple(self.player_ids))
        object.__setattr__(self, "team_ids", tuple(self.team_ids))


@dataclass(frozen=True)
class EquipmentAvailability:
    type: EquipmentType
    total: int
    available: int
    reserved: Optional[int] = None
    facility_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", EquipmentType(self.type))
        if self.reserved is None:
            object.__setattr__(self, "reserved", self.total - self.available)


@dataclass(frozen=True)
class Facility:
    id: str
    name: str
    location: str = ""
    capacity: int = 0
    equipment: tuple[str, ...] = ()
    availability: FacilityStatus = FacilityStatus.AVAILABLE

    def __post_init__(self) -> None:
        object.__setattr__(self, "equipment", tuple(self.equipment))
        object.__setattr__(self, "availability", FacilityStatus(self.availability))


@dataclass(frozen=True)
class SchedulingConstraints:
    facility_capacity: int
    equipment_availability: tuple[EquipmentAvailability, ...] = ()
    transition_time_minutes: int = 15
    max_concurrent_sessions: int = 1
    prioritize_grouping: bool = True
    minimize_transitions: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "equipment_availability",
            tuple(self.equipment_availability),
        )


@dataclass(frozen=True)
class SessionAllocation:
    session_id: str
    workout_type: WorkoutType
    start_time: str
    end_time: str
    start_minute: int
    end_minute: int
    facility_area: str
    transition_buffer: int
    conflict_score: float
    participants: int
    equipment: tuple[EquipmentType, ...] = ()
    shortfall_units: int = 0
    overflow_participants: int = 0
    transition_deficit_minutes: int = 0
    track: int = 0


@dataclass(frozen=True)
class AllocationResult:
    allocations: list[SessionAllocation]
    total_conflict_score: float
    equipment_utilization: dict[EquipmentType, float]
    facility_utilization: float
    warnings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    initial_conflict_score: float = 0.0
    optimizer_passes: int = 0
