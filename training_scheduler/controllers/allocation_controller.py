"""HTTP controller layer for training session allocation."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field, field_validator, model_validator

from training_scheduler.domain.models import (
    AllocationResult,
    EquipmentAvailability,
    EquipmentType,
    Facility,
    FacilityStatus,
    SchedulingConstraints,
    SessionConfiguration,
    WorkoutType,
)
from training_scheduler.services.allocation_service import (
    AllocationValidationError,
    SessionAllocationEngine,
)
from training_scheduler.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["allocation"])


class SessionRequest(BaseModel):
    """Input DTO validated before entering service layer."""

    id: str = Field(min_length=1)
    name: str
    workout_type: WorkoutType | None = None
    equipment: list[EquipmentType] = Field(default_factory=list)
    player_ids: list[str] = Field(default_factory=list)
    team_ids: list[str] = Field(default_factory=list)
    duration: int = Field(default=60, gt=0)

    @model_validator(mode="after")
    def validate_participants(self) -> "SessionRequest":
        if not self.player_ids and not self.team_ids:
            raise ValueError("session must include player_ids or team_ids")
        return self

    def to_domain(self) -> SessionConfiguration:
        return SessionConfiguration(
            id=self.id,
            name=self.name,
            workout_type=self.workout_type,
            equipment=tuple(self.equipment),
            player_ids=tuple(self.player_ids),
            team_ids=tuple(self.team_ids),
            duration=self.duration,
        )


class EquipmentAvailabilityRequest(BaseModel):
    type: EquipmentType
    total: int = Field(ge=0)
    available: int = Field(ge=0)
    reserved: int | None = Field(default=None, ge=0)
    facility_id: str = ""

    @model_validator(mode="after")
    def validate_counts(self) -> "EquipmentAvailabilityRequest":
        if self.available > self.total:
            raise ValueError("available cannot exceed total")
        return self

    def to_domain(self) -> EquipmentAvailability:
        return EquipmentAvailability(
            type=self.type,
            total=self.total,
            available=self.available,
            reserved=self.reserved,
            facility_id=self.facility_id,
        )


class SchedulingConstraintsRequest(BaseModel):
    facility_capacity: int = Field(gt=0)
    equipment_availability: list[EquipmentAvailabilityRequest] = Field(default_factory=list)
    transition_time_minutes: int = Field(default=15, ge=0)
    max_concurrent_sessions: int = Field(default=1, ge=1)
    prioritize_grouping: bool = True
    minimize_transitions: bool = True

    def to_domain(self) -> SchedulingConstraints:
        return SchedulingConstraints(
            facility_capacity=self.facility_capacity,
            equipment_availability=tuple(item.to_domain() for item in self.equipment_availability),
            transition_time_minutes=self.transition_time_minutes,
            max_concurrent_sessions=self.max_concurrent_sessions,
            prioritize_grouping=self.prioritize_grouping,
            minimize_transitions=self.minimize_transitions,
        )


class FacilityRequest(BaseModel):
    id: str = Field(min_length=1)
    name: str
    location: str = ""
    capacity: int = Field(default=0, ge=0)
    equipment: list[str] = Field(default_factory=list)
    availability: FacilityStatus = FacilityStatus.AVAILABLE

    def to_domain(self) -> Facility:
        return Facility(
            id=self.id,
            name=self.name,
            location=self.location,
            capacity=self.capacity,
            equipment=tuple(self.equipment),
            availability=self.availability,
        )


class AllocateRequest(BaseModel):
    sessions: list[SessionRequest]
    constraints: SchedulingConstraintsRequest
    facility: FacilityRequest
    require_sessions: bool = False

    @field_validator("sessions")
    @classmethod
    def validate_unique_ids(cls, value: list[SessionRequest]) -> list[SessionRequest]:
        ids = [item.id for item in value]
        if len(ids) != len(set(ids)):
            raise ValueError("session ids must be unique")
        return value


class SessionAllocationResponse(BaseModel):
    session_id: str
    workout_type: WorkoutType
    start_time: str
    end_time: str
    start_minute: int = Field(ge=0)
    end_minute: int = Field(ge=0)
    facility_area: str
    transition_buffer: int = Field(ge=0)
    conflict_score: float = Field(ge=0.0)
    participants: int = Field(ge=0)
    equipment: list[EquipmentType]
    shortfall_units: int = Field(ge=0)
    overflow_participants: int = Field(ge=0)
    transition_deficit_minutes: int = Field(ge=0)
    track: int = Field(ge=0)


class AllocateResponse(BaseModel):
    """Output DTO constrained to percentage bounds."""

    allocations: list[SessionAllocationResponse]
    total_conflict_score: float = Field(ge=0.0)
    initial_conflict_score: float = Field(ge=0.0)
    optimizer_passes: int = Field(ge=0)
    equipment_utilization: dict[EquipmentType, float]
    facility_utilization: float = Field(ge=0.0, le=100.0)
    warnings: list[str]
    recommendations: list[str]

    @field_validator("equipment_utilization")
    @classmethod
    def validate_utilization_bounds(
        cls,
        value: dict[EquipmentType, float],
    ) -> dict[EquipmentType, float]:
        for equipment_type, percent in value.items():
            if not 0.0 <= percent <= 100.0:
                raise ValueError(f"utilization for {equipment_type.value} out of bounds")
        return value

    @classmethod
    def from_result(cls, result: AllocationResult) -> "AllocateResponse":
        return cls(
            allocations=[
                SessionAllocationResponse(
                    session_id=item.session_id,
                    workout_type=item.workout_type,
                    start_time=item.start_time,
                    end_time=item.end_time,
                    start_minute=item.start_minute,
                    end_minute=item.end_minute,
                    facility_area=item.facility_area,
                    transition_buffer=item.transition_buffer,
                    conflict_score=item.conflict_score,
                    participants=item.participants,
                    equipment=list(item.equipment),
                    shortfall_units=item.shortfall_units,
                    overflow_participants=item.overflow_participants,
                    transition_deficit_minutes=item.transition_deficit_minutes,
                    track=item.track,
                )
                for item in result.allocations
            ],
            total_conflict_score=result.total_conflict_score,
            initial_conflict_score=result.initial_conflict_score,
            optimizer_passes=result.optimizer_passes,
            equipment_utilization=result.equipment_utilization,
            facility_utilization=result.facility_utilization,
            warnings=result.warnings,
            recommendations=result.recommendations,
        )


def get_allocation_engine(request: Request) -> SessionAllocationEngine:
    engine = getattr(request.app.state, "allocation_engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Allocation engine is not initialized",
        )
    return engine


@router.get("/health", status_code=status.HTTP_200_OK)
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post(
    "/allocate",
    response_model=AllocateResponse,
    status_code=status.HTTP_200_OK,
)
def allocate_sessions(
    payload: AllocateRequest,
    engine: SessionAllocationEngine = Depends(get_allocation_engine),
) -> AllocateResponse:
    """Run the allocation pipeline; sync route so it executes in the worker threadpool."""
    try:
        result = engine.allocate(
            [item.to_domain() for item in payload.sessions],
            payload.constraints.to_domain(),
            payload.facility.to_domain(),
            allow_empty=not payload.require_sessions,
        )
        return AllocateResponse.from_result(result)
    except AllocationValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected allocation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to allocate sessions",
        ) from exc
