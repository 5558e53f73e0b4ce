"""Allocation pipeline: equipment, sequencing, scheduling, scoring, search, reporting."""

from __future__ import annotations

import time
from typing import Mapping, Optional, Sequence

from training_scheduler.domain.constraints import (
    validate_facility,
    validate_scheduling_constraints,
    validate_sessions,
)
from training_scheduler.domain.models import (
    AllocationResult,
    Facility,
    SchedulingConstraints,
    SessionAllocation,
    SessionConfiguration,
    WorkoutType,
)
from training_scheduler.services.equipment_service import allocate_equipment
from training_scheduler.services.optimization_service import optimize_order
from training_scheduler.services.reporting_service import build_report
from training_scheduler.services.sequencing_service import (
    build_transition_table,
    resolve_workout_types,
    sequence_sessions,
)
from training_scheduler.services.timeslot_service import (
    TimeSlotScheduler,
    format_clock,
    parse_clock,
)
from training_scheduler.utils.config import Settings, get_settings, validate_settings
from training_scheduler.utils.logger import get_logger


logger = get_logger(__name__)


class AllocationValidationError(Exception):
    """Raised when allocation inputs are malformed."""


def effective_capacity(constraints: SchedulingConstraints, facility: Facility) -> int:
    """Scheduling capacity is the stricter of the constraint and the facility limit."""
    if facility.capacity > 0:
        return min(constraints.facility_capacity, facility.capacity)
    return constraints.facility_capacity


class SessionAllocationEngine:
    """Per-call orchestration of the allocation pipeline.

    The engine keeps only its injected settings and transition table;
    every intermediate structure is built inside ``allocate`` and dropped
    when it returns, so one engine can serve concurrent callers.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transition_table: Optional[Mapping[tuple[WorkoutType, WorkoutType], int]] = None,
    ) -> None:
        try:
            self._settings = settings or get_settings()
            validate_settings(self._settings)
            self._transition_table = build_transition_table(transition_table)
        except ValueError as exc:
            raise AllocationValidationError(str(exc)) from exc

    def _validate_inputs(
        self,
        sessions: Sequence[SessionConfiguration],
        constraints: SchedulingConstraints,
        facility: Facility,
        allow_empty: bool,
    ) -> None:
        try:
            validate_sessions(sessions, allow_empty=allow_empty)
            validate_scheduling_constraints(constraints)
            validate_facility(facility)
        except ValueError as exc:
            raise AllocationValidationError(str(exc)) from exc

    def allocate(
        self,
        sessions: Sequence[SessionConfiguration],
        constraints: SchedulingConstraints,
        facility: Facility,
        *,
        allow_empty: bool = True,
    ) -> AllocationResult:
        self._validate_inputs(sessions, constraints, facility, allow_empty)
        started = time.perf_counter()

        arena = tuple(sessions)
        capacity = effective_capacity(constraints, facility)
        session_ids = tuple(session.id for session in arena)
        equipment = allocate_equipment(arena, constraints.equipment_availability)
        workout_types = resolve_workout_types(arena)
        greedy_order = sequence_sessions(workout_types, constraints, self._transition_table)

        scheduler = TimeSlotScheduler(
            sessions=arena,
            workout_types=workout_types,
            track_count=constraints.max_concurrent_sessions,
            facility_capacity=capacity,
            transition_time_minutes=constraints.transition_time_minutes,
            same_type_buffer_factor=self._settings.same_type_buffer_factor,
            default_team_size=self._settings.default_team_size,
            transition_table=self._transition_table,
        )
        outcome = optimize_order(
            order=greedy_order,
            scheduler=scheduler,
            session_ids=session_ids,
            equipment=equipment,
            max_passes=self._settings.local_search_max_passes,
        )

        day_start = parse_clock(self._settings.schedule_day_start)
        breakdown_by_id = {item.session_id: item for item in outcome.breakdowns}
        allocations: list[SessionAllocation] = []
        for placement in outcome.placements:
            session = arena[placement.index]
            breakdown = breakdown_by_id[session.id]
            assigned = equipment.assigned.get(session.id, {})
            allocations.append(
                SessionAllocation(
                    session_id=session.id,
                    workout_type=workout_types[placement.index],
                    start_time=format_clock(day_start, placement.start_minute),
                    end_time=format_clock(day_start, placement.end_minute),
                    start_minute=placement.start_minute,
                    end_minute=placement.end_minute,
                    facility_area=placement.facility_area,
                    transition_buffer=placement.gap_minutes,
                    conflict_score=breakdown.total,
                    participants=placement.participants,
                    equipment=tuple(
                        item
                        for item, units in assigned.items()
                        for _ in range(units)
                    ),
                    shortfall_units=breakdown.shortfall_units,
                    overflow_participants=breakdown.overflow_participants,
                    transition_deficit_minutes=breakdown.transition_deficit_minutes,
                    track=placement.track,
                )
            )

        report = build_report(
            allocations=allocations,
            equipment=equipment,
            equipment_availability=constraints.equipment_availability,
            facility=facility,
            facility_capacity=capacity,
            transition_table=self._transition_table,
            day_start_minute=day_start,
        )

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        logger.info(
            (
                "Allocation completed | sessions=%s | initial_score=%.1f | final_score=%.1f | "
                "passes=%s | swaps=%s | warnings=%s | elapsed_ms=%.2f"
            ),
            len(arena),
            outcome.initial_score,
            outcome.final_score,
            outcome.passes,
            outcome.swaps,
            len(report.warnings),
            elapsed_ms,
        )
        return AllocationResult(
            allocations=allocations,
            total_conflict_score=outcome.final_score,
            equipment_utilization=report.equipment_utilization,
            facility_utilization=report.facility_utilization,
            warnings=report.warnings,
            recommendations=report.recommendations,
            initial_conflict_score=outcome.initial_score,
            optimizer_passes=outcome.passes,
        )


def allocate(
    sessions: Sequence[SessionConfiguration],
    constraints: SchedulingConstraints,
    facility: Facility,
    *,
    settings: Optional[Settings] = None,
    transition_table: Optional[Mapping[tuple[WorkoutType, WorkoutType], int]] = None,
    allow_empty: bool = True,
) -> AllocationResult:
    """Build a conflict-minimised timetable for ``sessions`` at ``facility``.

    Pure and synchronous: arguments are never mutated and identical inputs
    produce equal results. Malformed input raises
    ``AllocationValidationError``; resource conflicts never raise and are
    reported through conflict scores and ``warnings`` instead.
    """
    engine = SessionAllocationEngine(settings=settings, transition_table=transition_table)
    return engine.allocate(sessions, constraints, facility, allow_empty=allow_empty)
