"""Session ordering over a transition-cost graph between workout types."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from training_scheduler.domain.models import (
    EquipmentType,
    SchedulingConstraints,
    SessionConfiguration,
    WorkoutType,
)


TransitionTable = Mapping[tuple[WorkoutType, WorkoutType], int]

_S = WorkoutType.STRENGTH
_C = WorkoutType.CONDITIONING
_H = WorkoutType.HYBRID
_A = WorkoutType.AGILITY
_R = WorkoutType.RECOVERY

# Required changeover minutes between consecutive sessions on one track.
# Conditioning into strength is expensive: athletes need recovery before
# loading heavy lifts. Moving into agility or recovery work is cheap.
TRANSITION_MINUTES: dict[tuple[WorkoutType, WorkoutType], int] = {
    (_S, _S): 2, (_S, _C): 5, (_S, _H): 6, (_S, _A): 4, (_S, _R): 3,
    (_C, _S): 12, (_C, _C): 2, (_C, _H): 7, (_C, _A): 4, (_C, _R): 3,
    (_H, _S): 8, (_H, _C): 6, (_H, _H): 2, (_H, _A): 4, (_H, _R): 3,
    (_A, _S): 6, (_A, _C): 5, (_A, _H): 6, (_A, _A): 2, (_A, _R): 3,
    (_R, _S): 5, (_R, _C): 5, (_R, _H): 5, (_R, _A): 3, (_R, _R): 2,
}

GROUPING_BONUS = 2
TYPE_CHANGE_PENALTY = 3

CARDIO_EQUIPMENT = frozenset(
    {
        EquipmentType.BIKE_ERG,
        EquipmentType.ROWING,
        EquipmentType.TREADMILL,
        EquipmentType.AIRBIKE,
        EquipmentType.WATTBIKE,
        EquipmentType.SKIERG,
    }
)

_NAME_KEYWORDS: tuple[tuple[tuple[str, ...], WorkoutType], ...] = (
    (("conditioning", "cardio"), WorkoutType.CONDITIONING),
    (("hybrid", "circuit"), WorkoutType.HYBRID),
    (("agility", "speed"), WorkoutType.AGILITY),
    (("recovery", "mobility"), WorkoutType.RECOVERY),
)


def build_transition_table(
    overrides: Optional[Mapping[tuple[WorkoutType, WorkoutType], int]] = None,
) -> dict[tuple[WorkoutType, WorkoutType], int]:
    """Merge caller overrides into the default changeover table."""
    table = dict(TRANSITION_MINUTES)
    for (source, target), minutes in (overrides or {}).items():
        if minutes < 0:
            raise ValueError(
                f"transition minutes for {WorkoutType(source).value}->"
                f"{WorkoutType(target).value} must be >= 0"
            )
        table[(WorkoutType(source), WorkoutType(target))] = int(minutes)
    return table


def infer_workout_type(session: SessionConfiguration) -> WorkoutType:
    if session.workout_type is not None:
        return session.workout_type
    if any(item in CARDIO_EQUIPMENT for item in session.equipment):
        return WorkoutType.CONDITIONING
    name = session.name.lower()
    for keywords, workout_type in _NAME_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return workout_type
    return WorkoutType.STRENGTH


def resolve_workout_types(sessions: Sequence[SessionConfiguration]) -> tuple[WorkoutType, ...]:
    return tuple(infer_workout_type(session) for session in sessions)


def transition_minutes(
    source: WorkoutType,
    target: WorkoutType,
    table: Optional[TransitionTable] = None,
) -> int:
    return (table or TRANSITION_MINUTES)[(source, target)]


def edge_cost(
    source: WorkoutType,
    target: WorkoutType,
    constraints: SchedulingConstraints,
    table: Optional[TransitionTable] = None,
) -> int:
    cost = transition_minutes(source, target, table)
    if source == target:
        if constraints.prioritize_grouping:
            cost -= GROUPING_BONUS
    elif constraints.minimize_transitions:
        cost += TYPE_CHANGE_PENALTY
    return cost


def sequence_cost(
    order: Sequence[int],
    workout_types: Sequence[WorkoutType],
    constraints: SchedulingConstraints,
    table: Optional[TransitionTable] = None,
) -> int:
    return sum(
        edge_cost(workout_types[previous], workout_types[current], constraints, table)
        for previous, current in zip(order, order[1:])
    )


def _start_index(
    workout_types: Sequence[WorkoutType],
    constraints: SchedulingConstraints,
    table: Optional[TransitionTable],
) -> int:
    present = list(dict.fromkeys(workout_types))
    best_index = 0
    best_cost: Optional[int] = None
    for index, workout_type in enumerate(workout_types):
        outgoing = sum(
            edge_cost(workout_type, other, constraints, table)
            for other in present
            if other != workout_type
        )
        if best_cost is None or outgoing < best_cost:
            best_cost = outgoing
            best_index = index
    return best_index


def sequence_sessions(
    workout_types: Sequence[WorkoutType],
    constraints: SchedulingConstraints,
    table: Optional[TransitionTable] = None,
) -> list[int]:
    """Greedy nearest-neighbour ordering of session indices.

    Comparisons are strict, so ties always resolve to the lower input
    index and the resulting permutation is reproducible.
    """
    if not workout_types:
        return []

    current = _start_index(workout_types, constraints, table)
    order = [current]
    remaining = [index for index in range(len(workout_types)) if index != current]
    while remaining:
        current_type = workout_types[current]
        current = min(
            remaining,
            key=lambda index: (
                edge_cost(current_type, workout_types[index], constraints, table),
                index,
            ),
        )
        remaining.remove(current)
        order.append(current)
    return order


def type_grouped_order(workout_types: Sequence[WorkoutType]) -> list[int]:
    """Order indices so sessions sharing a type are contiguous, first-seen type first."""
    type_rank = {workout_type: rank for rank, workout_type in enumerate(dict.fromkeys(workout_types))}
    return sorted(range(len(workout_types)), key=lambda index: (type_rank[workout_types[index]], index))
