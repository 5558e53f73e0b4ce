"""Time-slot scheduling of an ordered session list onto parallel facility tracks."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from training_scheduler.domain.models import SessionConfiguration, WorkoutType
from training_scheduler.services.sequencing_service import TransitionTable, transition_minutes


FACILITY_AREAS: dict[WorkoutType, tuple[str, ...]] = {
    WorkoutType.STRENGTH: ("free-weights", "machines", "power-racks"),
    WorkoutType.CONDITIONING: ("cardio-area", "open-space", "track"),
    WorkoutType.HYBRID: ("functional-area", "open-space", "crossfit-area"),
    WorkoutType.AGILITY: ("agility-area", "court-space", "turf-area"),
    WorkoutType.RECOVERY: ("recovery-zone", "stretching-area", "pool"),
}

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class TrackState:
    end_minute: int = 0
    last_type: Optional[WorkoutType] = None


@dataclass(frozen=True)
class Placement:
    index: int
    track: int
    start_minute: int
    end_minute: int
    participants: int
    facility_area: str
    gap_minutes: int
    required_minutes: Optional[int]
    overflow_participants: int

    def overlaps(self, start_minute: int, end_minute: int) -> bool:
        return self.start_minute < end_minute and start_minute < self.end_minute


@dataclass(frozen=True)
class ScheduleState:
    tracks: tuple[TrackState, ...]
    placements: tuple[Placement, ...] = ()


def parse_clock(value: str) -> int:
    hours, minutes = (int(part) for part in value.split(":"))
    return hours * 60 + minutes


def format_clock(day_start_minute: int, offset_minutes: int) -> str:
    total = (day_start_minute + offset_minutes) % MINUTES_PER_DAY
    hours, minutes = divmod(total, 60)
    return f"{hours:02d}:{minutes:02d}"


def facility_area_for(workout_type: WorkoutType, track: int) -> str:
    areas = FACILITY_AREAS[workout_type]
    return f"{areas[track % len(areas)]}-{track + 1}"


def count_participants(session: SessionConfiguration, default_team_size: int) -> int:
    players = len(set(session.player_ids))
    if players:
        return players
    return len(set(session.team_ids)) * default_team_size


class TimeSlotScheduler:
    """Places sessions, in a given order, onto ``track_count`` serial tracks.

    Each track runs one session at a time, so concurrency never exceeds
    the track count. A session may start only once the peak headcount of
    everything it overlaps, plus its own, fits the facility capacity;
    otherwise it slides to the next moment another session ends. Sessions
    bigger than the facility run alone and carry the excess as overflow.

    States are immutable, which lets the optimizer re-place a suffix of
    the order starting from a cached prefix state.
    """

    def __init__(
        self,
        *,
        sessions: Sequence[SessionConfiguration],
        workout_types: Sequence[WorkoutType],
        track_count: int,
        facility_capacity: int,
        transition_time_minutes: int,
        same_type_buffer_factor: float,
        default_team_size: int,
        transition_table: Optional[TransitionTable] = None,
    ) -> None:
        self._sessions = tuple(sessions)
        self._workout_types = tuple(workout_types)
        self._track_count = track_count
        self._capacity = facility_capacity
        self._transition_time = transition_time_minutes
        self._same_type_factor = same_type_buffer_factor
        self._table = transition_table
        self._participants = tuple(
            count_participants(session, default_team_size) for session in self._sessions
        )

    @property
    def participants(self) -> tuple[int, ...]:
        return self._participants

    def initial_state(self) -> ScheduleState:
        return ScheduleState(tracks=tuple(TrackState() for _ in range(self._track_count)))

    def buffer_minutes(self, previous: WorkoutType, current: WorkoutType) -> int:
        if previous != current:
            return self._transition_time
        same_type_minimum = transition_minutes(current, current, self._table)
        discounted = math.ceil(self._transition_time * self._same_type_factor)
        return min(self._transition_time, max(discounted, same_type_minimum))

    def _peak_load(self, placements: Sequence[Placement], start: int, end: int) -> int:
        overlapping = [item for item in placements if item.overlaps(start, end)]
        checkpoints = {start}
        checkpoints.update(item.start_minute for item in overlapping if item.start_minute > start)
        return max(
            sum(
                item.participants
                for item in overlapping
                if item.start_minute <= point < item.end_minute
            )
            for point in checkpoints
        )

    def _earliest_feasible_start(
        self,
        placements: Sequence[Placement],
        earliest: int,
        duration: int,
        participants: int,
    ) -> int:
        start = earliest
        while True:
            end = start + duration
            overlapping = [item for item in placements if item.overlaps(start, end)]
            if not overlapping:
                return start
            if participants <= self._capacity:
                if self._peak_load(overlapping, start, end) + participants <= self._capacity:
                    return start
            start = min(item.end_minute for item in overlapping if item.end_minute > start)

    def place(self, state: ScheduleState, index: int) -> ScheduleState:
        session = self._sessions[index]
        workout_type = self._workout_types[index]
        participants = self._participants[index]

        best: Optional[tuple[int, int]] = None
        for track_index, track in enumerate(state.tracks):
            if track.last_type is None:
                earliest = track.end_minute
            else:
                earliest = track.end_minute + self.buffer_minutes(track.last_type, workout_type)
            start = self._earliest_feasible_start(
                state.placements,
                earliest,
                session.duration,
                participants,
            )
            if best is None or (start, track_index) < best:
                best = (start, track_index)

        start, track_index = best  # type: ignore[misc]
        track = state.tracks[track_index]
        required: Optional[int] = None
        if track.last_type is not None:
            required = transition_minutes(track.last_type, workout_type, self._table)

        placement = Placement(
            index=index,
            track=track_index,
            start_minute=start,
            end_minute=start + session.duration,
            participants=participants,
            facility_area=facility_area_for(workout_type, track_index),
            gap_minutes=start - track.end_minute,
            required_minutes=required,
            overflow_participants=max(0, participants - self._capacity),
        )
        tracks = list(state.tracks)
        tracks[track_index] = TrackState(end_minute=placement.end_minute, last_type=workout_type)
        return ScheduleState(tracks=tuple(tracks), placements=state.placements + (placement,))

    def schedule(
        self,
        order: Sequence[int],
        *,
        start_state: Optional[ScheduleState] = None,
    ) -> list[ScheduleState]:
        """Return the state before each position plus the final state."""
        states = [start_state or self.initial_state()]
        for index in order:
            states.append(self.place(states[-1], index))
        return states
