from __future__ import annotations

from training_scheduler.domain.models import SessionConfiguration, WorkoutType
from training_scheduler.services.sequencing_service import TRANSITION_MINUTES
from training_scheduler.services.timeslot_service import (
    TimeSlotScheduler,
    count_participants,
    facility_area_for,
    format_clock,
    parse_clock,
)


def _session(
    session_id: str,
    workout_type: str,
    players: int,
    duration: int,
) -> SessionConfiguration:
    return SessionConfiguration(
        id=session_id,
        name=session_id,
        workout_type=workout_type,
        player_ids=tuple(f"player-{index}" for index in range(players)),
        duration=duration,
    )


def _scheduler(
    sessions: list[SessionConfiguration],
    *,
    tracks: int = 1,
    capacity: int = 100,
    transition: int = 10,
    factor: float = 0.5,
) -> TimeSlotScheduler:
    return TimeSlotScheduler(
        sessions=sessions,
        workout_types=[session.workout_type for session in sessions],
        track_count=tracks,
        facility_capacity=capacity,
        transition_time_minutes=transition,
        same_type_buffer_factor=factor,
        default_team_size=20,
    )


def test_clock_helpers():
    assert parse_clock("08:00") == 480
    assert format_clock(480, 75) == "09:15"
    assert format_clock(23 * 60, 120) == "01:00"


def test_participants_count_distinct_players_or_team_size():
    duplicated = SessionConfiguration(
        id="a",
        name="a",
        player_ids=("p1", "p1", "p2"),
    )
    teams_only = SessionConfiguration(id="b", name="b", team_ids=("t1", "t2"))

    assert count_participants(duplicated, 20) == 2
    assert count_participants(teams_only, 20) == 40


def test_facility_area_cycles_preferred_areas_per_track():
    assert facility_area_for(WorkoutType.STRENGTH, 0) == "free-weights-1"
    assert facility_area_for(WorkoutType.CONDITIONING, 1) == "open-space-2"
    assert facility_area_for(WorkoutType.AGILITY, 3) == "agility-area-4"


def test_different_types_get_full_transition_buffer():
    sessions = [_session("s", "strength", 8, 60), _session("c", "conditioning", 8, 45)]
    scheduler = _scheduler(sessions)

    placements = scheduler.schedule([0, 1])[-1].placements

    assert (placements[0].start_minute, placements[0].end_minute) == (0, 60)
    assert (placements[1].start_minute, placements[1].end_minute) == (70, 115)
    assert placements[1].gap_minutes == 10
    assert placements[1].required_minutes == TRANSITION_MINUTES[
        (WorkoutType.STRENGTH, WorkoutType.CONDITIONING)
    ]


def test_same_type_changeover_is_discounted():
    sessions = [_session("s1", "strength", 8, 60), _session("s2", "strength", 8, 30)]
    scheduler = _scheduler(sessions)

    assert scheduler.buffer_minutes(WorkoutType.STRENGTH, WorkoutType.STRENGTH) == 5
    placements = scheduler.schedule([0, 1])[-1].placements
    assert placements[1].start_minute == 65
    assert placements[1].gap_minutes == 5


def test_same_type_discount_never_exceeds_configured_buffer():
    scheduler = _scheduler([_session("s", "strength", 1, 10)], transition=1)

    assert scheduler.buffer_minutes(WorkoutType.STRENGTH, WorkoutType.STRENGTH) == 1


def test_parallel_tracks_start_together_when_capacity_allows():
    sessions = [_session("s", "strength", 10, 60), _session("c", "conditioning", 10, 45)]
    scheduler = _scheduler(sessions, tracks=2)

    placements = scheduler.schedule([0, 1])[-1].placements

    assert [item.start_minute for item in placements] == [0, 0]
    assert [item.track for item in placements] == [0, 1]
    assert [item.facility_area for item in placements] == ["free-weights-1", "open-space-2"]


def test_capacity_pushes_session_later_instead_of_dropping_it():
    sessions = [_session("s1", "strength", 12, 60), _session("s2", "strength", 10, 30)]
    scheduler = _scheduler(sessions, tracks=2, capacity=20)

    placements = scheduler.schedule([0, 1])[-1].placements

    assert len(placements) == 2
    assert placements[1].start_minute == 60
    assert placements[1].track == 1
    assert placements[1].gap_minutes == 60
    assert placements[1].required_minutes is None
    assert placements[1].overflow_participants == 0


def test_oversized_session_runs_alone_and_records_overflow():
    sessions = [_session("small", "agility", 10, 60), _session("big", "agility", 25, 30)]
    scheduler = _scheduler(sessions, tracks=2, capacity=20)

    placements = scheduler.schedule([0, 1])[-1].placements

    big = placements[1]
    assert big.start_minute == 60
    assert big.overflow_participants == 5


def test_concurrency_never_exceeds_track_count():
    sessions = [_session(f"s{index}", "hybrid", 5, 40 + index * 5) for index in range(5)]
    scheduler = _scheduler(sessions, tracks=2)

    placements = scheduler.schedule(list(range(5)))[-1].placements

    for placement in placements:
        concurrent = [
            other
            for other in placements
            if other.start_minute <= placement.start_minute < other.end_minute
        ]
        assert len(concurrent) <= 2


def test_suffix_schedule_from_prefix_state_matches_full_run():
    sessions = [
        _session("s", "strength", 10, 60),
        _session("c", "conditioning", 12, 45),
        _session("a", "agility", 8, 30),
    ]
    scheduler = _scheduler(sessions, tracks=2, capacity=25)

    full = scheduler.schedule([0, 1, 2])
    suffix = scheduler.schedule([1, 2], start_state=full[1])

    assert suffix[-1] == full[-1]
