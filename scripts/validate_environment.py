#!/usr/bin/env python3
"""Validate local allocation engine environment readiness."""

from __future__ import annotations

import importlib
import sys
import time
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from training_scheduler.domain.models import (
    EquipmentAvailability,
    Facility,
    SchedulingConstraints,
    SessionConfiguration,
)
from training_scheduler.services.allocation_service import allocate
from training_scheduler.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def _sample_inputs() -> tuple[list[SessionConfiguration], SchedulingConstraints, Facility]:
    sessions = [
        SessionConfiguration(
            id="session-1",
            name="Strength Session",
            workout_type="strength",
            player_ids=tuple(f"player-{i}" for i in range(1, 9)),
            duration=60,
        ),
        SessionConfiguration(
            id="session-2",
            name="Conditioning Session",
            workout_type="conditioning",
            equipment=("bike_erg", "rowing"),
            player_ids=tuple(f"player-{i}" for i in range(1, 13)),
            duration=45,
        ),
        SessionConfiguration(
            id="session-3",
            name="Agility Session",
            workout_type="agility",
            player_ids=tuple(f"player-{i}" for i in range(1, 11)),
            duration=30,
        ),
    ]
    constraints = SchedulingConstraints(
        facility_capacity=30,
        equipment_availability=(
            EquipmentAvailability(type="bike_erg", total=10, available=8, facility_id="check"),
            EquipmentAvailability(type="rowing", total=6, available=4, facility_id="check"),
        ),
        transition_time_minutes=15,
        max_concurrent_sessions=4,
    )
    facility = Facility(id="check", name="Validation Facility", capacity=30)
    return sessions, constraints, facility


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_names = ["fastapi", "uvicorn", "pydantic", "httpx", "pytest"]
    import_errors: list[str] = []
    for module_name in package_names:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Settings load from environment
    try:
        settings = get_settings()
        ok, line = _print_result(
            "Settings",
            True,
            f": day_start={settings.schedule_day_start} max_passes={settings.local_search_max_passes}",
        )
    except ValueError as exc:
        ok, line = _print_result("Settings", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4: Sample allocation within bounds and effort budget
    sessions, constraints, facility = _sample_inputs()
    started = time.perf_counter()
    result = allocate(sessions, constraints, facility)
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    problems: list[str] = []
    if len(result.allocations) != len(sessions):
        problems.append("allocation count mismatch")
    if result.total_conflict_score >= 50:
        problems.append(f"conflict score {result.total_conflict_score:.1f} >= 50")
    if not 0.0 <= result.facility_utilization <= 100.0:
        problems.append("facility utilization out of [0,100] bounds")
    if elapsed_ms >= 200.0:
        problems.append(f"took {elapsed_ms:.1f} ms")
    if problems:
        ok, line = _print_result("Sample allocation", False, "; ".join(problems))
    else:
        ok, line = _print_result(
            "Sample allocation",
            True,
            f": score={result.total_conflict_score:.1f} "
            f"facility={result.facility_utilization:.1f}% in {elapsed_ms:.1f} ms",
        )
    results.append(line)
    all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Allocation Engine Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
