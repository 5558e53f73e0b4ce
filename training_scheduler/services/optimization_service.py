"""Bounded local search over adjacent swaps of the session order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from training_scheduler.services.equipment_service import EquipmentAllocation
from training_scheduler.services.scoring_service import ConflictBreakdown, score_schedule
from training_scheduler.services.timeslot_service import Placement, TimeSlotScheduler
from training_scheduler.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class OptimizationOutcome:
    order: list[int]
    placements: tuple[Placement, ...]
    breakdowns: list[ConflictBreakdown]
    initial_score: float
    final_score: float
    passes: int
    swaps: int
    converged: bool


def pass_budget(session_count: int, max_passes: int) -> int:
    if session_count < 2:
        return 0
    return min(max_passes, session_count * session_count)


def optimize_order(
    *,
    order: Sequence[int],
    scheduler: TimeSlotScheduler,
    session_ids: Sequence[str],
    equipment: EquipmentAllocation,
    max_passes: int,
) -> OptimizationOutcome:
    """Improve ``order`` by adjacent swaps that strictly lower the total score.

    A swap at position ``i`` only re-places positions ``i..n-1``; the
    track state before ``i`` is reused from the cached prefix. The search
    ends on the first pass without an accepted swap, or when the pass
    budget runs out, in which case the best order so far is returned.
    """
    current = list(order)
    states = scheduler.schedule(current)
    breakdowns, best_score = score_schedule(states[-1].placements, session_ids, equipment)
    initial_score = best_score

    budget = pass_budget(len(current), max_passes)
    passes = 0
    swaps = 0
    converged = len(current) < 2
    while passes < budget:
        passes += 1
        improved = False
        for position in range(len(current) - 1):
            candidate = (
                current[:position]
                + [current[position + 1], current[position]]
                + current[position + 2:]
            )
            suffix = scheduler.schedule(candidate[position:], start_state=states[position])
            candidate_breakdowns, score = score_schedule(
                suffix[-1].placements,
                session_ids,
                equipment,
            )
            if score < best_score:
                logger.debug(
                    "Swap accepted | position=%s | score_before=%.1f | score_after=%.1f",
                    position,
                    best_score,
                    score,
                )
                current = candidate
                states = states[:position] + suffix
                breakdowns = candidate_breakdowns
                best_score = score
                improved = True
                swaps += 1
        if not improved:
            converged = True
            break

    if not converged:
        logger.debug(
            "Local search budget exhausted | passes=%s | score=%.1f",
            passes,
            best_score,
        )
    return OptimizationOutcome(
        order=current,
        placements=states[-1].placements,
        breakdowns=breakdowns,
        initial_score=initial_score,
        final_score=best_score,
        passes=passes,
        swaps=swaps,
        converged=converged,
    )
