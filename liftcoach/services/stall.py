"""Plateau detection over a short window of recent sessions.

A lift is stalled when the e1RM of its top set has improved by less than
``stall_improvement_pct`` between the oldest and newest session in a window
of ``stall_min_sessions`` sessions. A stalled lift gets exactly one fix,
chosen by rule priority:

1. average top-set RPE at or above ``stall_high_rpe`` -> deload
2. average reps at or below ``stall_low_rep_max``    -> rep range change
3. average reps up to ``stall_mid_rep_max``          -> variation swap
4. anything higher                                   -> forced weight jump

With fewer sessions than the window the verdict says so explicitly
(``has_enough_data=False``) instead of guessing.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from liftcoach.config import get_settings
from liftcoach.models import (
    FIX_DELOAD,
    FIX_REP_RANGE_CHANGE,
    FIX_VARIATION_SWAP,
    FIX_WEIGHT_JUMP,
    PerformedSet,
    SessionRecord,
    StallVerdict,
)
from liftcoach.services.exercise_catalog import VARIATION_LOOKUP

logger = logging.getLogger(__name__)

WEIGHT_JUMP_UNITS = 2.5


def _top_sets(exercise_name: str, sessions: Iterable[SessionRecord], window: int) -> list[PerformedSet]:
    tops: list[PerformedSet] = []
    for session in sessions:
        if session.exercise_name != exercise_name:
            continue
        top = session.top_set
        # Unloaded or empty top sets carry no e1RM signal.
        if top is None or top.e1rm <= 0:
            continue
        tops.append(top)
        if len(tops) >= window:
            break
    return tops


def improvement_pct(e1rms: Sequence[float]) -> float:
    """Percent change from the oldest (last) to the newest (first) estimate."""
    if not e1rms:
        return 0.0
    newest, oldest = e1rms[0], e1rms[-1]
    if oldest <= 0:
        return 0.0
    return (newest - oldest) / oldest * 100


def detect_stall(exercise_name: str, sessions: Iterable[SessionRecord]) -> StallVerdict:
    """Classify whether ``exercise_name`` has stalled.

    ``sessions`` must be ordered most-recent-first; records for other exercises,
    sessions without a completed work set and top sets with no load or no reps
    are skipped.
    """
    settings = get_settings()
    window = settings.stall_min_sessions
    tops = _top_sets(exercise_name, sessions, window)

    if len(tops) < window:
        return StallVerdict(
            is_stalled=False,
            reason="not enough data",
            details=f"Need {window} sessions for stall detection, have {len(tops)}",
            has_enough_data=False,
        )

    e1rms = [s.e1rm for s in tops]
    improvement = improvement_pct(e1rms)
    if improvement >= settings.stall_improvement_pct:
        return StallVerdict(
            is_stalled=False,
            details=f"{exercise_name} progressing well (+{improvement:.1f}%)",
        )

    verdict = _classify_fix(exercise_name, tops)
    logger.debug(
        "stall detected",
        extra={"ctx_exercise": exercise_name, "ctx_fix_type": verdict.fix_type, "ctx_improvement_pct": round(improvement, 2)},
    )
    return verdict


def _classify_fix(exercise_name: str, tops: Sequence[PerformedSet]) -> StallVerdict:
    settings = get_settings()
    count = len(tops)
    rpes = [s.rpe for s in tops if s.rpe is not None]
    avg_rpe = sum(rpes) / len(rpes) if rpes else settings.stall_default_rpe
    # Whole-rep average so the rep bands below leave no gaps.
    avg_reps = sum(s.reps for s in tops) // count
    current_weight = tops[0].weight

    if avg_rpe >= settings.stall_high_rpe:
        target = round(current_weight * settings.deload_factor, 1)
        return StallVerdict(
            is_stalled=True,
            reason=f"RPE consistently high ({avg_rpe:.1f}) with no progress for {count} sessions",
            fix_type=FIX_DELOAD,
            suggested_fix=f"Take a micro-deload: reduce {exercise_name} weight by 8% for one week",
            details=f"Target: {target:.1f}kg. Focus on technique and bar speed.",
            target_weight=target,
        )

    if avg_reps <= settings.stall_low_rep_max:
        target = round(current_weight * settings.rep_range_load_factor, 1)
        return StallVerdict(
            is_stalled=True,
            reason=f"Stuck in low rep range ({avg_reps} avg) with no weight increases for {count} sessions",
            fix_type=FIX_REP_RANGE_CHANGE,
            suggested_fix=f"Switch {exercise_name} to higher rep range (6-8) to build volume",
            details=f"Use ~{target:.1f}kg. Focus on 6-8 reps for 2-3 weeks, then return to lower reps.",
            target_weight=target,
        )

    if avg_reps <= settings.stall_mid_rep_max:
        variations = VARIATION_LOOKUP.get(exercise_name, ())
        return StallVerdict(
            is_stalled=True,
            reason=f"No e1RM improvement in {count} sessions despite moderate RPE ({avg_rpe:.1f})",
            fix_type=FIX_VARIATION_SWAP,
            suggested_fix=f"Try a variation of {exercise_name} for 3-4 weeks",
            details=(
                f"Suggested: {', '.join(variations)}"
                if variations
                else "Swap to a similar movement pattern to break through plateau"
            ),
            variations=tuple(variations),
        )

    target = current_weight + WEIGHT_JUMP_UNITS
    return StallVerdict(
        is_stalled=True,
        reason=f"Rep count high ({avg_reps} avg) but weight not increasing for {count} sessions",
        fix_type=FIX_WEIGHT_JUMP,
        suggested_fix=f"Force a weight increase on {exercise_name}, even if reps drop",
        details="Add 2.5-5kg and accept fewer reps initially. Rebuild from there.",
        target_weight=target,
    )


def analyze_all(sessions: Sequence[SessionRecord]) -> dict[str, StallVerdict]:
    """Stall verdict for every exercise present in ``sessions`` (most-recent-first)."""
    names = sorted({s.exercise_name for s in sessions})
    return {name: detect_stall(name, sessions) for name in names}


def stalled_exercises(sessions: Sequence[SessionRecord]) -> list[str]:
    return [name for name, verdict in analyze_all(sessions).items() if verdict.is_stalled]
