"""Progression engine: next session's loads, reps and set counts.

The engine is a transition function keyed by the prescription's progression
type. Its input is the most recent session for the exercise (or nothing on a
first exposure) plus today's readiness directives; its output is a
``PlannedExercise`` whose every weight has been passed through the load
resolver, so nothing unloadable ever leaves this module.

- top_set_backoff: one heavy top set, then lighter backoff sets. Weight goes
  up once the top of the rep range is hit within the RPE cap; otherwise the
  lifter adds a rep, or holds when reps were missed or the cap was reached.
- double_progression: all working sets must reach the top of the rep range
  within the cap before the weight goes up.
- straight_sets: carried forward verbatim, unless a stall verdict prescribes
  a fix.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping, Optional, Sequence

from liftcoach.config import get_settings
from liftcoach.models import (
    DOUBLE_PROGRESSION,
    FIX_DELOAD,
    FIX_REP_RANGE_CHANGE,
    FIX_VARIATION_SWAP,
    FIX_WEIGHT_JUMP,
    LOAD_BARBELL,
    LOAD_DUMBBELL,
    STRAIGHT_SETS,
    TOP_SET_BACKOFF,
    ExerciseInfo,
    ExerciseSlot,
    LoadInventory,
    PerformedSet,
    PlannedExercise,
    PlannedSet,
    Prescription,
    SessionRecord,
    StallVerdict,
)
from liftcoach.services.exercise_catalog import EXERCISE_CATALOG
from liftcoach.services.loading import resolve_load, round_up_load, warmup_ladder
from liftcoach.services.periodization import WeekType, adjust_weight, apply_week_modifiers
from liftcoach.services.readiness import NEUTRAL_DIRECTIVES, ReadinessDirectives
from liftcoach.services.strength import weight_for_reps

logger = logging.getLogger(__name__)

FIRST_EXPOSURE_MARGIN = 0.9
REP_RANGE_CHANGE_REPS = 6
EMPTY_BAR_WARMUP_REPS = 10
EMPTY_BAR_WARMUP_RPE = 5.0
WARMUP_RPE = 6.0


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(value, hi))


def exercise_info_for(name: str, catalog: Mapping[str, ExerciseInfo] = EXERCISE_CATALOG) -> ExerciseInfo:
    """Catalog entry for ``name``; unknown exercises load in fixed increments."""
    info = catalog.get(name)
    if info is not None:
        return info
    return ExerciseInfo(name=name, movement_pattern="unknown", primary_muscles=(), is_compound=False)


def last_top_set(history: Sequence[SessionRecord]) -> Optional[PerformedSet]:
    """Top set of the most recent usable session, or None for a first exposure.

    Sessions whose top set has no reps or a negative weight count as no history.
    """
    for session in history:
        top = session.top_set
        if top is not None and top.reps > 0 and top.weight >= 0:
            return top
    return None


def _last_session(history: Sequence[SessionRecord]) -> Optional[SessionRecord]:
    for session in history:
        top = session.top_set
        if top is not None and top.reps > 0 and top.weight >= 0:
            return session
    return None


def starting_weight(slot: ExerciseSlot, info: ExerciseInfo, inventory: LoadInventory) -> float:
    """Conservative first-exposure load: caller-supplied, estimated, or the lightest option."""
    mode = info.load_mode
    if slot.starting_weight is not None:
        return resolve_load(max(0.0, slot.starting_weight), inventory, mode)
    if slot.estimated_1rm and slot.estimated_1rm > 0:
        estimate = weight_for_reps(slot.estimated_1rm, slot.prescription.top_reps_min) * FIRST_EXPOSURE_MARGIN
        return resolve_load(estimate, inventory, mode)
    if mode == LOAD_BARBELL:
        return inventory.bar_weight
    if mode == LOAD_DUMBBELL and inventory.dumbbells:
        return min(inventory.dumbbells)
    return 0.0


def _increase(weight: float, info: ExerciseInfo, inventory: LoadInventory) -> Optional[float]:
    """Next loadable weight above ``weight``, or None when the inventory tops out."""
    bumped = round_up_load(weight + info.weight_increment, inventory, info.load_mode)
    return bumped if bumped > weight else None


def top_set_target(
    prescription: Prescription,
    last: Optional[PerformedSet],
    rpe_cap: float,
    info: ExerciseInfo,
    inventory: LoadInventory,
    start: float,
) -> tuple[float, int, str]:
    """(weight, reps, reasoning) for the next top set."""
    lo, hi = prescription.top_reps_min, prescription.top_reps_max
    if last is None:
        return start, lo, f"First exposure: start at {start:g}kg x {lo}"

    held = resolve_load(last.weight, inventory, info.load_mode)
    rpe_for_increase = last.rpe if last.rpe is not None else rpe_cap

    if last.reps >= hi and rpe_for_increase <= rpe_cap:
        bumped = _increase(last.weight, info, inventory)
        if bumped is None:
            return held, hi, f"Hit {last.reps} reps but no heavier load available; hold {held:g}kg"
        return bumped, lo, f"Hit {last.reps} reps at or below RPE {rpe_cap:g}: add load to {bumped:g}kg x {lo}"

    if lo <= last.reps < hi and (last.rpe is None or last.rpe < rpe_cap):
        return held, last.reps + 1, f"In range at {last.reps} reps: hold {held:g}kg, aim for {last.reps + 1}"

    return held, _clamp(last.reps, lo, hi), f"Missed reps or at RPE cap: hold {held:g}kg, focus on form"


def _week_load(
    weight: float, why: str, week: Optional[WeekType], info: ExerciseInfo, inventory: LoadInventory
) -> tuple[float, str]:
    if week is None or week.intensity_modifier == 1.0:
        return weight, why
    scaled = resolve_load(adjust_weight(weight, week), inventory, info.load_mode)
    return scaled, f"{why}; {week.name} week at {week.intensity_modifier:.0%} -> {scaled:g}kg"


def _warmup_sets(top_weight: float, info: ExerciseInfo, inventory: LoadInventory) -> tuple[PlannedSet, ...]:
    if info.load_mode != LOAD_BARBELL:
        return ()
    sets: list[PlannedSet] = []
    for weight in warmup_ladder(top_weight, inventory.bar_weight, inventory.plates):
        if weight == inventory.bar_weight:
            sets.append(PlannedSet(weight=weight, reps=EMPTY_BAR_WARMUP_REPS, rpe_cap=EMPTY_BAR_WARMUP_RPE))
            continue
        reps = 5 if weight / top_weight < 0.7 else 3
        sets.append(PlannedSet(weight=weight, reps=reps, rpe_cap=WARMUP_RPE))
    return tuple(sets)


def _plan_top_set_backoff(
    slot: ExerciseSlot,
    history: Sequence[SessionRecord],
    directives: ReadinessDirectives,
    info: ExerciseInfo,
    inventory: LoadInventory,
    week: Optional[WeekType] = None,
) -> PlannedExercise:
    rx = slot.prescription
    cap = directives.apply_rpe_cap(rx.rpe_cap)
    start = starting_weight(slot, info, inventory)
    weight, reps, why = top_set_target(rx, last_top_set(history), cap, info, inventory, start)
    weight, why = _week_load(weight, why, week, info, inventory)

    backoffs: tuple[PlannedSet, ...] = ()
    if rx.backoff_sets > 0:
        backoff_weight = resolve_load(weight * (1 - rx.backoff_load_drop_percent), inventory, info.load_mode)
        backoffs = (
            PlannedSet(
                weight=backoff_weight,
                reps=rx.backoff_reps_min,
                rpe_cap=cap,
                set_count=directives.apply_backoff_sets(rx.backoff_sets),
            ),
        )

    return PlannedExercise(
        exercise_name=slot.name,
        warmup_sets=_warmup_sets(weight, info, inventory),
        top_set=PlannedSet(weight=weight, reps=reps, rpe_cap=cap, set_count=1),
        backoff_sets=backoffs,
        reasoning=why,
    )


def _plan_double_progression(
    slot: ExerciseSlot,
    history: Sequence[SessionRecord],
    directives: ReadinessDirectives,
    info: ExerciseInfo,
    inventory: LoadInventory,
    week: Optional[WeekType] = None,
) -> PlannedExercise:
    rx = slot.prescription
    lo, hi = rx.top_reps_min, rx.top_reps_max
    cap = directives.apply_rpe_cap(rx.rpe_cap)
    session = _last_session(history)

    if session is None:
        weight = starting_weight(slot, info, inventory)
        reps = lo
        why = f"First exposure: start at {weight:g}kg x {lo}"
    else:
        top = session.top_set
        work = session.work_sets
        all_topped = all(s.reps >= hi and (s.rpe if s.rpe is not None else cap) <= cap for s in work)
        held = resolve_load(top.weight, inventory, info.load_mode)
        bumped = _increase(top.weight, info, inventory) if all_topped else None
        if bumped is not None:
            weight, reps = bumped, lo
            why = f"All sets reached {hi} reps: add load to {bumped:g}kg x {lo}"
        else:
            lagging = min(s.reps for s in work)
            weight, reps = held, _clamp(lagging + 1, lo, hi)
            why = f"Hold {held:g}kg and build lagging sets toward {hi} reps"
    weight, why = _week_load(weight, why, week, info, inventory)

    return PlannedExercise(
        exercise_name=slot.name,
        warmup_sets=_warmup_sets(weight, info, inventory),
        working_sets=(
            PlannedSet(weight=weight, reps=reps, rpe_cap=cap, set_count=directives.apply_working_sets(rx.working_sets)),
        ),
        reasoning=why,
    )


def _apply_stall_fix(
    weight: float,
    reps: int,
    verdict: StallVerdict,
    info: ExerciseInfo,
    inventory: LoadInventory,
) -> tuple[float, int, str]:
    settings = get_settings()
    mode = info.load_mode
    if verdict.fix_type == FIX_DELOAD:
        deloaded = resolve_load(weight * settings.deload_factor, inventory, mode)
        return deloaded, reps, f"Stalled: deload to {deloaded:g}kg for one week"
    if verdict.fix_type == FIX_REP_RANGE_CHANGE:
        lighter = resolve_load(weight * settings.rep_range_load_factor, inventory, mode)
        return lighter, REP_RANGE_CHANGE_REPS, f"Stalled: shift to 6-8 reps at {lighter:g}kg"
    if verdict.fix_type == FIX_WEIGHT_JUMP:
        jumped = round_up_load(weight + max(info.weight_increment, 2.5), inventory, mode)
        return jumped, reps, f"Stalled: force a jump to {jumped:g}kg even if reps drop"
    if verdict.fix_type == FIX_VARIATION_SWAP:
        options = ", ".join(verdict.variations) or "a same-pattern variation"
        return weight, reps, f"Stalled: consider swapping to {options}"
    return weight, reps, "Carry forward"


def _plan_straight_sets(
    slot: ExerciseSlot,
    history: Sequence[SessionRecord],
    directives: ReadinessDirectives,
    info: ExerciseInfo,
    inventory: LoadInventory,
    stall_verdict: Optional[StallVerdict],
    week: Optional[WeekType] = None,
) -> PlannedExercise:
    rx = slot.prescription
    cap = directives.apply_rpe_cap(rx.rpe_cap)
    last = last_top_set(history)

    if last is None:
        weight = starting_weight(slot, info, inventory)
        reps = rx.top_reps_min
        why = f"First exposure: start at {weight:g}kg x {reps}"
    else:
        weight = resolve_load(last.weight, inventory, info.load_mode)
        reps = last.reps
        why = f"Carry forward {weight:g}kg x {reps}"

    if last is not None and stall_verdict is not None and stall_verdict.is_stalled:
        weight, reps, why = _apply_stall_fix(weight, reps, stall_verdict, info, inventory)
    weight, why = _week_load(weight, why, week, info, inventory)

    return PlannedExercise(
        exercise_name=slot.name,
        warmup_sets=_warmup_sets(weight, info, inventory),
        working_sets=(
            PlannedSet(weight=weight, reps=reps, rpe_cap=cap, set_count=directives.apply_working_sets(rx.working_sets)),
        ),
        reasoning=why,
    )


def plan_exercise(
    slot: ExerciseSlot,
    history: Sequence[SessionRecord] = (),
    directives: ReadinessDirectives = NEUTRAL_DIRECTIVES,
    inventory: LoadInventory = LoadInventory(),
    exercise: Optional[ExerciseInfo] = None,
    stall_verdict: Optional[StallVerdict] = None,
    week: Optional[WeekType] = None,
) -> PlannedExercise:
    """Plan the next session for one exercise slot.

    ``history`` holds this exercise's sessions, most-recent-first. A ``week``
    caps RPE and trims sets through the prescription, then scales the chosen
    working load by its intensity.
    """
    info = exercise or exercise_info_for(slot.name)
    if week is not None:
        slot = replace(slot, prescription=apply_week_modifiers(slot.prescription, week))
    kind = slot.prescription.progression_type

    if kind == TOP_SET_BACKOFF:
        planned = _plan_top_set_backoff(slot, history, directives, info, inventory, week)
    elif kind == DOUBLE_PROGRESSION:
        planned = _plan_double_progression(slot, history, directives, info, inventory, week)
    else:
        if kind != STRAIGHT_SETS:
            logger.warning("unknown progression type, carrying forward", extra={"ctx_progression_type": kind})
        planned = _plan_straight_sets(slot, history, directives, info, inventory, stall_verdict, week)

    logger.debug(
        "progression decision",
        extra={"ctx_exercise": slot.name, "ctx_progression_type": kind, "ctx_reasoning": planned.reasoning},
    )
    return planned
