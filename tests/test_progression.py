"""Tests for the progression engine."""

from __future__ import annotations

from datetime import date, timedelta

from liftcoach.models import (
    DOUBLE_PROGRESSION,
    FIX_DELOAD,
    FIX_REP_RANGE_CHANGE,
    FIX_VARIATION_SWAP,
    FIX_WEIGHT_JUMP,
    HYPERTROPHY_PRESCRIPTION,
    LOAD_BARBELL,
    LOAD_DUMBBELL,
    SET_WARMUP,
    STRAIGHT_SETS,
    ExerciseSlot,
    LoadInventory,
    PerformedSet,
    Prescription,
    Readiness,
    SessionRecord,
    StallVerdict,
)
from liftcoach.services.exercise_catalog import get_exercise
from liftcoach.services.loading import is_loadable
from liftcoach.services.periodization import get_week_type
from liftcoach.services.progression import last_top_set, plan_exercise, starting_weight
from liftcoach.services.readiness import readiness_directives


def _session(name, *sets, days_ago=0):
    return SessionRecord(
        date=date(2026, 3, 1) - timedelta(days=days_ago),
        exercise_name=name,
        sets=tuple(PerformedSet(weight=w, reps=r, rpe=rpe) for w, r, rpe in sets),
    )


def _squat_slot(**kwargs):
    return ExerciseSlot(name="Barbell Squat", **kwargs)


# --- top set / backoff ---

def test_top_of_range_within_cap_adds_weight_and_resets_reps():
    history = (_session("Barbell Squat", (100, 6, 8.0)),)
    planned = plan_exercise(_squat_slot(), history)
    assert planned.top_set.weight == 102.5
    assert planned.top_set.reps == 4
    assert planned.top_set.rpe_cap == 8.0


def test_backoff_is_dropped_and_rounded_to_plates():
    history = (_session("Barbell Squat", (100, 6, 8.0)),)
    planned = plan_exercise(_squat_slot(), history)
    assert len(planned.backoff_sets) == 1
    backoff = planned.backoff_sets[0]
    # 102.5 x 0.9 = 92.25 -> nearest loadable 92.5
    assert backoff.weight == 92.5
    assert backoff.reps == 6
    assert backoff.set_count == 3


def test_in_range_below_cap_adds_a_rep():
    planned = plan_exercise(_squat_slot(), (_session("Barbell Squat", (100, 5, 7.0)),))
    assert planned.top_set.weight == 100
    assert planned.top_set.reps == 6


def test_at_cap_holds():
    planned = plan_exercise(_squat_slot(), (_session("Barbell Squat", (100, 5, 8.0)),))
    assert planned.top_set.weight == 100
    assert planned.top_set.reps == 5
    assert "Missed reps or at RPE cap" in planned.reasoning


def test_missed_reps_holds_at_bottom_of_range():
    planned = plan_exercise(_squat_slot(), (_session("Barbell Squat", (100, 3, 9.0)),))
    assert planned.top_set.weight == 100
    assert planned.top_set.reps == 4


def test_missing_rpe_counts_as_at_cap_for_weight_increase():
    planned = plan_exercise(_squat_slot(), (_session("Barbell Squat", (100, 6, None)),))
    assert planned.top_set.weight == 102.5


def test_low_readiness_blocks_increase_and_trims_backoffs():
    directives = readiness_directives(Readiness(energy="low"))
    planned = plan_exercise(_squat_slot(), (_session("Barbell Squat", (100, 6, 8.0)),), directives)
    assert planned.top_set.weight == 100
    assert planned.top_set.rpe_cap == 7.5
    assert planned.backoff_sets[0].set_count == 2


def test_high_readiness_adds_backoff_set():
    directives = readiness_directives(Readiness(energy="high"))
    planned = plan_exercise(_squat_slot(), (_session("Barbell Squat", (100, 6, 8.5)),), directives)
    assert planned.top_set.rpe_cap == 8.5
    assert planned.top_set.weight == 102.5
    assert planned.backoff_sets[0].set_count == 4


def test_warmups_lead_up_to_top_set():
    planned = plan_exercise(_squat_slot(), (_session("Barbell Squat", (100, 6, 8.0)),))
    assert [w.weight for w in planned.warmup_sets] == [20, 40, 62.5, 82.5]
    assert [w.reps for w in planned.warmup_sets] == [10, 5, 5, 3]
    assert planned.warmup_sets[0].rpe_cap == 5.0


def test_no_backoffs_when_prescription_has_none():
    slot = _squat_slot(prescription=Prescription(backoff_sets=0))
    planned = plan_exercise(slot, (_session("Barbell Squat", (100, 5, 7.0)),))
    assert planned.backoff_sets == ()


# --- first exposure ---

def test_first_exposure_from_estimated_max():
    slot = _squat_slot(estimated_1rm=120)
    planned = plan_exercise(slot)
    # 120 / (1 + 4/30) x 0.9 = 95.3 -> 95
    assert planned.top_set.weight == 95
    assert planned.top_set.reps == 4
    assert "First exposure" in planned.reasoning


def test_first_exposure_defaults():
    inv = LoadInventory()
    assert starting_weight(_squat_slot(), get_exercise("Barbell Squat"), inv) == 20
    assert starting_weight(ExerciseSlot(name="Goblet Squat"), get_exercise("Goblet Squat"), inv) == 2.5
    assert plan_exercise(ExerciseSlot(name="Sled Push")).top_set.weight == 0


def test_first_exposure_starting_weight_is_made_loadable():
    planned = plan_exercise(_squat_slot(starting_weight=61))
    assert planned.top_set.weight == 60


def test_zero_rep_session_is_treated_as_no_history():
    history = (_session("Barbell Squat", (100, 0, None)),)
    assert last_top_set(history) is None
    assert plan_exercise(_squat_slot(), history).top_set.weight == 20


def test_falls_back_to_older_session_when_latest_has_no_work_sets():
    latest = SessionRecord(
        date=date(2026, 3, 2),
        exercise_name="Barbell Squat",
        sets=(PerformedSet(weight=60, reps=5, set_type=SET_WARMUP),),
    )
    older = _session("Barbell Squat", (100, 5, 7.0))
    assert last_top_set((latest, older)).weight == 100


# --- double progression ---

def test_double_progression_all_sets_topped_adds_weight():
    slot = ExerciseSlot(name="Dumbbell Bench Press", prescription=HYPERTROPHY_PRESCRIPTION)
    history = (_session("Dumbbell Bench Press", (25, 12, 8.0), (25, 12, 8.0), (25, 12, 8.5)),)
    planned = plan_exercise(slot, history)
    assert planned.top_set is None
    assert planned.warmup_sets == ()
    working = planned.working_sets[0]
    assert working.weight == 27.5
    assert working.reps == 8
    assert working.set_count == 3


def test_double_progression_lagging_set_holds_weight():
    slot = ExerciseSlot(name="Dumbbell Bench Press", prescription=HYPERTROPHY_PRESCRIPTION)
    history = (_session("Dumbbell Bench Press", (25, 12, 8.0), (25, 11, 8.0), (25, 10, 8.5)),)
    working = plan_exercise(slot, history).working_sets[0]
    assert working.weight == 25
    assert working.reps == 11


# --- straight sets ---

def _straight_slot():
    return _squat_slot(prescription=Prescription(progression_type=STRAIGHT_SETS, working_sets=3))


def test_straight_sets_carry_forward():
    planned = plan_exercise(_straight_slot(), (_session("Barbell Squat", (100, 5, 8.0)),))
    assert planned.working_sets[0].weight == 100
    assert planned.working_sets[0].reps == 5
    assert planned.working_sets[0].set_count == 3


def test_straight_sets_apply_stall_fixes():
    history = (_session("Barbell Squat", (100, 5, 8.0)),)

    deload = plan_exercise(_straight_slot(), history, stall_verdict=StallVerdict(is_stalled=True, fix_type=FIX_DELOAD))
    assert deload.working_sets[0].weight == 92.5

    rep_change = plan_exercise(
        _straight_slot(), history, stall_verdict=StallVerdict(is_stalled=True, fix_type=FIX_REP_RANGE_CHANGE)
    )
    assert rep_change.working_sets[0].weight == 85
    assert rep_change.working_sets[0].reps == 6

    jump = plan_exercise(_straight_slot(), history, stall_verdict=StallVerdict(is_stalled=True, fix_type=FIX_WEIGHT_JUMP))
    assert jump.working_sets[0].weight == 102.5

    swap = plan_exercise(
        _straight_slot(),
        history,
        stall_verdict=StallVerdict(is_stalled=True, fix_type=FIX_VARIATION_SWAP, variations=("Front Squat",)),
    )
    assert swap.working_sets[0].weight == 100
    assert "Front Squat" in swap.reasoning


def test_unknown_progression_type_carries_forward():
    slot = _squat_slot(prescription=Prescription(progression_type="wave_loading"))
    planned = plan_exercise(slot, (_session("Barbell Squat", (100, 5, 8.0)),))
    assert planned.working_sets[0].weight == 100


# --- invariants ---

def test_every_planned_weight_is_loadable():
    inv = LoadInventory()
    cases = [
        (_squat_slot(), (_session("Barbell Squat", (97.3, 6, 7.0)),), LOAD_BARBELL),
        (_squat_slot(), (_session("Barbell Squat", (141.1, 4, 8.0)),), LOAD_BARBELL),
        (
            ExerciseSlot(name="Goblet Squat", prescription=HYPERTROPHY_PRESCRIPTION),
            (_session("Goblet Squat", (23.3, 12, 7.0)),),
            LOAD_DUMBBELL,
        ),
    ]
    for slot, history, mode in cases:
        planned = plan_exercise(slot, history)
        for s in planned.all_sets():
            assert is_loadable(s.weight, inv, mode), (slot.name, s)


def test_progression_is_deterministic():
    history = (_session("Barbell Squat", (100, 6, 8.0)), _session("Barbell Squat", (97.5, 6, 8.0), days_ago=3))
    assert plan_exercise(_squat_slot(), history) == plan_exercise(_squat_slot(), history)


def test_double_progression_type_constant_matches_preset():
    assert HYPERTROPHY_PRESCRIPTION.progression_type == DOUBLE_PROGRESSION


# --- bare bar ---

def test_bar_without_plates_holds_the_empty_bar():
    history = (_session("Barbell Squat", (20, 6, None)),)
    planned = plan_exercise(_squat_slot(), history, inventory=LoadInventory(plates=()))
    assert {s.weight for s in planned.all_sets()} == {20}
    assert planned.top_set.reps == 6
    assert "no heavier load available" in planned.reasoning


# --- week types ---

def test_deload_week_scales_the_held_load():
    history = (_session("Barbell Squat", (100, 6, 8.0)),)
    planned = plan_exercise(_squat_slot(), history, week=get_week_type("deload"))
    assert planned.top_set.weight == 60
    assert planned.top_set.rpe_cap == 6.5
    assert planned.backoff_sets[0].set_count == 1
    assert "deload week at 60% -> 60kg" in planned.reasoning


def test_peak_week_scales_up_and_keeps_sets():
    history = (_session("Barbell Squat", (100, 6, 8.0)),)
    planned = plan_exercise(_squat_slot(), history, week=get_week_type("peak"))
    # 102.5 x 1.05 = 107.625 -> 107.5
    assert planned.top_set.weight == 107.5
    assert planned.backoff_sets[0].set_count == 3
    assert is_loadable(planned.backoff_sets[0].weight, LoadInventory(), LOAD_BARBELL)


def test_test_week_keeps_one_working_set():
    slot = _squat_slot(prescription=HYPERTROPHY_PRESCRIPTION)
    history = (_session("Barbell Squat", (60, 12, 8.0)),)
    planned = plan_exercise(slot, history, week=get_week_type("test"))
    assert planned.working_sets[0].weight == 62.5
    assert planned.working_sets[0].set_count == 1
    assert planned.working_sets[0].rpe_cap == 8.5
