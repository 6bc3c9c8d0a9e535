"""Immutable records exchanged between the coaching services.

Everything here is a plain frozen dataclass: history, prescriptions and
readiness come in as snapshots supplied by the caller and planned output
goes back out the same way. Nothing is persisted by this package.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as dt_date
from typing import Mapping, Optional

from liftcoach.services.strength import estimate_1rm

# -- Vocabulary --

TOP_SET_BACKOFF = "top_set_backoff"
DOUBLE_PROGRESSION = "double_progression"
STRAIGHT_SETS = "straight_sets"
ALLOWED_PROGRESSION_TYPES = {TOP_SET_BACKOFF, DOUBLE_PROGRESSION, STRAIGHT_SETS}

FIX_DELOAD = "deload"
FIX_REP_RANGE_CHANGE = "rep_range_change"
FIX_VARIATION_SWAP = "variation_swap"
FIX_WEIGHT_JUMP = "weight_jump"
ALLOWED_FIX_TYPES = {FIX_DELOAD, FIX_REP_RANGE_CHANGE, FIX_VARIATION_SWAP, FIX_WEIGHT_JUMP}

ENERGY_LEVELS = ("low", "ok", "high")
SORENESS_LEVELS = ("none", "mild", "high")
PAIN_SEVERITIES = ("mild", "moderate", "severe")

SET_WARMUP = "warmup"
SET_WORKING = "working"
SET_TOP = "top"
SET_BACKOFF = "backoff"
ALLOWED_SET_TYPES = {SET_WARMUP, SET_WORKING, SET_TOP, SET_BACKOFF}

ALLOWED_EQUIPMENT = {
    "barbell",
    "dumbbell",
    "cable",
    "machine",
    "pull_up_bar",
    "bands",
    "bodyweight",
    "rack",
    "bench",
}

BODY_PARTS = ("chest", "back", "shoulders", "arms", "legs", "core")

MUSCLE_BODY_PART: dict[str, str] = {
    "chest": "chest",
    "lats": "back",
    "upper_back": "back",
    "lower_back": "back",
    "front_delts": "shoulders",
    "side_delts": "shoulders",
    "rear_delts": "shoulders",
    "biceps": "arms",
    "triceps": "arms",
    "forearms": "arms",
    "quads": "legs",
    "hamstrings": "legs",
    "glutes": "legs",
    "calves": "legs",
    "core": "core",
    "traps": "core",
}

LOAD_BARBELL = "barbell"
LOAD_DUMBBELL = "dumbbell"
LOAD_FIXED = "fixed"

STANDARD_PLATES: tuple[float, ...] = (25.0, 20.0, 15.0, 10.0, 5.0, 2.5, 1.25)
STANDARD_DUMBBELLS: tuple[float, ...] = tuple(2.5 * i for i in range(1, 21))  # 2.5 .. 50


# -- History --


@dataclass(frozen=True)
class PerformedSet:
    """One logged set. Never mutated; later sessions supersede it."""

    weight: float
    reps: int
    rpe: Optional[float] = None
    is_completed: bool = True
    set_type: str = SET_WORKING

    @property
    def e1rm(self) -> float:
        return estimate_1rm(self.weight, self.reps)

    @property
    def counts_as_work(self) -> bool:
        return self.is_completed and self.set_type != SET_WARMUP


@dataclass(frozen=True)
class SessionRecord:
    """One exercise's performance within one workout."""

    date: dt_date
    exercise_name: str
    sets: tuple[PerformedSet, ...] = ()

    @property
    def work_sets(self) -> tuple[PerformedSet, ...]:
        return tuple(s for s in self.sets if s.counts_as_work)

    @property
    def top_set(self) -> Optional[PerformedSet]:
        """Completed non-warmup set with the highest e1RM (first wins on ties)."""
        work = self.work_sets
        if not work:
            return None
        return max(work, key=lambda s: s.e1rm)


# -- Rules for one exercise slot --


@dataclass(frozen=True)
class Prescription:
    progression_type: str = TOP_SET_BACKOFF
    top_reps_min: int = 4
    top_reps_max: int = 6
    rpe_cap: float = 8.0
    backoff_sets: int = 3
    backoff_reps_min: int = 6
    backoff_reps_max: int = 10
    backoff_load_drop_percent: float = 0.10
    working_sets: int = 3


DEFAULT_PRESCRIPTION = Prescription()

HYPERTROPHY_PRESCRIPTION = Prescription(
    progression_type=DOUBLE_PROGRESSION,
    top_reps_min=8,
    top_reps_max=12,
    rpe_cap=8.5,
    backoff_sets=0,
    backoff_reps_min=8,
    backoff_reps_max=12,
    backoff_load_drop_percent=0.0,
    working_sets=3,
)

STRENGTH_PRESCRIPTION = Prescription(
    progression_type=TOP_SET_BACKOFF,
    top_reps_min=3,
    top_reps_max=5,
    rpe_cap=8.0,
    backoff_sets=3,
    backoff_reps_min=5,
    backoff_reps_max=8,
    backoff_load_drop_percent=0.12,
    working_sets=1,
)

PRESCRIPTION_PRESETS: dict[str, Prescription] = {
    "default": DEFAULT_PRESCRIPTION,
    "hypertrophy": HYPERTROPHY_PRESCRIPTION,
    "strength": STRENGTH_PRESCRIPTION,
}


def prescription_preset(name: str) -> Prescription:
    key = name.strip().lower()
    if key not in PRESCRIPTION_PRESETS:
        raise ValueError(f"Unknown prescription preset: {name!r}. Choose from {sorted(PRESCRIPTION_PRESETS)}")
    return PRESCRIPTION_PRESETS[key]


# -- Daily state --


@dataclass(frozen=True)
class Readiness:
    energy: str = "ok"
    soreness: str = "none"
    time_available_minutes: int = 60

    @property
    def should_reduce_intensity(self) -> bool:
        return self.energy == "low" or self.soreness == "high"

    @property
    def should_increase_intensity(self) -> bool:
        return self.energy == "high" and self.soreness == "none"


@dataclass(frozen=True)
class PainFlag:
    body_part: str
    severity: str = "mild"
    is_active: bool = True


# -- Catalog and equipment --


@dataclass(frozen=True)
class ExerciseInfo:
    """Catalog entry for one exercise."""

    name: str
    movement_pattern: str
    primary_muscles: tuple[str, ...]
    secondary_muscles: tuple[str, ...] = ()
    equipment_required: frozenset[str] = frozenset()
    is_compound: bool = True
    default_progression: str = TOP_SET_BACKOFF

    @property
    def primary_body_parts(self) -> frozenset[str]:
        return frozenset(MUSCLE_BODY_PART.get(m, m) for m in self.primary_muscles)

    @property
    def load_mode(self) -> str:
        if "barbell" in self.equipment_required:
            return LOAD_BARBELL
        if "dumbbell" in self.equipment_required:
            return LOAD_DUMBBELL
        return LOAD_FIXED

    @property
    def weight_increment(self) -> float:
        """Smallest sensible jump in load, chosen from equipment tags."""
        if self.is_compound and "barbell" in self.equipment_required:
            return 2.5
        if "dumbbell" in self.equipment_required:
            return 2.0
        return 1.25


@dataclass(frozen=True)
class LoadInventory:
    """Discrete loading units available to the lifter."""

    bar_weight: float = 20.0
    plates: tuple[float, ...] = STANDARD_PLATES
    dumbbells: tuple[float, ...] = STANDARD_DUMBBELLS
    fixed_increment: float = 1.25


# -- Plan output --


@dataclass(frozen=True)
class PlannedSet:
    weight: float
    reps: int
    rpe_cap: Optional[float] = None
    set_count: int = 1


@dataclass(frozen=True)
class PlannedExercise:
    exercise_name: str
    warmup_sets: tuple[PlannedSet, ...] = ()
    top_set: Optional[PlannedSet] = None
    backoff_sets: tuple[PlannedSet, ...] = ()
    working_sets: tuple[PlannedSet, ...] = ()
    reasoning: str = ""

    @property
    def total_sets(self) -> int:
        count = sum(s.set_count for s in self.warmup_sets)
        count += self.top_set.set_count if self.top_set else 0
        count += sum(s.set_count for s in self.backoff_sets)
        count += sum(s.set_count for s in self.working_sets)
        return count

    def all_sets(self) -> tuple[PlannedSet, ...]:
        top = (self.top_set,) if self.top_set else ()
        return self.warmup_sets + top + self.backoff_sets + self.working_sets


@dataclass(frozen=True)
class Substitution:
    from_exercise: str
    to_exercise: str
    reason: str


@dataclass(frozen=True)
class StallVerdict:
    is_stalled: bool
    reason: Optional[str] = None
    fix_type: Optional[str] = None
    details: Optional[str] = None
    suggested_fix: Optional[str] = None
    has_enough_data: bool = True
    variations: tuple[str, ...] = ()
    target_weight: Optional[float] = None


@dataclass(frozen=True)
class ExerciseSlot:
    """A template slot: which exercise, under which prescription."""

    name: str
    prescription: Prescription = DEFAULT_PRESCRIPTION
    is_optional: bool = False
    starting_weight: Optional[float] = None
    estimated_1rm: Optional[float] = None


@dataclass(frozen=True)
class CoachContext:
    """Everything the planner needs for one session, supplied by the caller.

    ``history`` maps exercise name to session records ordered most-recent-first.
    ``week_type`` names the periodization week (regular, deload, peak, test);
    ``None`` plans without week modifiers.
    """

    template_name: str
    slots: tuple[ExerciseSlot, ...]
    readiness: Readiness = Readiness()
    equipment: frozenset[str] = frozenset({"bodyweight"})
    history: Mapping[str, tuple[SessionRecord, ...]] = field(default_factory=dict)
    pain_flags: tuple[PainFlag, ...] = ()
    inventory: LoadInventory = LoadInventory()
    stall_verdicts: Mapping[str, StallVerdict] = field(default_factory=dict)
    week_type: Optional[str] = None


@dataclass(frozen=True)
class PlanResponse:
    exercises: tuple[PlannedExercise, ...]
    substitutions: tuple[Substitution, ...] = ()
    adjustments: tuple[str, ...] = ()
    reasoning: tuple[str, ...] = ()
    estimated_duration_minutes: int = 0
    source: str = "offline"
    fallback_reason: Optional[str] = None
