"""Pydantic validation models for every external data contract.

Inputs are checked here, at the boundary, and converted into the frozen
domain records the services operate on. The services themselves assume
well-formed input and never raise for business reasons.
"""

from __future__ import annotations

from datetime import date as dt_date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from liftcoach.models import (
    ALLOWED_EQUIPMENT,
    ALLOWED_PROGRESSION_TYPES,
    ALLOWED_SET_TYPES,
    BODY_PARTS,
    DEFAULT_PRESCRIPTION,
    ENERGY_LEVELS,
    PAIN_SEVERITIES,
    SET_WORKING,
    SORENESS_LEVELS,
    STANDARD_DUMBBELLS,
    STANDARD_PLATES,
    TOP_SET_BACKOFF,
    CoachContext,
    ExerciseSlot,
    LoadInventory,
    PainFlag,
    PerformedSet,
    PlannedExercise,
    PlannedSet,
    PlanResponse,
    Prescription,
    Readiness,
    SessionRecord,
    Substitution,
    prescription_preset,
)
from liftcoach.services.periodization import get_week_type
from liftcoach.services.review import (
    ExerciseHighlight,
    SessionSummary,
    WeeklyReviewContext,
    session_volume,
    summarize_exercise,
)


def _check_equipment(values: list[str]) -> list[str]:
    unknown = sorted(set(values) - ALLOWED_EQUIPMENT)
    if unknown:
        raise ValueError(f"unknown equipment {unknown}; allowed: {sorted(ALLOWED_EQUIPMENT)}")
    return values


def _sessions_by_exercise(sessions: list["SessionInput"]) -> dict[str, tuple[SessionRecord, ...]]:
    grouped: dict[str, list[SessionRecord]] = {}
    for record in sorted((s.to_domain() for s in sessions), key=lambda r: r.date, reverse=True):
        grouped.setdefault(record.exercise_name, []).append(record)
    return {name: tuple(records) for name, records in grouped.items()}


# --- History ---


class PerformedSetInput(BaseModel):
    weight: float = Field(ge=0)
    reps: int = Field(ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)
    is_completed: bool = True
    set_type: str = SET_WORKING

    @field_validator("set_type")
    @classmethod
    def valid_set_type(cls, v):
        if v not in ALLOWED_SET_TYPES:
            raise ValueError(f"set_type must be one of {sorted(ALLOWED_SET_TYPES)}")
        return v

    def to_domain(self) -> PerformedSet:
        return PerformedSet(
            weight=self.weight,
            reps=self.reps,
            rpe=self.rpe,
            is_completed=self.is_completed,
            set_type=self.set_type,
        )


class SessionInput(BaseModel):
    date: dt_date
    exercise_name: str = Field(min_length=1, max_length=120)
    sets: list[PerformedSetInput] = Field(default_factory=list)

    def to_domain(self) -> SessionRecord:
        return SessionRecord(
            date=self.date,
            exercise_name=self.exercise_name,
            sets=tuple(s.to_domain() for s in self.sets),
        )


# --- Template rules ---


class PrescriptionInput(BaseModel):
    progression_type: str = TOP_SET_BACKOFF
    top_reps_min: int = Field(default=4, ge=1, le=50)
    top_reps_max: int = Field(default=6, ge=1, le=50)
    rpe_cap: float = Field(default=8.0, ge=1, le=10)
    backoff_sets: int = Field(default=3, ge=0, le=10)
    backoff_reps_min: int = Field(default=6, ge=1, le=50)
    backoff_reps_max: int = Field(default=10, ge=1, le=50)
    backoff_load_drop_percent: float = Field(default=0.10, ge=0, lt=1)
    working_sets: int = Field(default=3, ge=0, le=10)

    @field_validator("progression_type")
    @classmethod
    def valid_progression_type(cls, v):
        if v not in ALLOWED_PROGRESSION_TYPES:
            raise ValueError(f"progression_type must be one of {sorted(ALLOWED_PROGRESSION_TYPES)}")
        return v

    @model_validator(mode="after")
    def ranges_ordered(self):
        if self.top_reps_min > self.top_reps_max:
            raise ValueError("top_reps_min must be <= top_reps_max")
        if self.backoff_reps_min > self.backoff_reps_max:
            raise ValueError("backoff_reps_min must be <= backoff_reps_max")
        return self

    def to_domain(self) -> Prescription:
        return Prescription(**self.model_dump())


class ExerciseSlotInput(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    prescription: Optional[PrescriptionInput] = None
    preset: Optional[str] = None
    is_optional: bool = False
    starting_weight: Optional[float] = Field(default=None, ge=0)
    estimated_1rm: Optional[float] = Field(default=None, gt=0)

    @field_validator("preset")
    @classmethod
    def known_preset(cls, v):
        if v is not None:
            prescription_preset(v)
        return v

    def to_domain(self) -> ExerciseSlot:
        """An explicit prescription wins over a named preset; neither means the default."""
        if self.prescription is not None:
            rx = self.prescription.to_domain()
        elif self.preset is not None:
            rx = prescription_preset(self.preset)
        else:
            rx = DEFAULT_PRESCRIPTION
        return ExerciseSlot(
            name=self.name,
            prescription=rx,
            is_optional=self.is_optional,
            starting_weight=self.starting_weight,
            estimated_1rm=self.estimated_1rm,
        )


# --- Daily state ---


class ReadinessInput(BaseModel):
    energy: str = "ok"
    soreness: str = "none"
    time_available_minutes: int = Field(default=60, gt=0, le=300)

    @field_validator("energy")
    @classmethod
    def valid_energy(cls, v):
        if v not in ENERGY_LEVELS:
            raise ValueError(f"energy must be one of {ENERGY_LEVELS}")
        return v

    @field_validator("soreness")
    @classmethod
    def valid_soreness(cls, v):
        if v not in SORENESS_LEVELS:
            raise ValueError(f"soreness must be one of {SORENESS_LEVELS}")
        return v

    def to_domain(self) -> Readiness:
        return Readiness(
            energy=self.energy,
            soreness=self.soreness,
            time_available_minutes=self.time_available_minutes,
        )


class PainFlagInput(BaseModel):
    body_part: str
    severity: str = "mild"
    is_active: bool = True

    @field_validator("body_part")
    @classmethod
    def valid_body_part(cls, v):
        token = v.strip().lower()
        if token not in BODY_PARTS:
            raise ValueError(f"body_part must be one of {BODY_PARTS}")
        return token

    @field_validator("severity")
    @classmethod
    def valid_severity(cls, v):
        if v not in PAIN_SEVERITIES:
            raise ValueError(f"severity must be one of {PAIN_SEVERITIES}")
        return v

    def to_domain(self) -> PainFlag:
        return PainFlag(body_part=self.body_part, severity=self.severity, is_active=self.is_active)


class LoadInventoryInput(BaseModel):
    bar_weight: float = Field(default=20.0, ge=0)
    plates: list[float] = Field(default_factory=lambda: list(STANDARD_PLATES))
    dumbbells: list[float] = Field(default_factory=lambda: list(STANDARD_DUMBBELLS))
    fixed_increment: float = Field(default=1.25, gt=0)

    @field_validator("plates", "dumbbells")
    @classmethod
    def positive_units(cls, v):
        if any(unit <= 0 for unit in v):
            raise ValueError("loading units must be positive")
        return v

    def to_domain(self) -> LoadInventory:
        return LoadInventory(
            bar_weight=self.bar_weight,
            plates=tuple(sorted(self.plates, reverse=True)),
            dumbbells=tuple(sorted(self.dumbbells)),
            fixed_increment=self.fixed_increment,
        )


class CoachContextInput(BaseModel):
    template_name: str = Field(min_length=1, max_length=140)
    slots: list[ExerciseSlotInput] = Field(min_length=1)
    readiness: ReadinessInput = Field(default_factory=ReadinessInput)
    equipment: list[str] = Field(default_factory=lambda: ["bodyweight"])
    history: list[SessionInput] = Field(default_factory=list)
    pain_flags: list[PainFlagInput] = Field(default_factory=list)
    inventory: LoadInventoryInput = Field(default_factory=LoadInventoryInput)
    week_type: Optional[str] = None

    @field_validator("equipment")
    @classmethod
    def valid_equipment(cls, v):
        return _check_equipment(v)

    @field_validator("week_type")
    @classmethod
    def known_week_type(cls, v):
        if v is None:
            return v
        return get_week_type(v).name

    def to_domain(self) -> CoachContext:
        return CoachContext(
            template_name=self.template_name,
            slots=tuple(s.to_domain() for s in self.slots),
            readiness=self.readiness.to_domain(),
            # Bodyweight work is always possible.
            equipment=frozenset(self.equipment) | {"bodyweight"},
            history=_sessions_by_exercise(self.history),
            pain_flags=tuple(p.to_domain() for p in self.pain_flags),
            inventory=self.inventory.to_domain(),
            week_type=self.week_type,
        )


class StallRequestInput(BaseModel):
    exercise_name: str = Field(min_length=1, max_length=120)
    sessions: list[SessionInput] = Field(default_factory=list)

    def history(self) -> tuple[SessionRecord, ...]:
        """Sessions for the requested exercise, most-recent-first."""
        return _sessions_by_exercise(self.sessions).get(self.exercise_name, ())


class SubstitutionRequestInput(BaseModel):
    exercise_name: str = Field(min_length=1, max_length=120)
    equipment: list[str] = Field(default_factory=list)
    pain_flags: list[PainFlagInput] = Field(default_factory=list)
    limit: int = Field(default=3, ge=1, le=10)

    @field_validator("equipment")
    @classmethod
    def valid_equipment(cls, v):
        return _check_equipment(v)


class PlateRequestInput(BaseModel):
    target_weight: float = Field(ge=0)
    bar_weight: float = Field(default=20.0, ge=0)
    plates: list[float] = Field(default_factory=lambda: list(STANDARD_PLATES))

    @field_validator("plates")
    @classmethod
    def positive_plates(cls, v):
        if not v or any(p <= 0 for p in v):
            raise ValueError("plates must be a non-empty list of positive weights")
        return v


# --- Reviews ---


class SessionReviewInput(BaseModel):
    template_name: str = Field(min_length=1, max_length=140)
    duration_minutes: int = Field(default=0, ge=0, le=600)
    sessions: list[SessionInput] = Field(min_length=1)
    previous: list[SessionInput] = Field(default_factory=list)
    target_reps: dict[str, int] = Field(default_factory=dict)

    def to_domain(self) -> SessionSummary:
        """Summaries in logged order, each against the latest earlier session of that exercise."""
        earlier = _sessions_by_exercise(self.previous)
        records = [s.to_domain() for s in self.sessions]
        exercises = tuple(
            summarize_exercise(
                record,
                earlier.get(record.exercise_name, (None,))[0],
                self.target_reps.get(record.exercise_name),
            )
            for record in records
        )
        return SessionSummary(
            template_name=self.template_name,
            exercises=exercises,
            total_volume=sum(session_volume(r) for r in records),
            duration_minutes=self.duration_minutes,
        )


class ExerciseHighlightInput(BaseModel):
    exercise_name: str = Field(min_length=1, max_length=120)
    sessions: int = Field(default=1, ge=0)
    best_e1rm: float = Field(ge=0)
    previous_best_e1rm: Optional[float] = Field(default=None, ge=0)
    total_volume: float = Field(default=0.0, ge=0)


class WeeklyReviewInput(BaseModel):
    workout_count: int = Field(ge=0)
    total_volume: float = Field(default=0.0, ge=0)
    average_duration_minutes: int = Field(default=0, ge=0)
    highlights: list[ExerciseHighlightInput] = Field(default_factory=list)

    def to_domain(self) -> WeeklyReviewContext:
        return WeeklyReviewContext(
            workout_count=self.workout_count,
            total_volume=self.total_volume,
            average_duration_minutes=self.average_duration_minutes,
            highlights=tuple(ExerciseHighlight(**h.model_dump()) for h in self.highlights),
        )


# --- Externally produced plans (e.g. from a language model) ---


class PlannedSetPayload(BaseModel):
    weight: float = Field(ge=0)
    reps: int = Field(ge=1)
    rpe_cap: Optional[float] = Field(default=None, ge=1, le=10)
    set_count: int = Field(default=1, ge=1)

    def to_domain(self) -> PlannedSet:
        return PlannedSet(weight=self.weight, reps=self.reps, rpe_cap=self.rpe_cap, set_count=self.set_count)


class PlannedExercisePayload(BaseModel):
    exercise_name: str = Field(min_length=1)
    warmup_sets: list[PlannedSetPayload] = Field(default_factory=list)
    top_set: Optional[PlannedSetPayload] = None
    backoff_sets: list[PlannedSetPayload] = Field(default_factory=list)
    working_sets: list[PlannedSetPayload] = Field(default_factory=list)
    reasoning: str = ""

    def to_domain(self) -> PlannedExercise:
        return PlannedExercise(
            exercise_name=self.exercise_name,
            warmup_sets=tuple(s.to_domain() for s in self.warmup_sets),
            top_set=self.top_set.to_domain() if self.top_set else None,
            backoff_sets=tuple(s.to_domain() for s in self.backoff_sets),
            working_sets=tuple(s.to_domain() for s in self.working_sets),
            reasoning=self.reasoning,
        )


class SubstitutionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_exercise: str = Field(alias="from")
    to_exercise: str = Field(alias="to")
    reason: str = ""


class PlanPayload(BaseModel):
    exercises: list[PlannedExercisePayload]
    substitutions: list[SubstitutionPayload] = Field(default_factory=list)
    adjustments: list[str] = Field(default_factory=list)
    reasoning: list[str] = Field(default_factory=list)
    estimated_duration_minutes: int = Field(default=0, ge=0)

    def to_domain(self, source: str = "llm") -> PlanResponse:
        return PlanResponse(
            exercises=tuple(e.to_domain() for e in self.exercises),
            substitutions=tuple(
                Substitution(from_exercise=s.from_exercise, to_exercise=s.to_exercise, reason=s.reason)
                for s in self.substitutions
            ),
            adjustments=tuple(self.adjustments),
            reasoning=tuple(self.reasoning),
            estimated_duration_minutes=self.estimated_duration_minutes,
            source=source,
        )
