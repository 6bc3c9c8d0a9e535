from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    status: str
    env: str


class PlannedSetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    weight: float
    reps: int
    rpe_cap: Optional[float] = None
    set_count: int = 1


class PlannedExerciseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    exercise_name: str
    warmup_sets: list[PlannedSetOut]
    top_set: Optional[PlannedSetOut] = None
    backoff_sets: list[PlannedSetOut]
    working_sets: list[PlannedSetOut]
    reasoning: str
    total_sets: int


class SubstitutionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    from_exercise: str
    to_exercise: str
    reason: str


class PlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    exercises: list[PlannedExerciseOut]
    substitutions: list[SubstitutionOut]
    adjustments: list[str]
    reasoning: list[str]
    estimated_duration_minutes: int
    source: str
    fallback_reason: Optional[str] = None


class StallVerdictOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_stalled: bool
    has_enough_data: bool
    reason: Optional[str] = None
    fix_type: Optional[str] = None
    details: Optional[str] = None
    suggested_fix: Optional[str] = None
    variations: list[str]
    target_weight: Optional[float] = None


class ExerciseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    movement_pattern: str
    primary_muscles: list[str]
    secondary_muscles: list[str]
    equipment_required: list[str]
    is_compound: bool
    default_progression: str


class SubstitutionsResponse(BaseModel):
    exercise_name: str
    reason: Optional[str] = None
    substitutes: list[ExerciseOut]
    best: Optional[ExerciseOut] = None


class PlateBreakdownResponse(BaseModel):
    target_weight: float
    bar_weight: float
    feasible: bool
    plates_per_side: list[float]
    instruction: str
    nearest_loadable: float
    warmups: list[float]


class InsightOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    insight: str
    action: str
    category: str


class WeeklyReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    summary: str
    highlights: list[str]
    areas_to_improve: list[str]
    recommendation: str
    consistency_score: int
