from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from api.schemas import (
    ExerciseOut,
    HealthResponse,
    InsightOut,
    PlanOut,
    PlateBreakdownResponse,
    StallVerdictOut,
    SubstitutionsResponse,
    WeeklyReviewOut,
)
from liftcoach.config import get_settings
from liftcoach.models import ExerciseInfo
from liftcoach.services.coach import resolve_plan
from liftcoach.services.exercise_catalog import EXERCISE_CATALOG, get_exercise
from liftcoach.services.loading import loading_instruction, nearest_loadable, plates_per_side, warmup_ladder
from liftcoach.services.review import session_insight, weekly_review
from liftcoach.services.stall import detect_stall
from liftcoach.services.substitution import find_substitutes, substitution_reason
from liftcoach.validators import (
    CoachContextInput,
    PlateRequestInput,
    SessionReviewInput,
    StallRequestInput,
    SubstitutionRequestInput,
    WeeklyReviewInput,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")


def _exercise_out(info: ExerciseInfo) -> ExerciseOut:
    return ExerciseOut(
        name=info.name,
        movement_pattern=info.movement_pattern,
        primary_muscles=list(info.primary_muscles),
        secondary_muscles=list(info.secondary_muscles),
        equipment_required=sorted(info.equipment_required),
        is_compound=info.is_compound,
        default_progression=info.default_progression,
    )


@router.get("/health", response_model=HealthResponse, tags=["system"])
def health():
    return HealthResponse(status="ok", env=get_settings().app_env)


@router.post("/plan", response_model=PlanOut, tags=["coach"])
def plan_session(payload: CoachContextInput):
    context = payload.to_domain()
    plan = resolve_plan(context)
    logger.info(
        "plan_generated",
        extra={
            "ctx_template": context.template_name,
            "ctx_exercises": len(plan.exercises),
            "ctx_substitutions": len(plan.substitutions),
            "ctx_source": plan.source,
            "ctx_week_type": context.week_type,
        },
    )
    return PlanOut.model_validate(plan)


@router.post("/stall", response_model=StallVerdictOut, tags=["coach"])
def stall_check(payload: StallRequestInput):
    verdict = detect_stall(payload.exercise_name, payload.history())
    return StallVerdictOut.model_validate(verdict)


@router.post("/substitutions", response_model=SubstitutionsResponse, tags=["coach"])
def substitutions(payload: SubstitutionRequestInput):
    info = get_exercise(payload.exercise_name)
    if info is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown exercise: {payload.exercise_name}")

    equipment = frozenset(payload.equipment) | {"bodyweight"}
    pain_flags = tuple(p.to_domain() for p in payload.pain_flags)
    found = find_substitutes(payload.exercise_name, equipment, pain_flags, limit=payload.limit)
    return SubstitutionsResponse(
        exercise_name=payload.exercise_name,
        reason=substitution_reason(info, equipment, pain_flags),
        substitutes=[_exercise_out(ex) for ex in found],
        best=_exercise_out(found[0]) if found else None,
    )


@router.post("/plates", response_model=PlateBreakdownResponse, tags=["loading"])
def plates(payload: PlateRequestInput):
    breakdown = plates_per_side(payload.target_weight, payload.bar_weight, payload.plates)
    return PlateBreakdownResponse(
        target_weight=payload.target_weight,
        bar_weight=payload.bar_weight,
        feasible=breakdown.feasible,
        plates_per_side=list(breakdown.plates_per_side),
        instruction=loading_instruction(payload.target_weight, payload.bar_weight, payload.plates),
        nearest_loadable=nearest_loadable(payload.target_weight, payload.plates, payload.bar_weight),
        warmups=warmup_ladder(payload.target_weight, payload.bar_weight, payload.plates),
    )


@router.get("/exercises", response_model=list[ExerciseOut], tags=["catalog"])
def list_exercises():
    return [_exercise_out(info) for info in EXERCISE_CATALOG.values()]


@router.post("/review/session", response_model=InsightOut, tags=["review"])
def review_session(payload: SessionReviewInput):
    return InsightOut.model_validate(session_insight(payload.to_domain()))


@router.post("/review/weekly", response_model=WeeklyReviewOut, tags=["review"])
def review_week(payload: WeeklyReviewInput):
    return WeeklyReviewOut.model_validate(weekly_review(payload.to_domain()))
