"""Today's plan: readiness -> substitutions -> progression -> loadable weights.

``generate_plan`` is the deterministic planner and always returns a plan.
``resolve_plan`` optionally asks an external producer (typically a language
model behind the caller's own client and timeout) for a plan in the same
contract, checks it against the rules enforced here, and falls back to the
deterministic plan when the producer fails or its plan does not hold up.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from liftcoach.config import get_settings
from liftcoach.logging_config import log_context
from liftcoach.models import CoachContext, ExerciseInfo, ExerciseSlot, PlannedExercise, PlanResponse, Substitution
from liftcoach.services.exercise_catalog import EXERCISE_CATALOG, SUBSTITUTION_GRAPH
from liftcoach.services.loading import is_loadable
from liftcoach.services.periodization import WeekType, apply_week_modifiers, get_week_type
from liftcoach.services.progression import exercise_info_for, last_top_set, plan_exercise
from liftcoach.services.readiness import readiness_directives
from liftcoach.services.substitution import (
    REASON_EQUIPMENT_MISSING,
    REASON_PAIN_FLAG,
    active_pain_body_parts,
    best_substitute,
    substitution_reason,
)
from liftcoach.validators import PlanPayload

logger = logging.getLogger(__name__)

PlanProducer = Callable[[CoachContext], Mapping[str, Any]]

_RPE_TOLERANCE = 1e-9


def estimate_duration(exercises: tuple[PlannedExercise, ...]) -> int:
    """Minutes for the session, assuming a flat per-set cost including rest."""
    return sum(e.total_sets for e in exercises) * get_settings().minutes_per_set


def _week_for(context: CoachContext) -> Optional[WeekType]:
    return get_week_type(context.week_type) if context.week_type else None


def generate_plan(context: CoachContext, catalog: Mapping[str, ExerciseInfo] = EXERCISE_CATALOG) -> PlanResponse:
    directives = readiness_directives(context.readiness)
    week = _week_for(context)
    exercises: list[PlannedExercise] = []
    substitutions: list[Substitution] = []
    adjustments: list[str] = list(directives.notes)
    reasoning: list[str] = []
    if week is not None:
        adjustments.append(week.coaching_note)

    painful = active_pain_body_parts(context.pain_flags)
    if painful:
        adjustments.append(f"Pain-aware plan: avoiding exercises targeting {', '.join(sorted(painful))}")

    for slot in context.slots:
        if slot.is_optional and not directives.include_optional:
            reasoning.append(f"Skipped optional {slot.name} due to time constraint")
            continue

        name = slot.name
        info = catalog.get(name)
        if info is not None:
            reason = substitution_reason(info, context.equipment, context.pain_flags)
            if reason is not None:
                sub = best_substitute(name, context.equipment, context.pain_flags, catalog)
                if sub is not None:
                    substitutions.append(Substitution(from_exercise=name, to_exercise=sub.name, reason=reason))
                    reasoning.append(f"Substituted {name} -> {sub.name} ({reason})")
                    name, info = sub.name, sub
                elif reason == REASON_EQUIPMENT_MISSING:
                    reasoning.append(f"Dropped {name}: equipment missing and no substitute available")
                    continue
                else:
                    adjustments.append(f"No pain-safe substitute for {name}; keep loads conservative")

        if name != slot.name:
            # Starting loads belong to the original exercise.
            slot = replace(slot, name=name, starting_weight=None, estimated_1rm=None)

        history = context.history.get(name, ())
        with log_context(exercise=name):
            planned = plan_exercise(
                slot,
                history,
                directives,
                context.inventory,
                exercise=info,
                stall_verdict=context.stall_verdicts.get(name),
                week=week,
            )
        exercises.append(planned)

        last = last_top_set(history)
        if last is not None:
            reasoning.append(f"{name}: Last {last.weight:g}kg x {last.reps}")

    planned_exercises = tuple(exercises)
    return PlanResponse(
        exercises=planned_exercises,
        substitutions=tuple(substitutions),
        adjustments=tuple(adjustments),
        reasoning=tuple(reasoning),
        estimated_duration_minutes=estimate_duration(planned_exercises),
        source="offline",
    )


def _slot_for(name: str, slots: tuple[ExerciseSlot, ...]) -> Optional[ExerciseSlot]:
    for slot in slots:
        if slot.name == name:
            return slot
    for slot in slots:
        if name in SUBSTITUTION_GRAPH.get(slot.name, ()):
            return slot
    return None


def validate_plan(
    plan: PlanResponse,
    context: CoachContext,
    catalog: Mapping[str, ExerciseInfo] = EXERCISE_CATALOG,
) -> tuple[str, ...]:
    """Problems that make ``plan`` unusable for ``context``; empty when it holds up.

    Checks that every exercise belongs to the template (or is a listed
    substitute), respects today's time budget for optional slots, can be done
    with today's equipment, avoids pain-flagged body parts whenever a pain-safe
    substitute exists, uses only loadable weights, and keeps RPE caps within
    the week- and readiness-adjusted cap.
    """
    directives = readiness_directives(context.readiness)
    week = _week_for(context)
    issues: list[str] = []

    for exercise in plan.exercises:
        name = exercise.exercise_name
        slot = _slot_for(name, context.slots)
        if slot is None:
            issues.append(f"{name}: not part of template {context.template_name!r}")
            continue
        if slot.is_optional and not directives.include_optional:
            issues.append(f"{name}: optional exercise with only {context.readiness.time_available_minutes} min available")

        info = exercise_info_for(name, catalog)
        if not info.equipment_required <= context.equipment:
            issues.append(f"{name}: requires unavailable equipment")
        elif substitution_reason(info, context.equipment, context.pain_flags) == REASON_PAIN_FLAG:
            safe = best_substitute(name, context.equipment, context.pain_flags, catalog)
            if safe is not None:
                issues.append(f"{name}: loads a pain-flagged body part; {safe.name} is pain-safe")

        for planned in exercise.all_sets():
            if planned.set_count < 1 or planned.reps < 1:
                issues.append(f"{name}: set counts and reps must be positive")
            if not is_loadable(planned.weight, context.inventory, info.load_mode):
                issues.append(f"{name}: {planned.weight:g}kg is not loadable")

        prescription = slot.prescription if week is None else apply_week_modifiers(slot.prescription, week)
        cap = directives.apply_rpe_cap(prescription.rpe_cap)
        working = exercise.all_sets()[len(exercise.warmup_sets):]
        for planned in working:
            if planned.rpe_cap is not None and planned.rpe_cap > cap + _RPE_TOLERANCE:
                issues.append(f"{name}: RPE cap {planned.rpe_cap:g} exceeds {cap:g}")

    return tuple(issues)


def resolve_plan(
    context: CoachContext,
    producer: Optional[PlanProducer] = None,
    catalog: Mapping[str, ExerciseInfo] = EXERCISE_CATALOG,
) -> PlanResponse:
    """Plan from ``producer`` when it returns a valid plan, otherwise the deterministic one."""
    with log_context(template=context.template_name, week_type=context.week_type):
        return _resolve(context, producer, catalog)


def _resolve(
    context: CoachContext,
    producer: Optional[PlanProducer],
    catalog: Mapping[str, ExerciseInfo],
) -> PlanResponse:
    if producer is None:
        return generate_plan(context, catalog)

    try:
        candidate = PlanPayload.model_validate(producer(context)).to_domain(source="llm")
    except ValidationError as exc:
        reason = f"invalid plan payload ({exc.error_count()} errors)"
        logger.warning("external plan rejected", extra={"ctx_reason": reason})
        return replace(generate_plan(context, catalog), fallback_reason=reason)
    except Exception as exc:
        reason = f"plan producer failed: {type(exc).__name__}: {exc}"
        logger.warning("external plan producer failed, using offline plan", exc_info=True, extra={"ctx_reason": reason})
        return replace(generate_plan(context, catalog), fallback_reason=reason)

    issues = validate_plan(candidate, context, catalog)
    if issues:
        reason = "; ".join(issues[:3])
        logger.warning("external plan failed validation", extra={"ctx_reason": reason, "ctx_issue_count": len(issues)})
        return replace(generate_plan(context, catalog), fallback_reason=reason)

    return candidate
