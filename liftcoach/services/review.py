"""Post-session insight and weekly review, computed from logged history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from liftcoach.models import SessionRecord

CATEGORY_PROGRESS = "progress"
CATEGORY_FATIGUE = "fatigue"

HIGH_VOLUME_KG = 15000
SOLID_VOLUME_KG = 8000
ON_TRACK_VOLUME_KG = 10000
SHORT_SESSION_MINUTES = 40
TARGET_SESSIONS_PER_WEEK = 3
MAX_PR_NAMES = 3


@dataclass(frozen=True)
class ExerciseSummary:
    name: str
    e1rm: float
    previous_e1rm: Optional[float] = None
    target_hit: bool = True


@dataclass(frozen=True)
class SessionSummary:
    template_name: str
    exercises: tuple[ExerciseSummary, ...]
    total_volume: float = 0.0
    duration_minutes: int = 0


@dataclass(frozen=True)
class Insight:
    insight: str
    action: str
    category: str


@dataclass(frozen=True)
class ExerciseHighlight:
    exercise_name: str
    sessions: int
    best_e1rm: float
    previous_best_e1rm: Optional[float] = None
    total_volume: float = 0.0

    @property
    def is_pr(self) -> bool:
        return self.previous_best_e1rm is not None and self.best_e1rm > self.previous_best_e1rm


@dataclass(frozen=True)
class WeeklyReviewContext:
    workout_count: int
    total_volume: float
    average_duration_minutes: int
    highlights: tuple[ExerciseHighlight, ...] = ()


@dataclass(frozen=True)
class WeeklyReview:
    summary: str
    highlights: tuple[str, ...]
    areas_to_improve: tuple[str, ...]
    recommendation: str
    consistency_score: int


def session_volume(session: SessionRecord) -> float:
    """Sum of weight x reps over completed work sets."""
    return sum(s.weight * s.reps for s in session.work_sets)


def summarize_exercise(
    session: SessionRecord,
    previous: Optional[SessionRecord] = None,
    target_reps: Optional[int] = None,
) -> ExerciseSummary:
    """Summary of one logged exercise against its previous session and rep target."""
    top = session.top_set
    prev_top = previous.top_set if previous is not None else None
    target_hit = True
    if target_reps is not None:
        target_hit = top is not None and top.reps >= target_reps
    return ExerciseSummary(
        name=session.exercise_name,
        e1rm=top.e1rm if top else 0.0,
        previous_e1rm=prev_top.e1rm if prev_top else None,
        target_hit=target_hit,
    )


def session_insight(summary: SessionSummary) -> Insight:
    """The single most relevant takeaway from a finished session.

    e1RM gains and missed rep targets are collected in exercise order and the
    first one wins; a session with neither gets a generic progress note.
    """
    for exercise in summary.exercises:
        prev = exercise.previous_e1rm
        if prev and exercise.e1rm > prev:
            improvement = (exercise.e1rm - prev) / prev * 100
            return Insight(
                insight=f"{exercise.name} e1RM improved by {improvement:.1f}%",
                action="Keep current progression, add weight next session",
                category=CATEGORY_PROGRESS,
            )
        if not exercise.target_hit:
            return Insight(
                insight=f"{exercise.name} missed rep target",
                action="Keep weight the same, focus on hitting target reps next time",
                category=CATEGORY_FATIGUE,
            )

    return Insight(
        insight="Solid workout completed",
        action="Continue current program, small weight increases where possible",
        category=CATEGORY_PROGRESS,
    )


def consistency(workout_count: int) -> tuple[int, str]:
    """(score out of 10, message) for the number of workouts in the period."""
    if workout_count <= 0:
        return 1, "No workouts recorded this period."
    if workout_count == 1:
        return 3, "You completed 1 workout."
    if workout_count == 2:
        return 5, "You completed 2 workouts."
    if workout_count == 3:
        return 7, "You completed 3 workouts. Good consistency!"
    if workout_count == 4:
        return 8, "You completed 4 workouts. Excellent consistency!"
    return 9, f"You completed {workout_count} workouts. Outstanding commitment!"


def weekly_review(context: WeeklyReviewContext) -> WeeklyReview:
    count = context.workout_count
    volume = context.total_volume
    prs: Sequence[ExerciseHighlight] = [h for h in context.highlights if h.is_pr]

    highlights: list[str] = []
    areas: list[str] = []

    if prs:
        names = ", ".join(h.exercise_name for h in prs[:MAX_PR_NAMES])
        highlights.append(f"Hit PRs on {names}")

    score, message = consistency(count)
    if count >= 4:
        highlights.append("Maintained excellent training frequency")

    if volume > HIGH_VOLUME_KG:
        highlights.append(f"High training volume ({int(volume / 1000)}k kg)")
    elif volume > SOLID_VOLUME_KG:
        highlights.append("Solid training volume this week")

    if count < TARGET_SESSIONS_PER_WEEK:
        areas.append("Try to fit in at least 3 sessions per week for optimal progress")
    if not prs and count >= 2:
        areas.append("Focus on progressive overload - aim for small weight or rep increases")
    if context.average_duration_minutes < SHORT_SESSION_MINUTES and count > 0:
        areas.append("Consider longer sessions to include more accessory work")

    summary = message
    if prs:
        summary += f" You set {len(prs)} personal record(s)."
    if volume > ON_TRACK_VOLUME_KG:
        summary += " Your volume is on track."
    elif count > 0:
        summary += " There's room to increase volume if recovery allows."

    if count < 2:
        recommendation = "Prioritize getting to the gym at least 3 times this week."
    elif not prs:
        recommendation = "Focus on adding 1 rep or 2.5kg to your main lifts this week."
    elif volume > HIGH_VOLUME_KG:
        recommendation = "Monitor fatigue levels and consider a lighter week if needed."
    else:
        recommendation = "Keep up the momentum! Stay consistent and trust the process."

    return WeeklyReview(
        summary=summary,
        highlights=tuple(highlights) or ("Showed up and put in the work",),
        areas_to_improve=tuple(areas) or ("Keep pushing - you're on track",),
        recommendation=recommendation,
        consistency_score=score,
    )
