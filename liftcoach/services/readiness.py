from __future__ import annotations

from dataclasses import dataclass

from liftcoach.config import get_settings
from liftcoach.models import Readiness

INTENSITY_REDUCE = "reduce"
INTENSITY_INCREASE = "increase"
INTENSITY_NEUTRAL = "neutral"


@dataclass(frozen=True)
class ReadinessDirectives:
    """Advisory deltas for today's session, consumed by the progression engine."""
    intensity: str
    rpe_cap_limit: float | None     # hard ceiling when reducing
    rpe_cap_delta: float            # additive bump when increasing
    rpe_cap_ceiling: float
    backoff_set_delta: int
    working_set_delta: int
    include_optional: bool
    notes: tuple[str, ...] = ()

    def apply_rpe_cap(self, cap: float) -> float:
        if self.rpe_cap_limit is not None:
            return min(cap, self.rpe_cap_limit)
        if self.rpe_cap_delta:
            return min(cap + self.rpe_cap_delta, self.rpe_cap_ceiling)
        return cap

    def apply_backoff_sets(self, count: int) -> int:
        if count <= 0:
            return 0
        return max(1, count + self.backoff_set_delta)

    def apply_working_sets(self, count: int) -> int:
        if count <= 0:
            return 0
        return max(1, count + self.working_set_delta)


def readiness_directives(readiness: Readiness) -> ReadinessDirectives:
    settings = get_settings()
    include_optional = readiness.time_available_minutes > settings.optional_cutoff_minutes
    notes: list[str] = []

    if readiness.should_reduce_intensity:
        notes.append(f"Reduced intensity due to {readiness.energy} energy / {readiness.soreness} soreness")
        directives = dict(
            intensity=INTENSITY_REDUCE,
            rpe_cap_limit=settings.reduced_rpe_cap,
            rpe_cap_delta=0.0,
            backoff_set_delta=-1,
            working_set_delta=-1,
        )
    elif readiness.should_increase_intensity:
        notes.append("Feeling fresh: RPE cap raised and one extra backoff set allowed")
        directives = dict(
            intensity=INTENSITY_INCREASE,
            rpe_cap_limit=None,
            rpe_cap_delta=settings.rpe_cap_bonus,
            backoff_set_delta=1,
            working_set_delta=0,
        )
    else:
        directives = dict(
            intensity=INTENSITY_NEUTRAL,
            rpe_cap_limit=None,
            rpe_cap_delta=0.0,
            backoff_set_delta=0,
            working_set_delta=0,
        )

    if not include_optional:
        notes.append(f"Optional exercises dropped: only {readiness.time_available_minutes} min available")

    return ReadinessDirectives(
        rpe_cap_ceiling=settings.rpe_cap_ceiling,
        include_optional=include_optional,
        notes=tuple(notes),
        **directives,
    )


NEUTRAL_DIRECTIVES = ReadinessDirectives(
    intensity=INTENSITY_NEUTRAL,
    rpe_cap_limit=None,
    rpe_cap_delta=0.0,
    rpe_cap_ceiling=9.5,
    backoff_set_delta=0,
    working_set_delta=0,
    include_optional=True,
)
