"""Estimated one-rep max (e1RM) conversions.

The Epley model is the shared currency for comparing sets performed at
different rep counts: every top-set comparison in the progression and stall
logic goes through ``estimate_1rm``. Brzycki is offered as an alternate model
and must not be mixed with Epley values in the same comparison.

All functions are total: invalid input (zero reps, non-positive weight)
yields 0 instead of raising so downstream arithmetic stays well-defined.
"""

from __future__ import annotations

EPLEY_DIVISOR = 30.0
BRZYCKI_MAX_REPS = 36


def estimate_1rm(weight: float, reps: int) -> float:
    """Epley: e1RM = weight x (1 + reps/30). A single is its own max."""
    if reps <= 0 or weight <= 0:
        return 0.0
    if reps == 1:
        return float(weight)
    return weight * (1 + reps / EPLEY_DIVISOR)


def estimate_1rm_brzycki(weight: float, reps: int) -> float:
    """Brzycki: e1RM = weight x 36 / (37 - reps), defined for 1-36 reps.

    Outside that range the model is undefined and the plain weight is returned.
    """
    if reps <= 0 or weight <= 0:
        return 0.0
    if reps == 1 or reps > BRZYCKI_MAX_REPS:
        return float(weight)
    return weight * (36.0 / (37.0 - reps))


def weight_for_reps(e1rm: float, reps: int) -> float:
    """Invert Epley: the load that corresponds to ``e1rm`` at ``reps``."""
    if reps <= 0 or e1rm <= 0:
        return 0.0
    if reps == 1:
        return float(e1rm)
    return e1rm / (1 + reps / EPLEY_DIVISOR)


def percentage_of_1rm(weight: float, reps: int) -> float:
    """Share of the estimated max that ``weight`` represents, in percent."""
    e1rm = estimate_1rm(weight, reps)
    if e1rm <= 0:
        return 0.0
    return weight / e1rm * 100


def reps_at_percentage(percentage: float) -> int:
    """Recommended rep count for a percentage-of-max scheme (Epley inverse)."""
    fraction = percentage / 100.0
    if fraction <= 0 or fraction > 1:
        return 1
    reps = EPLEY_DIVISOR * (1.0 / fraction - 1.0)
    return max(1, int(reps + 0.5))
