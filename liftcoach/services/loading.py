"""Plate and dumbbell math: turning target weights into loadable ones.

A barbell is loaded symmetrically with identical plate pairs, so the load
above the bar is split in half and decomposed greedily, largest plate first.
The greedy decomposition is exact for the standard 25/20/15/10/5/2.5/1.25
denominations. For unusual inventories (e.g. only 15s and 10s) it can miss
a decomposition that exists; that is a known limitation and the greedy
result is kept as-is because callers rely on its exact output.

Infeasible decompositions are reported in the return value, never raised.
The engine entry points fall back to ``feasible_load``: the nearest total on
the ``nearest_loadable`` grid that the greedy decomposition accepts, so every
resolved weight is one ``is_loadable`` agrees with.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from liftcoach.models import LOAD_BARBELL, LOAD_DUMBBELL, STANDARD_DUMBBELLS, STANDARD_PLATES, LoadInventory

logger = logging.getLogger(__name__)

RESIDUAL_TOLERANCE = 0.001
_EPS = 1e-9
WARMUP_PERCENTAGES = (0.4, 0.6, 0.8)
FEASIBLE_SEARCH_STEPS = 20


@dataclass(frozen=True)
class PlateBreakdown:
    """Per-side plate list for a barbell total, or an infeasible marker."""
    target: float
    bar_weight: float
    plates_per_side: tuple[float, ...]
    feasible: bool

    @property
    def loaded_total(self) -> float:
        return self.bar_weight + 2 * sum(self.plates_per_side)


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


def _clean(value: float) -> float:
    # Strip float noise from repeated increments (e.g. 62.50000000001).
    return round(value, 4)


def plates_per_side(
    target_weight: float,
    bar_weight: float = 20.0,
    available_plates: Sequence[float] = STANDARD_PLATES,
) -> PlateBreakdown:
    """Greedy per-side decomposition of ``target_weight`` on a ``bar_weight`` bar."""
    infeasible = PlateBreakdown(target=target_weight, bar_weight=bar_weight, plates_per_side=(), feasible=False)
    to_load = target_weight - bar_weight
    if to_load < -_EPS:
        return infeasible
    # Odd totals need a 1.25 pair to split evenly across both sides.
    if to_load % 2 != 0 and 1.25 not in available_plates:
        return infeasible

    remaining = to_load / 2
    plates: list[float] = []
    for plate in sorted((p for p in available_plates if p > 0), reverse=True):
        while remaining >= plate - _EPS:
            plates.append(plate)
            remaining -= plate

    if abs(remaining) < RESIDUAL_TOLERANCE:
        return PlateBreakdown(target=target_weight, bar_weight=bar_weight, plates_per_side=tuple(plates), feasible=True)
    return infeasible


def format_plates(plates: Sequence[float]) -> str:
    """Render a per-side plate list as '25 + 10 + 5', or 'Empty bar'."""
    if not plates:
        return "Empty bar"
    return " + ".join(f"{p:g}" for p in plates)


def loading_instruction(
    target_weight: float,
    bar_weight: float = 20.0,
    available_plates: Sequence[float] = STANDARD_PLATES,
) -> str:
    breakdown = plates_per_side(target_weight, bar_weight, available_plates)
    if not breakdown.feasible:
        return f"Cannot load {target_weight:g}kg with available plates"
    if not breakdown.plates_per_side:
        return f"Empty bar ({bar_weight:g}kg)"
    return f"{format_plates(breakdown.plates_per_side)} each side"


def _barbell_step(available_plates: Sequence[float]) -> Optional[float]:
    smallest = min((p for p in available_plates if p > 0), default=None)
    return smallest * 2 if smallest is not None else None


def nearest_loadable(
    weight: float,
    available_plates: Sequence[float] = STANDARD_PLATES,
    bar_weight: float = 20.0,
) -> float:
    """Round to the nearest multiple of two of the smallest plate above the bar.

    Never returns less than the bar itself. Without plates only the bar is left.
    """
    step = _barbell_step(available_plates)
    if step is None:
        return _clean(bar_weight)
    rounded = _round_half_up((weight - bar_weight) / step) * step
    return _clean(bar_weight + max(0.0, rounded))


def feasible_load(
    target: float,
    bar_weight: float = 20.0,
    available_plates: Sequence[float] = STANDARD_PLATES,
    direction: int = 0,
) -> float:
    """Closest barbell total that ``plates_per_side`` accepts.

    Candidates are the ``nearest_loadable`` grid around ``target``. A positive
    ``direction`` keeps to totals at or above the target, a negative one to
    totals at or below it; when no candidate qualifies the closest accepted
    total is used. The empty bar is always accepted.
    """
    step = _barbell_step(available_plates)
    if step is None:
        return _clean(bar_weight)
    centre = _round_half_up((target - bar_weight) / step)
    steps = {0} | set(range(max(0, centre - FEASIBLE_SEARCH_STEPS), centre + FEASIBLE_SEARCH_STEPS + 1))
    accepted = []
    for k in sorted(steps):
        total = _clean(bar_weight + k * step)
        if plates_per_side(total, bar_weight, available_plates).feasible:
            accepted.append(total)

    if direction > 0:
        pool = [w for w in accepted if w >= target - _EPS] or accepted
    elif direction < 0:
        pool = [w for w in accepted if w <= target + _EPS] or accepted
    else:
        pool = accepted
    # Heavier wins a tie, matching the half-up grid rounding.
    return min(pool, key=lambda w: (abs(w - target), -w))


def warmup_ladder(
    top_set_weight: float,
    bar_weight: float = 20.0,
    available_plates: Sequence[float] = STANDARD_PLATES,
) -> list[float]:
    """Ascending loadable warmup weights leading up to ``top_set_weight``.

    Empty bar first when the top set is more than twice the bar, then 40/60/80%
    of the top set rounded via ``nearest_loadable`` (or ``feasible_load`` where
    the plates cannot make that total), deduplicated and strictly below the
    top set.
    """
    if top_set_weight <= bar_weight:
        return []

    warmups: list[float] = []
    if top_set_weight > bar_weight * 2:
        warmups.append(bar_weight)

    for pct in WARMUP_PERCENTAGES:
        target = top_set_weight * pct
        if target <= bar_weight:
            continue
        loadable = nearest_loadable(target, available_plates, bar_weight)
        if not plates_per_side(loadable, bar_weight, available_plates).feasible:
            loadable = feasible_load(target, bar_weight, available_plates)
        if loadable not in warmups and loadable < top_set_weight:
            warmups.append(loadable)

    return sorted(warmups)


# --- Dumbbells ---


def nearest_dumbbell(weight: float, available: Sequence[float] = STANDARD_DUMBBELLS) -> Optional[float]:
    """Closest dumbbell by absolute difference; the lighter one wins a tie."""
    closest: Optional[float] = None
    smallest_diff = math.inf
    for db in sorted(available):
        diff = abs(db - weight)
        if diff < smallest_diff:
            smallest_diff = diff
            closest = db
    return closest


def next_dumbbell_up(current: float, available: Sequence[float] = STANDARD_DUMBBELLS) -> Optional[float]:
    return next((db for db in sorted(available) if db > current), None)


def next_dumbbell_down(current: float, available: Sequence[float] = STANDARD_DUMBBELLS) -> Optional[float]:
    return next((db for db in sorted(available, reverse=True) if db < current), None)


# --- Engine entry points ---


def _fixed_step(inventory: LoadInventory) -> float:
    return inventory.fixed_increment if inventory.fixed_increment > 0 else 1.25


def resolve_load(target: float, inventory: LoadInventory, mode: str) -> float:
    """Nearest weight that is physically loadable for ``mode``; never negative."""
    target = max(0.0, target)
    if mode == LOAD_BARBELL:
        breakdown = plates_per_side(target, inventory.bar_weight, inventory.plates)
        if breakdown.feasible:
            return _clean(target)
        fallback = feasible_load(target, inventory.bar_weight, inventory.plates)
        logger.debug(
            "infeasible plate load, using nearest loadable",
            extra={"ctx_target": target, "ctx_resolved": fallback},
        )
        return fallback
    if mode == LOAD_DUMBBELL and inventory.dumbbells:
        return nearest_dumbbell(target, inventory.dumbbells)
    step = _fixed_step(inventory)
    return _clean(_round_half_up(target / step) * step)


def round_up_load(target: float, inventory: LoadInventory, mode: str) -> float:
    """Smallest loadable weight at or above ``target``.

    Used for progression jumps so that an increase is never rounded away.
    Dumbbells top out at the heaviest pair available.
    """
    target = max(0.0, target)
    if mode == LOAD_BARBELL:
        if plates_per_side(target, inventory.bar_weight, inventory.plates).feasible:
            return _clean(target)
        return feasible_load(target, inventory.bar_weight, inventory.plates, direction=1)
    if mode == LOAD_DUMBBELL and inventory.dumbbells:
        at_or_above = [db for db in sorted(inventory.dumbbells) if db >= target - _EPS]
        return at_or_above[0] if at_or_above else max(inventory.dumbbells)
    step = _fixed_step(inventory)
    return _clean(math.ceil(target / step - _EPS) * step)


def is_loadable(weight: float, inventory: LoadInventory, mode: str) -> bool:
    """True when ``weight`` can be produced exactly with the inventory."""
    if weight < 0:
        return False
    if mode == LOAD_BARBELL:
        return plates_per_side(weight, inventory.bar_weight, inventory.plates).feasible
    if mode == LOAD_DUMBBELL and inventory.dumbbells:
        return any(abs(db - weight) < RESIDUAL_TOLERANCE for db in inventory.dumbbells)
    step = _fixed_step(inventory)
    ratio = weight / step
    return abs(ratio - round(ratio)) < RESIDUAL_TOLERANCE
