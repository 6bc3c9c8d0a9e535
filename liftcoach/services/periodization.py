"""Training-week modifiers for periodized blocks.

A block mixes regular weeks with deload, peak and test weeks. Each week type
scales working loads by an intensity factor and caps the prescription's RPE.
Deload and test weeks also trim backoff and working set counts by a volume
factor; regular and peak weeks keep the prescribed sets.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from liftcoach.models import Prescription

WEEK_REGULAR = "regular"
WEEK_DELOAD = "deload"
WEEK_PEAK = "peak"
WEEK_TEST = "test"


@dataclass(frozen=True)
class WeekType:
    name: str
    intensity_modifier: float
    volume_modifier: float
    rpe_cap: float
    trims_volume: bool
    coaching_note: str


WEEK_TYPES: dict[str, WeekType] = {
    WEEK_REGULAR: WeekType(
        name=WEEK_REGULAR,
        intensity_modifier=1.0,
        volume_modifier=1.0,
        rpe_cap=8.5,
        trims_volume=False,
        coaching_note="Regular week: focus on progressive overload and proper form",
    ),
    WEEK_DELOAD: WeekType(
        name=WEEK_DELOAD,
        intensity_modifier=0.6,
        volume_modifier=0.5,
        rpe_cap=6.5,
        trims_volume=True,
        coaching_note="Deload week: 60% loads and half the sets, focus on technique",
    ),
    WEEK_PEAK: WeekType(
        name=WEEK_PEAK,
        intensity_modifier=1.05,
        volume_modifier=0.75,
        rpe_cap=9.0,
        trims_volume=False,
        coaching_note="Peak week: loads at 105%, push the weights but keep reps lower",
    ),
    WEEK_TEST: WeekType(
        name=WEEK_TEST,
        intensity_modifier=1.0,
        volume_modifier=0.3,
        rpe_cap=10.0,
        trims_volume=True,
        coaching_note="Test week: minimal volume, warm up thoroughly and rest fully between attempts",
    ),
}


def get_week_type(name: str) -> WeekType:
    key = name.strip().lower()
    if key not in WEEK_TYPES:
        raise ValueError(f"Unknown week type: {name!r}. Choose from {sorted(WEEK_TYPES)}")
    return WEEK_TYPES[key]


def _scaled_sets(count: int, modifier: float) -> int:
    if count <= 0:
        return 0
    return max(1, int(count * modifier))


def apply_week_modifiers(prescription: Prescription, week: WeekType) -> Prescription:
    """Prescription for this week: RPE capped, sets trimmed on deload and test weeks."""
    rpe_cap = min(week.rpe_cap, prescription.rpe_cap)
    if not week.trims_volume:
        return replace(prescription, rpe_cap=rpe_cap)
    return replace(
        prescription,
        rpe_cap=rpe_cap,
        backoff_sets=_scaled_sets(prescription.backoff_sets, week.volume_modifier),
        working_sets=_scaled_sets(prescription.working_sets, week.volume_modifier),
    )


def adjust_weight(weight: float, week: WeekType) -> float:
    """Raw weight scaled by the week's intensity; callers resolve it to a loadable value."""
    return weight * week.intensity_modifier
