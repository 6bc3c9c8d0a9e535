"""Equipment- and pain-aware exercise substitution.

Walks the static substitution graph in priority order and accepts the first
alternative that can be performed with the available equipment and does not
load a body part with an active pain flag. "No substitute" is an ordinary
result (``None`` / empty list), not an error.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from liftcoach.models import ExerciseInfo, PainFlag
from liftcoach.services.exercise_catalog import EXERCISE_CATALOG, SUBSTITUTION_GRAPH

logger = logging.getLogger(__name__)

REASON_EQUIPMENT_MISSING = "equipment_missing"
REASON_PAIN_FLAG = "pain_flag"


def active_pain_body_parts(pain_flags: Iterable[PainFlag]) -> frozenset[str]:
    return frozenset(flag.body_part.lower() for flag in pain_flags if flag.is_active)


def _equipment_ok(exercise: ExerciseInfo, equipment: frozenset[str]) -> bool:
    return exercise.equipment_required <= equipment


def _pain_ok(exercise: ExerciseInfo, painful: frozenset[str]) -> bool:
    return not (exercise.primary_body_parts & painful)


def find_substitutes(
    exercise_name: str,
    equipment: frozenset[str],
    pain_flags: Iterable[PainFlag] = (),
    catalog: Mapping[str, ExerciseInfo] = EXERCISE_CATALOG,
    limit: int = 3,
) -> list[ExerciseInfo]:
    """Feasible, pain-safe alternatives in graph priority order (at most ``limit``)."""
    alternatives = SUBSTITUTION_GRAPH.get(exercise_name)
    if not alternatives:
        return []

    painful = active_pain_body_parts(pain_flags)
    found: list[ExerciseInfo] = []
    for alt_name in alternatives:
        alt = catalog.get(alt_name)
        if alt is None:
            continue
        if not _equipment_ok(alt, equipment) or not _pain_ok(alt, painful):
            continue
        found.append(alt)
        if len(found) >= limit:
            break
    return found


def best_substitute(
    exercise_name: str,
    equipment: frozenset[str],
    pain_flags: Iterable[PainFlag] = (),
    catalog: Mapping[str, ExerciseInfo] = EXERCISE_CATALOG,
) -> Optional[ExerciseInfo]:
    found = find_substitutes(exercise_name, equipment, pain_flags, catalog, limit=1)
    if not found:
        logger.debug("no substitute found", extra={"ctx_exercise": exercise_name})
        return None
    return found[0]


def substitution_reason(
    exercise: ExerciseInfo,
    equipment: frozenset[str],
    pain_flags: Iterable[PainFlag] = (),
) -> Optional[str]:
    """Why ``exercise`` cannot be done as prescribed today; equipment is checked first."""
    if not _equipment_ok(exercise, equipment):
        return REASON_EQUIPMENT_MISSING
    if not _pain_ok(exercise, active_pain_body_parts(pain_flags)):
        return REASON_PAIN_FLAG
    return None


def needs_substitution(
    exercise: ExerciseInfo,
    equipment: frozenset[str],
    pain_flags: Iterable[PainFlag] = (),
) -> bool:
    return substitution_reason(exercise, equipment, pain_flags) is not None
