"""Static exercise catalog, substitution graph and stall-variation lookup.

The tables are immutable and loaded once at import time. Keys are the
canonical exercise display names; binding free-text names to these is the
caller's job.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from liftcoach.models import DOUBLE_PROGRESSION, STRAIGHT_SETS, TOP_SET_BACKOFF, ExerciseInfo

GYM_EQUIPMENT = frozenset(
    {"bodyweight", "barbell", "dumbbell", "cable", "machine", "pull_up_bar", "rack", "bench"}
)
HOME_EQUIPMENT = frozenset({"bodyweight", "dumbbell", "pull_up_bar", "bands", "bench"})


def _ex(
    name: str,
    pattern: str,
    primary: tuple[str, ...],
    secondary: tuple[str, ...],
    equipment: tuple[str, ...],
    compound: bool = True,
    progression: str = DOUBLE_PROGRESSION,
) -> ExerciseInfo:
    return ExerciseInfo(
        name=name,
        movement_pattern=pattern,
        primary_muscles=primary,
        secondary_muscles=secondary,
        equipment_required=frozenset(equipment),
        is_compound=compound,
        default_progression=progression,
    )


_EXERCISES: tuple[ExerciseInfo, ...] = (
    # Horizontal push
    _ex("Bench Press", "horizontal_push", ("chest",), ("front_delts", "triceps"), ("barbell", "bench", "rack"), progression=TOP_SET_BACKOFF),
    _ex("Incline Bench Press", "horizontal_push", ("chest", "front_delts"), ("triceps",), ("barbell", "bench", "rack"), progression=TOP_SET_BACKOFF),
    _ex("Dumbbell Bench Press", "horizontal_push", ("chest",), ("front_delts", "triceps"), ("dumbbell", "bench")),
    _ex("Incline Dumbbell Press", "horizontal_push", ("chest", "front_delts"), ("triceps",), ("dumbbell", "bench")),
    _ex("Floor Press", "horizontal_push", ("chest", "triceps"), ("front_delts",), ("dumbbell",)),
    _ex("Push-ups", "horizontal_push", ("chest",), ("front_delts", "triceps"), ("bodyweight",)),
    _ex("Dips", "horizontal_push", ("chest", "triceps"), ("front_delts",), ("bodyweight",)),
    _ex("Cable Fly", "isolation", ("chest",), (), ("cable",), compound=False),
    _ex("Machine Chest Press", "horizontal_push", ("chest",), ("front_delts", "triceps"), ("machine",)),
    # Vertical push
    _ex("Overhead Press", "vertical_push", ("front_delts", "side_delts"), ("triceps", "upper_back"), ("barbell", "rack"), progression=TOP_SET_BACKOFF),
    _ex("Dumbbell Shoulder Press", "vertical_push", ("front_delts", "side_delts"), ("triceps",), ("dumbbell", "bench")),
    _ex("Lateral Raise", "isolation", ("side_delts",), (), ("dumbbell",), compound=False),
    _ex("Face Pull", "isolation", ("rear_delts", "upper_back"), (), ("cable",), compound=False),
    _ex("Rear Delt Fly", "isolation", ("rear_delts",), ("upper_back",), ("dumbbell",), compound=False),
    # Horizontal pull
    _ex("Barbell Row", "horizontal_pull", ("upper_back", "lats"), ("rear_delts", "biceps"), ("barbell",), progression=TOP_SET_BACKOFF),
    _ex("Dumbbell Row", "horizontal_pull", ("upper_back", "lats"), ("rear_delts", "biceps"), ("dumbbell", "bench")),
    _ex("Chest Supported Row", "horizontal_pull", ("upper_back", "lats"), ("rear_delts", "biceps"), ("dumbbell", "bench")),
    _ex("Cable Row", "horizontal_pull", ("upper_back", "lats"), ("biceps",), ("cable",)),
    _ex("Inverted Row", "horizontal_pull", ("upper_back", "lats"), ("biceps",), ("bodyweight", "pull_up_bar")),
    # Vertical pull
    _ex("Pull-ups", "vertical_pull", ("lats", "upper_back"), ("biceps",), ("pull_up_bar",)),
    _ex("Chin-ups", "vertical_pull", ("lats", "biceps"), ("upper_back",), ("pull_up_bar",)),
    _ex("Lat Pulldown", "vertical_pull", ("lats",), ("upper_back", "biceps"), ("cable",)),
    _ex("Banded Pull-ups", "vertical_pull", ("lats", "upper_back"), ("biceps",), ("pull_up_bar", "bands")),
    # Squat
    _ex("Barbell Squat", "squat", ("quads", "glutes"), ("hamstrings", "core"), ("barbell", "rack"), progression=TOP_SET_BACKOFF),
    _ex("Front Squat", "squat", ("quads",), ("glutes", "core"), ("barbell", "rack"), progression=TOP_SET_BACKOFF),
    _ex("Goblet Squat", "squat", ("quads", "glutes"), ("core",), ("dumbbell",)),
    _ex("Leg Press", "squat", ("quads", "glutes"), (), ("machine",)),
    _ex("Hack Squat", "squat", ("quads",), ("glutes",), ("machine",)),
    _ex("Leg Extension", "isolation", ("quads",), (), ("machine",), compound=False),
    # Hinge
    _ex("Deadlift", "hinge", ("hamstrings", "glutes", "lower_back"), ("quads", "upper_back", "traps"), ("barbell",), progression=TOP_SET_BACKOFF),
    _ex("Romanian Deadlift", "hinge", ("hamstrings", "glutes"), ("lower_back",), ("barbell",), progression=TOP_SET_BACKOFF),
    _ex("Dumbbell Romanian Deadlift", "hinge", ("hamstrings", "glutes"), ("lower_back",), ("dumbbell",)),
    _ex("Leg Curl", "isolation", ("hamstrings",), (), ("machine",), compound=False),
    # Lunge
    _ex("Bulgarian Split Squat", "lunge", ("quads", "glutes"), ("hamstrings",), ("dumbbell", "bench")),
    _ex("Walking Lunges", "lunge", ("quads", "glutes"), ("hamstrings",), ("dumbbell",)),
    # Arms
    _ex("Barbell Curl", "isolation", ("biceps",), ("forearms",), ("barbell",), compound=False),
    _ex("Dumbbell Curl", "isolation", ("biceps",), ("forearms",), ("dumbbell",), compound=False),
    _ex("Cable Curl", "isolation", ("biceps",), (), ("cable",), compound=False),
    _ex("Band Curl", "isolation", ("biceps",), (), ("bands",), compound=False),
    _ex("Tricep Pushdown", "isolation", ("triceps",), (), ("cable",), compound=False),
    _ex("Overhead Tricep Extension", "isolation", ("triceps",), (), ("dumbbell",), compound=False),
    _ex("Close Grip Bench Press", "horizontal_push", ("triceps", "chest"), ("front_delts",), ("barbell", "bench", "rack"), progression=TOP_SET_BACKOFF),
    _ex("Diamond Push-ups", "horizontal_push", ("triceps",), ("chest",), ("bodyweight",)),
    # Calves
    _ex("Standing Calf Raise", "isolation", ("calves",), (), ("machine",), compound=False),
    _ex("Seated Calf Raise", "isolation", ("calves",), (), ("machine",), compound=False),
    # Core
    _ex("Plank", "isolation", ("core",), (), ("bodyweight",), compound=False, progression=STRAIGHT_SETS),
    _ex("Cable Crunch", "isolation", ("core",), (), ("cable",), compound=False),
)

EXERCISE_CATALOG: Mapping[str, ExerciseInfo] = MappingProxyType({ex.name: ex for ex in _EXERCISES})


# Exercise name -> alternatives, highest priority first.
SUBSTITUTION_GRAPH: Mapping[str, tuple[str, ...]] = MappingProxyType({
    # Horizontal push
    "Bench Press": ("Dumbbell Bench Press", "Floor Press", "Push-ups", "Machine Chest Press"),
    "Incline Bench Press": ("Incline Dumbbell Press", "Dumbbell Bench Press", "Push-ups"),
    "Dumbbell Bench Press": ("Bench Press", "Floor Press", "Push-ups", "Machine Chest Press"),
    "Floor Press": ("Dumbbell Bench Press", "Push-ups", "Bench Press"),
    "Push-ups": ("Dumbbell Bench Press", "Floor Press", "Bench Press"),
    "Dips": ("Push-ups", "Dumbbell Bench Press", "Tricep Pushdown"),
    "Machine Chest Press": ("Dumbbell Bench Press", "Push-ups", "Floor Press"),
    # Vertical push
    "Overhead Press": ("Dumbbell Shoulder Press", "Push-ups"),
    "Dumbbell Shoulder Press": ("Overhead Press", "Lateral Raise"),
    # Vertical pull
    "Pull-ups": ("Lat Pulldown", "Banded Pull-ups", "Inverted Row", "Chin-ups"),
    "Chin-ups": ("Pull-ups", "Lat Pulldown", "Banded Pull-ups", "Inverted Row"),
    "Lat Pulldown": ("Pull-ups", "Banded Pull-ups", "Inverted Row", "Chin-ups"),
    "Banded Pull-ups": ("Pull-ups", "Inverted Row", "Lat Pulldown"),
    # Horizontal pull
    "Barbell Row": ("Dumbbell Row", "Chest Supported Row", "Cable Row", "Inverted Row"),
    "Dumbbell Row": ("Barbell Row", "Chest Supported Row", "Cable Row", "Inverted Row"),
    "Chest Supported Row": ("Dumbbell Row", "Cable Row", "Barbell Row", "Inverted Row"),
    "Cable Row": ("Dumbbell Row", "Chest Supported Row", "Barbell Row", "Inverted Row"),
    "Inverted Row": ("Dumbbell Row", "Cable Row", "Barbell Row"),
    # Squat
    "Barbell Squat": ("Goblet Squat", "Leg Press", "Bulgarian Split Squat", "Front Squat"),
    "Front Squat": ("Goblet Squat", "Barbell Squat", "Leg Press", "Bulgarian Split Squat"),
    "Goblet Squat": ("Barbell Squat", "Bulgarian Split Squat", "Leg Press"),
    "Leg Press": ("Goblet Squat", "Barbell Squat", "Bulgarian Split Squat", "Hack Squat"),
    "Hack Squat": ("Leg Press", "Barbell Squat", "Goblet Squat"),
    # Hinge
    "Deadlift": ("Romanian Deadlift", "Dumbbell Romanian Deadlift"),
    "Romanian Deadlift": ("Dumbbell Romanian Deadlift", "Deadlift", "Leg Curl"),
    "Dumbbell Romanian Deadlift": ("Romanian Deadlift", "Leg Curl"),
    # Lunge
    "Bulgarian Split Squat": ("Walking Lunges", "Goblet Squat"),
    "Walking Lunges": ("Bulgarian Split Squat", "Goblet Squat"),
    # Biceps
    "Barbell Curl": ("Dumbbell Curl", "Cable Curl", "Band Curl"),
    "Dumbbell Curl": ("Barbell Curl", "Cable Curl", "Band Curl"),
    "Cable Curl": ("Dumbbell Curl", "Barbell Curl", "Band Curl"),
    "Band Curl": ("Dumbbell Curl", "Cable Curl"),
    # Triceps
    "Tricep Pushdown": ("Overhead Tricep Extension", "Diamond Push-ups", "Dips"),
    "Overhead Tricep Extension": ("Tricep Pushdown", "Diamond Push-ups", "Dips"),
    "Close Grip Bench Press": ("Diamond Push-ups", "Tricep Pushdown", "Dips"),
    "Diamond Push-ups": ("Tricep Pushdown", "Overhead Tricep Extension", "Dips"),
    # Shoulder isolation
    "Lateral Raise": ("Face Pull", "Rear Delt Fly"),
    "Face Pull": ("Rear Delt Fly", "Lateral Raise"),
    "Rear Delt Fly": ("Face Pull", "Dumbbell Row"),
    # Leg isolation
    "Leg Extension": ("Goblet Squat", "Bulgarian Split Squat"),
    "Leg Curl": ("Romanian Deadlift", "Dumbbell Romanian Deadlift"),
    # Calves
    "Standing Calf Raise": ("Seated Calf Raise",),
    "Seated Calf Raise": ("Standing Calf Raise",),
    # Core
    "Cable Crunch": ("Plank",),
    "Plank": ("Cable Crunch",),
})


# Same-pattern variations suggested when a lift stalls in the mid-rep range.
VARIATION_LOOKUP: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "Bench Press": ("Close Grip Bench", "Incline Bench Press", "Dumbbell Bench Press"),
    "Barbell Squat": ("Front Squat", "Pause Squat", "Box Squat"),
    "Deadlift": ("Deficit Deadlift", "Pause Deadlift", "Romanian Deadlift"),
    "Overhead Press": ("Push Press", "Seated Press", "Dumbbell Shoulder Press"),
    "Barbell Row": ("Pendlay Row", "Chest Supported Row", "T-Bar Row"),
    "Pull-ups": ("Weighted Pull-ups", "Wide Grip Pull-ups", "Chin-ups"),
})


def get_exercise(name: str, catalog: Mapping[str, ExerciseInfo] = EXERCISE_CATALOG) -> ExerciseInfo | None:
    return catalog.get(name)


def exercises_for_equipment(equipment: frozenset[str], catalog: Mapping[str, ExerciseInfo] = EXERCISE_CATALOG) -> list[ExerciseInfo]:
    """Catalog entries whose required equipment is all available, in catalog order."""
    return [ex for ex in catalog.values() if ex.equipment_required <= equipment]
