"""
Workout body codec: the exercise table under ``## Exercises``.

    ## Exercises

    | Exercise | Sets | Reps | Rest |
    |---|---|---|---|
    | [[bench-press]] | 4 | 6-8 | 180s |
    | overhead-press | 3 | 8-10 | 120s |

Linked references are custom exercises; plain text references are database
exercises.
"""

import re

from ..core.config import DEFAULT_REPS_MAX, DEFAULT_REPS_MIN, DEFAULT_REST_SECONDS, DEFAULT_TARGET_SETS
from ..core.identifiers import to_slug
from ..core.models import WorkoutExercise
from ..core.references import (
    create_wiki_link,
    extract_exercise_id,
    extract_wiki_link_name,
    is_wiki_link,
    should_use_wiki_link,
)
from .sections import find_section
from .tables import Column, create_table, find_table, get_cell, parse_table

_INT_RE = re.compile(r"-?\d+")

WORKOUT_COLUMNS = [
    Column("exercise", "Exercise"),
    Column("sets", "Sets"),
    Column("reps", "Reps"),
    Column("rest", "Rest"),
]


def parse_int(text: str, default: int) -> int:
    """Leading integer of ``text`` ("180s" -> 180), or ``default``."""
    match = _INT_RE.search(text or "")
    return int(match.group(0)) if match else default


def parse_rep_range(text: str, default_min: int = DEFAULT_REPS_MIN, default_max: int = DEFAULT_REPS_MAX) -> tuple[int, int]:
    """
    Parse a reps cell written as ``min`` or ``min-max``.

    Returns:
        (min, max); a single number gives min == max
    """
    text = (text or "").strip()
    if not text:
        return default_min, default_max
    if "-" in text:
        low, _, high = text.partition("-")
        reps_min = parse_int(low, default_min)
        return reps_min, parse_int(high, reps_min)
    reps = parse_int(text, default_min)
    return reps, reps


def format_rep_range(reps_min: int, reps_max: int) -> str:
    return str(reps_min) if reps_min == reps_max else f"{reps_min}-{reps_max}"


def parse_exercise_table(text: str) -> list[WorkoutExercise]:
    """
    Parse the first exercise table found in ``text``.

    Rows without an exercise reference are skipped.
    """
    table = find_table(text)
    if table is None:
        return []

    exercises: list[WorkoutExercise] = []
    for row in parse_table(table):
        raw = get_cell(row, "Exercise")
        name = extract_wiki_link_name(raw)
        if not name:
            continue
        reps_min, reps_max = parse_rep_range(get_cell(row, "Reps"))
        exercises.append(
            WorkoutExercise(
                exercise=name,
                exercise_id=extract_exercise_id(raw),
                target_sets=parse_int(get_cell(row, "Sets"), DEFAULT_TARGET_SETS),
                target_reps_min=reps_min,
                target_reps_max=reps_max,
                rest_seconds=parse_int(get_cell(row, "Rest"), DEFAULT_REST_SECONDS),
                source="custom" if is_wiki_link(raw) else "database",
            )
        )
    return exercises


def parse_workout_body(body: str) -> list[WorkoutExercise]:
    """
    Parse the exercises of a workout document body.

    The ``## Exercises`` section is preferred; a body without it is searched
    as a whole.
    """
    section = find_section(body, "Exercises", 2)
    return parse_exercise_table(section if section is not None else body)


def create_exercise_table(exercises: list[WorkoutExercise]) -> str:
    """Render exercise rows; only custom exercises become links."""
    rows = []
    for e in exercises:
        slug = e.exercise_id or to_slug(e.exercise)
        rows.append(
            {
                "exercise": create_wiki_link(slug) if should_use_wiki_link(e.source) else slug,
                "sets": e.target_sets,
                "reps": format_rep_range(e.target_reps_min, e.target_reps_max),
                "rest": f"{e.rest_seconds}s",
            }
        )
    return create_table(WORKOUT_COLUMNS, rows)


def create_workout_body(exercises: list[WorkoutExercise]) -> str:
    if not exercises:
        return ""
    return f"\n## Exercises\n\n{create_exercise_table(exercises)}\n"
