"""
Session body codec: per-exercise blocks with set tables.

    # Exercises

    ## Bench Press
    Target: 4 × 6-8 | Rest: 180s | RPE: 8

    | # | kg | reps | rpe | time | rest | +rest | s/rep |
    |---|---|---|---|---|---|---|---|
    | 1 | 80 | 8 | - | 10:02:11 | - | - | - |

    **Did you feel the correct muscle working?** Yes, clearly

The same block format is used for the ``# Previous`` section.
"""

import re
from datetime import datetime

from ..core.config import DEFAULT_REPS_MAX, DEFAULT_REPS_MIN, DEFAULT_REST_SECONDS, DEFAULT_TARGET_SETS
from ..core.models import LoggedSet, PreviousSession, SessionExercise
from ..core.references import extract_wiki_link_name
from .sections import find_section, split_sections
from .tables import Column, create_table, find_table, get_cell, parse_table
from .values import format_number
from .workout_body import format_rep_range

BODYWEIGHT_LABEL = "body weight"
BODYWEIGHT_CELLS = frozenset({"body weight", "", "-", "0"})

MUSCLE_ENGAGEMENT_QUESTION = "Did you feel the correct muscle working?"
MUSCLE_ENGAGEMENT_LABELS = {
    "yes-clearly": "Yes, clearly",
    "moderately": "Moderately",
    "not-really": "Not really",
}
_LABEL_TO_ENGAGEMENT = {label.lower(): key for key, label in MUSCLE_ENGAGEMENT_LABELS.items()}

SET_COLUMNS = [
    Column("num", "#"),
    Column("kg", "kg"),
    Column("reps", "reps"),
    Column("rpe", "rpe"),
    Column("time", "time"),
    Column("rest", "rest"),
    Column("extra_rest", "+rest"),
    Column("avg_rep", "s/rep"),
]

_TARGET_RE = re.compile(
    r"Target:\s*(\d+)\s*[×x]\s*(\d+)(?:\s*-\s*(\d+))?\s*\|\s*Rest:\s*(\d+)\s*s?"
    r"(?:\s*\|\s*RPE:\s*(\d+(?:\.\d+)?))?",
    re.IGNORECASE,
)
_MUSCLE_RE = re.compile(r"\*\*Did you feel the correct muscle working\?\*\*[ \t]*(.*)", re.IGNORECASE)
_CLOCK_RE = re.compile(r"^\d{2}:\d{2}:\d{2}$")
_DATE_LINE_RE = re.compile(r"^Date:\s*(\S+)", re.MULTILINE)


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------


def parse_weight(cell: str) -> float:
    """Weight cell to a number; the bodyweight spellings and junk give 0."""
    text = cell.strip().lower()
    if text in BODYWEIGHT_CELLS:
        return 0
    try:
        weight = float(text)
    except ValueError:
        return 0
    return int(weight) if weight.is_integer() else weight


def format_weight(weight: float) -> str:
    return BODYWEIGHT_LABEL if weight == 0 else format_number(weight)


def parse_seconds(cell: str) -> float | None:
    """``"90s"``, ``"+30s"`` or ``"2.5s"`` to a number; "-" and junk give None."""
    text = (cell or "").strip()
    if not text or text == "-":
        return None
    text = text.removeprefix("+").removesuffix("s")
    try:
        value = float(text)
    except ValueError:
        return None
    return int(value) if value.is_integer() else value


def _parse_optional_number(cell: str) -> float | None:
    text = (cell or "").strip()
    if not text or text == "-":
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return int(value) if value.is_integer() else value


def format_time_from_iso(timestamp: str) -> str:
    """
    Wall-clock HH:MM:SS for a set timestamp.

    Aware timestamps are shown in local time; HH:MM:SS passes through.
    Unparseable input gives "-".
    """
    if not timestamp:
        return "-"
    if _CLOCK_RE.match(timestamp):
        return timestamp
    try:
        moment = datetime.fromisoformat(timestamp)
    except ValueError:
        return "-"
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.strftime("%H:%M:%S")


def _timestamp_from_cell(cell: str, session_date: str | None) -> str:
    text = (cell or "").strip()
    if text == "-":
        return ""
    if session_date and _CLOCK_RE.match(text):
        return f"{session_date}T{text}"
    return text


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_sets(block: str, session_date: str | None) -> list[LoggedSet]:
    table = find_table(block)
    if table is None:
        return []

    sets: list[LoggedSet] = []
    for row in parse_table(table):
        number = get_cell(row, "#", "Set")
        if not number.strip().isdigit() or int(number) == 0:
            continue
        reps = _parse_optional_number(get_cell(row, "reps"))
        rest = parse_seconds(get_cell(row, "rest"))
        extra = parse_seconds(get_cell(row, "+rest"))
        sets.append(
            LoggedSet(
                weight=parse_weight(get_cell(row, "kg", "lbs", "weight")),
                reps=int(reps) if reps is not None else 0,
                completed=True,
                timestamp=_timestamp_from_cell(get_cell(row, "time"), session_date),
                rpe=_parse_optional_number(get_cell(row, "rpe")),
                actual_rest_seconds=int(rest) if rest is not None else None,
                extra_rest_seconds=int(extra) if extra is not None else None,
                avg_rep_duration=parse_seconds(get_cell(row, "s/rep")),
            )
        )
    return sets


def _parse_exercise_block(title: str, block: str, session_date: str | None) -> SessionExercise | None:
    name = extract_wiki_link_name(title)
    if not name:
        return None

    target = _TARGET_RE.search(block)
    if target:
        target_sets = int(target.group(1))
        reps_min = int(target.group(2))
        reps_max = int(target.group(3) or target.group(2))
        rest_seconds = int(target.group(4))
        rpe = _parse_optional_number(target.group(5) or "")
    else:
        target_sets, reps_min, reps_max = DEFAULT_TARGET_SETS, DEFAULT_REPS_MIN, DEFAULT_REPS_MAX
        rest_seconds, rpe = DEFAULT_REST_SECONDS, None

    engagement = None
    muscle = _MUSCLE_RE.search(block)
    if muscle and muscle.group(1).strip():
        label = muscle.group(1).strip()
        engagement = _LABEL_TO_ENGAGEMENT.get(label.lower(), label)

    return SessionExercise(
        exercise=name,
        target_sets=target_sets,
        target_reps_min=reps_min,
        target_reps_max=reps_max,
        rest_seconds=rest_seconds,
        sets=_parse_sets(block, session_date),
        rpe=rpe,
        muscle_engagement=engagement,
    )


def parse_exercise_blocks(text: str, session_date: str | None = None) -> list[SessionExercise]:
    """
    Parse ``## Name`` exercise blocks.

    Args:
        text: Section content holding the blocks
        session_date: YYYY-MM-DD used to turn HH:MM:SS cells into timestamps

    Returns:
        Exercises in document order
    """
    exercises = []
    for title, block in split_sections(text, 2):
        exercise = _parse_exercise_block(title, block, session_date)
        if exercise is not None:
            exercises.append(exercise)
    return exercises


def parse_session_body(body: str, session_date: str | None = None) -> list[SessionExercise]:
    """
    Parse the ``# Exercises`` section of a session body.

    Parsing stops at the next top-level heading, so tables in ``# Previous``
    are never read as current exercises. A body without the heading is read
    as a whole.
    """
    section = find_section(body, "Exercises", 1)
    return parse_exercise_blocks(section if section is not None else body, session_date)


def parse_previous_body(body: str) -> PreviousSession | None:
    """Parse the ``# Previous`` section, or None when absent."""
    section = find_section(body, "Previous", 1)
    if section is None:
        return None
    date_match = _DATE_LINE_RE.search(section)
    date = date_match.group(1) if date_match else ""
    return PreviousSession(date=date, exercises=parse_exercise_blocks(section, date or None))


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _target_line(exercise: SessionExercise) -> str:
    line = (
        f"Target: {exercise.target_sets} × "
        f"{format_rep_range(exercise.target_reps_min, exercise.target_reps_max)}"
        f" | Rest: {exercise.rest_seconds}s"
    )
    if exercise.rpe is not None:
        line += f" | RPE: {format_number(exercise.rpe)}"
    return line


def _set_row(number: int, logged: LoggedSet) -> dict[str, str]:
    def seconds(value: float | None, prefix: str = "") -> str:
        return "-" if value is None else f"{prefix}{format_number(value)}s"

    return {
        "num": str(number),
        "kg": format_weight(logged.weight),
        "reps": str(logged.reps),
        "rpe": "-" if logged.rpe is None else format_number(logged.rpe),
        "time": format_time_from_iso(logged.timestamp),
        "rest": seconds(logged.actual_rest_seconds),
        "extra_rest": seconds(logged.extra_rest_seconds, "+"),
        "avg_rep": seconds(logged.avg_rep_duration),
    }


def _exercise_block(exercise: SessionExercise, completed_only: bool = False) -> str:
    lines = [f"## {exercise.exercise}", _target_line(exercise), ""]
    sets = [s for s in exercise.sets if s.completed] if completed_only else exercise.sets
    lines.append(create_table(SET_COLUMNS, [_set_row(i, s) for i, s in enumerate(sets, start=1)]))
    if exercise.muscle_engagement:
        label = MUSCLE_ENGAGEMENT_LABELS.get(exercise.muscle_engagement, exercise.muscle_engagement)
        lines.extend(["", f"**{MUSCLE_ENGAGEMENT_QUESTION}** {label}"])
    return "\n".join(lines)


def create_session_body(exercises: list[SessionExercise]) -> str:
    """Render the ``# Exercises`` section."""
    header = "# Exercises\n\n"
    if not exercises:
        return header
    return header + "\n\n".join(_exercise_block(e) for e in exercises) + "\n"


def create_previous_exercises_body(exercises: list[SessionExercise], session_date: str) -> str:
    """
    Render the ``# Previous`` section for a past session.

    Only completed sets are listed.
    """
    header = f"# Previous\n\nDate: {session_date}\n\n"
    if not exercises:
        return header
    return header + "\n\n".join(_exercise_block(e, completed_only=True) for e in exercises) + "\n"
