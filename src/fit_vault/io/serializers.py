"""
Record <-> document conversion.

Each record kind is stored as a metadata block plus a body. The functions
here map dataclasses to document text and back; reading never raises and
returns None for a document without the identifying metadata.
"""

import math
from datetime import datetime
from typing import Any

from ..core.config import RPE_MAX, RPE_MIN
from ..core.errors import ValidationError
from ..core.models import (
    SESSION_STATUSES,
    Exercise,
    PreviousSession,
    Program,
    Session,
    Workout,
)
from ..core.references import extract_exercise_id, extract_wiki_link_name, is_wiki_link
from .coach_feedback import create_coach_feedback_body, parse_coach_feedback_body
from .metadata import create_document, parse_metadata_block
from .program_body import (
    create_program_body,
    parse_description_section,
    parse_inline_workouts,
    parse_review_questions,
)
from .review_body import create_session_review_body, parse_session_review_body
from .session_body import (
    create_previous_exercises_body,
    create_session_body,
    parse_previous_body,
    parse_session_body,
)
from .workout_body import create_workout_body, parse_workout_body


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that value is a non-negative number.

    Args:
        value: Value to validate
        name: Field name for error message

    Returns:
        The value

    Raises:
        ValidationError: If value is negative or not a finite number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """Validate that value is a positive number (raises ValidationError)."""
    validate_non_negative(value, name)
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def validate_rpe(value: float | None) -> float | None:
    if value is None:
        return None
    validate_positive(value, "rpe")
    if not RPE_MIN <= value <= RPE_MAX:
        raise ValidationError(f"rpe must be between {RPE_MIN} and {RPE_MAX}, got {value}")
    return value


def _str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _num(value: Any) -> int | float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def format_clock(timestamp: str | None) -> str | None:
    """HH:MM:SS wall-clock form of an ISO timestamp (local time when aware)."""
    if not timestamp:
        return None
    try:
        moment = datetime.fromisoformat(timestamp)
    except ValueError:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.strftime("%H:%M:%S")


# =============================================================================
# EXERCISES
# =============================================================================


def exercise_to_metadata(exercise: Exercise) -> dict[str, Any]:
    return {
        "name": exercise.name,
        "category": exercise.category,
        "equipment": exercise.equipment,
        "muscleGroups": exercise.muscle_groups,
        "defaultWeight": exercise.default_weight,
        "weightIncrement": exercise.weight_increment,
        "image0": exercise.image0,
        "image1": exercise.image1,
    }


def exercise_to_document(exercise: Exercise) -> str:
    """Exercise metadata; notes form the body."""
    return create_document(exercise_to_metadata(exercise), exercise.notes or "")


def document_to_exercise(exercise_id: str, content: str) -> Exercise | None:
    metadata, body = parse_metadata_block(content)
    if not metadata or not _str(metadata.get("name")):
        return None
    muscles = metadata.get("muscleGroups")
    return Exercise(
        id=exercise_id,
        name=_str(metadata["name"]) or "",
        source="custom",
        category=_str(metadata.get("category")),
        equipment=_str(metadata.get("equipment")),
        muscle_groups=[str(m) for m in muscles] if isinstance(muscles, list) else [],
        default_weight=_num(metadata.get("defaultWeight")),
        weight_increment=_num(metadata.get("weightIncrement")),
        image0=_str(metadata.get("image0")),
        image1=_str(metadata.get("image1")),
        notes=body.strip() or None,
    )


def database_record_to_exercise(record: dict[str, Any]) -> Exercise | None:
    """
    Map an imported exercise-database record to an Exercise.

    Expected keys: id, name, equipment, category, primaryMuscles,
    secondaryMuscles, instructions, images.
    """
    exercise_id, name = _str(record.get("id")), _str(record.get("name"))
    if not exercise_id or not name:
        return None
    muscles: list[str] = []
    for key in ("primaryMuscles", "secondaryMuscles"):
        for muscle in record.get(key) or []:
            if isinstance(muscle, str) and muscle not in muscles:
                muscles.append(muscle)
    images = [i for i in record.get("images") or [] if isinstance(i, str)]
    instructions = [i for i in record.get("instructions") or [] if isinstance(i, str)]
    return Exercise(
        id=exercise_id,
        name=name,
        source="database",
        category=_str(record.get("category")),
        equipment=_str(record.get("equipment")),
        muscle_groups=muscles,
        image0=images[0] if images else None,
        image1=images[1] if len(images) > 1 else None,
        notes="\n".join(f"{i}. {step}" for i, step in enumerate(instructions, start=1)) or None,
    )


# =============================================================================
# WORKOUTS
# =============================================================================


def workout_to_document(workout: Workout) -> str:
    metadata = {
        "name": workout.name,
        "description": workout.description,
        "estimatedDuration": workout.estimated_duration,
    }
    return create_document(metadata, create_workout_body(workout.exercises))


def document_to_workout(workout_id: str, content: str) -> Workout | None:
    metadata, body = parse_metadata_block(content)
    if not metadata or not _str(metadata.get("name")):
        return None
    duration = _num(metadata.get("estimatedDuration"))
    return Workout(
        id=workout_id,
        name=_str(metadata["name"]) or "",
        description=_str(metadata.get("description")),
        estimated_duration=int(duration) if duration is not None else None,
        exercises=parse_workout_body(body),
    )


# =============================================================================
# PROGRAMS
# =============================================================================


def program_to_document(program: Program) -> str:
    """
    Program metadata plus description, inline workouts and review sections.

    Only workout ids that are not defined inline go into the metadata.
    """
    inline_ids = {w.id for w in program.inline_workouts}
    metadata = {
        "name": program.name,
        "workouts": [w for w in program.workouts if w not in inline_ids],
    }
    body = create_program_body(program.description, program.inline_workouts, program.questions)
    return create_document(metadata, body)


def document_to_program(program_id: str, content: str) -> Program | None:
    metadata, body = parse_metadata_block(content)
    if not metadata or not _str(metadata.get("name")):
        return None

    inline_workouts = parse_inline_workouts(body)
    referenced = metadata.get("workouts")
    workouts = []
    if isinstance(referenced, list):
        workouts = [extract_exercise_id(str(w)) for w in referenced if _str(w)]
    workouts.extend(w.id for w in inline_workouts if w.id not in workouts)

    return Program(
        id=program_id,
        name=_str(metadata["name"]) or "",
        description=parse_description_section(body) or _str(metadata.get("description")),
        workouts=workouts,
        questions=parse_review_questions(body),
        inline_workouts=inline_workouts,
    )


# =============================================================================
# SESSIONS
# =============================================================================


def session_to_metadata(session: Session) -> dict[str, Any]:
    return {
        "date": session.date,
        "startTime": session.start_time,
        "startTimeFormatted": format_clock(session.start_time),
        "endTime": session.end_time,
        "endTimeFormatted": format_clock(session.end_time),
        "workout": session.workout,
        "status": session.status,
        "notes": session.notes,
    }


def session_to_document(session: Session) -> str:
    """
    Render a full session document.

    Body sections, in order: Exercises, Previous, Previous Coach Feedback,
    Review, Coach Feedback.
    """
    sections = [create_session_body(session.exercises)]
    if session.previous is not None:
        if session.previous.date or session.previous.exercises:
            sections.append(create_previous_exercises_body(session.previous.exercises, session.previous.date))
        sections.append(create_coach_feedback_body(session.previous.coach_feedback, previous=True))
    if session.review is not None:
        sections.append(create_session_review_body(session.review))
    sections.append(create_coach_feedback_body(session.coach_feedback))
    body = "\n".join(s.rstrip("\n") + "\n" for s in sections if s)
    return create_document(session_to_metadata(session), body)


def document_to_session(session_id: str, content: str) -> Session | None:
    metadata, body = parse_metadata_block(content)
    start_time = _str(metadata.get("startTime")) if metadata else None
    if not metadata or not start_time:
        return None

    date = _str(metadata.get("date")) or start_time[:10]
    status = _str(metadata.get("status"))
    workout = _str(metadata.get("workout"))
    if workout and is_wiki_link(workout):
        workout = extract_wiki_link_name(workout)

    previous = parse_previous_body(body)
    previous_feedback = parse_coach_feedback_body(body, previous=True)
    if previous is None and previous_feedback:
        previous = PreviousSession(date="", coach_feedback=previous_feedback)
    elif previous is not None:
        previous.coach_feedback = previous_feedback

    return Session(
        id=session_id,
        date=date,
        start_time=start_time,
        status=status if status in SESSION_STATUSES else "completed",  # type: ignore[arg-type]
        end_time=_str(metadata.get("endTime")),
        workout=workout,
        exercises=parse_session_body(body, date),
        notes=_str(metadata.get("notes")),
        review=parse_session_review_body(body),
        coach_feedback=parse_coach_feedback_body(body),
        previous=previous,
    )
