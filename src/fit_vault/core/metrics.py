"""
Pure metric computation functions over sessions, exercises and sets.

Only completed sets count towards any metric.
"""

from .models import LoggedSet, Session, SessionExercise


def _completed(sets: list[LoggedSet]) -> list[LoggedSet]:
    return [s for s in sets if s.completed]


# =============================================================================
# SESSION METRICS
# =============================================================================


def total_volume(session: Session) -> float:
    """
    Total training volume of a session.

    volume = sum(weight * reps) over completed sets

    Bodyweight sets (weight 0) contribute nothing.

    Args:
        session: Session to measure

    Returns:
        Volume in the session's weight unit
    """
    return sum(s.weight * s.reps for e in session.exercises for s in _completed(e.sets))


def count_total_completed_sets(session: Session) -> int:
    return sum(len(_completed(e.sets)) for e in session.exercises)


def count_total_target_sets(session: Session) -> int:
    return sum(e.target_sets for e in session.exercises)


def session_progress(session: Session) -> float:
    """Fraction of target sets completed, clipped to [0, 1]."""
    target = count_total_target_sets(session)
    if target == 0:
        return 0.0
    return min(count_total_completed_sets(session) / target, 1.0)


def has_completed_work(session: Session) -> bool:
    return any(s.completed for e in session.exercises for s in e.sets)


def count_completed_exercises(session: Session) -> int:
    return sum(1 for e in session.exercises if len(_completed(e.sets)) >= e.target_sets)


# =============================================================================
# EXERCISE METRICS
# =============================================================================


def count_completed_sets(session: Session, index: int) -> int:
    if not 0 <= index < len(session.exercises):
        return 0
    return len(_completed(session.exercises[index].sets))


def is_exercise_complete(session: Session, index: int) -> bool:
    if not 0 <= index < len(session.exercises):
        return False
    return count_completed_sets(session, index) >= session.exercises[index].target_sets


def exercise_progress(exercise: SessionExercise) -> float:
    if exercise.target_sets == 0:
        return 0.0
    return min(len(_completed(exercise.sets)) / exercise.target_sets, 1.0)


def total_reps(exercise: SessionExercise) -> int:
    return sum(s.reps for s in _completed(exercise.sets))


def max_weight(exercise: SessionExercise) -> float:
    """Heaviest completed set, 0 when nothing is completed."""
    return max((s.weight for s in _completed(exercise.sets)), default=0)


def exercise_volume(exercise: SessionExercise) -> float:
    return sum(s.weight * s.reps for s in _completed(exercise.sets))


# =============================================================================
# SET METRICS
# =============================================================================


def last_completed_set(exercise: SessionExercise) -> LoggedSet | None:
    completed = _completed(exercise.sets)
    return completed[-1] if completed else None


def format_set_display(logged_set: LoggedSet, weight_unit: str = "kg") -> str:
    """
    Short human form of a set, e.g. "82.5kg × 6" or "BW × 12".
    """
    if logged_set.weight == 0:
        return f"BW × {logged_set.reps}"
    weight = logged_set.weight
    weight_text = str(int(weight)) if float(weight).is_integer() else str(weight)
    return f"{weight_text}{weight_unit} × {logged_set.reps}"
