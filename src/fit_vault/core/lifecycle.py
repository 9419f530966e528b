"""
Session lifecycle rules and completion queries.

Status transitions:

    active  -> paused | completed | discarded
    paused  -> active | completed | discarded

completed and discarded are terminal.
"""

from .models import Session, SessionStatus

VALID_TRANSITIONS: frozenset[tuple[str, str]] = frozenset(
    {
        ("active", "paused"),
        ("active", "completed"),
        ("active", "discarded"),
        ("paused", "active"),
        ("paused", "completed"),
        ("paused", "discarded"),
    }
)

OPEN_STATUSES: frozenset[str] = frozenset({"active", "paused"})


def is_valid_transition(from_status: SessionStatus, to_status: SessionStatus) -> bool:
    return (from_status, to_status) in VALID_TRANSITIONS


def is_open(status: str) -> bool:
    """True for statuses that count as the single active session."""
    return status in OPEN_STATUSES


def can_finish_session(has_completed_work: bool) -> bool:
    """A session with no completed set can only be discarded."""
    return has_completed_work


def can_discard_session(status: SessionStatus) -> bool:
    return status in OPEN_STATUSES


def should_auto_start_rest_timer(
    auto_start_enabled: bool, completed_sets: int, target_sets: int
) -> bool:
    """
    Decide whether logging a set should start the rest timer.

    No rest is started after the last target set of an exercise.
    """
    return auto_start_enabled and completed_sets < target_sets


def find_first_unfinished_exercise_index(session: Session) -> int:
    """
    Index of the first exercise with fewer completed sets than targeted.

    Returns:
        Exercise index, or -1 when every exercise is done
    """
    for i, exercise in enumerate(session.exercises):
        completed = sum(1 for s in exercise.sets if s.completed)
        if completed < exercise.target_sets:
            return i
    return -1


def is_session_fully_complete(session: Session) -> bool:
    return bool(session.exercises) and find_first_unfinished_exercise_index(session) == -1
