"""
Identifier generation: slugs and session ids.
"""

import re
from datetime import datetime

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_SESSION_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})")


def to_slug(name: str) -> str:
    """
    Convert a display name to a file-safe slug.

    "Bench Press (Barbell)" -> "bench-press-barbell"
    """
    return _NON_ALNUM_RE.sub("-", name.lower()).strip("-")


def slug_to_title_case(slug: str) -> str:
    """"bench-press" -> "Bench Press"."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def generate_session_id(started_at: datetime, workout_name: str | None = None) -> str:
    """
    Build a session id from its start time and workout.

    Args:
        started_at: Session start (local wall-clock fields are used)
        workout_name: Optional workout name, appended as a slug

    Returns:
        "YYYY-MM-DD-HH-MM-SS" or "YYYY-MM-DD-HH-MM-SS-workout-slug"
    """
    base = started_at.strftime("%Y-%m-%d-%H-%M-%S")
    if workout_name:
        return f"{base}-{to_slug(workout_name)}"
    return base


def extract_date_from_session_id(session_id: str) -> str | None:
    """Return the YYYY-MM-DD prefix of a session id, or None."""
    match = _SESSION_DATE_RE.match(session_id)
    return match.group(1) if match else None
