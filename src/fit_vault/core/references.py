"""
Bracket-link references between documents.

A reference written as ``[[target]]`` or ``[[target|alias]]`` points at a
custom, file-backed record; plain text points at a database exercise.
"""

import re

from .identifiers import slug_to_title_case
from .models import ExerciseSource

_WIKI_LINK_RE = re.compile(r"^\[\[([^\]|]+)(?:\|([^\]]+))?\]\]$")
_ANY_WIKI_LINK_RE = re.compile(r"^\[\[[^\]]+\]\]$")


def is_wiki_link(value: str) -> bool:
    return bool(_ANY_WIKI_LINK_RE.match(value.strip()))


def _looks_like_slug(value: str) -> bool:
    return "-" in value and value == value.lower()


def extract_exercise_id(value: str) -> str:
    """
    Extract the record id from a reference.

    "[[Exercises/bench-press|Bench]]" -> "bench-press"; plain text is
    returned trimmed.
    """
    trimmed = value.strip()
    match = _WIKI_LINK_RE.match(trimmed)
    if not match:
        return trimmed
    target = match.group(1).strip()
    return target.rsplit("/", 1)[-1]


def extract_wiki_link_name(value: str) -> str:
    """
    Extract a human-readable name from a reference.

    The alias wins when present. Otherwise the folder prefix is dropped, an
    anchor after ``#`` becomes the name, and slug-looking targets are title
    cased.

    Args:
        value: Link or plain text

    Returns:
        Display name
    """
    trimmed = value.strip()
    match = _WIKI_LINK_RE.match(trimmed)
    if not match:
        return slug_to_title_case(trimmed) if _looks_like_slug(trimmed) else trimmed

    target = match.group(1).strip()
    alias = (match.group(2) or "").strip()
    if alias:
        return alias

    target = target.rsplit("/", 1)[-1]
    if "#" in target:
        target = target.split("#", 1)[1]
    if _looks_like_slug(target):
        return slug_to_title_case(target)
    return target


def create_wiki_link(target: str, alias: str | None = None) -> str:
    if alias:
        return f"[[{target}|{alias}]]"
    return f"[[{target}]]"


def determine_exercise_source(exists_in_database: bool) -> ExerciseSource:
    return "database" if exists_in_database else "custom"


def should_use_wiki_link(source: ExerciseSource | None) -> bool:
    """Only custom exercises are rendered as links; unknown sources stay plain."""
    return source == "custom"
