"""
Coach feedback codec.

Feedback is free text stored under ``# Coach Feedback`` (or
``# Previous Coach Feedback`` for the feedback carried over from the last
session). When the text is itself metadata-block syntax it is wrapped in a
yaml fence and can be read as structured feedback:

    actions:
      - action: Add 2.5 kg to bench press
    exercises:
      - exercise: Bench Press
        stimulus: Good chest stimulus
        cue: Pause on the chest
    motivation:
      style: calm
      text: Steady progress.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from .metadata import parse_block
from .sections import find_section

CURRENT_HEADING = "Coach Feedback"
PREVIOUS_HEADING = "Previous Coach Feedback"

_YAML_FENCE_RE = re.compile(r"\A```ya?ml[ \t]*\n(.*?)\n```\Z", re.DOTALL)
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


@dataclass
class FeedbackAction:
    action: str


@dataclass
class ExerciseFeedback:
    exercise: str
    stimulus: str | None = None
    fatigue: str | None = None
    progression: str | None = None
    cue: str | None = None
    next_approach: str | None = None


@dataclass
class MotivationBoost:
    style: str
    text: str


@dataclass
class StructuredCoachFeedback:
    actions: list[FeedbackAction] = field(default_factory=list)
    exercises: list[ExerciseFeedback] = field(default_factory=list)
    motivation: MotivationBoost | None = None


@dataclass
class ExerciseValidationResult:
    exercise_name: str
    matched: bool
    session_exercise_name: str | None = None


@dataclass
class FeedbackValidationStatus:
    is_valid: bool
    actions_count: int
    exercise_validations: list[ExerciseValidationResult]
    has_motivation: bool

    @property
    def has_actions(self) -> bool:
        return self.actions_count > 0

    @property
    def has_exercise_feedback(self) -> bool:
        return bool(self.exercise_validations)


def is_metadata_syntax(content: str) -> bool:
    """True when ``content`` parses to at least one metadata key."""
    if not content.strip():
        return False
    return bool(parse_block(content))


def create_coach_feedback_body(feedback: str | None, previous: bool = False) -> str:
    """
    Render a coach feedback section.

    Args:
        feedback: Feedback text; empty gives no section
        previous: Write the ``# Previous Coach Feedback`` variant

    Returns:
        Section text, or "" for empty feedback
    """
    if not feedback:
        return ""
    heading = PREVIOUS_HEADING if previous else CURRENT_HEADING
    if is_metadata_syntax(feedback):
        return f"# {heading}\n\n```yaml\n{feedback}\n```\n"
    return f"# {heading}\n\n{feedback}\n"


def parse_coach_feedback_body(body: str, previous: bool = False) -> str | None:
    """
    Read coach feedback text from a session body, unwrapping a yaml fence.

    The current and previous sections never match each other.
    """
    section = find_section(body, PREVIOUS_HEADING if previous else CURRENT_HEADING, 1)
    if section is None:
        return None
    feedback = section.strip()
    fenced = _YAML_FENCE_RE.match(feedback)
    if fenced:
        feedback = fenced.group(1).strip()
    return feedback or None


# ---------------------------------------------------------------------------
# Structured feedback
# ---------------------------------------------------------------------------


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return ""


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def parse_structured_feedback(content: str) -> StructuredCoachFeedback | None:
    """
    Read feedback text as structured feedback.

    Returns:
        The structured form, or None when it holds no actions, exercise
        notes or motivation
    """
    if not content.strip():
        return None
    data = parse_block(content)
    result = StructuredCoachFeedback()

    for item in data.get("actions") or []:
        if isinstance(item, dict) and _text(item.get("action")):
            result.actions.append(FeedbackAction(_text(item.get("action"))))

    for item in data.get("exercises") or []:
        if isinstance(item, dict) and _text(item.get("exercise")):
            result.exercises.append(
                ExerciseFeedback(
                    exercise=_text(item.get("exercise")),
                    stimulus=_optional_text(item.get("stimulus")),
                    fatigue=_optional_text(item.get("fatigue")),
                    progression=_optional_text(item.get("progression")),
                    cue=_optional_text(item.get("cue")),
                    next_approach=_optional_text(item.get("next_approach")),
                )
            )

    motivation = data.get("motivation")
    if isinstance(motivation, dict):
        style, text = _text(motivation.get("style")), _text(motivation.get("text"))
        if style and text:
            result.motivation = MotivationBoost(style, text)

    if not result.actions and not result.exercises and result.motivation is None:
        return None
    return result


def normalize_exercise_name(name: str) -> str:
    """Lowercase alphanumerics only: "Bench-Press (BB)" -> "benchpressbb"."""
    return _NON_ALNUM_RE.sub("", name.lower())


def exercise_names_match(first: str, second: str) -> bool:
    return normalize_exercise_name(first) == normalize_exercise_name(second)


def find_matching_name(target: str, candidates: list[str]) -> str | None:
    normalized = normalize_exercise_name(target)
    return next((c for c in candidates if normalize_exercise_name(c) == normalized), None)


def validate_feedback_against_session(
    feedback: StructuredCoachFeedback, session_exercise_names: list[str]
) -> FeedbackValidationStatus:
    """
    Check that every exercise the feedback mentions exists in the session.
    """
    validations = []
    for item in feedback.exercises:
        match = find_matching_name(item.exercise, session_exercise_names)
        validations.append(ExerciseValidationResult(item.exercise, match is not None, match))
    return FeedbackValidationStatus(
        is_valid=all(v.matched for v in validations),
        actions_count=len(feedback.actions),
        exercise_validations=validations,
        has_motivation=feedback.motivation is not None,
    )


def find_exercise_feedback(feedback: StructuredCoachFeedback, exercise_name: str) -> ExerciseFeedback | None:
    return next((e for e in feedback.exercises if exercise_names_match(e.exercise, exercise_name)), None)
