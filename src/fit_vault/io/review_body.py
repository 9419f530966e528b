"""
Session review codec: the ``# Review`` section.

    # Review

    Program: [[Programs/upper-lower]]
    Completed: 2026-10-19T11:02:00+00:00
    Skipped: no

    **How did the session feel?** Hard (left shoulder tight)
"""

import re

from ..core.models import QuestionAnswer, SessionReview
from .sections import find_section

_PROGRAM_RE = re.compile(r"Program:\s*\[\[(?:Programs/)?([^\]|]+)(?:\|[^\]]*)?\]\]", re.IGNORECASE)
_COMPLETED_RE = re.compile(r"^Completed:[ \t]*(.*)$", re.IGNORECASE | re.MULTILINE)
_SKIPPED_RE = re.compile(r"^Skipped:\s*(yes|no)\b", re.IGNORECASE | re.MULTILINE)
_ANSWER_RE = re.compile(r"^\s*\*\*(.+?)\*\*\s*(.+?)\s*$")
_COMMENT_RE = re.compile(r"^(.+?)\s*\((.*)\)$")


def format_answer_line(answer: QuestionAnswer) -> str:
    line = f"**{answer.question_text}** {answer.selected_option_label}"
    if answer.free_text:
        line += f" ({answer.free_text})"
    return line


def create_session_review_body(review: SessionReview) -> str:
    lines = [
        "# Review",
        "",
        f"Program: [[Programs/{review.program_id}]]",
        f"Completed: {review.completed_at}",
        f"Skipped: {'yes' if review.skipped else 'no'}",
    ]
    if review.answers:
        lines.append("")
        lines.extend(format_answer_line(a) for a in review.answers)
    return "\n".join(lines) + "\n"


def parse_answer_line(line: str) -> QuestionAnswer | None:
    """
    Parse ``**Question** Answer (comment)``.

    The trailing parenthetical, when present, becomes the free text.
    """
    match = _ANSWER_RE.match(line)
    if not match:
        return None
    question = match.group(1).strip()
    answer = match.group(2).strip()
    free_text = None
    comment = _COMMENT_RE.match(answer)
    if comment and comment.group(1).strip():
        answer = comment.group(1).strip()
        free_text = comment.group(2).strip() or None
    if not question or not answer:
        return None
    return QuestionAnswer(
        question_id=question,
        question_text=question,
        selected_option_id=answer,
        selected_option_label=answer,
        free_text=free_text,
    )


def parse_session_review_body(body: str) -> SessionReview | None:
    """
    Parse the review section of a session body.

    Returns:
        The review, or None when the section or its program link is missing
    """
    section = find_section(body, "Review", 1)
    if section is None:
        return None
    program = _PROGRAM_RE.search(section)
    if not program:
        return None

    completed = _COMPLETED_RE.search(section)
    skipped = _SKIPPED_RE.search(section)
    answers = [a for a in (parse_answer_line(line) for line in section.split("\n")) if a is not None]
    return SessionReview(
        program_id=program.group(1).strip(),
        completed_at=completed.group(1).strip() if completed else "",
        answers=answers,
        skipped=bool(skipped) and skipped.group(1).lower() == "yes",
    )
