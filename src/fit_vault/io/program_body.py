"""
Program body codec.

    ## Description

    Four-week upper/lower split.

    ## Workouts

    ### Upper A

    | Exercise | Sets | Reps | Rest |
    |---|---|---|---|
    | bench-press | 4 | 6-8 | 180s |

    ## Review

    ### session-feel
    **How did the session feel?**
    - easy: Easy
    - hard: Hard | freeText: 120

A fenced code block may hold ``##`` lines without ending a section.
"""

import re

from ..core.config import DEFAULT_FREE_TEXT_MAX_LENGTH
from ..core.identifiers import to_slug
from ..core.models import Question, QuestionOption, Workout
from .sections import find_section, split_sections, strip_html_comments
from .workout_body import create_exercise_table, parse_exercise_table

_PROMPT_RE = re.compile(r"^\*\*(.+)\*\*$")
_FREE_TEXT_OPTION_RE = re.compile(r"^([^:]+):\s*(.+?)\s*\|\s*freeText:\s*(\d+)$")
_OPTION_RE = re.compile(r"^([^:]+):\s*(.+)$")


def _section_text(body: str, title: str) -> str | None:
    content = find_section(body, title, 2)
    if content is None:
        return None
    return content.strip() or None


def parse_description_section(body: str) -> str | None:
    """Text of ``## Description``, or None when absent or empty."""
    return _section_text(body, "Description")


def parse_inline_workouts(body: str) -> list[Workout]:
    """
    Workouts defined as ``### Name`` blocks holding an exercise table.

    Blocks under ``## Workouts`` are used when that section exists;
    otherwise every ``###`` block outside ``## Review`` is considered.
    Blocks without a table are not workouts.
    """
    scope = find_section(body, "Workouts", 2)
    if scope is None:
        scope = "\n".join(
            f"## {title}\n{content}" for title, content in split_sections(body, 2) if title != "Review"
        ) or body

    workouts = []
    for title, content in split_sections(scope, 3):
        exercises = parse_exercise_table(content)
        if title and exercises:
            workouts.append(Workout(id=to_slug(title), name=title, exercises=exercises))
    return workouts


def _parse_question_block(question_id: str, block: str) -> Question | None:
    lines = [line.strip() for line in strip_html_comments(block).split("\n") if line.strip()]
    if not question_id or not lines:
        return None
    prompt = _PROMPT_RE.match(lines[0])
    if not prompt or not prompt.group(1).strip():
        return None

    question = Question(id=question_id, text=prompt.group(1).strip())
    for line in lines[1:]:
        if not line.startswith("- "):
            continue
        content = line[2:]
        free_text = _FREE_TEXT_OPTION_RE.match(content)
        if free_text:
            option_id, label = free_text.group(1).strip(), free_text.group(2).strip()
            if option_id and label:
                question.options.append(QuestionOption(option_id, label))
                question.allow_free_text = True
                question.free_text_trigger = option_id
                question.free_text_max_length = int(free_text.group(3) or DEFAULT_FREE_TEXT_MAX_LENGTH)
            continue
        option = _OPTION_RE.match(content)
        if option and option.group(1).strip() and option.group(2).strip():
            question.options.append(QuestionOption(option.group(1).strip(), option.group(2).strip()))

    return question if question.options else None


def parse_review_questions(body: str) -> list[Question]:
    """Questions from ``## Review``; blocks without options are dropped."""
    section = find_section(body, "Review", 2)
    if section is None:
        return []
    questions = []
    for question_id, block in split_sections(section, 3):
        question = _parse_question_block(question_id.strip(), block)
        if question is not None:
            questions.append(question)
    return questions


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def create_description_section(description: str | None) -> str:
    if not description:
        return ""
    return f"## Description\n\n{description.strip()}\n"


def create_inline_workouts_section(workouts: list[Workout]) -> str:
    if not workouts:
        return ""
    blocks = [f"### {w.name}\n\n{create_exercise_table(w.exercises)}\n" for w in workouts]
    return "## Workouts\n\n" + "\n".join(blocks)


def _option_line(question: Question, option: QuestionOption) -> str:
    line = f"- {option.id}: {option.label}"
    if question.free_text_trigger == option.id:
        line += f" | freeText: {question.free_text_max_length or DEFAULT_FREE_TEXT_MAX_LENGTH}"
    return line


def create_review_section(questions: list[Question]) -> str:
    if not questions:
        return ""
    blocks = []
    for question in questions:
        lines = [f"### {question.id}", f"**{question.text}**"]
        lines.extend(_option_line(question, option) for option in question.options)
        blocks.append("\n".join(lines) + "\n")
    return "## Review\n\n" + "\n".join(blocks)


def create_program_body(
    description: str | None, inline_workouts: list[Workout], questions: list[Question]
) -> str:
    """Join the non-empty program sections with blank lines."""
    sections = [
        create_description_section(description),
        create_inline_workouts_section(inline_workouts),
        create_review_section(questions),
    ]
    rendered = [s for s in sections if s]
    if not rendered:
        return ""
    return "\n" + "\n".join(rendered)
