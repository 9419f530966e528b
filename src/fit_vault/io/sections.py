"""
Heading-delimited sections of a document body.

A section runs from its heading to the next heading of the same or a
higher level. Headings inside fenced code blocks do not count.
"""

import re
from dataclasses import dataclass

_HEADING_RE = re.compile(r"^(#{1,6})[ \t]+(.+?)\s*$")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")


@dataclass
class Heading:
    line: int
    level: int
    title: str


def iter_headings(text: str) -> list[Heading]:
    """All headings outside fenced code blocks, in order."""
    headings: list[Heading] = []
    fence: str | None = None
    for number, line in enumerate(text.split("\n")):
        fence_match = _FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker == fence:
                fence = None
            continue
        if fence is not None:
            continue
        match = _HEADING_RE.match(line)
        if match:
            headings.append(Heading(number, len(match.group(1)), match.group(2).strip()))
    return headings


def split_sections(text: str, level: int) -> list[tuple[str, str]]:
    """
    Split ``text`` at headings of exactly ``level``.

    Content before the first such heading is dropped. A heading of a higher
    level (fewer #) also ends the current section.

    Returns:
        (title, content) pairs, content without the heading line
    """
    lines = text.split("\n")
    sections: list[tuple[str, str]] = []
    current: Heading | None = None
    for heading in iter_headings(text):
        if heading.level > level:
            continue
        if current is not None:
            sections.append((current.title, "\n".join(lines[current.line + 1 : heading.line])))
            current = None
        if heading.level == level:
            current = heading
    if current is not None:
        sections.append((current.title, "\n".join(lines[current.line + 1 :])))
    return sections


def find_section(text: str, title: str, level: int) -> str | None:
    """
    Content of the first section titled ``title`` at ``level``.

    The title match is exact after trimming, so "Coach Feedback" never
    matches "Previous Coach Feedback".

    Returns:
        Section content, or None when the section is absent
    """
    for section_title, content in split_sections(text, level):
        if section_title == title:
            return content
    return None


def strip_html_comments(text: str) -> str:
    return re.sub(r"<!--.*?-->", "", text, flags=re.DOTALL)
