"""
Metadata block codec.

A document may start with a fenced metadata block:

    ---
    name: Push Day
    tags: [upper, push]
    exercises:
      - exercise: Bench Press
        targetSets: 4
    ---
    body text...

The dialect is deliberately small: scalars, inline scalar arrays, nested
objects and arrays of objects, all indentation based. A ``key:`` line with
no value opens a nested block; the first deeper line decides whether the
block is an array (``- `` items) or an object.
"""

import re
from dataclasses import dataclass
from typing import Any

from .values import format_inline_array, format_value, parse_value, split_inline_array

FENCE = "---"

_FENCE_RE = re.compile(r"\A---\n(?:(.*?)\n)?---[ \t]*(?:\n|\Z)(.*)\Z", re.DOTALL)
_FIELD_RE = re.compile(r"^([\w-]+):(?:[ \t]+(.*))?$")
_INLINE_ARRAY_RE = re.compile(r"^\[(.*)\]$")


@dataclass
class _Frame:
    """One level of the parse stack."""

    target: dict[str, Any]
    array: list[Any] | None
    indent: int


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _is_array_block(lines: list[str], start: int, block_indent: int) -> bool | None:
    """
    Look ahead from ``start`` to classify the block opened at ``block_indent``.

    Returns:
        True for an array, False for an object, None when the block is empty
    """
    for line in lines[start:]:
        if not line.strip():
            continue
        if _indent_of(line) <= block_indent:
            return None
        stripped = line.strip()
        return stripped.startswith("- ") or stripped == "-"
    return None


def _parse_field_value(rest: str) -> Any:
    match = _INLINE_ARRAY_RE.match(rest)
    # An unquoted [[link]] is a reference, not a nested array
    if match and not rest.startswith("[["):
        return [parse_value(item) for item in split_inline_array(match.group(1))]
    return parse_value(rest)


class _BlockParser:
    def __init__(self, text: str):
        self.lines = text.split("\n")
        self.result: dict[str, Any] = {}
        self.stack = [_Frame(self.result, None, -2)]

    def parse(self) -> dict[str, Any]:
        for index, line in enumerate(self.lines):
            if not line.strip():
                continue
            indent = _indent_of(line)
            stripped = line.strip()

            while len(self.stack) > 1 and indent <= self.stack[-1].indent:
                self.stack.pop()
            current = self.stack[-1]

            if stripped.startswith("- ") or stripped == "-":
                self._array_item(stripped[2:], current, index, indent)
                continue

            match = _FIELD_RE.match(stripped)
            if match:
                self._field(match.group(1), match.group(2), current.target, index, indent)
        return self.result

    def _array_item(self, content: str, current: _Frame, index: int, indent: int) -> None:
        if current.array is None:
            return
        match = _FIELD_RE.match(content)
        if not match:
            current.array.append(parse_value(content))
            return
        element: dict[str, Any] = {}
        current.array.append(element)
        self.stack.append(_Frame(element, None, indent))
        # Remaining fields of the element sit two columns past the dash
        self._field(match.group(1), match.group(2), element, index, indent + 2)

    def _field(self, key: str, rest: str | None, target: dict[str, Any], index: int, indent: int) -> None:
        if rest is not None and rest.strip():
            target[key] = _parse_field_value(rest.strip())
            return

        kind = _is_array_block(self.lines, index + 1, indent)
        if kind is None:
            target[key] = None
        elif kind:
            array: list[Any] = []
            target[key] = array
            self.stack.append(_Frame(target, array, indent))
        else:
            obj: dict[str, Any] = {}
            target[key] = obj
            self.stack.append(_Frame(obj, None, indent))


def parse_block(text: str) -> dict[str, Any]:
    """
    Parse the inside of a metadata block (without fences).

    Unrecognized lines are skipped; this never raises on malformed input.
    """
    return _BlockParser(text.replace("\r\n", "\n")).parse()


def parse_metadata_block(content: str) -> tuple[dict[str, Any] | None, str]:
    """
    Split a document into its metadata block and body.

    Args:
        content: Full document text

    Returns:
        (metadata, body); metadata is None and body is the whole input when
        the document does not start with a fence
    """
    content = content.replace("\r\n", "\n")
    match = _FENCE_RE.match(content)
    if not match:
        return None, content
    return parse_block(match.group(1) or ""), match.group(2)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, dict)) and not value:
        return False
    return True


def _is_object_array(values: list[Any]) -> bool:
    return any(isinstance(v, dict) for v in values)


def _serialize_object(obj: dict[str, Any], lines: list[str], level: int) -> None:
    prefix = "  " * level
    for key, value in obj.items():
        if not _is_present(value):
            continue
        if isinstance(value, list):
            if _is_object_array(value):
                lines.append(f"{prefix}{key}:")
                for item in value:
                    _serialize_array_item(item, lines, level + 1)
            else:
                lines.append(f"{prefix}{key}: {format_inline_array(value)}")
        elif isinstance(value, dict):
            lines.append(f"{prefix}{key}:")
            _serialize_object(value, lines, level + 1)
        else:
            lines.append(f"{prefix}{key}: {format_value(value)}")


def _serialize_array_item(item: Any, lines: list[str], level: int) -> None:
    prefix = "  " * level
    if not isinstance(item, dict):
        if item is not None:
            lines.append(f"{prefix}- {format_value(item)}")
        return

    entries = [(k, v) for k, v in item.items() if _is_present(v)]
    for position, (key, value) in enumerate(entries):
        lead = f"{prefix}- " if position == 0 else f"{prefix}  "
        if isinstance(value, list):
            if _is_object_array(value):
                lines.append(f"{lead}{key}:")
                for sub_item in value:
                    _serialize_array_item(sub_item, lines, level + 2)
            else:
                lines.append(f"{lead}{key}: {format_inline_array(value)}")
        elif isinstance(value, dict):
            lines.append(f"{lead}{key}:")
            _serialize_object(value, lines, level + 2)
        else:
            lines.append(f"{lead}{key}: {format_value(value)}")


def serialize_block(data: dict[str, Any]) -> str:
    """Serialize a mapping to metadata lines without fences."""
    lines: list[str] = []
    _serialize_object(data, lines, 0)
    return "\n".join(lines)


def serialize_metadata_block(data: dict[str, Any]) -> str:
    """
    Serialize a mapping to a fenced metadata block.

    Keys keep insertion order. None values and empty lists or mappings are
    omitted.
    """
    inner = serialize_block(data)
    if not inner:
        return f"{FENCE}\n{FENCE}"
    return f"{FENCE}\n{inner}\n{FENCE}"


def create_document(metadata: dict[str, Any], body: str = "") -> str:
    """Join a metadata block and body into document text."""
    block = serialize_metadata_block(metadata)
    return f"{block}\n{body}" if body else f"{block}\n"
