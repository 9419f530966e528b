"""
Scalar value codec for metadata blocks.

Scalars are strings, numbers (int or float) and booleans. Strings are
quoted only when the bare text would read back as something else.
"""

import math
import re
from typing import Any

Scalar = str | int | float | bool

_INT_RE = re.compile(r"^-?(?:0|[1-9]\d*)$")
_FLOAT_RE = re.compile(r"^-?(?:0|[1-9]\d*)(?:\.\d+)?(?:e[+-]\d+)?$")
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}

# Characters that change the meaning of a bare metadata line
_SPECIAL_CHARS = (":", "#", "\n", "\r")
_SPECIAL_PREFIXES = ("[", "{", '"', "'", "- ")


def format_number(value: int | float) -> str:
    """
    Canonical text for a number.

    Integral floats are written without a fractional part ("80.0" -> "80").
    """
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def _parse_number(text: str) -> int | float | None:
    if _INT_RE.match(text):
        number: int | float = int(text)
    elif _FLOAT_RE.match(text):
        number = float(text)
        if number.is_integer():
            return None
    else:
        return None
    # Only accept numbers whose canonical form is the input text
    if format_number(number) != text:
        return None
    return number


def _unescape(text: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), text)


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def parse_value(text: str) -> Scalar:
    """
    Decode a scalar from its metadata text.

    Matching single or double quotes are stripped (double-quoted text is
    unescaped). ``true``/``false`` become booleans, and canonical number
    text becomes int or float. Anything else is returned as a string.

    Args:
        text: Raw value text

    Returns:
        Decoded scalar
    """
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
        inner = text[1:-1]
        return _unescape(inner) if text[0] == '"' else inner

    if text == "true":
        return True
    if text == "false":
        return False

    number = _parse_number(text)
    if number is not None:
        return number
    return text


def needs_quoting(text: str, in_inline_array: bool = False) -> bool:
    """True when bare ``text`` would not read back as the same string."""
    if not text or text != text.strip():
        return True
    if text.startswith(_SPECIAL_PREFIXES):
        return True
    if any(ch in text for ch in _SPECIAL_CHARS):
        return True
    if in_inline_array and ("," in text or "]" in text):
        return True
    parsed = parse_value(text)
    return not (isinstance(parsed, str) and parsed == text)


def format_value(value: Any, in_inline_array: bool = False) -> str:
    """
    Encode a scalar as metadata text.

    Args:
        value: Scalar to encode (other types are written via str())
        in_inline_array: Also quote strings containing a comma or bracket

    Returns:
        Text that parse_value() decodes back to ``value``
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    text = str(value)
    if needs_quoting(text, in_inline_array):
        return f'"{_escape(text)}"'
    return text


def split_inline_array(content: str) -> list[str]:
    """
    Split the inside of ``[a, b, "c, d"]`` into raw item texts.

    Commas inside quoted items do not split.
    """
    if not content.strip():
        return []

    items: list[str] = []
    buf: list[str] = []
    quote: str | None = None
    escaped = False
    for ch in content:
        if quote:
            buf.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\" and quote == '"':
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in ('"', "'") and not "".join(buf).strip():
            quote = ch
            buf.append(ch)
        elif ch == ",":
            items.append("".join(buf).strip())
            buf = []
        else:
            buf.append(ch)
    items.append("".join(buf).strip())
    return items


def format_inline_array(values: list[Any]) -> str:
    """``[a, b, c]`` for a list of scalars; None entries are dropped."""
    return "[" + ", ".join(format_value(v, in_inline_array=True) for v in values if v is not None) + "]"
