"""
Pipe-table parsing and rendering.

    | Exercise | Sets | Reps | Rest |
    |---|---|---|---|
    | [[bench-press]] | 4 | 6-8 | 180s |

Pipes inside ``[[target|alias]]`` links do not split cells.
"""

from dataclasses import dataclass
from typing import Any

# Cell texts that mean "no value" in a data row
EMPTY_CELLS = frozenset({"", "-", "—"})


@dataclass
class Column:
    key: str
    header: str


def split_row(line: str) -> list[str]:
    """
    Split a table row into trimmed cells.

    Leading and trailing pipes are optional.
    """
    cells: list[str] = []
    buf: list[str] = []
    depth = 0
    i = 0
    while i < len(line):
        if line.startswith("[[", i):
            depth += 1
            buf.append("[[")
            i += 2
            continue
        if line.startswith("]]", i) and depth:
            depth -= 1
            buf.append("]]")
            i += 2
            continue
        ch = line[i]
        if ch == "\\" and line.startswith("\\|", i):
            buf.append("|")
            i += 2
            continue
        if ch == "|" and not depth:
            cells.append("".join(buf).strip())
            buf = []
        else:
            buf.append(ch)
        i += 1
    cells.append("".join(buf).strip())

    stripped = line.strip()
    if stripped.startswith("|"):
        cells = cells[1:]
    if stripped.endswith("|") and cells:
        cells = cells[:-1]
    return cells


def is_table_line(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("|") and len(stripped) > 1


def _is_separator(line: str) -> bool:
    cells = split_row(line)
    return bool(cells) and all(cell and set(cell) <= set("-: ") for cell in cells)


def find_table(text: str) -> str | None:
    """
    Return the first table (header, separator and data rows) in ``text``.

    Returns:
        The table lines joined with newlines, or None when there is none
    """
    lines = text.split("\n")
    for i in range(len(lines) - 1):
        if is_table_line(lines[i]) and is_table_line(lines[i + 1]) and _is_separator(lines[i + 1]):
            end = i + 2
            while end < len(lines) and is_table_line(lines[end]):
                end += 1
            return "\n".join(lines[i:end])
    return None


def parse_table(table: str) -> list[dict[str, str]]:
    """
    Parse a pipe table into rows keyed by header text.

    Rows with no meaningful cell are skipped. Missing cells read as "".

    Args:
        table: Table text (header line, separator line, data lines)

    Returns:
        One dict per data row
    """
    lines = [line for line in table.strip().split("\n") if line.strip()]
    if len(lines) < 2:
        return []

    headers = [h for h in split_row(lines[0]) if h]
    rows: list[dict[str, str]] = []
    for line in lines[2:]:
        values = split_row(line)
        if not any(v not in EMPTY_CELLS for v in values):
            continue
        rows.append({header: values[idx] if idx < len(values) else "" for idx, header in enumerate(headers)})
    return rows


def get_cell(row: dict[str, str], *names: str, default: str = "") -> str:
    """First present cell among header ``names`` (case-insensitive)."""
    lowered = {k.lower(): v for k, v in row.items()}
    for name in names:
        value = lowered.get(name.lower())
        if value is not None:
            return value
    return default


def _format_cell(value: Any) -> str:
    if value is None:
        return "-"
    return str(value).replace("\n", " ")


def create_table(columns: list[Column], rows: list[dict[str, Any]]) -> str:
    """
    Render rows as a pipe table.

    Missing values are rendered as "-".
    """
    if not columns:
        return ""
    lines = [
        "| " + " | ".join(c.header for c in columns) + " |",
        "|" + "|".join("---" for _ in columns) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(_format_cell(row.get(c.key)) for c in columns) + " |")
    return "\n".join(lines)
