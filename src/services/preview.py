from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

"""Search, sort and bounded preview over the consolidated rows.

Search is a case-insensitive substring match against every header; missing
values match as empty text. Sorting compares lower-cased text, and rows with
a missing value always go last whatever the direction.
"""

PREVIEW_ROWS = 50


def search_rows(
    rows: Iterable[Mapping[str, Any]], headers: Sequence[str], term: str | None
) -> list[Mapping[str, Any]]:
    if not term:
        return list(rows)
    needle = term.lower()
    return [
        row for row in rows
        if any(needle in str(row.get(h) or "").lower() for h in headers)
    ]


def sort_rows(
    rows: Iterable[Mapping[str, Any]], column: str, descending: bool = False
) -> list[Mapping[str, Any]]:
    """Stable sort on one column; rows missing the value keep their order at the end."""
    rows = list(rows)
    present = [r for r in rows if r.get(column) is not None]
    missing = [r for r in rows if r.get(column) is None]
    present.sort(key=lambda r: str(r[column]).lower(), reverse=descending)
    return present + missing


def parse_sort_arg(value: str) -> tuple[str, bool]:
    """Parse ``COLUMN`` or ``COLUMN:asc|desc`` into (column, descending).

    Raises:
        ValueError: If the column is empty or the direction is unknown
    """
    column, sep, direction = value.rpartition(":")
    if not sep or direction.lower() not in ("asc", "desc"):
        column, direction = value, "asc"
    column = column.strip()
    if not column:
        raise ValueError(f"invalid sort {value!r}, expected COLUMN[:asc|desc]")
    return column, direction.lower() == "desc"


def render_preview(
    rows: Sequence[Mapping[str, Any]], columns: Sequence[str], limit: int = PREVIEW_ROWS
) -> list[str]:
    """Tab separated preview lines: header, at most ``limit`` rows, then a count footer."""
    lines = ["\t".join(columns)]
    for row in rows[:limit]:
        lines.append("\t".join("" if row.get(c) is None else str(row.get(c)) for c in columns))
    lines.append(f"Showing {min(limit, len(rows))} of {len(rows)} records")
    return lines
