from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from pathlib import Path
from typing import Any

from src.models.config_models import DEFAULT_DROPPED_COLUMN_INDICES

"""Derived CSV re-export of the consolidated dataset.

A fixed set of zero-based column positions is dropped from the canonical
headers (C:J, L, O:U, Y:AB, AD:AH), then the remaining columns are serialized.
A cell is wrapped in double quotes when it contains a comma or a quote, and
embedded quotes are doubled. Missing/None cells are written empty.
An explicit column selection replaces the positional drop.
"""

__all__ = [
    "export_columns",
    "escape_cell",
    "render_export_csv",
    "export_filename",
    "write_export",
]


def export_columns(
    headers: Sequence[str], dropped_indices: Iterable[int] = DEFAULT_DROPPED_COLUMN_INDICES
) -> list[str]:
    dropped = set(dropped_indices)
    return [h for idx, h in enumerate(headers) if idx not in dropped]


def escape_cell(value: Any) -> str:
    text = "" if value is None else str(value)
    escaped = text.replace('"', '""')
    if "," in escaped or '"' in escaped:
        return f'"{escaped}"'
    return escaped


def render_export_csv(
    rows: Iterable[Mapping[str, Any]],
    headers: Sequence[str],
    dropped_indices: Iterable[int] = DEFAULT_DROPPED_COLUMN_INDICES,
    columns: Sequence[str] | None = None,
) -> str:
    if columns is None:
        columns = export_columns(headers, dropped_indices)
    lines = [",".join(escape_cell(c) for c in columns)]
    for row in rows:
        lines.append(",".join(escape_cell(row.get(c)) for c in columns))
    return "\n".join(lines)


def export_filename(day: date) -> str:
    return f"data-export-{day.isoformat()}.csv"


def write_export(
    path: Path,
    rows: Iterable[Mapping[str, Any]],
    headers: Sequence[str],
    dropped_indices: Iterable[int] = DEFAULT_DROPPED_COLUMN_INDICES,
    columns: Sequence[str] | None = None,
) -> Path:
    """Write the re-export as UTF-8; a directory path gets the dated default file name."""
    if path.is_dir():
        path = path / export_filename(date.today())
    path.write_text(render_export_csv(rows, headers, dropped_indices, columns), encoding="utf-8")
    return path
