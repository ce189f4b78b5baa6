from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from src.models.upload_metadata import to_iso_timestamp

"""JSON and column-statistics exports of the (filtered) consolidated rows.

Both exports work on an explicit column selection; an empty selection means
every canonical header. The JSON export is an array of row objects limited
to the selected columns. The statistics export summarizes each selected
column over the given rows: distinct and total non-missing counts plus the
first five sample values.
"""

__all__ = [
    "SAMPLE_VALUES",
    "select_columns",
    "render_export_json",
    "render_column_stats",
    "json_export_filename",
    "stats_export_filename",
    "write_json_export",
    "write_stats_export",
]

SAMPLE_VALUES = 5


def select_columns(headers: Sequence[str], selected: Iterable[str] | None = None) -> list[str]:
    """Selected columns in canonical order; all headers when nothing is selected.

    Raises:
        ValueError: If a selected column is not one of the headers
    """
    chosen = list(dict.fromkeys(selected or ()))
    if not chosen:
        return list(headers)
    unknown = [c for c in chosen if c not in headers]
    if unknown:
        raise ValueError(f"unknown columns: {unknown}")
    return [h for h in headers if h in chosen]


def _frame(rows: Iterable[Mapping[str, Any]], columns: Sequence[str]) -> pd.DataFrame:
    records = [{c: row.get(c) for c in columns} for row in rows]
    return pd.DataFrame.from_records(records, columns=list(columns))


def render_export_json(rows: Iterable[Mapping[str, Any]], columns: Sequence[str]) -> str:
    df = _frame(rows, columns)
    if df.empty:
        return "[]"
    return df.to_json(orient="records", indent=2, force_ascii=False)


def render_column_stats(
    rows: Iterable[Mapping[str, Any]],
    columns: Sequence[str],
    total_records: int,
    now: datetime | None = None,
) -> str:
    """Per-column statistics document.

    Args:
        rows: The rows being exported (after filters)
        columns: Selected columns
        total_records: Row count before filtering
        now: Export timestamp (default: current time)
    """
    df = _frame(rows, columns)
    summary: dict[str, dict[str, Any]] = {}
    for column in columns:
        values = df[column].dropna()
        summary[column] = {
            "uniqueValues": int(values.nunique()),
            "totalValues": int(values.size),
            "sampleValues": values.head(SAMPLE_VALUES).tolist(),
        }
    doc = {
        "exportDate": to_iso_timestamp(now or datetime.now(UTC)),
        "totalRecords": total_records,
        "filteredRecords": len(df),
        "selectedColumns": list(columns),
        "columnCount": len(columns),
        "summary": summary,
    }
    return json.dumps(doc, indent=2, ensure_ascii=False)


def json_export_filename(day: date, filtered: bool) -> str:
    return f"data-{'filtered' if filtered else 'all'}-{day.isoformat()}.json"


def stats_export_filename(day: date) -> str:
    return f"data-stats-{day.isoformat()}.json"


def write_json_export(
    path: Path, rows: Iterable[Mapping[str, Any]], columns: Sequence[str], *, filtered: bool = False
) -> Path:
    if path.is_dir():
        path = path / json_export_filename(date.today(), filtered)
    path.write_text(render_export_json(rows, columns), encoding="utf-8")
    return path


def write_stats_export(
    path: Path, rows: Iterable[Mapping[str, Any]], columns: Sequence[str], total_records: int
) -> Path:
    if path.is_dir():
        path = path / stats_export_filename(date.today())
    path.write_text(render_column_stats(rows, columns, total_records), encoding="utf-8")
    return path
