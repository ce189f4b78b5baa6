from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

"""Column value filters over the consolidated rows.

The dashboard filter panel offers a fixed set of columns (only those present
in the canonical headers). Selecting values keeps rows whose value is one of
the selected values for every column that has a selection; a column with an
empty selection does not filter.
"""

FILTER_COLUMNS = ("Current Station", "Receiver Type", "Journey Type", "Receive Status")


def available_filter_columns(headers: Sequence[str]) -> list[str]:
    return [c for c in FILTER_COLUMNS if c in headers]


def unique_values(rows: Iterable[Mapping[str, Any]], column: str) -> list[str]:
    """Sorted distinct non-empty values of a column."""
    return sorted({str(row.get(column)) for row in rows if row.get(column)})


def apply_column_filters(
    rows: Iterable[Mapping[str, Any]], filters: Mapping[str, Iterable[str]]
) -> list[Mapping[str, Any]]:
    selections = {col: set(values) for col, values in filters.items()}
    active = {col: values for col, values in selections.items() if values}
    if not active:
        return list(rows)
    return [
        row for row in rows
        if all(str(row.get(col)) in values for col, values in active.items())
    ]


def parse_filter_args(items: Iterable[str]) -> dict[str, set[str]]:
    """Parse repeated ``COLUMN=VALUE`` arguments into a filter mapping.

    Raises:
        ValueError: If an item has no '=' separator
    """
    filters: dict[str, set[str]] = {}
    for item in items:
        column, sep, value = item.partition("=")
        if not sep or not column.strip():
            raise ValueError(f"invalid filter {item!r}, expected COLUMN=VALUE")
        filters.setdefault(column.strip(), set()).add(value)
    return filters
