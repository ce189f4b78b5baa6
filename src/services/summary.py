from __future__ import annotations

from ..models.consolidated_dataset import ConsolidatedDataset

"""Summary line rendering service.

Format:
SUMMARY files={files} rows={initial} kept={kept} excluded={excluded}
skipped_lines={skipped} elapsed_sec={elapsed}
"""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_summary_line(dataset: ConsolidatedDataset) -> str:
    """Render a SUMMARY line for a consolidated dataset.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from src.models.consolidated_dataset import FileStat
        >>> start = datetime(2023, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2023, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> ds = ConsolidatedDataset(
        ...     rows=(), headers=(), total_kept=5,
        ...     file_stats={"a.csv": FileStat("a.csv", 10, 5)},
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(ds)
        'SUMMARY files=1 rows=10 kept=5 excluded=5 skipped_lines=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={len(dataset.file_stats)} "
        f"rows={dataset.total_initial_rows} "
        f"kept={dataset.total_kept} "
        f"excluded={dataset.total_excluded} "
        f"skipped_lines={dataset.total_skipped_lines} "
        f"elapsed_sec={_format_number(dataset.elapsed_seconds)}"
    )
