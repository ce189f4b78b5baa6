from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

"""Parsing and consolidation result models.

ParsedCsv is the output of the CSV parser adapter for one archive member.
FileStat and SchemaMismatch are per-file diagnostics collected while
consolidating, and ConsolidatedDataset is the single result handed to the
caller once every eligible file has been processed.
"""

Record = dict[str, str | None]


@dataclass(frozen=True)
class ParsedCsv:
    """Header-keyed records parsed from one sanitized CSV text.

    Records already exclude blank rows (every value null or empty).
    """
    file_name: str
    headers: tuple[str, ...]  # Trimmed header row of this file
    records: tuple[Record, ...]
    skipped_lines: int = 0  # Malformed lines dropped by the tokenizer


@dataclass(frozen=True)
class FileStat:
    """Per-file admission statistics."""
    file_name: str
    initial_row_count: int  # After blank-row filter, before admission filter
    kept_row_count: int  # Rows admitted into the dataset
    skipped_lines: int = 0

    @property
    def excluded_row_count(self) -> int:
        return self.initial_row_count - self.kept_row_count


@dataclass(frozen=True)
class SchemaMismatch:
    """Header difference between a later file and the canonical header list."""
    file_name: str
    missing_columns: tuple[str, ...]  # Canonical columns absent from the file
    extra_columns: tuple[str, ...]  # File columns not reachable under canonical headers


@dataclass(frozen=True)
class ConsolidatedDataset:
    """Final ordered row set plus headers and per-file statistics.

    rows keep insertion order: file order first, then row order within a file.
    headers are the trimmed header row of the first processed file.
    """
    rows: tuple[Record, ...]
    headers: tuple[str, ...]
    total_kept: int
    file_stats: dict[str, FileStat]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    schema_mismatches: tuple[SchemaMismatch, ...] = field(default_factory=tuple)

    @property
    def total_initial_rows(self) -> int:
        return sum(s.initial_row_count for s in self.file_stats.values())

    @property
    def total_excluded(self) -> int:
        return sum(s.excluded_row_count for s in self.file_stats.values())

    @property
    def total_skipped_lines(self) -> int:
        return sum(s.skipped_lines for s in self.file_stats.values())

    @property
    def per_file_stats(self) -> dict[str, dict[str, int]]:
        """Per-file {initialRowCount, keptRowCount} breakdown."""
        return {
            name: {"initialRowCount": s.initial_row_count, "keptRowCount": s.kept_row_count}
            for name, s in self.file_stats.items()
        }
