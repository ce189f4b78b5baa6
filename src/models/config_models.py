from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the ZIP/CSV ingestion pipeline.

These are the typed configuration objects built by src/config/loader.py after
YAML parsing and schema validation. Every field has a default so the pipeline
can also run without a config file.
"""

# Zero-based column positions removed from the CSV re-export:
# C:J, L, O:U, Y:AB, AD:AH
DEFAULT_DROPPED_COLUMN_INDICES: frozenset[int] = frozenset(
    [*range(2, 10), 11, *range(14, 21), *range(24, 28), *range(29, 34)]
)


@dataclass(frozen=True)
class ExportConfig:
    """Settings for the derived CSV re-export."""
    dropped_column_indices: frozenset[int] = DEFAULT_DROPPED_COLUMN_INDICES


@dataclass(frozen=True)
class IngestConfig:
    """Root configuration object for the ingestion pipeline."""
    metadata_store_path: str = "./data/uploaded_files.json"  # Durable upload metadata (JSON)
    error_log_directory: str = "./logs"  # JSON Lines error logs
    encoding: str = "utf-8"  # Text encoding of CSV members
    delimiter: str = ","  # CSV field delimiter
    unknown_uploader: str = "Unknown User"  # Display name when no identity is known
    detect_schema_mismatch: bool = True  # Report later files whose headers differ from file 1
    export: ExportConfig = field(default_factory=ExportConfig)
