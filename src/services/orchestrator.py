from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..archive.extractor import extract_csv_files
from ..ingest.admission import admit_record, status_breakdown
from ..ingest.parser import parse_csv_text
from ..ingest.sanitizer import sanitize_csv_text
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.archive_member import EligibleFile
from ..models.config_models import IngestConfig
from ..models.consolidated_dataset import ConsolidatedDataset, FileStat, ParsedCsv, Record, SchemaMismatch
from ..models.upload_metadata import Uploader, UploadedFileMetadata
from ..store.metadata_store import JsonFileStore, StoreError, record_uploads
from .progress import ProgressTracker

"""Archive ingestion orchestration.

process_archive() runs the whole pipeline for one uploaded archive:
extract eligible CSV members, record their upload metadata, then sanitize,
parse and filter each file in archive order, and consolidate the kept rows
into a single ConsolidatedDataset. Files and rows are processed strictly in
order; nothing is shared with other uploads until the dataset is returned.
"""

logger = logging.getLogger("socpacked_ingest.orchestrator")

SCHEMA_MISMATCH = "SCHEMA_MISMATCH"
METADATA_WRITE_FAILED = "METADATA_WRITE_FAILED"


class ProcessingError(Exception):
    """Base exception for processing errors."""
    user_message = "Failed to process ZIP file"


class EmptyResult(ProcessingError):
    """Raised when no row of any eligible file survives the admission filter."""
    user_message = "No valid data rows found in CSV files"


def _record_upload_metadata(
    store: JsonFileStore | None,
    files: list[EligibleFile],
    uploader: Uploader,
    moment: datetime,
    config: IngestConfig,
    error_log: ErrorLogBuffer,
) -> None:
    """Append one metadata entry per eligible file; failures never stop the pipeline."""
    if store is None:
        return
    entries = [
        UploadedFileMetadata.create(f.name, f.size, uploader, moment, config.unknown_uploader)
        for f in files
    ]
    try:
        record_uploads(store, entries)
    except (StoreError, OSError) as e:
        logger.warning("upload metadata not saved: %s", e)
        error_log.append(ErrorRecord.create(file="<ARCHIVE>", line=-1, error_type=METADATA_WRITE_FAILED, message=str(e)))


def _detect_schema_mismatch(canonical: tuple[str, ...], parsed: ParsedCsv) -> SchemaMismatch | None:
    if not parsed.headers or parsed.headers == canonical:
        return None
    missing = tuple(c for c in canonical if c not in parsed.headers)
    extra = tuple(c for c in parsed.headers if c not in canonical)
    if not missing and not extra:
        # Same columns in a different order: records are keyed by name
        return None
    return SchemaMismatch(file_name=parsed.file_name, missing_columns=missing, extra_columns=extra)


def process_archive(
    buffer: bytes,
    uploader: Uploader | None = None,
    *,
    config: IngestConfig | None = None,
    metadata_store: JsonFileStore | None = None,
    error_log: ErrorLogBuffer | None = None,
    now: datetime | None = None,
) -> ConsolidatedDataset:
    """Process one uploaded ZIP archive into a consolidated dataset.

    Steps:
    1. Extract eligible CSV members (archive order)
    2. Append their upload metadata to the durable store (best effort)
    3. Per file: sanitize -> parse -> admission filter -> append kept rows
    4. Flush the error log (best effort)

    Args:
        buffer: Raw ZIP bytes
        uploader: Identity of the uploading employee
        config: Ingestion settings (defaults when None)
        metadata_store: Durable upload metadata store (skipped when None)
        error_log: Buffer for non-fatal issues (created from config when None)
        now: Upload timestamp (current UTC time when None)

    Returns:
        ConsolidatedDataset with canonical headers from the first file

    Raises:
        InvalidArchive: The buffer is not a readable ZIP archive
        NoEligibleFiles: The archive holds no eligible CSV member
        EmptyResult: No row survived the admission filter
    """
    cfg = config or IngestConfig()
    who = uploader or Uploader()
    start_time = datetime.now(UTC)
    moment = now or start_time
    errors = error_log if error_log is not None else ErrorLogBuffer(Path(cfg.error_log_directory))

    csv_files = extract_csv_files(buffer, encoding=cfg.encoding)
    logger.info(f"Processing {len(csv_files)} CSV file(s) uploaded by {who.display_name(cfg.unknown_uploader)}")

    _record_upload_metadata(metadata_store, csv_files, who, moment, cfg, errors)

    headers: tuple[str, ...] | None = None
    rows: list[Record] = []
    file_stats: dict[str, FileStat] = {}
    mismatches: list[SchemaMismatch] = []

    with ProgressTracker(len(csv_files)) as progress:
        for csv_file in csv_files:
            progress.start_file(csv_file.name)

            parsed = parse_csv_text(
                sanitize_csv_text(csv_file.text),
                csv_file.name,
                delimiter=cfg.delimiter,
                error_log=errors,
            )
            if headers is None:
                headers = parsed.headers
            elif cfg.detect_schema_mismatch:
                mismatch = _detect_schema_mismatch(headers, parsed)
                if mismatch is not None:
                    mismatches.append(mismatch)
                    message = f"missing={list(mismatch.missing_columns)} extra={list(mismatch.extra_columns)}"
                    logger.warning("headers differ from first file: file=%s %s", csv_file.name, message)
                    errors.append(
                        ErrorRecord.create(file=csv_file.name, line=1, error_type=SCHEMA_MISMATCH, message=message)
                    )

            kept = [r for r in parsed.records if admit_record(r)]
            rows.extend(kept)

            stat = FileStat(
                file_name=csv_file.name,
                initial_row_count=len(parsed.records),
                kept_row_count=len(kept),
                skipped_lines=parsed.skipped_lines,
            )
            file_stats[csv_file.name] = stat
            logger.info(
                f"file={csv_file.name} rows={stat.initial_row_count} "
                f"kept={stat.kept_row_count} excluded={stat.excluded_row_count}"
            )
            logger.debug("file=%s status breakdown=%s", csv_file.name, status_breakdown(kept))

            progress.finish_file(len(kept))

    try:
        log_path = errors.flush()
        if log_path is not None:
            logger.info(f"error log written: {log_path}")
    except OSError as e:
        logger.warning("error log not written: %s", e)

    if not rows:
        raise EmptyResult("No valid data rows found in CSV files")

    end_time = datetime.now(UTC)
    return ConsolidatedDataset(
        rows=tuple(rows),
        headers=headers or (),
        total_kept=len(rows),
        file_stats=file_stats,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        schema_mismatches=tuple(mismatches),
    )
