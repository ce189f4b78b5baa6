from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from src.archive.extractor import ArchiveError, NoEligibleFiles, extract_csv_files
from src.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from src.export.csv_export import write_export
from src.export.json_export import select_columns, write_json_export, write_stats_export
from src.ingest.parser import parse_csv_text
from src.ingest.sanitizer import sanitize_csv_text
from src.logging.init import log_summary, set_debug, setup_logging
from src.models.config_models import IngestConfig
from src.models.upload_metadata import Uploader
from src.services.filtering import apply_column_filters, available_filter_columns, parse_filter_args
from src.services.orchestrator import EmptyResult, ProcessingError
from src.services.preview import parse_sort_arg, render_preview, search_rows, sort_rows
from src.services.summary import render_summary_line
from src.services.upload_session import NotAZipFile, UploadRejected, UploadSession, describe_failure
from src.store.metadata_store import JsonFileStore, StoreError, delete_uploaded_file, list_uploaded_files

"""CLI entrypoint.

Flow for an upload:
- Load .env and the YAML config (defaults when the default config file is absent)
- Reject non .zip inputs before extraction
- Run the ingestion pipeline through an UploadSession
- Optionally filter, search and sort the consolidated rows
- Optionally preview them or export them as CSV, JSON or column statistics
- Print the SUMMARY line

--list-uploads / --delete-upload operate on the upload metadata store only.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_NO_DATA = 2

ENV_CONFIG = "SOCPACKED_CONFIG"
ENV_USER = "SOCPACKED_USER"
ENV_EMPLOYEE_ID = "SOCPACKED_EMPLOYEE_ID"

EXPORT_FORMATS = ("csv", "json", "stats")


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv. Failure only prints a warning."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="ZIP/CSV shipment record consolidation")
    p.add_argument("archive", nargs="?", type=Path, help="ZIP archive of CSV exports")
    p.add_argument("--user", help=f"Uploader display name (default: ${ENV_USER})")
    p.add_argument("--employee-id", help=f"Uploader employee id (default: ${ENV_EMPLOYEE_ID})")
    p.add_argument("--config", type=Path, help=f"YAML config path (default: ${ENV_CONFIG} or {DEFAULT_CONFIG_PATH})")
    p.add_argument("--export", type=Path, help="Write the filtered re-export CSV to this file or directory")
    p.add_argument("--filter", action="append", default=[], metavar="COLUMN=VALUE",
                   help="Keep rows whose COLUMN equals VALUE (repeatable)")
    p.add_argument("--search", metavar="TEXT", help="Keep rows containing TEXT in any column (case-insensitive)")
    p.add_argument("--sort", metavar="COLUMN[:desc]", help="Sort rows by COLUMN, ascending unless :desc")
    p.add_argument("--columns", action="append", default=[], metavar="COL[,COL...]",
                   help="Columns to export or preview (repeatable; default: all for json/stats)")
    p.add_argument("--format", choices=EXPORT_FORMATS, default="csv", help="Export format (default: csv)")
    p.add_argument("--preview", action="store_true", help="Print the first 50 resulting rows")
    p.add_argument("--inspect-data", action="store_true", help="Print CSV headers & first rows then exit")
    p.add_argument("--list-uploads", action="store_true", help="List recorded uploaded files then exit")
    p.add_argument("--delete-upload", metavar="DATE", help="Delete uploaded file entries recorded at DATE (ISO)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> IngestConfig:
    explicit = args.config or (Path(os.environ[ENV_CONFIG]) if os.getenv(ENV_CONFIG) else None)
    if explicit is not None:
        return load_config(explicit)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return IngestConfig()


def _inspect_data(archive: Path, cfg: IngestConfig) -> int:
    try:
        files = extract_csv_files(archive.read_bytes(), encoding=cfg.encoding)
    except ArchiveError as e:
        print(f"inspect: {describe_failure(e)} ({e})")
        return EXIT_NO_DATA if isinstance(e, NoEligibleFiles) else EXIT_FATAL
    for f in files:
        parsed = parse_csv_text(sanitize_csv_text(f.text), f.name, delimiter=cfg.delimiter)
        print(f"FILE: {f.name} size={f.size}")
        print(f"  cols={list(parsed.headers)}")
        print(f"  rows={len(parsed.records)} skipped_lines={parsed.skipped_lines}")
        print("    sample_rows=", list(parsed.records[:3]))
    return EXIT_SUCCESS


def _list_uploads(store: JsonFileStore) -> int:
    entries = list_uploaded_files(store)
    if not entries:
        print("No files uploaded yet")
        return EXIT_SUCCESS
    for e in entries:
        print(f"{e.date}\t{e.name}\tsize={e.size}\tby={e.uploaded_by}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (tests call main([]))
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    store = JsonFileStore(cfg.metadata_store_path)

    if args.list_uploads or args.delete_upload:
        try:
            if args.delete_upload:
                removed = delete_uploaded_file(store, args.delete_upload)
                logger.info(f"deleted {removed} uploaded file entr{'y' if removed == 1 else 'ies'}")
                return EXIT_SUCCESS
            return _list_uploads(store)
        except StoreError as e:
            logger.error(f"store: {e}")
            return EXIT_FATAL

    if args.archive is None:
        logger.error("no archive given")
        return EXIT_FATAL

    try:
        filters = parse_filter_args(args.filter)
        sort_key = parse_sort_arg(args.sort) if args.sort else None
    except ValueError as e:
        logger.error(str(e))
        return EXIT_FATAL
    requested_columns = [c.strip() for item in args.columns for c in item.split(",") if c.strip()]

    archive: Path = args.archive
    if not archive.name.endswith(".zip"):
        logger.error(NotAZipFile.user_message)
        return EXIT_FATAL
    if not archive.is_file():
        logger.error(f"archive not found: {archive}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(archive, cfg)

    uploader = Uploader(
        full_name=args.user or os.getenv(ENV_USER),
        employee_id=args.employee_id or os.getenv(ENV_EMPLOYEE_ID),
    )
    session = UploadSession(uploader, config=cfg, metadata_store=store)
    logger.info(f"Processing archive: {archive}")
    try:
        dataset = session.submit(archive.name, archive.read_bytes())
    except (NoEligibleFiles, EmptyResult) as e:
        logger.error(describe_failure(e))
        return EXIT_NO_DATA
    except (UploadRejected, ArchiveError, ProcessingError) as e:
        logger.error(f"{describe_failure(e)}: {e}")
        return EXIT_FATAL
    except Exception as e:  # 想定外の失敗も汎用メッセージで終了
        logger.error(f"{describe_failure(e)}: {e!r}")
        return EXIT_FATAL

    rows = dataset.rows
    if filters:
        unknown = sorted(set(filters) - set(available_filter_columns(dataset.headers)))
        if unknown:
            logger.warning(f"filter columns not offered for this dataset: {unknown}")
        rows = apply_column_filters(dataset.rows, filters)
        logger.info(f"filtered rows={len(rows)}/{dataset.total_kept}")
    if args.search:
        rows = search_rows(rows, dataset.headers, args.search)
        logger.info(f"search {args.search!r} rows={len(rows)}/{dataset.total_kept}")
    if sort_key is not None:
        column, descending = sort_key
        if column not in dataset.headers:
            logger.warning(f"sort column not in dataset: {column!r}")
        rows = sort_rows(rows, column, descending)

    try:
        selected = select_columns(dataset.headers, requested_columns)
    except ValueError as e:
        logger.error(str(e))
        return EXIT_FATAL

    if args.preview:
        for line in render_preview(rows, selected):
            print(line)

    if args.export is not None:
        if args.format == "json":
            out = write_json_export(args.export, rows, selected, filtered=len(rows) != dataset.total_kept)
        elif args.format == "stats":
            out = write_stats_export(args.export, rows, selected, dataset.total_kept)
        else:
            out = write_export(
                args.export, rows, dataset.headers, cfg.export.dropped_column_indices,
                columns=selected if requested_columns else None,
            )
        logger.info(f"export written: {out}")

    summary_line = render_summary_line(dataset)
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_SUCCESS
