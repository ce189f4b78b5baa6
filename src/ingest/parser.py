from __future__ import annotations

import csv
import io
import logging
import re
from collections.abc import Sequence
from typing import Any

import pandas as pd

from src.logging.error_log import ErrorLogBuffer, ErrorRecord
from src.models.consolidated_dataset import ParsedCsv, Record

"""CSV parser adapter.

Turns sanitized CSV text into header-keyed records with pandas:

- Line 1 is the header row; header names are trimmed (a leading BOM included)
- Empty lines are skipped, and records whose every value is null/empty are dropped
- Lines with more fields than the header are reported (with their line number)
  and skipped while the rest of the file keeps parsing, unless the extra fields
  are all empty (trailing delimiters), in which case the row is kept
- Lines with fewer fields get None cells
- Repeated header names are renamed <name>_1, <name>_2, ... so no column is lost
- Every cell is kept as text (no type or NA inference)

The text is read without a header (header=None) and the first row is applied
as header afterwards, so pandas never infers an implicit index column from a
malformed first data line.
"""

__all__ = [
    "PARSE_ERROR",
    "dedupe_headers",
    "parse_csv_text",
    "trim_header",
]

logger = logging.getLogger("socpacked_ingest.parser")

PARSE_ERROR = "PARSE_ERROR"
BOM = "\ufeff"
LINE_IN_MESSAGE = re.compile(r"line (\d+)")


def trim_header(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip().lstrip(BOM).strip()


def _cell(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    return str(value)


def _is_blank(record: Record) -> bool:
    return all(v is None or v == "" for v in record.values())


def dedupe_headers(headers: Sequence[str]) -> tuple[str, ...]:
    """Rename repeated header names to ``<name>_<n>`` so no column is shadowed.

    >>> dedupe_headers(["id", "Remark", "Remark", "Remark"])
    ('id', 'Remark', 'Remark_1', 'Remark_2')
    """
    used: set[str] = set()
    counts: dict[str, int] = {}
    result: list[str] = []
    for name in headers:
        candidate = name
        while candidate in used:
            counts[name] = counts.get(name, 0) + 1
            candidate = f"{name}_{counts[name]}"
        used.add(candidate)
        result.append(candidate)
    return tuple(result)


def _locate_overlong_lines(text: str, delimiter: str) -> tuple[int, list[int]]:
    """Header width and the 1-based start line of every record wider than it.

    Reads the text with the same csv dialect the python engine uses, so the
    n-th entry matches the n-th bad-line callback from pandas.
    """
    reader = csv.reader(io.StringIO(text), delimiter=delimiter, strict=False)
    width: int | None = None
    lines: list[int] = []
    last_line = 0
    for row in reader:
        start = last_line + 1
        last_line = reader.line_num
        if not row:
            continue
        if width is None:
            width = len(row)
        elif len(row) > width:
            lines.append(start)
    return width or 0, lines


def _error_line(message: str) -> int:
    m = LINE_IN_MESSAGE.search(message)
    return int(m.group(1)) if m else -1


def parse_csv_text(
    text: str,
    file_name: str = "",
    *,
    delimiter: str = ",",
    error_log: ErrorLogBuffer | None = None,
) -> ParsedCsv:
    """Parse sanitized CSV text into trimmed headers and records.

    Parameters
    ----------
    text: sanitized CSV text, header row on line 1
    file_name: archive member name (logging only)
    delimiter: field delimiter
    error_log: optional buffer receiving PARSE_ERROR records

    Returns
    -------
    ParsedCsv with this file's own headers and its non-blank records
    """
    if not text.strip():
        logger.debug("empty csv content: %s", file_name)
        return ParsedCsv(file_name=file_name, headers=(), records=())

    bad_lines: list[list[str]] = []
    overlong: tuple[int, list[int]] | None = None
    callbacks = 0

    def _on_bad_line(fields: list[str]) -> list[str] | None:
        nonlocal overlong, callbacks
        if overlong is None:
            overlong = _locate_overlong_lines(text, delimiter)
        width, lines = overlong
        line = lines[callbacks] if callbacks < len(lines) else -1
        callbacks += 1

        if all(not f.strip() for f in fields[width:]):
            # Trailing delimiters only: keep the row
            logger.debug("csv parse: file=%s line=%d trailing empty fields dropped", file_name, line)
            return fields[:width]

        bad_lines.append(fields)
        message = f"too many fields ({len(fields)}, expected {width}), line skipped"
        logger.warning("csv parse: file=%s line=%d %s", file_name, line, message)
        if error_log is not None:
            error_log.append(ErrorRecord.create(file=file_name, line=line, error_type=PARSE_ERROR, message=message))
        return None

    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=delimiter,
            header=None,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_on_bad_line,
        )
    except pd.errors.EmptyDataError:
        return ParsedCsv(file_name=file_name, headers=(), records=())
    except (pd.errors.ParserError, csv.Error) as e:
        logger.error("csv parse: file=%s unreadable content: %s", file_name, e)
        if error_log is not None:
            error_log.append(
                ErrorRecord.create(file=file_name, line=_error_line(str(e)), error_type=PARSE_ERROR, message=str(e))
            )
        return ParsedCsv(file_name=file_name, headers=(), records=(), skipped_lines=len(bad_lines))

    if df.shape[0] == 0:
        return ParsedCsv(file_name=file_name, headers=(), records=(), skipped_lines=len(bad_lines))

    raw_headers = tuple(trim_header(v) for v in df.iloc[0].tolist())
    headers = dedupe_headers(raw_headers)
    if headers != raw_headers:
        renamed = [f"{old}->{new}" for old, new in zip(raw_headers, headers, strict=True) if old != new]
        logger.warning("csv parse: file=%s duplicate headers renamed: %s", file_name, ", ".join(renamed))

    records: list[Record] = []
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        record: Record = {col: _cell(val) for col, val in zip(headers, raw, strict=False)}
        if _is_blank(record):
            continue
        records.append(record)

    return ParsedCsv(
        file_name=file_name,
        headers=headers,
        records=tuple(records),
        skipped_lines=len(bad_lines),
    )
