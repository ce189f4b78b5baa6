from __future__ import annotations

import io
import logging
import zipfile

from src.models.archive_member import ArchiveMember, EligibleFile

"""ZIP archive extractor.

Opens an uploaded archive from an in-memory buffer, enumerates its entries in
archive order and selects the CSV members eligible for processing: the name
ends with ``.csv`` (case-sensitive) and does not start with the macOS
resource-fork prefix ``__MACOSX``.
"""

__all__ = [
    "ArchiveError",
    "InvalidArchive",
    "NoEligibleFiles",
    "is_eligible_name",
    "list_members",
    "extract_csv_files",
]

logger = logging.getLogger("socpacked_ingest.extractor")

CSV_SUFFIX = ".csv"
MACOS_METADATA_PREFIX = "__MACOSX"


class ArchiveError(Exception):
    """Base class for archive level failures."""
    user_message = "Failed to process ZIP file"


class InvalidArchive(ArchiveError):
    """Raised when the buffer cannot be read as a ZIP archive."""


class NoEligibleFiles(ArchiveError):
    """Raised when the archive contains no eligible CSV member."""
    user_message = "No CSV files found in the ZIP archive"


def is_eligible_name(name: str) -> bool:
    return name.endswith(CSV_SUFFIX) and not name.startswith(MACOS_METADATA_PREFIX)


def _open_zip(buffer: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(buffer))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, OSError) as e:
        raise InvalidArchive(f"not a readable ZIP archive: {e}") from e


def _read_member(zf: zipfile.ZipFile, info: zipfile.ZipInfo) -> bytes:
    try:
        return zf.read(info)
    except (zipfile.BadZipFile, NotImplementedError, RuntimeError, OSError, EOFError) as e:
        # CRC mismatch, unsupported compression, encrypted entry, truncated data
        raise InvalidArchive(f"cannot read archive member {info.filename!r}: {e}") from e


def list_members(buffer: bytes) -> list[ArchiveMember]:
    """Enumerate every entry of the archive (files and directories) in archive order.

    Raises:
        InvalidArchive: If the buffer is not a readable ZIP archive
    """
    with _open_zip(buffer) as zf:
        members: list[ArchiveMember] = []
        for info in zf.infolist():
            if info.is_dir():
                members.append(ArchiveMember(name=info.filename, is_directory=True))
            else:
                members.append(
                    ArchiveMember(name=info.filename, is_directory=False, raw_bytes=_read_member(zf, info))
                )
        return members


def extract_csv_files(buffer: bytes, encoding: str = "utf-8") -> list[EligibleFile]:
    """Extract and decode the eligible CSV members of an archive.

    Only eligible members are read. Undecodable bytes are replaced rather than
    failing the whole archive.

    Args:
        buffer: Raw ZIP bytes
        encoding: Text encoding of the CSV members

    Returns:
        Eligible files in archive enumeration order

    Raises:
        InvalidArchive: If the buffer (or an eligible member) cannot be read
        NoEligibleFiles: If no member satisfies the eligibility predicate
    """
    files: list[EligibleFile] = []
    with _open_zip(buffer) as zf:
        for info in zf.infolist():
            if info.is_dir() or not is_eligible_name(info.filename):
                logger.debug("skip archive member: %s", info.filename)
                continue
            raw = _read_member(zf, info)
            files.append(EligibleFile(name=info.filename, text=raw.decode(encoding, errors="replace")))

    if not files:
        raise NoEligibleFiles("No CSV files found in the ZIP archive")
    logger.debug("eligible csv members: %s", [f.name for f in files])
    return files
