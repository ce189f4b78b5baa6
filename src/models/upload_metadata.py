from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

"""Upload metadata model persisted to the durable metadata store.

One UploadedFileMetadata is recorded per eligible CSV member of an uploaded
archive. The serialized form uses the camelCase keys of the uploaded files
listing: name, originalName, date, size, uploadedBy, employeeId.
"""

__all__ = [
    "Uploader",
    "UploadedFileMetadata",
    "format_short_datetime",
    "build_display_name",
    "to_iso_timestamp",
]

UNKNOWN_UPLOADER = "Unknown User"


@dataclass(frozen=True)
class Uploader:
    """Identity of the employee who submitted the archive."""
    full_name: str | None = None
    employee_id: str | None = None

    def display_name(self, fallback: str = UNKNOWN_UPLOADER) -> str:
        return self.full_name or fallback


def format_short_datetime(moment: datetime) -> str:
    """Render a US style short date-time, e.g. ``Oct 19, 3:04 PM``."""
    hour = int(moment.strftime("%I"))
    return f"{moment.strftime('%b %d')}, {hour}:{moment.strftime('%M %p')}"


def build_display_name(moment: datetime, uploader_name: str, original_name: str) -> str:
    return f"{format_short_datetime(moment)} | {uploader_name} | {original_name}"


def to_iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix, e.g. ``2026-10-19T07:04:00.000Z``.

    A naive moment is taken as local time.
    """
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class UploadedFileMetadata:
    """Lightweight summary of one uploaded CSV file.

    Attributes:
        name: Display name "<short-date-time> | <uploader> | <original filename>"
        original_name: Member name inside the archive
        date: UTC ISO-8601 upload timestamp (milliseconds, Z suffix), also the deletion key
        size: Decoded text length (size proxy)
        uploaded_by: Uploader display name
        employee_id: Uploader employee id, if known
    """
    name: str
    original_name: str
    date: str
    size: int
    uploaded_by: str
    employee_id: str | None = None

    @staticmethod
    def create(
        original_name: str,
        size: int,
        uploader: Uploader,
        moment: datetime,
        unknown_uploader: str = UNKNOWN_UPLOADER,
    ) -> UploadedFileMetadata:
        uploaded_by = uploader.display_name(unknown_uploader)
        # Display name in the local time zone, storage key in UTC
        return UploadedFileMetadata(
            name=build_display_name(moment.astimezone(), uploaded_by, original_name),
            original_name=original_name,
            date=to_iso_timestamp(moment),
            size=size,
            uploaded_by=uploaded_by,
            employee_id=uploader.employee_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "originalName": self.original_name,
            "date": self.date,
            "size": self.size,
            "uploadedBy": self.uploaded_by,
            "employeeId": self.employee_id,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> UploadedFileMetadata:
        return UploadedFileMetadata(
            name=str(data.get("name", "")),
            original_name=str(data.get("originalName") or data.get("name", "")),
            date=str(data.get("date", "")),
            size=int(data.get("size") or 0),
            uploaded_by=str(data.get("uploadedBy") or UNKNOWN_UPLOADER),
            employee_id=data.get("employeeId"),
        )
