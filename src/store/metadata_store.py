from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from src.models.upload_metadata import UploadedFileMetadata

"""Durable key-value store for upload metadata.

JsonFileStore keeps a JSON object on disk whose values are lists, standing in
for the per-browser storage of the dashboard. The ingestion pipeline only
appends to the ``uploadedFiles`` list; the uploaded files listing reads it and
deletes entries by their ``date`` timestamp.
"""

__all__ = [
    "UPLOADED_FILES_KEY",
    "StoreError",
    "JsonFileStore",
    "record_uploads",
    "list_uploaded_files",
    "delete_uploaded_file",
]

logger = logging.getLogger("socpacked_ingest.store")

UPLOADED_FILES_KEY = "uploadedFiles"


class StoreError(Exception):
    """Raised when the store file cannot be read or written."""


class JsonFileStore:
    """JSON file backed key -> list store.

    Writes go to a temporary file in the same directory which then replaces the
    store file, so a failed write leaves the previous content intact.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"cannot read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"store {self.path} does not hold a JSON object")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StoreError(f"cannot write store {self.path}: {e}") from e

    def get_list(self, key: str) -> list[Any]:
        value = self._read_all().get(key, [])
        if not isinstance(value, list):
            raise StoreError(f"store key {key!r} does not hold a list")
        return value

    def append(self, key: str, items: Iterable[Any]) -> None:
        """Append items to the list under key, keeping prior entries."""
        data = self._read_all()
        current = data.get(key, [])
        if not isinstance(current, list):
            raise StoreError(f"store key {key!r} does not hold a list")
        data[key] = [*current, *items]
        self._write_all(data)

    def delete_matching(self, key: str, field: str, value: Any) -> int:
        """Remove list entries whose field equals value.

        Returns:
            Number of removed entries
        """
        data = self._read_all()
        current = data.get(key, [])
        kept = [item for item in current if not (isinstance(item, dict) and item.get(field) == value)]
        removed = len(current) - len(kept)
        if removed:
            data[key] = kept
            self._write_all(data)
        return removed


def record_uploads(store: JsonFileStore, entries: Iterable[UploadedFileMetadata]) -> None:
    store.append(UPLOADED_FILES_KEY, [e.to_dict() for e in entries])


def list_uploaded_files(store: JsonFileStore) -> list[UploadedFileMetadata]:
    return [UploadedFileMetadata.from_dict(item) for item in store.get_list(UPLOADED_FILES_KEY) if isinstance(item, dict)]


def delete_uploaded_file(store: JsonFileStore, date: str) -> int:
    """Delete every uploaded file entry recorded with the given timestamp."""
    removed = store.delete_matching(UPLOADED_FILES_KEY, "date", date)
    logger.debug("deleted %d upload metadata entries for date=%s", removed, date)
    return removed
