from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from datetime import datetime

from ..archive.extractor import ArchiveError
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import IngestConfig
from ..models.consolidated_dataset import ConsolidatedDataset, Record
from ..models.upload_metadata import Uploader
from ..store.metadata_store import JsonFileStore
from .orchestrator import ProcessingError, process_archive

"""Upload session: the submit(file_name, buffer) entry point.

Uploads are serialized: a submit while another one is in flight is rejected.
The published dataset is replaced in one assignment after a successful run,
so a failed upload leaves the previously published dataset untouched.
"""

logger = logging.getLogger("socpacked_ingest.session")

PublishCallback = Callable[[Sequence[Record], Sequence[str]], None]


class UploadRejected(Exception):
    """Raised when an upload is refused before extraction starts."""
    user_message = "Upload rejected"


class NotAZipFile(UploadRejected):
    user_message = "Please upload a ZIP file."


class UploadInProgress(UploadRejected):
    user_message = "An upload is already being processed."


def describe_failure(exc: BaseException) -> str:
    """User facing message for an upload failure."""
    if isinstance(exc, (UploadRejected, ArchiveError, ProcessingError)):
        return exc.user_message
    return ProcessingError.user_message


class UploadSession:
    """Holds the currently published dataset of one user session."""

    def __init__(
        self,
        uploader: Uploader | None = None,
        *,
        config: IngestConfig | None = None,
        metadata_store: JsonFileStore | None = None,
        on_published: PublishCallback | None = None,
    ) -> None:
        self.uploader = uploader or Uploader()
        self.config = config or IngestConfig()
        self.metadata_store = metadata_store
        self.on_published = on_published
        self._lock = threading.Lock()
        self._dataset: ConsolidatedDataset | None = None

    @property
    def dataset(self) -> ConsolidatedDataset | None:
        return self._dataset

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def submit(
        self,
        file_name: str,
        buffer: bytes,
        *,
        error_log: ErrorLogBuffer | None = None,
        now: datetime | None = None,
    ) -> ConsolidatedDataset:
        """Process an uploaded archive and publish its dataset.

        Raises:
            NotAZipFile: file_name does not end with ".zip"
            UploadInProgress: another submit is still running
            InvalidArchive, NoEligibleFiles, EmptyResult: see process_archive
        """
        if not file_name.endswith(".zip"):
            raise NotAZipFile(f"not a zip upload: {file_name}")
        if not self._lock.acquire(blocking=False):
            raise UploadInProgress(f"upload already in progress, rejected: {file_name}")
        try:
            dataset = process_archive(
                buffer,
                self.uploader,
                config=self.config,
                metadata_store=self.metadata_store,
                error_log=error_log,
                now=now,
            )
            self._dataset = dataset
        finally:
            self._lock.release()

        logger.debug("published dataset from %s rows=%d", file_name, dataset.total_kept)
        if self.on_published is not None:
            self.on_published(list(dataset.rows), list(dataset.headers))
        return dataset
