"""Domain models for the SOCPacked ZIP/CSV ingestion pipeline.

This package contains the domain model classes passed between the archive
extractor, the CSV parser adapter, the consolidation aggregator and the
durable upload metadata store.
"""

from .archive_member import ArchiveMember, EligibleFile
from .config_models import ExportConfig, IngestConfig
from .consolidated_dataset import ConsolidatedDataset, FileStat, ParsedCsv, SchemaMismatch
from .upload_metadata import Uploader, UploadedFileMetadata

__all__ = [
    # Configuration models
    "ExportConfig",
    "IngestConfig",
    # Archive models
    "ArchiveMember",
    "EligibleFile",
    # Processing models
    "ParsedCsv",
    "FileStat",
    "SchemaMismatch",
    "ConsolidatedDataset",
    # Upload metadata
    "Uploader",
    "UploadedFileMetadata",
]
