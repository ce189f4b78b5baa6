from __future__ import annotations

from dataclasses import dataclass

"""Archive member models for the ZIP ingestion step.

ArchiveMember is one raw entry of the uploaded ZIP container. EligibleFile is
the subset of members accepted for CSV processing, already decoded to text.
Both only live for the duration of a single upload.
"""

__all__ = [
    "ArchiveMember",
    "EligibleFile",
]


@dataclass(frozen=True)
class ArchiveMember:
    """One entry inside the ZIP container (file or directory)."""
    name: str  # Full entry name, including any directory prefix
    is_directory: bool
    raw_bytes: bytes = b""  # Empty for directories


@dataclass(frozen=True)
class EligibleFile:
    """A CSV member selected for processing, with its decoded text content."""
    name: str
    text: str

    @property
    def size(self) -> int:
        """Character length of the decoded content, used as the size proxy."""
        return len(self.text)
