from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""CSV member progress display with tqdm (TTY only).

One bar per uploaded archive, advanced once per eligible CSV member. The bar
shows the member being parsed and the running count of kept rows. When stdout
is not a TTY (CI, piped output) no bar is created, so log lines stay free of
control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Check if TTY output is enabled.

    Returns:
        True if stdout is a TTY and progress should be displayed, False otherwise
    """
    return sys.stdout.isatty()


def _member_label(file_name: str) -> str:
    # Archive members use "/" whatever the platform that produced the ZIP
    return file_name.rsplit("/", 1)[-1] or file_name


class ProgressTracker:
    """Progress over the eligible CSV members of one archive.

    Attributes:
        current_file: 1-based position of the member being processed
        kept_rows: Rows admitted so far across finished members
    """

    def __init__(self, total_files: int, *, description: str = "Processing CSV files") -> None:
        self.total_files = total_files
        self.description = description
        self.current_file = 0
        self.kept_rows = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = None
        if self.enabled:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="csv",
                leave=False,
                ncols=80,
                ascii=True,
            )

    def start_file(self, file_name: str) -> None:
        self.current_file += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({_member_label(file_name)})")

    def finish_file(self, kept_rows: int = 0) -> None:
        """Advance the bar by one member and add its kept rows to the running total."""
        self.kept_rows += kept_rows
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)
            self.pbar.set_postfix(kept=self.kept_rows)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
