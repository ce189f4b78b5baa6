# Shared pytest fixtures
from __future__ import annotations

import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

import pytest

from src.logging.init import reset_logging
from tests.helpers import build_zip, shipment_csv


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def make_zip() -> Callable[[dict[str, str | bytes]], bytes]:
    return build_zip


@pytest.fixture()
def sample_config_yaml() -> str:
    return """metadata_store_path: ./data/uploaded_files.json
error_log_directory: ./logs
encoding: utf-8
delimiter: ","
unknown_uploader: Unknown User
detect_schema_mismatch: true
export:
  dropped_column_indices: [1, 3]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "ingest.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def two_file_archive() -> bytes:
    """File A: 10 rows (3 pending, 2 qualifying abnormal, 5 other); file B: 5 rows (1 qualifying)."""
    file_a = shipment_csv([
        ("A01", "Pending Receive", ""),
        ("A02", "In Transit", "Packed in another TO; Received in Manila"),
        ("A03", "Abnormal", "Packed in another TO; Received in Manila"),
        ("A04", "Abnormal", "Packed in another TO"),
        ("A05", "Pending Receive", "late"),
        ("A06", "Received", ""),
        ("A07", "Abnormal", "Received in Cebu"),
        ("A08", "Abnormal", "Packed in another TO, Received in Davao"),
        ("A09", "Pending Receive", ""),
        ("A10", "", ""),
    ])
    file_b = shipment_csv([
        ("B01", "In Transit", ""),
        ("B02", "Abnormal", "Received in Manila; Packed in another TO"),
        ("B03", "Cancelled", ""),
        ("B04", "pending receive", ""),
        ("B05", "Abnormal", ""),
    ])
    return build_zip({"export/a.csv": file_a, "export/b.csv": file_b})


@pytest.fixture()
def local_timezone():
    """Switch the process local time zone (TZ + tzset) for one test."""
    previous = os.environ.get("TZ")

    def _set(name: str) -> None:
        os.environ["TZ"] = name
        time.tzset()

    _set("UTC")
    yield _set
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()
