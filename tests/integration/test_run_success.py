from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from src.cli import main as cli_main
from tests.helpers import build_zip

"""Integration test: end-to-end CLI run over a realistic two-file archive.

Covers config loading, ZIP extraction (with macOS metadata and folders),
admission filtering, upload metadata persistence, filtering and re-export,
then the uploaded files listing and deletion.
"""

HEADERS = "TO Number,Current Station,Receiver Type,Receive Status,Remark"


@pytest.fixture
def realistic_archive(temp_workdir: Path) -> Path:
    north = "\n".join([
        "\ufeff" + HEADERS,
        "N01,Manila Hub,Station,Pending Receive,",
        "N02,Manila Hub,Station,Received,",
        "",
        "N03,Cebu Hub,Rider,Abnormal,\"Packed in another TO, Received in Cebu\"",
        "N04,Cebu Hub,Rider,Abnormal,Received in Cebu",
        ",,,,",
        "N05,Davao Hub,Station,Pending Receive,\"say \"\"hi\"\"\"",
    ]) + "\n"
    south = "\r\n".join([
        HEADERS,
        "S01,Manila Hub,Rider,Pending Receive,",
        "S02,Davao Hub,Station,In Transit,",
    ]) + "\r\n"
    path = temp_workdir / "shipments.zip"
    path.write_bytes(build_zip({
        "exports/": b"",
        "exports/north.csv": north,
        "__MACOSX/exports/._north.csv": b"\x00\x05\x16\x07",
        "exports/notes.txt": "not a csv",
        "exports/south.csv": south.encode("utf-8"),
    }))
    return path


def test_full_run_with_filter_and_export(temp_workdir: Path, write_config: Path, realistic_archive: Path, capsys):
    out_file = temp_workdir / "out.csv"
    code = cli_main([
        str(realistic_archive),
        "--user", "Ana Cruz",
        "--employee-id", "E7",
        "--filter", "Current Station=Manila Hub",
        "--filter", "Current Station=Cebu Hub",
        "--export", str(out_file),
    ])
    out = capsys.readouterr().out

    assert code == 0
    summary = re.search(r"^SUMMARY (.*)$", out, re.MULTILINE)
    assert summary is not None
    assert summary.group(1).startswith("files=2 rows=7 kept=4 excluded=3 skipped_lines=0")
    assert "filtered rows=3/4" in out

    # sample config drops zero-based columns 1 and 3
    lines = out_file.read_text(encoding="utf-8").split("\n")
    assert lines == [
        "TO Number,Receiver Type,Remark",
        "N01,Station,",
        'N03,Rider,"Packed in another TO, Received in Cebu"',
        "S01,Rider,",
    ]

    stored = json.loads((temp_workdir / "data" / "uploaded_files.json").read_text(encoding="utf-8"))
    entries = stored["uploadedFiles"]
    assert [e["originalName"] for e in entries] == ["exports/north.csv", "exports/south.csv"]
    assert all(e["uploadedBy"] == "Ana Cruz" and e["employeeId"] == "E7" for e in entries)
    assert all(" | Ana Cruz | " in e["name"] for e in entries)


def test_export_to_directory_uses_dated_name(temp_workdir: Path, realistic_archive: Path):
    export_dir = temp_workdir / "exports"
    export_dir.mkdir()
    assert cli_main([str(realistic_archive), "--export", str(export_dir)]) == 0

    written = list(export_dir.glob("data-export-*.csv"))
    assert len(written) == 1
    # default dropped columns only reach indices >= 2, so the first two columns survive
    header = written[0].read_text(encoding="utf-8").split("\n")[0]
    assert header == "TO Number,Current Station"


def test_missing_config_and_quoted_cells(temp_workdir: Path, realistic_archive: Path, capsys):
    out_file = temp_workdir / "all.csv"
    assert cli_main([str(realistic_archive), "--export", str(out_file), "--config", "missing.yml"]) == 1
    assert "config file not found" in capsys.readouterr().out

    (temp_workdir / "keep_all.yml").write_text("export:\n  dropped_column_indices: []\n", encoding="utf-8")
    assert cli_main([str(realistic_archive), "--export", str(out_file), "--config", "keep_all.yml"]) == 0
    assert 'N05,Davao Hub,Station,Pending Receive,"say ""hi"""' in out_file.read_text(encoding="utf-8")


def test_list_and_delete_uploads(temp_workdir: Path, write_config: Path, realistic_archive: Path, capsys):
    assert cli_main(["--list-uploads"]) == 0
    assert "No files uploaded yet" in capsys.readouterr().out

    assert cli_main([str(realistic_archive), "--user", "Ana Cruz"]) == 0
    assert cli_main([str(realistic_archive), "--user", "Ben Reyes"]) == 0
    capsys.readouterr()

    assert cli_main(["--list-uploads"]) == 0
    listing = [line for line in capsys.readouterr().out.splitlines() if "\t" in line]
    assert len(listing) == 4
    first_date = listing[0].split("\t")[0]

    assert cli_main(["--delete-upload", first_date]) == 0
    out = capsys.readouterr().out
    assert "INFO deleted 2 uploaded file entries" in out

    stored = json.loads((temp_workdir / "data" / "uploaded_files.json").read_text(encoding="utf-8"))
    assert [e["uploadedBy"] for e in stored["uploadedFiles"]] == ["Ben Reyes", "Ben Reyes"]


def test_corrupt_store_is_fatal_for_listing(temp_workdir: Path, write_config: Path, capsys):
    (temp_workdir / "data" / "uploaded_files.json").write_text("[broken", encoding="utf-8")
    assert cli_main(["--list-uploads"]) == 1
    assert "ERROR store:" in capsys.readouterr().out
