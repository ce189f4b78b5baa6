from __future__ import annotations

import re
from pathlib import Path

from src.cli import main as cli_main
from tests.helpers import build_zip, shipment_csv

"""SUMMARY line output contract test.

Exactly one SUMMARY line is printed on success:
SUMMARY files=N rows=R kept=K excluded=E skipped_lines=S elapsed_sec=T
"""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY files=(\d+) rows=(\d+) kept=(\d+) excluded=(\d+) skipped_lines=(\d+) elapsed_sec=(\d+(?:\.\d+)?)$",
    re.MULTILINE,
)


def test_summary_line_format_and_values(temp_workdir: Path, capsys):
    archive = temp_workdir / "in.zip"
    archive.write_bytes(build_zip({
        "a.csv": shipment_csv([("T1", "Pending Receive", ""), ("T2", "Received", "")])
        + "T3,x,y,Pending Receive,z,too many\n",
    }))

    assert cli_main([str(archive)]) == 0

    out = capsys.readouterr().out
    matches = SUMMARY_PATTERN.findall(out)
    assert len(matches) == 1
    files, rows, kept, excluded, skipped, _elapsed = matches[0]
    assert (files, rows, kept, excluded, skipped) == ("1", "2", "1", "1", "1")
    assert int(rows) == int(kept) + int(excluded)


def test_no_summary_on_failure(temp_workdir: Path, capsys):
    archive = temp_workdir / "in.zip"
    archive.write_bytes(build_zip({"a.txt": "no csv"}))
    assert cli_main([str(archive)]) == 2
    assert SUMMARY_PATTERN.search(capsys.readouterr().out) is None
