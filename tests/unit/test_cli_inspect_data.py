from __future__ import annotations

from pathlib import Path

from src.cli import main as cli_main
from tests.helpers import build_zip


def test_inspect_data_prints_headers_and_samples(temp_workdir: Path, two_file_archive: bytes, capsys):
    """--inspect-data はヘッダと先頭行を表示し、メタデータは記録しない。"""
    archive = temp_workdir / "shipments.zip"
    archive.write_bytes(two_file_archive)

    code = cli_main([str(archive), "--inspect-data"])

    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: export/a.csv" in out
    assert "FILE: export/b.csv" in out
    assert "cols=['TO Number', 'Current Station', 'Receiver Type', 'Receive Status', 'Remark']" in out
    assert "rows=10 skipped_lines=0" in out
    assert "'TO Number': 'A01'" in out
    assert "SUMMARY" not in out
    assert not (temp_workdir / "data" / "uploaded_files.json").exists()


def test_inspect_data_without_csv(temp_workdir: Path, capsys):
    archive = temp_workdir / "empty.zip"
    archive.write_bytes(build_zip({"readme.txt": "nothing here"}))

    code = cli_main([str(archive), "--inspect-data"])

    assert code == 2
    assert "inspect: No CSV files found in the ZIP archive" in capsys.readouterr().out
