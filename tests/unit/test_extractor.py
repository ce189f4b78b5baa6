from __future__ import annotations

import io
import zipfile

import pytest

from src.archive.extractor import (
    InvalidArchive,
    NoEligibleFiles,
    extract_csv_files,
    is_eligible_name,
    list_members,
)

"""Unit tests for the archive extractor."""


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a.csv", True),
        ("nested/dir/b.csv", True),
        ("A.CSV", False),
        ("report.csv.txt", False),
        ("__MACOSX/._a.csv", False),
        ("__MACOSX_a.csv", False),
        ("data/__MACOSX/a.csv", True),
        ("folder.csv/", False),
    ],
)
def test_is_eligible_name(name: str, expected: bool):
    assert is_eligible_name(name) is expected


def test_extract_selects_csv_members_in_archive_order(make_zip):
    buffer = make_zip({
        "z_last.csv": "id\n1\n",
        "readme.txt": "ignore",
        "docs/": b"",
        "docs/a_first.csv": "id\n2\n",
        "__MACOSX/docs/._a_first.csv": "binary",
        "UPPER.CSV": "id\n3\n",
    })
    files = extract_csv_files(buffer)
    assert [f.name for f in files] == ["z_last.csv", "docs/a_first.csv"]
    assert files[0].text == "id\n1\n"
    assert files[0].size == len("id\n1\n")


def test_directory_entry_named_like_csv_is_ignored(make_zip):
    buffer = make_zip({"weird.csv/": b"", "weird.csv/inner.csv": "id\n1\n"})
    files = extract_csv_files(buffer)
    assert [f.name for f in files] == ["weird.csv/inner.csv"]


def test_members_decoded_as_utf8(make_zip):
    buffer = make_zip({"a.csv": "station\nParañaque Hub\n".encode("utf-8")})
    assert extract_csv_files(buffer)[0].text == "station\nParañaque Hub\n"


def test_undecodable_bytes_are_replaced(make_zip):
    buffer = make_zip({"a.csv": b"id\n\xff\xfe1\n"})
    text = extract_csv_files(buffer)[0].text
    assert text.startswith("id\n")
    assert "\ufffd" in text


def test_invalid_archive_bytes():
    with pytest.raises(InvalidArchive):
        extract_csv_files(b"definitely not a zip")


def test_truncated_archive(make_zip):
    buffer = make_zip({"a.csv": "id\n" + "1\n" * 1000})
    with pytest.raises(InvalidArchive):
        extract_csv_files(buffer[: len(buffer) // 2])


def test_no_eligible_files(make_zip):
    buffer = make_zip({"readme.txt": "x", "__MACOSX/._a.csv": "y"})
    with pytest.raises(NoEligibleFiles) as e:
        extract_csv_files(buffer)
    assert e.value.user_message == "No CSV files found in the ZIP archive"


def test_empty_archive_has_no_eligible_files():
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w"):
        pass
    with pytest.raises(NoEligibleFiles):
        extract_csv_files(buf.getvalue())


def test_list_members_enumerates_everything(make_zip):
    buffer = make_zip({"docs/": b"", "docs/a.csv": "id\n", "b.txt": "hello"})
    members = list_members(buffer)
    assert [(m.name, m.is_directory) for m in members] == [
        ("docs/", True),
        ("docs/a.csv", False),
        ("b.txt", False),
    ]
    assert members[2].raw_bytes == b"hello"
    assert members[0].raw_bytes == b""
