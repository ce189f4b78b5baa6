from __future__ import annotations

import pytest

from src.ingest.sanitizer import sanitize_csv_text

"""Unit tests for the CSV content sanitizer."""

SAMPLES = [
    "",
    "a,b,c",
    'a,"b,c\nd,e',
    'x,"unterminated\n"ok","fine"\n',
    'only "one" quote " here\n\n\nlast"',
    "nul\0bytes,\0\nsecond\0 line",
    'crlf,"quoted\r\nnext,line\r\n',
    '"""\n""\n"',
]


@pytest.mark.parametrize("text", SAMPLES)
def test_sanitize_preserves_line_count(text: str):
    assert len(sanitize_csv_text(text).split("\n")) == len(text.split("\n"))


@pytest.mark.parametrize("text", SAMPLES)
def test_sanitize_is_idempotent(text: str):
    once = sanitize_csv_text(text)
    assert sanitize_csv_text(once) == once


@pytest.mark.parametrize("text", SAMPLES)
def test_sanitized_lines_have_even_quote_count(text: str):
    for line in sanitize_csv_text(text).split("\n"):
        assert line.count('"') % 2 == 0


def test_unterminated_quote_gets_closed_at_end_of_line():
    assert sanitize_csv_text('1,"Manila Hub,Pending') == '1,"Manila Hub,Pending"'


def test_balanced_lines_are_unchanged():
    text = 'id,remark\n1,"Packed in another TO, Received in Manila"\n'
    assert sanitize_csv_text(text) == text


def test_null_bytes_removed():
    assert sanitize_csv_text("a\0b,c\0") == "ab,c"


def test_lines_repaired_independently():
    text = 'a,"b\nc,d\ne,"f'
    assert sanitize_csv_text(text) == 'a,"b"\nc,d\ne,"f"'


def test_carriage_return_kept_before_added_quote():
    # Quote repair is per "\n" line; the "\r" stays part of the line
    assert sanitize_csv_text('a,"b\r\nc') == 'a,"b\r"\nc'
