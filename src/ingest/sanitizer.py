from __future__ import annotations

"""CSV content sanitizer.

Best-effort repair applied to raw CSV text before parsing:
1. Remove null bytes
2. For each line (split on "\\n"), append a closing double quote when the line
   holds an odd number of double quotes (unterminated quoted field)

Line count and order are preserved, and the function is idempotent. It is a
per-line heuristic: a quoted field that legitimately spans lines gets closed
on its first line.
"""

__all__ = [
    "QUOTE",
    "sanitize_csv_text",
]

QUOTE = '"'


def _close_unbalanced_quote(line: str) -> str:
    if line.count(QUOTE) % 2 == 1:
        return line + QUOTE
    return line


def sanitize_csv_text(text: str) -> str:
    cleaned = text.replace("\0", "")
    return "\n".join(_close_unbalanced_quote(line) for line in cleaned.split("\n"))
