from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

"""Row admission filter.

Business rule deciding which parsed shipment records are kept:

- "Receive Status" == "Pending Receive"  -> keep
- "Receive Status" == "Abnormal"         -> keep only when "Remark" contains
  both "Packed in another TO" and "Received in"
- anything else (including a missing status) -> discard

Matching is exact and case-sensitive. Each record is judged on its own.
"""

__all__ = [
    "STATUS_FIELD",
    "REMARK_FIELD",
    "PENDING_RECEIVE",
    "ABNORMAL",
    "is_admitted",
    "admit_record",
    "status_breakdown",
]

STATUS_FIELD = "Receive Status"
REMARK_FIELD = "Remark"

PENDING_RECEIVE = "Pending Receive"
ABNORMAL = "Abnormal"

PACKED_IN_ANOTHER_TO = "Packed in another TO"
RECEIVED_IN = "Received in"


def is_admitted(status: str | None, remark: str | None) -> bool:
    if status == PENDING_RECEIVE:
        return True
    if status == ABNORMAL:
        text = remark or ""
        return PACKED_IN_ANOTHER_TO in text and RECEIVED_IN in text
    return False


def admit_record(record: Mapping[str, Any]) -> bool:
    remark = record.get(REMARK_FIELD)
    return is_admitted(record.get(STATUS_FIELD), str(remark) if remark else "")


def status_breakdown(records: Iterable[Mapping[str, Any]]) -> dict[str, int]:
    """Count kept records per admitted status (for diagnostics)."""
    counts = {"pending_receive": 0, "abnormal": 0}
    for r in records:
        status = r.get(STATUS_FIELD)
        if status == PENDING_RECEIVE:
            counts["pending_receive"] += 1
        elif status == ABNORMAL:
            counts["abnormal"] += 1
    return counts
