"""ZIP and CSV builders shared by the test suites."""
from __future__ import annotations

import io
import zipfile

SHIPMENT_HEADERS = ["TO Number", "Current Station", "Receiver Type", "Receive Status", "Remark"]


def build_zip(members: dict[str, str | bytes]) -> bytes:
    """Build ZIP bytes from name -> content (directories end with '/')."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in members.items():
            if name.endswith("/"):
                zf.writestr(zipfile.ZipInfo(name), b"")
            else:
                zf.writestr(name, content)
    return buf.getvalue()


def shipment_csv(rows: list[tuple[str, str, str]], headers: list[str] | None = None) -> str:
    """Render (to_number, status, remark) tuples as a shipment CSV export."""
    cols = headers or SHIPMENT_HEADERS
    lines = [",".join(cols)]
    for to_number, status, remark in rows:
        lines.append(f'{to_number},Manila Hub,Station,{status},"{remark}"')
    return "\n".join(lines) + "\n"
