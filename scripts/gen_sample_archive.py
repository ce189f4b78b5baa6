#!/usr/bin/env python3
"""Sample archive generation script for performance checks.

Generates a ZIP archive of synthetic shipment CSV exports in the layout the
ingestion pipeline expects:
- Line 1: header row (includes "Receive Status" and "Remark")
- Line 2+: data rows

A share of the rows satisfies the admission rule ("Pending Receive", or
"Abnormal" with a remark naming both "Packed in another TO" and "Received in").
"""
from __future__ import annotations

import argparse
import io
import sys
import zipfile
from pathlib import Path

import numpy as np
import pandas as pd

STATUSES = ["Pending Receive", "Abnormal", "In Transit", "Received", "Cancelled"]
STATIONS = ["Manila Hub", "Cebu Hub", "Davao Hub", "Pasig DC", "Taguig DC"]
RECEIVER_TYPES = ["Station", "Customer", "Hub"]
JOURNEY_TYPES = ["Forward", "Return"]
REMARKS = [
    "",
    "Packed in another TO; Received in Manila Hub",
    "Packed in another TO",
    "Received in Cebu Hub",
    "Damaged parcel",
]


def generate_shipments(rows: int, extra_cols: int = 20, seed: int = 42) -> pd.DataFrame:
    """Generate a synthetic shipment export.

    Args:
        rows: Number of data rows
        extra_cols: Number of filler columns appended after the business columns
        seed: Random seed for reproducible data

    Returns:
        DataFrame with string columns only
    """
    rng = np.random.default_rng(seed)
    data: dict[str, list[str]] = {
        "TO Number": [f"TO{n:09d}" for n in range(1, rows + 1)],
        "Tracking Number": [f"PH{v}" for v in rng.integers(10**9, 10**10, rows)],
        "Current Station": rng.choice(STATIONS, rows).tolist(),
        "Receiver Type": rng.choice(RECEIVER_TYPES, rows).tolist(),
        "Journey Type": rng.choice(JOURNEY_TYPES, rows).tolist(),
        "Receive Status": rng.choice(STATUSES, rows, p=[0.3, 0.2, 0.2, 0.2, 0.1]).tolist(),
        "Remark": rng.choice(REMARKS, rows).tolist(),
    }
    for i in range(extra_cols):
        data[f"Field {i + 1}"] = [f"value {v}" for v in rng.integers(0, 1000, rows)]
    return pd.DataFrame(data)


def build_archive(files: int, rows: int, extra_cols: int = 20, seed: int = 42) -> bytes:
    """Build ZIP bytes holding `files` CSV exports of `rows` rows each."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for i in range(files):
            df = generate_shipments(rows, extra_cols, seed + i)
            zf.writestr(f"exports/shipments_{i + 1:02d}.csv", df.to_csv(index=False))
    return buffer.getvalue()


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic shipment ZIP archive for performance checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 3 files of 10k rows
  %(prog)s sample.zip

  # Larger archive
  %(prog)s large.zip --files 10 --rows 50000 --cols 30
        """
    )
    parser.add_argument("output", type=Path, help="Output ZIP file path")
    parser.add_argument("--files", type=int, default=3, help="Number of CSV files (default: 3)")
    parser.add_argument("--rows", type=int, default=10_000, help="Rows per CSV file (default: 10,000)")
    parser.add_argument("--cols", type=int, default=20, help="Filler columns per file (default: 20)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.files <= 0 or args.rows <= 0 or args.cols < 0:
        print("Error: --files and --rows must be positive, --cols non-negative", file=sys.stderr)
        return 1

    try:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(build_archive(args.files, args.rows, args.cols, args.seed))
    except OSError as e:
        print(f"Error writing archive: {e}", file=sys.stderr)
        return 1

    print(f"Created archive: {args.output}")
    print(f"  CSV files: {args.files}")
    print(f"  Rows per file: {args.rows:,}")
    print(f"  Columns per file: {7 + args.cols}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
