#!/usr/bin/env python3
"""Inspect a CSV/XLSX sales file and its canonical header matches."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from sales_sync.aggregate import build_output_matrix, summarize_matrix  # noqa: E402
from sales_sync.errors import SalesSyncError  # noqa: E402
from sales_sync.ingest.decoder import decode_table  # noqa: E402
from sales_sync.ingest.headers import CanonicalField, find_header, resolve_headers  # noqa: E402

logger = logging.getLogger(__name__)


def inspect_file(path: Path) -> int:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    records = decode_table(path.read_bytes(), path.name)
    keys = list(records[0].keys())
    print(f"{path}: {len(records)} data rows")
    print(f"  Raw headers: {keys}")
    for field in CanonicalField:
        print(f"  {field.label}: {find_header(keys, field.label) or 'None'}")

    columns = resolve_headers(keys)
    summary = summarize_matrix(build_output_matrix(records, columns))
    print(f"  Items kept: {summary['data_rows']} in {summary['categories']} categories")
    for category, count in summary["per_category"].items():
        print(f"    {category}: {count}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect sales file headers for upload compatibility")
    parser.add_argument("path", type=Path, help="Path to CSV/XLSX file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    try:
        return inspect_file(args.path)
    except (FileNotFoundError, SalesSyncError) as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
