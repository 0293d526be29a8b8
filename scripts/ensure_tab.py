#!/usr/bin/env python3
"""
CLI to make sure a store's sheet tab exists in the shared spreadsheet.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from sales_sync.errors import SalesSyncError  # noqa: E402
from sales_sync.pipeline import ensure_tab  # noqa: E402
from sales_sync.sheets.client import SheetsClient  # noqa: E402
from sales_sync.sheets.sync import SheetSynchronizer  # noqa: E402
from sales_sync.utils.config import configure_logging, load_config  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ensure a sheet tab exists.")
    parser.add_argument("tab", help="Sheet tab name (usually the store name)")
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional path to sales_sync.yaml (defaults to config/sales_sync.yaml)",
    )
    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else load_config()
    configure_logging(config)

    try:
        client = SheetsClient.from_settings(config.sheets)
        result = ensure_tab(SheetSynchronizer(client, config.sheets, config.formatting), args.tab)
    except SalesSyncError as exc:
        logging.error(str(exc))
        return 1

    suffix = " (created)" if result.created else ""
    print(f"{result.message}{suffix}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
