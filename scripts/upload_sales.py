#!/usr/bin/env python3
"""
CLI to push store sales files (CSV/XLSX) into their Google Sheet tabs.

Examples:
  upload_sales.py rockwell.xlsx --tab Rockwell
  upload_sales.py sales.csv --store "North Edsa"
  upload_sales.py --all data_raw/            # one file per configured store
  upload_sales.py sales.csv --tab Test --plan
  upload_sales.py sales.csv --dry-run
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from sales_sync.errors import SalesSyncError  # noqa: E402
from sales_sync.ingest.decoder import SUPPORTED_EXTENSIONS  # noqa: E402
from sales_sync.pipeline import build_matrix, clean_tab_name, process_upload  # noqa: E402
from sales_sync.sheets.client import SheetsClient  # noqa: E402
from sales_sync.sheets.sync import SheetSynchronizer  # noqa: E402
from sales_sync.utils.config import AppConfig, configure_logging, load_config  # noqa: E402

logger = logging.getLogger(__name__)

Job = Tuple[str, Optional[Path], str]


def find_store_file(directory: Path, store_name: str) -> Optional[Path]:
    wanted = store_name.strip().lower()
    for path in sorted(directory.iterdir()):
        if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS and path.stem.strip().lower() == wanted:
            return path
    return None


def collect_jobs(args: argparse.Namespace, config: AppConfig) -> List[Job]:
    if args.all:
        directory = Path(args.all)
        if not directory.is_dir():
            raise FileNotFoundError(f"Directory not found: {directory}")
        return [(store.name, find_store_file(directory, store.name), store.tab) for store in config.stores]

    if args.store:
        tab = config.store_tab(args.store) or args.store
    else:
        tab = args.tab or ""
    return [(path.stem, path, tab) for path in args.paths]


def print_matrix(matrix) -> None:
    for row in matrix:
        print("\t".join(str(cell) for cell in row))


def run_job(synchronizer: Optional[SheetSynchronizer], job: Job, args: argparse.Namespace) -> bool:
    label, path, tab = job
    if path is None:
        print(f"{label}: No file selected")
        return True
    if not path.exists():
        print(f"{label}: Error: File not found: {path}")
        return False

    data = path.read_bytes()
    try:
        if args.dry_run:
            print_matrix(build_matrix(data, path.name))
            return True
        tab = clean_tab_name(tab)
        if args.plan:
            diff = synchronizer.plan(tab, build_matrix(data, path.name))
            state = "changes" if diff.has_changes else "no changes"
            print(
                f"{label} -> {tab}: {state} (unchanged={diff.unchanged}, changed={diff.changed}, "
                f"added={diff.added}, removed={diff.removed}, tab exists={diff.exists})"
            )
            if diff.changed_rows:
                print(f"  changed rows: {diff.changed_rows}")
            return True
        summary = process_upload(synchronizer, data, path.name, tab)
    except SalesSyncError as exc:
        logger.error("%s: %s", label, exc)
        print(f"{label}: Error: {exc}")
        return False

    status = "Success!" if not summary.warning else f"Success (warning: {summary.warning})"
    print(f"{label} -> {summary.tab}: {status} {summary.data_rows} items in {summary.categories} categories")
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Upload store sales files into Google Sheet tabs.")
    parser.add_argument("paths", nargs="*", type=Path, help="CSV/XLSX files to upload")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--tab", help="Destination sheet tab")
    target.add_argument("--store", help="Store name from the configured roster")
    target.add_argument("--all", metavar="DIR", help="Upload <store>.csv/.xlsx for every configured store")
    parser.add_argument("--plan", action="store_true", help="Show the diff against the tab without writing")
    parser.add_argument("--dry-run", action="store_true", help="Print the output rows; no remote calls")
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional path to sales_sync.yaml (defaults to config/sales_sync.yaml)",
    )
    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else load_config()
    configure_logging(config)

    if not args.all and not args.paths:
        parser.error("pass one or more files, or --all DIR")

    try:
        jobs = collect_jobs(args, config)
        synchronizer = None
        if not args.dry_run:
            client = SheetsClient.from_settings(config.sheets)
            synchronizer = SheetSynchronizer(client, config.sheets, config.formatting)
    except (FileNotFoundError, SalesSyncError) as exc:
        logger.error(str(exc))
        return 1

    ok = True
    for job in jobs:
        ok = run_job(synchronizer, job, args) and ok
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
