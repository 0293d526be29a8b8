"""
Entry points used by the HTTP app and the CLI scripts.

``process_upload`` decodes, resolves headers and aggregates before touching
the spreadsheet, so every input error surfaces with no remote call made.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sales_sync.aggregate import OutputMatrix, build_output_matrix, summarize_matrix
from sales_sync.errors import InvalidArgument
from sales_sync.ingest.decoder import decode_table, supported_extension
from sales_sync.ingest.headers import resolve_headers
from sales_sync.sheets.sync import SheetSynchronizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnsureTabResult:
    tab: str
    sheet_id: int
    created: bool

    @property
    def message(self) -> str:
        return f'Sheet tab "{self.tab}" is ready.'


@dataclass(frozen=True)
class UploadSummary:
    tab: str
    file_name: str
    rows_written: int
    data_rows: int
    categories: int
    formatted: bool
    warning: Optional[str] = None

    @property
    def message(self) -> str:
        if self.formatted:
            return "Uploaded and formatted successfully"
        return "Uploaded successfully; formatting was not applied"


def clean_tab_name(tab_name: Optional[str]) -> str:
    cleaned = (tab_name or "").strip()
    if not cleaned:
        raise InvalidArgument("Sheet tab name is required.")
    return cleaned


def build_matrix(file_bytes: bytes, file_name: str) -> OutputMatrix:
    records = decode_table(file_bytes, file_name)
    columns = resolve_headers(records[0].keys())
    return build_output_matrix(records, columns)


def ensure_tab(synchronizer: SheetSynchronizer, tab_name: Optional[str]) -> EnsureTabResult:
    tab = clean_tab_name(tab_name)
    sheet_id, created = synchronizer.ensure_tab(tab)
    logger.info("Successfully ensured sheet tab exists: %s", tab)
    return EnsureTabResult(tab=tab, sheet_id=sheet_id, created=created)


def process_upload(
    synchronizer: SheetSynchronizer,
    file_bytes: bytes,
    file_name: str,
    tab_name: Optional[str],
) -> UploadSummary:
    tab = clean_tab_name(tab_name)
    supported_extension(file_name)

    matrix = build_matrix(file_bytes, file_name)
    summary = summarize_matrix(matrix)

    result = synchronizer.sync(tab, matrix)
    if result.warning:
        logger.warning("%s: %s", tab, result.warning)
    logger.info("Upload of %s into %s finished (%d rows).", file_name, tab, result.rows_written)
    return UploadSummary(
        tab=tab,
        file_name=file_name,
        rows_written=result.rows_written,
        data_rows=summary["data_rows"],
        categories=summary["categories"],
        formatted=result.format_error is None,
        warning=result.warning,
    )


__all__ = [
    "EnsureTabResult",
    "UploadSummary",
    "build_matrix",
    "clean_tab_name",
    "ensure_tab",
    "process_upload",
]
