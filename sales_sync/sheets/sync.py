"""
Reconcile an output matrix with one tab of the shared spreadsheet.

Stages run strictly in order: resolve (or create) the tab, clear the clear
rectangle, write the values, then apply formatting. A failure at or before the
write aborts the sync; a formatting failure is logged and reported in the
result instead of being raised.

Concurrent syncs against the same tab interleave their clear/write calls;
callers that can upload to one tab from several flows must serialize them.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from sales_sync.aggregate import Cell
from sales_sync.errors import ClearError, FormatError, TabAccessError, WriteError
from sales_sync.sheets.client import a1, http_status
from sales_sync.sheets.formatting import build_format_requests, clear_request
from sales_sync.utils.config import FormattingSettings, SheetsSettings

logger = logging.getLogger(__name__)


class SyncState(enum.Enum):
    NOT_STARTED = "not_started"
    TAB_RESOLVED = "tab_resolved"
    CLEARED = "cleared"
    WRITTEN = "written"
    FORMATTED = "formatted"
    FORMAT_FAILED = "format_failed"


@dataclass
class SyncResult:
    tab: str
    sheet_id: Optional[int] = None
    rows_written: int = 0
    state: SyncState = SyncState.NOT_STARTED
    format_error: Optional[FormatError] = None

    @property
    def ok(self) -> bool:
        return self.state in (SyncState.FORMATTED, SyncState.FORMAT_FAILED)

    @property
    def warning(self) -> Optional[str]:
        if self.format_error is None:
            return None
        return f"Data written, but formatting failed: {self.format_error.cause or self.format_error.message}"


@dataclass
class TabDiff:
    tab: str
    exists: bool
    unchanged: int = 0
    changed: int = 0
    added: int = 0
    removed: int = 0
    changed_rows: List[int] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed or self.added or self.removed)


def _error_detail(exc: BaseException) -> str:
    details = getattr(exc, "error_details", None)
    if details:
        return str(details)
    return str(exc)


def _normalize_row(row: Sequence[Any], width: int) -> List[Any]:
    cells: List[Any] = []
    for cell in list(row)[:width]:
        if isinstance(cell, float) and cell.is_integer():
            cell = int(cell)
        cells.append(cell)
    cells.extend([""] * (width - len(cells)))
    return cells


class SheetSynchronizer:
    def __init__(
        self,
        client: Any,
        sheets: Optional[SheetsSettings] = None,
        formatting: Optional[FormattingSettings] = None,
    ) -> None:
        self.client = client
        self.sheets = sheets or SheetsSettings(spreadsheet_id=getattr(client, "spreadsheet_id", ""))
        self.formatting = formatting or FormattingSettings()

    def find_tab(self, title: str) -> Optional[int]:
        try:
            return self.client.list_tabs().get(title)
        except Exception as exc:
            raise self._tab_error(title, exc) from exc

    def ensure_tab(self, title: str) -> Tuple[int, bool]:
        """Return ``(sheet_id, created)`` for ``title``, creating the tab when absent."""
        try:
            tabs = self.client.list_tabs()
            if title in tabs:
                logger.info('Found sheet "%s" with ID: %s', title, tabs[title])
                return tabs[title], False
            logger.info('Sheet "%s" not found. Creating it.', title)
            sheet_id = self.client.add_tab(title)
        except Exception as exc:
            raise self._tab_error(title, exc) from exc
        logger.info('Sheet "%s" created with ID: %s', title, sheet_id)
        return sheet_id, True

    def resolve_tab(self, title: str) -> int:
        sheet_id, _ = self.ensure_tab(title)
        return sheet_id

    def _tab_error(self, title: str, exc: BaseException) -> TabAccessError:
        logger.error('Error getting/creating sheet ID for "%s": %s', title, exc)
        if http_status(exc) == 403:
            return TabAccessError(
                f'Permission denied for sheet "{title}". Ensure the service account '
                "has editor access to the spreadsheet.",
                cause=_error_detail(exc),
            )
        return TabAccessError(
            f'Failed to access or create sheet tab "{title}". Check permissions or API errors.',
            cause=_error_detail(exc),
        )

    def clear_tab(self, title: str, sheet_id: int) -> None:
        logger.info("Clearing sheet: %s (Sheet ID: %s)", title, sheet_id)
        request = clear_request(sheet_id, self.sheets.clear_rows, self.sheets.clear_cols)
        try:
            self.client.batch_update([request])
        except Exception as exc:
            raise ClearError(f'Failed to clear sheet tab "{title}".', cause=_error_detail(exc)) from exc

    def write_matrix(self, title: str, matrix: Sequence[Sequence[Cell]]) -> int:
        logger.info("Writing %d rows to sheet: %s", len(matrix), title)
        try:
            self.client.update_values(a1(title, "A1"), matrix, value_input_option="USER_ENTERED")
        except Exception as exc:
            raise WriteError(f'Failed to write data to sheet tab "{title}".', cause=_error_detail(exc)) from exc
        return len(matrix)

    def apply_formatting(self, sheet_id: int, rows: int, cols: int) -> Optional[FormatError]:
        """Apply cosmetic formatting; never raises."""
        requests = build_format_requests(sheet_id, rows, cols, self.formatting)
        if not requests:
            logger.info("Formatting skipped (no requests).")
            return None
        try:
            if self.formatting.banding:
                stale = self.client.banded_range_ids(sheet_id)
                requests = [{"deleteBanding": {"bandedRangeId": b}} for b in stale] + requests
            self.client.batch_update(requests)
        except Exception as exc:
            detail = _error_detail(exc)
            logger.warning("Formatting failed (continuing): %s", detail)
            return FormatError("Formatting failed.", cause=detail)
        logger.info("Formatting applied successfully.")
        return None

    def sync(self, title: str, matrix: Sequence[Sequence[Cell]]) -> SyncResult:
        result = SyncResult(tab=title)
        result.sheet_id = self.resolve_tab(title)
        result.state = SyncState.TAB_RESOLVED

        self.clear_tab(title, result.sheet_id)
        result.state = SyncState.CLEARED

        result.rows_written = self.write_matrix(title, matrix)
        result.state = SyncState.WRITTEN

        cols = max((len(row) for row in matrix), default=0)
        result.format_error = self.apply_formatting(result.sheet_id, len(matrix), cols)
        result.state = SyncState.FORMAT_FAILED if result.format_error else SyncState.FORMATTED
        return result

    def plan(self, title: str, matrix: Sequence[Sequence[Cell]]) -> TabDiff:
        """Diff the tab's current values against ``matrix`` without writing."""
        sheet_id = self.find_tab(title)
        if sheet_id is None:
            return TabDiff(tab=title, exists=False, added=len(matrix))

        # the clear wipes the whole rectangle, so read all of it
        read_cols = max(self.sheets.clear_cols, max((len(row) for row in matrix), default=1))
        cell_range = f"A1:{_column_letter(read_cols)}{self.sheets.clear_rows}"
        try:
            current = self.client.get_values(a1(title, cell_range))
        except Exception as exc:
            raise self._tab_error(title, exc) from exc

        diff = TabDiff(tab=title, exists=True)
        for idx in range(max(len(current), len(matrix))):
            if idx >= len(matrix):
                if any(cell not in ("", None) for cell in current[idx]):
                    diff.removed += 1
                continue
            if idx >= len(current):
                diff.added += 1
                continue
            width = max(len(current[idx]), len(matrix[idx]))
            if _normalize_row(current[idx], width) == _normalize_row(matrix[idx], width):
                diff.unchanged += 1
            else:
                diff.changed += 1
                diff.changed_rows.append(idx + 1)
        return diff


def _column_letter(index: int) -> str:
    letters = ""
    while index > 0:
        index, rem = divmod(index - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


__all__ = ["SheetSynchronizer", "SyncResult", "SyncState", "TabDiff"]
