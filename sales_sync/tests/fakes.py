"""
In-memory stand-in for ``SheetsClient`` used across the test suite.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import httplib2
from googleapiclient.errors import HttpError


def http_error(status: int, message: str = "boom") -> HttpError:
    content = ('{"error": {"code": %d, "message": "%s"}}' % (status, message)).encode("utf-8")
    return HttpError(httplib2.Response({"status": status}), content)


class FakeSheetsClient:
    """Records every call and keeps tab values in memory.

    ``fail_on`` maps an operation name (``list_tabs``, ``add_tab``, ``clear``,
    ``update_values``, ``format``, ``get_values``) to the exception it raises.
    """

    def __init__(self, tabs: Optional[Dict[str, int]] = None, spreadsheet_id: str = "sheet-123") -> None:
        self.spreadsheet_id = spreadsheet_id
        self.tabs: Dict[str, int] = dict(tabs or {})
        self.values: Dict[str, List[List[Any]]] = {}
        self.calls: List[str] = []
        self.batches: List[List[Dict[str, Any]]] = []
        self.fail_on: Dict[str, Exception] = {}
        self.bandings: Dict[int, List[int]] = {}
        self._next_id = 1000

    def _maybe_fail(self, op: str) -> None:
        self.calls.append(op)
        if op in self.fail_on:
            raise self.fail_on[op]

    def list_tabs(self) -> Dict[str, int]:
        self._maybe_fail("list_tabs")
        return dict(self.tabs)

    def add_tab(self, title: str) -> int:
        self._maybe_fail("add_tab")
        self._next_id += 1
        self.tabs[title] = self._next_id
        return self._next_id

    def banded_range_ids(self, sheet_id: int) -> List[int]:
        self._maybe_fail("banded_range_ids")
        return list(self.bandings.get(sheet_id, []))

    def batch_update(self, requests: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        kind = "clear" if "repeatCell" in requests[0] and "userEnteredValue" in requests[0]["repeatCell"]["cell"] else "format"
        self._maybe_fail(kind)
        self.batches.append(list(requests))
        if kind == "clear":
            sheet_id = requests[0]["repeatCell"]["range"]["sheetId"]
            for title, tab_id in self.tabs.items():
                if tab_id == sheet_id:
                    self.values[title] = []
        return {"replies": [{} for _ in requests]}

    def update_values(
        self,
        cell_range: str,
        values: Sequence[Sequence[Any]],
        value_input_option: str = "USER_ENTERED",
    ) -> Dict[str, Any]:
        self._maybe_fail("update_values")
        title = cell_range.rsplit("!", 1)[0].strip("'").replace("''", "'")
        self.values[title] = [list(row) for row in values]
        return {"updatedRows": len(values)}

    def get_values(self, cell_range: str) -> List[List[Any]]:
        self._maybe_fail("get_values")
        title = cell_range.rsplit("!", 1)[0].strip("'").replace("''", "'")
        rows = [list(row) for row in self.values.get(title, [])]
        # the API trims trailing empty cells and rows
        trimmed = []
        for row in rows:
            while row and row[-1] == "":
                row.pop()
            trimmed.append(row)
        while trimmed and not trimmed[-1]:
            trimmed.pop()
        return trimmed
