"""
Thin wrapper over the Google Sheets v4 API bound to one spreadsheet.

The wrapper is constructed once by the process bootstrap and injected into
the synchronizer, so tests can substitute a fake with the same methods.
"""
from __future__ import annotations

import json
import logging
import socket
from typing import Any, Dict, List, Optional, Sequence

import google_auth_httplib2
import httplib2
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from sales_sync.errors import InvalidArgument
from sales_sync.utils.config import SheetsSettings, require_spreadsheet_id

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def a1(tab: str, cell_range: str) -> str:
    safe = tab.replace("'", "''")
    return f"'{safe}'!{cell_range}"


def http_status(exc: BaseException) -> Optional[int]:
    if isinstance(exc, HttpError):
        status = getattr(exc, "status_code", None) or getattr(exc.resp, "status", None)
        try:
            return int(status) if status is not None else None
        except (TypeError, ValueError):
            return None
    return None


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (socket.timeout, TimeoutError, ConnectionError)):
        return True
    status = http_status(exc)
    if status is None:
        return False
    return status == 429 or 500 <= status < 600


def _load_credentials(settings: SheetsSettings) -> service_account.Credentials:
    if settings.credentials_json.strip():
        try:
            info = json.loads(settings.credentials_json)
        except json.JSONDecodeError as exc:
            raise InvalidArgument(
                "Server configuration error: GOOGLE_SERVICE_ACCOUNT is not valid JSON.",
                cause=str(exc),
            ) from exc
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    if settings.credentials_file.strip():
        return service_account.Credentials.from_service_account_file(
            settings.credentials_file, scopes=SCOPES
        )
    raise InvalidArgument(
        "Server configuration error: Google service account credentials are not configured."
    )


def build_sheets_service(settings: SheetsSettings) -> Any:
    """Build an authorized Sheets v4 service object with a request timeout."""
    credentials = _load_credentials(settings)
    http = google_auth_httplib2.AuthorizedHttp(
        credentials, http=httplib2.Http(timeout=settings.request_timeout_s)
    )
    service = build("sheets", "v4", http=http, cache_discovery=False)
    logger.info("Google Sheets API client initialized.")
    return service


class SheetsClient:
    retry_wait = wait_exponential(multiplier=1, max=8)

    def __init__(self, service: Any, spreadsheet_id: str, *, retry_attempts: int = 1) -> None:
        self.service = service
        self.spreadsheet_id = spreadsheet_id
        self.retry_attempts = max(1, retry_attempts)

    @classmethod
    def from_settings(cls, settings: SheetsSettings) -> "SheetsClient":
        spreadsheet_id = require_spreadsheet_id(settings)
        return cls(
            build_sheets_service(settings),
            spreadsheet_id,
            retry_attempts=settings.retry_attempts,
        )

    def _execute(self, request: Any) -> Dict[str, Any]:
        retryer = Retrying(
            reraise=True,
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self.retry_attempts),
            wait=self.retry_wait,
        )
        return retryer(request.execute) or {}

    def list_tabs(self) -> Dict[str, int]:
        response = self._execute(
            self.service.spreadsheets().get(
                spreadsheetId=self.spreadsheet_id,
                fields="sheets(properties(sheetId,title))",
            )
        )
        tabs: Dict[str, int] = {}
        for sheet in response.get("sheets", []):
            props = sheet.get("properties", {})
            tabs[props.get("title", "")] = int(props.get("sheetId", 0))
        return tabs

    def banded_range_ids(self, sheet_id: int) -> List[int]:
        response = self._execute(
            self.service.spreadsheets().get(
                spreadsheetId=self.spreadsheet_id,
                fields="sheets(properties(sheetId),bandedRanges(bandedRangeId))",
            )
        )
        for sheet in response.get("sheets", []):
            if int(sheet.get("properties", {}).get("sheetId", -1)) == sheet_id:
                return [int(b["bandedRangeId"]) for b in sheet.get("bandedRanges", [])]
        return []

    def add_tab(self, title: str) -> int:
        response = self.batch_update([{"addSheet": {"properties": {"title": title}}}])
        return int(response["replies"][0]["addSheet"]["properties"]["sheetId"])

    def batch_update(self, requests: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        return self._execute(
            self.service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"requests": list(requests)},
            )
        )

    def update_values(
        self,
        cell_range: str,
        values: Sequence[Sequence[Any]],
        value_input_option: str = "USER_ENTERED",
    ) -> Dict[str, Any]:
        return self._execute(
            self.service.spreadsheets()
            .values()
            .update(
                spreadsheetId=self.spreadsheet_id,
                range=cell_range,
                valueInputOption=value_input_option,
                body={"values": [list(row) for row in values]},
            )
        )

    def get_values(self, cell_range: str) -> List[List[Any]]:
        response = self._execute(
            self.service.spreadsheets()
            .values()
            .get(
                spreadsheetId=self.spreadsheet_id,
                range=cell_range,
                valueRenderOption="UNFORMATTED_VALUE",
            )
        )
        return [list(row) for row in response.get("values", [])]


__all__ = ["SCOPES", "SheetsClient", "a1", "build_sheets_service", "http_status"]
