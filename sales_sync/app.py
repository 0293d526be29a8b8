#!/usr/bin/env python3
"""
HTTP front for the upload pipeline.

Exposes the two operations the upload form needs:

- ``POST /tabs/ensure`` with ``{"sheetTab": "Store"}``
- ``POST /uploads`` multipart with ``file`` and ``sheetTab`` (or ``store``)

The spreadsheet client is built once at startup and shared by all requests.
Uploads to the same tab are serialized with a per-tab lock.
"""
from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager, contextmanager
from typing import Any, Dict, Iterator, List, Optional

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sales_sync.errors import SalesSyncError
from sales_sync.pipeline import ensure_tab, process_upload
from sales_sync.sheets.client import SheetsClient
from sales_sync.sheets.sync import SheetSynchronizer
from sales_sync.utils.config import AppConfig, configure_logging, load_config

logger = logging.getLogger(__name__)


class TabLocks:
    """
    One lock per tab title, held for the duration of an upload.

    Entries are dropped when no request holds or waits on them, so the
    registry only ever contains tabs with uploads in flight.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, List[Any]] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, tab: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(tab, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[tab]


class EnsureTabRequest(BaseModel):
    sheetTab: Optional[str] = None


def build_synchronizer(config: AppConfig) -> SheetSynchronizer:
    client = SheetsClient.from_settings(config.sheets)
    return SheetSynchronizer(client, config.sheets, config.formatting)


def _error_response(exc: SalesSyncError) -> JSONResponse:
    status = 400 if exc.client_error else 500
    if status == 500:
        logger.error("Request failed: %s", exc)
    return JSONResponse(status_code=status, content={"message": str(exc), "stage": exc.stage})


def create_app(
    synchronizer: Optional[SheetSynchronizer] = None,
    config: Optional[AppConfig] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.synchronizer is None:
            cfg = app.state.config or load_config()
            configure_logging(cfg)
            app.state.config = cfg
            app.state.synchronizer = build_synchronizer(cfg)
        yield

    app = FastAPI(title="Store Sales Sync", version="0.1.0", lifespan=lifespan)
    app.state.synchronizer = synchronizer
    app.state.config = config
    app.state.tab_locks = TabLocks()

    @app.get("/health", tags=["health"])
    def healthcheck() -> Dict[str, str]:
        """Minimal liveness probe."""
        return {"status": "ok"}

    @app.post("/tabs/ensure")
    def ensure_tab_endpoint(body: EnsureTabRequest) -> Any:
        try:
            result = ensure_tab(app.state.synchronizer, body.sheetTab)
        except SalesSyncError as exc:
            return _error_response(exc)
        return {"message": result.message, "created": result.created, "sheetId": result.sheet_id}

    @app.post("/uploads")
    def upload_endpoint(
        file: UploadFile = File(...),
        sheetTab: Optional[str] = Form(None),
        store: Optional[str] = Form(None),
    ) -> Any:
        tab = (sheetTab or "").strip() or (store or "").strip()
        data = file.file.read()
        try:
            with app.state.tab_locks.hold(tab):
                summary = process_upload(app.state.synchronizer, data, file.filename or "", tab)
        except SalesSyncError as exc:
            return _error_response(exc)
        finally:
            file.file.close()
        payload: Dict[str, Any] = {
            "message": summary.message,
            "tab": summary.tab,
            "rowsWritten": summary.rows_written,
            "dataRows": summary.data_rows,
            "categories": summary.categories,
        }
        if summary.warning:
            payload["warning"] = summary.warning
        return payload

    return app


app = create_app()
