"""
Decode uploaded CSV/XLSX bytes into ordered row records.
"""
from __future__ import annotations

import io
import logging
import math
from pathlib import PurePath
from typing import Any, Dict, List

import pandas as pd

from sales_sync.errors import DecodeError, EmptyInput, UnsupportedFormat

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

SUPPORTED_EXTENSIONS = (".csv", ".xlsx")


def supported_extension(filename: str) -> str:
    """Return the lower-cased extension of ``filename`` or raise ``UnsupportedFormat``."""
    suffix = PurePath(str(filename or "")).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormat(
            f"Unsupported file type for '{filename}' (CSV/XLSX only)."
        )
    return suffix


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, str):
        return value.strip()
    return value


def _frame_to_records(df: pd.DataFrame) -> List[Record]:
    columns = [str(col) for col in df.columns]
    records: List[Record] = []
    for values in df.itertuples(index=False, name=None):
        records.append({col: _clean_cell(val) for col, val in zip(columns, values)})
    return records


def _dedupe_columns(columns: List[str]) -> List[str]:
    # keeps the first occurrence verbatim, later ones get ".N" like pandas
    seen: Dict[str, int] = {}
    out: List[str] = []
    for col in columns:
        name = col
        while name in seen:
            seen[col] += 1
            name = f"{col}.{seen[col]}"
        seen.setdefault(name, 0)
        out.append(name)
    return out


def _read_csv(data: bytes) -> pd.DataFrame:
    df = pd.read_csv(
        io.BytesIO(data),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        encoding="utf-8-sig",
    )
    df.columns = _dedupe_columns([str(col).strip() for col in df.columns])
    return df


def _read_xlsx(data: bytes) -> pd.DataFrame:
    df = pd.read_excel(io.BytesIO(data), sheet_name=0, engine="openpyxl", dtype=object)
    return df.dropna(how="all")


def decode_table(data: bytes, filename: str) -> List[Record]:
    """
    Turn raw upload bytes into records keyed by the header row.

    The extension of ``filename`` selects the reader. Only the first worksheet
    of an XLSX workbook is read; absent cells are ``None``.
    """
    suffix = supported_extension(filename)
    logger.info("Parsing file: %s", filename)
    try:
        df = _read_csv(data) if suffix == ".csv" else _read_xlsx(data)
    except pd.errors.EmptyDataError as exc:
        raise EmptyInput("File contains no data rows.", cause=str(exc)) from exc
    except Exception as exc:
        raise DecodeError(f"Error parsing file: {exc}", cause=str(exc)) from exc

    records = _frame_to_records(df)
    if not records:
        raise EmptyInput("File contains no data rows.")
    logger.info("Parsed %d raw data rows.", len(records))
    return records


__all__ = ["Record", "SUPPORTED_EXTENSIONS", "decode_table", "supported_extension"]
