"""
Ingestion helpers for turning uploaded sales files into canonical columns.
"""

from .decoder import Record, decode_table, supported_extension
from .headers import OUTPUT_HEADERS, CanonicalField, ResolvedColumns, resolve_headers
from .numeric import SENTINEL_MIN, display_sales, parse_sales

__all__ = [
    "CanonicalField",
    "OUTPUT_HEADERS",
    "Record",
    "ResolvedColumns",
    "SENTINEL_MIN",
    "decode_table",
    "display_sales",
    "parse_sales",
    "resolve_headers",
    "supported_extension",
]
