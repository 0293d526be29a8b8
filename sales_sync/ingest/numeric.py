"""
Sales quantity coercion.

Every cell maps to a float so rows can be ordered without a separate null
branch: missing or unparsable quantities become ``SENTINEL_MIN`` and therefore
sort last when ordering by quantity descending.
"""
from __future__ import annotations

import math
import re
from typing import Any, Union

SENTINEL_MIN = float("-inf")

# plain decimal notation only; float() alone also takes "inf", "nan" and "1_000"
_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

DisplayValue = Union[int, float, str]


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def parse_sales(value: Any) -> float:
    """Parse a raw sales cell, returning ``SENTINEL_MIN`` when it is not a number."""
    if is_blank(value):
        return SENTINEL_MIN
    cleaned = str(value).replace(",", "").strip()
    if not _DECIMAL_RE.match(cleaned):
        return SENTINEL_MIN
    number = float(cleaned)
    if not math.isfinite(number):
        return SENTINEL_MIN
    return number


def display_sales(value: float) -> DisplayValue:
    if not math.isfinite(value):
        return ""
    if value.is_integer():
        return int(value)
    return value


__all__ = ["SENTINEL_MIN", "display_sales", "is_blank", "parse_sales"]
