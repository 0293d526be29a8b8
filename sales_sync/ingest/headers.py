"""
Canonical header resolution for uploaded sales files.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from sales_sync.errors import HeaderNotFound

logger = logging.getLogger(__name__)

OUTPUT_HEADERS = ("Product Name", "Product Category", "Total Items Sold")


class CanonicalField(enum.Enum):
    PRODUCT_NAME = OUTPUT_HEADERS[0]
    PRODUCT_CATEGORY = OUTPUT_HEADERS[1]
    ITEMS_SOLD = OUTPUT_HEADERS[2]

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class ResolvedColumns:
    name: str
    category: str
    sold: str

    def as_dict(self) -> Dict[CanonicalField, str]:
        return {
            CanonicalField.PRODUCT_NAME: self.name,
            CanonicalField.PRODUCT_CATEGORY: self.category,
            CanonicalField.ITEMS_SOLD: self.sold,
        }


def _normalize_header(header: object) -> str:
    return str(header if header is not None else "").lower()


def find_header(keys: Sequence[str], target: str) -> Optional[str]:
    """Return the first key equal to ``target`` ignoring case."""
    wanted = target.lower()
    for key in keys:
        if _normalize_header(key) == wanted:
            return key
    return None


def resolve_headers(keys: Iterable[str]) -> ResolvedColumns:
    """
    Map the file's header row onto the three canonical fields.

    Raises ``HeaderNotFound`` listing every field that has no
    case-insensitive match.
    """
    key_list: List[str] = list(keys)
    found: Dict[CanonicalField, Optional[str]] = {
        field: find_header(key_list, field.label) for field in CanonicalField
    }
    missing = [field.label for field, key in found.items() if key is None]
    if missing:
        raise HeaderNotFound(missing, available=[str(k) for k in key_list])

    resolved = ResolvedColumns(
        name=found[CanonicalField.PRODUCT_NAME],
        category=found[CanonicalField.PRODUCT_CATEGORY],
        sold=found[CanonicalField.ITEMS_SOLD],
    )
    logger.info(
        "Using headers - Name: %s, Category: %s, Sales: %s",
        resolved.name,
        resolved.category,
        resolved.sold,
    )
    return resolved


__all__ = [
    "CanonicalField",
    "OUTPUT_HEADERS",
    "ResolvedColumns",
    "find_header",
    "resolve_headers",
]
