"""
Group, order and lay out sales rows for the destination tab.

The output matrix is a pure function of the decoded records: a header row,
then one block per category (ascending), items by quantity descending and
name ascending, blocks separated by a single empty row.
"""
from __future__ import annotations

import logging
import math
import unicodedata
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from sales_sync.ingest.decoder import Record
from sales_sync.ingest.headers import OUTPUT_HEADERS, ResolvedColumns
from sales_sync.ingest.numeric import display_sales, parse_sales

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
EMPTY_ROW: Tuple[str, str, str] = ("", "", "")

Cell = Union[str, int, float]
OutputMatrix = List[List[Cell]]


@dataclass(frozen=True)
class SalesItem:
    name: str
    category: str
    sold: float


CollationKey = Tuple[Tuple[Tuple[int, str], ...], str, str]


def collation_key(text: str) -> CollationKey:
    """
    Sort key approximating a locale-aware string comparison.

    Accents and case are ignored first, and punctuation or spaces sort before
    digits and letters. On ties lowercase precedes uppercase and the raw text
    decides, so the order is total and does not depend on the process locale.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    primary = tuple((1 if ch.isalnum() else 0, ch) for ch in base)
    return (primary, text.swapcase(), text)


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def extract_items(records: Iterable[Record], columns: ResolvedColumns) -> List[SalesItem]:
    """Build ``SalesItem`` rows, dropping rows without a product name."""
    items: List[SalesItem] = []
    dropped = 0
    for record in records:
        name = _cell_text(record.get(columns.name))
        if not name:
            dropped += 1
            continue
        category = _cell_text(record.get(columns.category)) or UNCATEGORIZED
        sold = parse_sales(record.get(columns.sold))
        items.append(SalesItem(name=name, category=category, sold=sold))
    if dropped:
        logger.info("Skipped %d rows without a product name.", dropped)
    logger.info("Processed %d valid rows.", len(items))
    return items


def group_by_category(items: Iterable[SalesItem]) -> Dict[str, List[SalesItem]]:
    grouped: Dict[str, List[SalesItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


def sort_items(items: Sequence[SalesItem]) -> List[SalesItem]:
    return sorted(items, key=lambda item: (-item.sold, collation_key(item.name)))


def matrix_from_items(items: Iterable[SalesItem]) -> OutputMatrix:
    grouped = group_by_category(items)
    rows: OutputMatrix = [list(OUTPUT_HEADERS)]
    for category in sorted(grouped, key=collation_key):
        for item in sort_items(grouped[category]):
            rows.append([item.name, item.category, display_sales(item.sold)])
        rows.append(list(EMPTY_ROW))

    if len(rows) > 1 and all(cell == "" for cell in rows[-1]):
        rows.pop()
    logger.info("Final data array has %d rows (%d categories).", len(rows), len(grouped))
    return rows


def build_output_matrix(records: Iterable[Record], columns: ResolvedColumns) -> OutputMatrix:
    return matrix_from_items(extract_items(records, columns))


def is_separator(row: Sequence[Cell]) -> bool:
    return all(cell == "" for cell in row)


def summarize_matrix(matrix: Sequence[Sequence[Cell]]) -> Dict[str, Any]:
    """Count data rows per category, ignoring the header and separators."""
    per_category: Dict[str, int] = {}
    for row in matrix[1:]:
        if is_separator(row):
            continue
        category = str(row[1])
        per_category[category] = per_category.get(category, 0) + 1
    return {
        "rows": len(matrix),
        "data_rows": sum(per_category.values()),
        "categories": len(per_category),
        "per_category": per_category,
    }


__all__ = [
    "Cell",
    "EMPTY_ROW",
    "OutputMatrix",
    "SalesItem",
    "UNCATEGORIZED",
    "build_output_matrix",
    "collation_key",
    "extract_items",
    "group_by_category",
    "is_separator",
    "matrix_from_items",
    "sort_items",
    "summarize_matrix",
]
