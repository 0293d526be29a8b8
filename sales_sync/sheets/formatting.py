"""
Builders for the cosmetic batchUpdate applied after the values are written.
"""
from __future__ import annotations

from typing import Any, Dict, List

from sales_sync.utils.config import RGB, FormattingSettings


def _color(rgb: RGB) -> Dict[str, Dict[str, float]]:
    red, green, blue = rgb
    return {"rgbColor": {"red": red, "green": green, "blue": blue}}


def grid_range(sheet_id: int, rows: int, cols: int, start_row: int = 0) -> Dict[str, int]:
    return {
        "sheetId": sheet_id,
        "startRowIndex": start_row,
        "endRowIndex": rows,
        "startColumnIndex": 0,
        "endColumnIndex": cols,
    }


def clear_request(sheet_id: int, rows: int, cols: int) -> Dict[str, Any]:
    """Wipe values and formatting over the whole clear rectangle."""
    return {
        "repeatCell": {
            "range": grid_range(sheet_id, rows, cols),
            "cell": {"userEnteredFormat": {}, "userEnteredValue": None},
            "fields": "userEnteredFormat,userEnteredValue",
        }
    }


def border_request(sheet_id: int, rows: int, cols: int, settings: FormattingSettings) -> Dict[str, Any]:
    border = {"style": "SOLID", "width": 1, "colorStyle": _color(settings.border_rgb)}
    return {
        "updateBorders": {
            "range": grid_range(sheet_id, rows, cols),
            "innerHorizontal": border,
            "innerVertical": border,
        }
    }


def header_request(sheet_id: int, cols: int, settings: FormattingSettings) -> Dict[str, Any]:
    return {
        "repeatCell": {
            "range": grid_range(sheet_id, 1, cols),
            "cell": {
                "userEnteredFormat": {
                    "backgroundColorStyle": _color(settings.header_bg_rgb),
                    "textFormat": {
                        "foregroundColorStyle": _color(settings.header_text_rgb),
                        "bold": True,
                    },
                    "horizontalAlignment": "CENTER",
                    "verticalAlignment": "MIDDLE",
                }
            },
            "fields": (
                "userEnteredFormat(backgroundColorStyle,textFormat,"
                "horizontalAlignment,verticalAlignment)"
            ),
        }
    }


def banding_request(sheet_id: int, rows: int, cols: int, settings: FormattingSettings) -> Dict[str, Any]:
    return {
        "addBanding": {
            "bandedRange": {
                "range": grid_range(sheet_id, rows, cols, start_row=1),
                "rowProperties": {
                    "firstBandColorStyle": {"rgbColor": {"red": 1.0, "green": 1.0, "blue": 1.0}},
                    "secondBandColorStyle": _color(settings.band_rgb),
                },
            }
        }
    }


def build_format_requests(
    sheet_id: int, rows: int, cols: int, settings: FormattingSettings
) -> List[Dict[str, Any]]:
    requests: List[Dict[str, Any]] = []
    if rows > 1 and cols > 1:
        requests.append(border_request(sheet_id, rows, cols, settings))
    if settings.banding and rows > 1:
        requests.append(banding_request(sheet_id, rows, cols, settings))
    if rows > 0 and cols > 0:
        requests.append(header_request(sheet_id, cols, settings))
    return requests


__all__ = [
    "banding_request",
    "border_request",
    "build_format_requests",
    "clear_request",
    "grid_range",
    "header_request",
]
