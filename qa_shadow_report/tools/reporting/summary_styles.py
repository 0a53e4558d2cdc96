from __future__ import annotations

from typing import Any, Dict, Final, List

LIGHT_GREY: Final[Dict[str, float]] = {"red": 0.9, "green": 0.9, "blue": 0.9}
BLACK: Final[Dict[str, float]] = {"red": 0.0, "green": 0.0, "blue": 0.0}

SOLID_BLACK_WIDTH_ONE: Final[Dict[str, Any]] = {"style": "SOLID", "width": 1, "color": BLACK}
SOLID_BLACK_WIDTH_TWO: Final[Dict[str, Any]] = {"style": "SOLID", "width": 2, "color": BLACK}


def _range(sheet_id: int, start_row: int, end_row: int, start_col: int, end_col: int) -> Dict[str, int]:
    return {
        "sheetId": sheet_id,
        "startRowIndex": start_row,
        "endRowIndex": end_row,
        "startColumnIndex": start_col,
        "endColumnIndex": end_col,
    }


def summary_title_styles(sheet_id: int, start_col: int, end_col: int) -> List[Dict[str, Any]]:
    """Merge, border and shade the title cell spanning one source tab."""
    title_range = _range(sheet_id, 0, 1, start_col, end_col)
    return [
        {"mergeCells": {"range": dict(title_range), "mergeType": "MERGE_ALL"}},
        {
            "repeatCell": {
                "range": dict(title_range),
                "cell": {
                    "userEnteredFormat": {
                        "horizontalAlignment": "CENTER",
                        "backgroundColor": LIGHT_GREY,
                        "textFormat": {"bold": True, "fontSize": 12},
                    }
                },
                "fields": "userEnteredFormat(horizontalAlignment,backgroundColor,textFormat)",
            }
        },
        {
            "updateBorders": {
                "range": dict(title_range),
                "top": SOLID_BLACK_WIDTH_TWO,
                "bottom": SOLID_BLACK_WIDTH_TWO,
                "left": SOLID_BLACK_WIDTH_ONE,
                "right": SOLID_BLACK_WIDTH_ONE,
            }
        },
    ]


def grid_style(sheet_id: int, header_row_index: int, width: int) -> List[Dict[str, Any]]:
    """Bold the column-title row of a daily tab and freeze everything above the body."""
    return [
        {
            "repeatCell": {
                "range": _range(sheet_id, header_row_index - 1, header_row_index, 0, width),
                "cell": {"userEnteredFormat": {"textFormat": {"bold": True}}},
                "fields": "userEnteredFormat.textFormat",
            }
        },
        {
            "updateSheetProperties": {
                "properties": {"sheetId": sheet_id, "gridProperties": {"frozenRowCount": header_row_index}},
                "fields": "gridProperties.frozenRowCount",
            }
        },
    ]
