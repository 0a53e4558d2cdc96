from __future__ import annotations

from typing import Any, Dict, Final, Mapping

PASTE_NORMAL: Final[str] = "PASTE_NORMAL"


def _grid_range(sheet_id: Any, params: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "sheetId": sheet_id,
        "startRowIndex": params.get("startRow"),
        "endRowIndex": params.get("endRow"),
        "startColumnIndex": params.get("startCol"),
        "endColumnIndex": params.get("endCol"),
    }


def copy_paste_normal(
    source_params: Mapping[str, Any], destination_params: Mapping[str, Any]
) -> Dict[str, Any]:
    """Return a ``copyPaste`` request moving one block between tabs.

    ``source_params`` carries ``sourcePageId`` and ``destination_params``
    carries ``destinationTabId``; both also take ``startRow``, ``endRow``,
    ``startCol`` and ``endCol``, copied through unchanged. Ranges are not
    checked here.
    """
    source_id = (source_params or {}).get("sourcePageId")
    destination_id = (destination_params or {}).get("destinationTabId")
    if source_id is None or destination_id is None:
        raise ValueError("Both sourcePageId and destinationTabId must be provided.")
    return {
        "copyPaste": {
            "source": _grid_range(source_id, source_params),
            "destination": _grid_range(destination_id, destination_params),
            "pasteType": PASTE_NORMAL,
        }
    }
