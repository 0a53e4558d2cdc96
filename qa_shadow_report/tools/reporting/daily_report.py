"""Daily report assembly.

Tab layout, top to bottom: classification header block with state metrics,
the column-title row, one row per test, and the footer row.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from qa_shadow_report.util.constants import (
    DEFAULT_HEADER_METRICS,
    FOOTER_ROW,
    ClassificationConfig,
    columns_available,
)
from qa_shadow_report.util.report.model import DailyPayload

from .formulas import process_header_with_formulas
from .header_report import append_state_reports_to_header, construct_header_report
from .row_builder import process_test_suites, sort_payload
from .summary_styles import grid_style

LOGGER = logging.getLogger(__name__)


def build_daily_payload(
    results: Iterable[Mapping[str, Any]],
    is_playwright_run: bool,
    config: Optional[ClassificationConfig] = None,
) -> DailyPayload:
    """Build the rows of one daily tab from framework results.

    Formula placeholders stay in the header; see :func:`apply_header_formulas`.
    """
    if isinstance(results, (str, bytes)) or not isinstance(results, Iterable):
        raise TypeError("Invalid results: Expected a list of result objects.")
    if not isinstance(is_playwright_run, bool):
        raise TypeError("Invalid is_playwright_run flag: Expected a boolean.")
    config = config or ClassificationConfig()
    columns = columns_available(is_playwright_run, config)

    payload = DailyPayload(column_titles=columns)
    entries = sort_payload(process_test_suites(results, is_playwright_run, config))
    payload.body_payload = [entry.to_row() for entry in entries]

    header = construct_header_report(payload.body_payload, config)
    state_index = columns.index("state")
    payload.header_payload = append_state_reports_to_header(header, DEFAULT_HEADER_METRICS, state_index)
    payload.footer_payload.append([""] * state_index + [FOOTER_ROW])
    LOGGER.info(
        "Daily payload built: %d header row(s), %d test row(s)",
        len(payload.header_payload),
        payload.body_row_count,
    )
    return payload


def apply_header_formulas(
    payload: DailyPayload, config: Optional[ClassificationConfig] = None
) -> DailyPayload:
    if payload.body_row_count == 0:
        raise ValueError("Cannot build header formulas for a report without test rows.")
    process_header_with_formulas(
        payload.header_payload,
        payload.header_row_index,
        payload.total_number_of_rows,
        payload.body_row_count,
        config or ClassificationConfig(),
        payload.column_titles,
    )
    return payload


def create_merge_queries(
    rows: Sequence[Sequence[Any]], header_row_index: int, sheet_id: int
) -> List[Dict[str, Any]]:
    """Return ``mergeCells`` requests for repeated values in the first two columns.

    *header_row_index* is the 0-based sheet row of the first body row.
    """
    requests: List[Dict[str, Any]] = []
    for column in (0, 1):
        start = header_row_index
        for offset, row in enumerate(rows):
            is_last = offset == len(rows) - 1
            if not is_last and row[column] == rows[offset + 1][column]:
                continue
            end = header_row_index + offset + 1
            if end - start > 1:
                requests.append(
                    {
                        "mergeCells": {
                            "range": {
                                "sheetId": sheet_id,
                                "startRowIndex": start,
                                "endRowIndex": end,
                                "startColumnIndex": column,
                                "endColumnIndex": column + 1,
                            },
                            "mergeType": "MERGE_ALL",
                        }
                    }
                )
            start = end
    return requests


def daily_grid_styles(payload: DailyPayload, sheet_id: int) -> List[Dict[str, Any]]:
    return grid_style(sheet_id, payload.header_row_index, len(payload.column_titles))
