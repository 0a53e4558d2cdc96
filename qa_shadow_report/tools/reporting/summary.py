"""Weekly and monthly roll-ups of daily report tabs.

A roll-up places every daily tab of its window side by side in one summary
tab. Row 0 of the summary holds one title per daily tab; the daily blocks
start below it, shifted down so that all column-title rows line up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Sequence

from openpyxl.utils import get_column_letter

from qa_shadow_report.util.constants import FOOTER_ROW, HEADER_INDICATORS, ClassificationConfig
from qa_shadow_report.util.date_formatting import (
    DateWindow,
    TabTitle,
    last_month_window,
    titles_in_window,
    validate_tab_titles,
    week_window,
)
from qa_shadow_report.util.report.model import SummaryMetadata, SummaryPayload

from .copy_paste import copy_paste_normal
from .sheet_backend import SheetBackend
from .summary_styles import summary_title_styles

LOGGER = logging.getLogger(__name__)

_DEFAULT_CONFIG = ClassificationConfig()


class SummaryPayloadError(RuntimeError):
    """Raised when a roll-up payload cannot be assembled."""


@dataclass(frozen=True)
class _TabBlock:
    tab: TabTitle
    tab_id: int
    header_index: int
    footer_index: int
    width: int


def find_header_row_index(rows: Sequence[Sequence[Any]]) -> int:
    """Return the index of the first row holding every column-title indicator."""
    for index, row in enumerate(rows):
        if all(indicator in row for indicator in HEADER_INDICATORS):
            return index
    raise ValueError("No column-title row found in tab values")


def find_footer_row_index(rows: Sequence[Sequence[Any]]) -> int:
    for index, row in enumerate(rows):
        if FOOTER_ROW in row:
            return index
    return len(rows) - 1


async def _read_tab_block(backend: SheetBackend, tab: TabTitle) -> _TabBlock:
    tab_id = await backend.resolve_tab_id(tab.title)
    rows = await backend.fetch_tab_values(tab_id)
    header_index = find_header_row_index(rows)
    footer_index = max(find_footer_row_index(rows), header_index)
    return _TabBlock(
        tab=tab,
        tab_id=tab_id,
        header_index=header_index,
        footer_index=footer_index,
        width=len(rows[header_index]),
    )


async def _build_summary_payload(
    summary_type: str,
    source_tab_titles: Sequence[str],
    destination_tab_title: str,
    backend: SheetBackend,
    window: DateWindow,
) -> SummaryPayload:
    titles = validate_tab_titles(source_tab_titles)
    destination_id = await backend.resolve_tab_id(destination_tab_title)
    tabs = titles_in_window(titles, window)
    LOGGER.info(
        "Building %s summary from %d of %d tab(s) between %s and %s",
        summary_type,
        len(tabs),
        len(titles),
        window.start.date(),
        window.end.date(),
    )

    # Tabs are read one after another so their column order is deterministic.
    blocks: List[_TabBlock] = []
    for tab in tabs:
        blocks.append(await _read_tab_block(backend, tab))
    longest_header_end = max((block.header_index for block in blocks), default=0)

    payload = SummaryPayload(source_tab_titles=[block.tab.title for block in blocks])
    next_available_column = 0
    for block in blocks:
        block_height = block.footer_index + 1
        destination_start_row = 1 + longest_header_end - block.header_index
        payload.body_payload.append(
            copy_paste_normal(
                {
                    "sourcePageId": block.tab_id,
                    "startRow": 0,
                    "endRow": block_height,
                    "startCol": 0,
                    "endCol": block.width,
                },
                {
                    "destinationTabId": destination_id,
                    "startRow": destination_start_row,
                    "endRow": destination_start_row + block_height,
                    "startCol": next_available_column,
                    "endCol": next_available_column + block.width,
                },
            )
        )
        payload.header_payload.append(
            {
                "range": f"{destination_tab_title}!{get_column_letter(next_available_column + 1)}1",
                "values": [[f"{block.tab.weekday_label} {block.tab.title}"]],
            }
        )
        payload.summary_header_style_payload.extend(
            summary_title_styles(destination_id, next_available_column, next_available_column + block.width)
        )
        next_available_column += block.width

    payload.metadata = SummaryMetadata(
        summary_type=summary_type,
        start_date=window.start.isoformat(),
        end_date=window.end.isoformat(),
    )
    return payload


async def construct_weekly_payload_for_copy_paste(
    source_tab_titles: Sequence[str],
    destination_tab_title: str,
    backend: SheetBackend,
    *,
    today: Optional[date] = None,
    config: Optional[ClassificationConfig] = None,
) -> SummaryPayload:
    """Assemble the copy-paste payload for the week containing *today*.

    Titles outside the week, or not naming a date, are ignored. Any failure
    is logged and re-raised as :class:`SummaryPayloadError`.
    """
    config = config or _DEFAULT_CONFIG
    try:
        window = week_window(today or date.today(), config.week_start_index)
        return await _build_summary_payload(
            "weekly", source_tab_titles, destination_tab_title, backend, window
        )
    except Exception as exc:
        LOGGER.exception("Error building weekly copy-paste payload")
        raise SummaryPayloadError("Error building weekly copy-paste payload.") from exc


async def construct_monthly_payload_for_copy_paste(
    source_tab_titles: Sequence[str],
    destination_tab_title: str,
    backend: SheetBackend,
    *,
    today: Optional[date] = None,
) -> SummaryPayload:
    """Assemble the copy-paste payload for the month before *today*."""
    try:
        window = last_month_window(today or date.today())
        return await _build_summary_payload(
            "monthly", source_tab_titles, destination_tab_title, backend, window
        )
    except Exception as exc:
        LOGGER.exception("Error building monthly copy-paste payload")
        raise SummaryPayloadError("Error building monthly copy-paste payload.") from exc
