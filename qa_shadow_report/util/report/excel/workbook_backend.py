"""Local ``.xlsx`` implementation of the spreadsheet backend (openpyxl).

Tab ids are worksheet positions. Only the requests that change cell content
or layout (``copyPaste`` and ``mergeCells``) are applied; style-only
requests are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Final, List, Optional, Sequence, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.formula.translate import Translator
from openpyxl.utils import get_column_letter
from openpyxl.utils.cell import coordinate_from_string, column_index_from_string
from openpyxl.worksheet.worksheet import Worksheet

LOGGER = logging.getLogger(__name__)

# Excel refuses sheet names longer than this.
MAX_SHEET_TITLE_LENGTH: Final[int] = 31


def _split_range(cell_range: str) -> Tuple[str, int, int]:
    """Split ``"Title!B3"`` into ``("Title", 3, 2)`` (1-based row and column)."""
    if "!" not in cell_range:
        raise ValueError(f"Range {cell_range!r} must look like 'Title!A1'")
    title, coordinate = cell_range.rsplit("!", 1)
    title = title.strip("'")
    column_letter, row = coordinate_from_string(coordinate.split(":")[0])
    return title, row, column_index_from_string(column_letter)


def _trim(values: Sequence[Any]) -> List[Any]:
    row = ["" if value is None else value for value in values]
    while row and row[-1] == "":
        row.pop()
    return row


class XlsxSheetBackend:
    """Spreadsheet backend writing into one workbook file."""

    max_title_length: int = MAX_SHEET_TITLE_LENGTH

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._workbook: Optional[Workbook] = None

    @property
    def workbook(self) -> Workbook:
        if self._workbook is None:
            if self.path.exists():
                self._workbook = load_workbook(self.path)
            else:
                workbook = Workbook()
                workbook.remove(workbook.active)
                self._workbook = workbook
        return self._workbook

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.workbook.save(self.path)

    def _sheet(self, tab_id: int) -> Worksheet:
        sheets = self.workbook.worksheets
        if not isinstance(tab_id, int) or not 0 <= tab_id < len(sheets):
            raise LookupError(f"No tab with id {tab_id!r}")
        return sheets[tab_id]

    def _sheet_by_title(self, title: str) -> Worksheet:
        if title not in self.workbook.sheetnames:
            raise LookupError(f"No tab titled {title!r}")
        return self.workbook[title]

    async def list_tab_titles(self) -> List[str]:
        return list(self.workbook.sheetnames)

    async def resolve_tab_id(self, title: str) -> int:
        return self.workbook.sheetnames.index(self._sheet_by_title(title).title)

    async def fetch_tab_values(self, tab_id: int) -> List[List[Any]]:
        sheet = self._sheet(tab_id)
        rows = [_trim(row) for row in sheet.iter_rows(values_only=True)]
        while rows and not rows[-1]:
            rows.pop()
        return rows

    async def create_tab(self, title: str) -> int:
        if len(title) > self.max_title_length:
            raise ValueError(f"Tab title {title!r} is longer than {self.max_title_length} characters")
        if title in self.workbook.sheetnames:
            raise ValueError(f"Tab {title!r} already exists")
        self.workbook.create_sheet(title)
        self.save()
        LOGGER.info("Created tab %s in %s", title, self.path)
        return self.workbook.sheetnames.index(title)

    async def delete_tab(self, title: str) -> None:
        self.workbook.remove(self._sheet_by_title(title))
        self.save()
        LOGGER.info("Removed tab %s from %s", title, self.path)

    async def append_values(self, title: str, rows: Sequence[Sequence[Any]]) -> None:
        sheet = self._sheet_by_title(title)
        for row in rows:
            sheet.append(list(row))
        self.save()

    async def update_values(self, updates: Sequence[Dict[str, Any]]) -> None:
        for update in updates:
            title, start_row, start_col = _split_range(update["range"])
            sheet = self._sheet_by_title(title)
            for row_offset, row in enumerate(update.get("values") or []):
                for col_offset, value in enumerate(row):
                    sheet.cell(row=start_row + row_offset, column=start_col + col_offset, value=value)
        self.save()

    def _copy_paste(self, request: Dict[str, Any]) -> None:
        source = request["source"]
        destination = request["destination"]
        source_sheet = self._sheet(source["sheetId"])
        destination_sheet = self._sheet(destination["sheetId"])
        row_shift = destination["startRowIndex"] - source["startRowIndex"]
        col_shift = destination["startColumnIndex"] - source["startColumnIndex"]
        for row in range(source["startRowIndex"], source["endRowIndex"]):
            for col in range(source["startColumnIndex"], source["endColumnIndex"]):
                value = source_sheet.cell(row=row + 1, column=col + 1).value
                target_row, target_col = row + row_shift + 1, col + col_shift + 1
                if isinstance(value, str) and value.startswith("="):
                    origin = f"{get_column_letter(col + 1)}{row + 1}"
                    target = f"{get_column_letter(target_col)}{target_row}"
                    value = Translator(value, origin=origin).translate_formula(target)
                destination_sheet.cell(row=target_row, column=target_col, value=value)

    def _merge(self, request: Dict[str, Any]) -> None:
        grid = request["range"]
        sheet = self._sheet(grid["sheetId"])
        sheet.merge_cells(
            start_row=grid["startRowIndex"] + 1,
            end_row=grid["endRowIndex"],
            start_column=grid["startColumnIndex"] + 1,
            end_column=grid["endColumnIndex"],
        )

    async def batch_update(self, requests: Sequence[Dict[str, Any]]) -> None:
        for request in requests:
            if "copyPaste" in request:
                self._copy_paste(request["copyPaste"])
            elif "mergeCells" in request:
                self._merge(request["mergeCells"])
            else:
                LOGGER.debug("Skipping style request %s", next(iter(request), "<empty>"))
        self.save()
