"""Aggregate formulas for the daily report header.

Row numbers follow the 1-based spreadsheet model. ``header_row_index`` is
the number of rows above the body (header block plus column titles), so the
body spans rows ``header_row_index + 1`` to ``total_number_of_rows``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Final, List, Optional, Sequence, Tuple

from openpyxl.utils import get_column_letter

from qa_shadow_report.util.constants import ClassificationConfig, columns_available
from qa_shadow_report.util.report.model import AggregateFormulas, FormulaSet

LOGGER = logging.getLogger(__name__)

FORMULA_KEYS: Final[tuple[str, ...]] = (
    "formula tests passed",
    "formula base",
    "formula skipped/pending",
    "formula total",
)

_PASSED_SHARE: Final[str] = (
    '=COUNTIFS({S}{start}:{S}{end}, "*{label}*", {T}{start}:{T}{end}, "passed")'
    '&" of "&COUNTIFS({S}{start}:{S}{end}, "*{label}*")'
    '&"  -  "&"("&ROUND(COUNTIFS({S}{start}:{S}{end}, "*{label}*", {T}{start}:{T}{end}, "passed")'
    '/(COUNTIFS({S}{start}:{S}{end}, "*{label}*")) * 100)&"%)"'
)
_STATE_SHARE: Final[str] = (
    '=COUNTIFS({T}{start}:{T}{end}, "*{label}*")'
    '&" ("&ROUND(COUNTIFS({T}{start}:{T}{end}, "*{label}*")/{body} * 100)&"%)"'
)
_OTHER_STATE_SHARE: Final[str] = (
    '=COUNTIFS({T}{start}:{T}{end}, "<>*passed*", {T}{start}:{T}{end}, "<>*failed*")'
    '&" ("&ROUND(COUNTIFS({T}{start}:{T}{end}, "<>*passed*", {T}{start}:{T}{end}, "<>*failed*")'
    '/{body} * 100)&"%)"'
)
_ROW_COUNT: Final[str] = "=ROWS({T}{start}:{T}{end})"
HEADER_FORMULA_TEMPLATES: Final[tuple[str, ...]] = (
    _PASSED_SHARE,
    _STATE_SHARE,
    _OTHER_STATE_SHARE,
    _ROW_COUNT,
)

_HEADER_PLACEHOLDER: Final[re.Pattern[str]] = re.compile(
    r"^(.+) (" + "|".join(re.escape(key) for key in FORMULA_KEYS) + r")$"
)
_RANGE: Final[re.Pattern[str]] = re.compile(r"\b([A-Z]{1,3})(\d+):\1(\d+)\b")


class FormulaGenerationError(RuntimeError):
    """Raised when formula strings cannot be produced."""


class HeaderFormulaError(RuntimeError):
    """Raised when header placeholders cannot be replaced by formulas."""


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def build_formulas(
    label: str,
    header_row_index: int,
    total_number_of_rows: int,
    body_row_count: int,
    subject_column: str,
    state_column: str,
) -> FormulaSet:
    if not _is_int(header_row_index) or header_row_index < 0:
        raise ValueError("Header row index must be a non-negative integer.")
    if not _is_int(total_number_of_rows) or total_number_of_rows <= header_row_index:
        raise ValueError("Total number of rows must be an integer greater than header row index.")
    if not _is_int(body_row_count) or body_row_count <= 0:
        raise ValueError("Body row count must be a positive integer.")
    if not subject_column.strip() or not state_column.strip():
        raise ValueError("Subject and state columns must be non-empty strings.")

    values = {
        "S": subject_column,
        "T": state_column,
        "start": header_row_index + 1,
        "end": total_number_of_rows,
        "label": label,
        "body": body_row_count,
    }

    def fill(template: str) -> str:
        return re.sub(r"\{(\w+)\}", lambda match: str(values[match.group(1)]), template)

    subject = f"{subject_column}{values['start']}:{subject_column}{total_number_of_rows}"
    state = f"{state_column}{values['start']}:{state_column}{total_number_of_rows}"
    aggregate = AggregateFormulas(
        passed=f'=COUNTIFS({subject}, "*{label}*", {state}, "passed")',
        failed=f'=COUNTIFS({subject}, "*{label}*", {state}, "failed")',
        total=f'=COUNTIFS({subject}, "*{label}*")',
    )
    by_key = {key: fill(template) for key, template in zip(FORMULA_KEYS, HEADER_FORMULA_TEMPLATES)}
    return FormulaSet(formulas=aggregate, by_key=by_key)


def get_formulas(
    label: str,
    header_row_index: int,
    total_number_of_rows: int,
    body_row_count: int,
    subject_column: str,
    state_column: str,
) -> FormulaSet:
    """Return the passed, failed and total formulas for *label*.

    Every argument is type-checked before any formula is built; a failure
    while building surfaces as :class:`FormulaGenerationError`.
    """
    if not (
        isinstance(label, str)
        and _is_int(header_row_index)
        and _is_int(total_number_of_rows)
        and _is_int(body_row_count)
        and isinstance(subject_column, str)
        and isinstance(state_column, str)
    ):
        raise TypeError("Invalid input: Ensure all parameters are of the correct type.")
    try:
        return build_formulas(
            label,
            header_row_index,
            total_number_of_rows,
            body_row_count,
            subject_column,
            state_column,
        )
    except Exception as exc:
        LOGGER.error("Error generating formulas for %r: %s", label, exc)
        raise FormulaGenerationError("Failed to generate formulas") from exc


def column_letter(columns: Sequence[str], title: str) -> str:
    return get_column_letter(list(columns).index(title) + 1)


def determine_subject_column(
    label: str,
    config: ClassificationConfig,
    columns: Optional[Sequence[str]] = None,
) -> str:
    """Return the column letter holding the axis *label* belongs to."""
    columns = columns or columns_available(False, config)
    if label in config.test_categories:
        return column_letter(columns, "category")
    if label in config.test_types:
        return column_letter(columns, "type")
    return column_letter(columns, "team")


def process_header_with_formulas(
    header_rows: List[List[str]],
    header_row_index: int,
    total_number_of_rows: int,
    body_row_count: int,
    config: ClassificationConfig,
    columns: Optional[Sequence[str]] = None,
) -> List[List[str]]:
    """Replace every formula placeholder in *header_rows*, in place."""
    if not isinstance(header_rows, list):
        raise TypeError("Invalid header rows: Expected a list of lists.")
    columns = columns or columns_available(False, config)
    try:
        state_column = column_letter(columns, "state")
        for row_index, row in enumerate(header_rows):
            if not isinstance(row, list):
                raise TypeError(f"Invalid header row at index {row_index}: Expected a list.")
            for col_index, cell in enumerate(row):
                match = _HEADER_PLACEHOLDER.match(cell) if isinstance(cell, str) else None
                if not match:
                    continue
                label, key = match.groups()
                formula_set = get_formulas(
                    label,
                    header_row_index,
                    total_number_of_rows,
                    body_row_count,
                    determine_subject_column(label, config, columns),
                    state_column,
                )
                row[col_index] = formula_set.by_key[key]
    except Exception as exc:
        LOGGER.error("Error processing header with formulas: %s", exc)
        raise HeaderFormulaError("Failed to process header with formulas") from exc
    return header_rows


def parse_formula_range(formula: str) -> Tuple[int, int]:
    """Recover ``(header_row_index, total_number_of_rows)`` from a formula."""
    match = _RANGE.search(formula)
    if not match:
        raise ValueError(f"No row range found in formula {formula!r}")
    return int(match.group(2)) - 1, int(match.group(3))


def formula_ranges(header_rows: Sequence[Sequence[Any]]) -> List[Tuple[int, int]]:
    """Return the row range of every formula cell in *header_rows*."""
    return [
        parse_formula_range(cell)
        for row in header_rows
        for cell in row
        if isinstance(cell, str) and cell.startswith("=")
    ]