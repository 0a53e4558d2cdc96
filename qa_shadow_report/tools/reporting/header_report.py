"""Classification header block of a daily report.

The header sits above the column titles. Each classification axis (type,
category, team) contributes a two-cell ``[title, formula placeholder]``
entry per label that occurs in the body; the axes are laid out side by side
and padded with blank pairs. The state metrics (passed, failed, skipped,
total) are appended to the right so their formulas land in the ``state``
column.
"""

from __future__ import annotations

import logging
from typing import Any, List, Protocol, Sequence

from qa_shadow_report.util.constants import (
    AXIS_COLUMN_INDEX,
    DEFAULT_HEADER_METRICS,
    STATE_COLUMN_INDEX,
)

LOGGER = logging.getLogger(__name__)


class HeaderReportError(RuntimeError):
    """Raised when the classification header block cannot be built."""


class LabelUniverseProvider(Protocol):
    def label_universe(self, axis: str) -> Sequence[str]:
        ...


def generate_placeholders(count: int) -> List[List[str]]:
    if isinstance(count, bool) or not isinstance(count, int):
        raise TypeError("The count must be an integer.")
    if count < 0:
        raise ValueError("The count must be a non-negative integer.")
    return [["", ""] for _ in range(count)]


def generate_report_entry(title: str, formula: str) -> List[str]:
    if not isinstance(title, str) or not isinstance(formula, str):
        raise TypeError("Title and formula must be strings.")
    if not title.strip() or not formula.strip():
        raise ValueError("Title and formula cannot be empty.")
    return [title, formula]


def _cell(row: Sequence[Any], index: int) -> str:
    if index >= len(row):
        return ""
    value = row[index]
    return value if isinstance(value, str) else ""


def generate_report(
    labels: Sequence[str],
    rows: Sequence[Sequence[Any]],
    search_index: int,
    is_team: bool = False,
) -> List[List[str]]:
    """Return one ``[title, placeholder]`` entry per label found in *rows*.

    Labels with no occurrence in column *search_index* are left out. Team
    names are matched ignoring case because the team cell keeps the casing
    used in the test title.
    """
    if isinstance(labels, str) or not isinstance(labels, Sequence):
        raise TypeError("Labels must be a list of strings.")
    if not all(isinstance(label, str) for label in labels):
        raise TypeError("All labels must be strings.")
    if isinstance(search_index, bool) or not isinstance(search_index, int) or search_index < 0:
        raise TypeError("search_index must be a non-negative integer.")
    if not isinstance(is_team, bool):
        raise TypeError("is_team must be a boolean.")

    report: List[List[str]] = []
    for label in labels:
        if not label.strip():
            continue
        needle = label.lower() if is_team else label
        occurrences = 0
        for row in rows:
            cell = _cell(row, search_index)
            haystack = cell.lower() if is_team else cell
            if cell and needle in haystack:
                occurrences += 1
        if occurrences:
            report.append(generate_report_entry(f"# {label} tests passed", f"{label} formula tests passed"))
    return report


def combine_reports(
    reports: Sequence[Sequence[List[str]]], placeholders: Sequence[List[str]]
) -> List[List[str]]:
    """Lay the per-axis reports side by side, one label per row.

    Axes that run out of entries are filled with the matching placeholder.
    """
    if any(not isinstance(report, (list, tuple)) for report in reports):
        raise TypeError("Invalid report entry: Expected a list.")
    height = max((len(report) for report in reports), default=0)
    if height > len(placeholders):
        raise ValueError("Not enough placeholders to align the header report.")
    combined: List[List[str]] = []
    for row_index in range(height):
        row: List[str] = []
        for report in reports:
            entry = report[row_index] if row_index < len(report) else placeholders[row_index]
            row.extend(entry)
        combined.append(row)
    return combined


def construct_header_report(
    payload_rows: Sequence[Sequence[Any]], config: LabelUniverseProvider
) -> List[List[str]]:
    """Build the classification header block for *payload_rows*.

    Any failure while reading the label universes or generating the block
    surfaces as :class:`HeaderReportError` with the original cause chained.
    """
    if not isinstance(payload_rows, (list, tuple)):
        raise TypeError("Invalid payload: Expected a list.")

    try:
        reports = []
        universe_sizes = []
        for axis, index in AXIS_COLUMN_INDEX.items():
            labels = config.label_universe(axis)
            if not isinstance(labels, (list, tuple)):
                LOGGER.error("Label universe for %s at index %d is %s, not a list", axis, index, type(labels).__name__)
                raise TypeError(f"Invalid types: Expected a list at index {index}.")
            reports.append(generate_report(list(labels), payload_rows, index, is_team=axis == "team"))
            universe_sizes.append(len(labels))
        placeholders = generate_placeholders(max(universe_sizes, default=0))
        return combine_reports(reports, placeholders)
    except Exception as exc:
        LOGGER.error("Error constructing header report: %s", exc)
        raise HeaderReportError("Failed to construct header report") from exc


def generate_state_reports(metrics: Sequence[str], index: int) -> List[List[str]]:
    """Return the ``[title, placeholder]`` pairs for state metric *index*."""
    if not all(isinstance(metric, str) for metric in metrics):
        raise TypeError("Each metric must be a string.")
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError("index must be an integer.")
    if index < 0 or index >= len(metrics):
        raise IndexError("index is out of bounds for metrics.")
    state = metrics[index][2:].replace(" tests", "").strip()
    if not state:
        raise ValueError(f"Metric {metrics[index]!r} does not name a state.")

    reports = []
    for metric in metrics:
        adjusted = metric.replace("# ", "", 1)
        if state == "skipped/pending":
            formula = f"{adjusted} formula skipped/pending"
        elif state == "total":
            formula = f"{adjusted} formula total"
        else:
            formula = f"{state} formula base"
        reports.append([f"# {adjusted}", formula])
    return reports


def append_state_reports_to_header(
    header_rows: List[List[str]],
    metrics: Sequence[str] = DEFAULT_HEADER_METRICS,
    state_index: int = STATE_COLUMN_INDEX,
) -> List[List[str]]:
    """Append one state metric pair per header row, in place.

    Rows are padded so the placeholder of each pair sits in column
    *state_index*; missing rows are added.
    """
    if not isinstance(header_rows, list):
        raise TypeError("Invalid header rows: Expected a list.")
    width = len(header_rows[0]) if header_rows else 0
    while len(header_rows) < len(metrics):
        header_rows.append([""] * width)
    for index in range(len(metrics)):
        row = header_rows[index]
        while len(row) < state_index - 1:
            row.append("")
        row.extend(generate_state_reports(metrics, index)[index])
    return header_rows
