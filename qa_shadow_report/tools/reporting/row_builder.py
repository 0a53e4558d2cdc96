from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from qa_shadow_report.util.constants import ClassificationConfig
from qa_shadow_report.util.date_formatting import format_duration
from qa_shadow_report.util.report.model import RawTestResult, ReportRowEntry

from .extraction import (
    category_from_title,
    extract_area_from_full_file,
    extract_spec_from_full_file,
    extract_type_from_full_file,
    manual_test_case_id_from_titles,
    name_from_title,
    team_from_title,
)
from .normalization import to_test_result_source
from .truncation import enforce_max_length

LOGGER = logging.getLogger(__name__)

_DEFAULT_CONFIG = ClassificationConfig()


def _test_name(full_title: str) -> str:
    try:
        return name_from_title(full_title)
    except ValueError:
        LOGGER.warning("Test title %r only holds tags; using it verbatim", full_title)
        return full_title.strip()


def build_row_entry(raw: RawTestResult, config: ClassificationConfig) -> ReportRowEntry:
    """Turn one normalized test record into a truncated report row."""
    unclassified = config.unclassified_label
    if raw.is_playwright:
        area: Any = raw.project_name or unclassified
    else:
        area = extract_area_from_full_file(raw.full_file, config.test_types, unclassified)
    values = {
        "area": area,
        "spec": extract_spec_from_full_file(raw.full_file, unclassified),
        "test_name": _test_name(raw.full_title),
        "type": extract_type_from_full_file(raw.full_file, config.test_types, unclassified),
        "category": category_from_title(raw.full_title, config.test_categories),
        "team": team_from_title(raw.full_title, config.team_names),
        "priority": "",
        "status": "",
        "state": raw.state,
        "manual_test_id": manual_test_case_id_from_titles(raw.title, raw.full_title),
        "error": raw.error,
        "speed": format_duration(raw.duration),
    }
    limit = config.max_cell_length
    return ReportRowEntry(**{key: enforce_max_length(value, limit) for key, value in values.items()})


def construct_report_payload_entry(
    result: Mapping[str, Any],
    test: Mapping[str, Any],
    is_playwright_run: bool,
    config: Optional[ClassificationConfig] = None,
) -> ReportRowEntry:
    """Build one report row from a test and the result that ran it.

    Raises ``ValueError`` when *result* or *test* is missing and
    ``TypeError`` when they are not mappings, when *is_playwright_run* is not
    a bool, or when the test has no ``fullTitle`` string.
    """
    if result is None or test is None:
        raise ValueError("Both result and test must be provided.")
    if not isinstance(result, Mapping) or not isinstance(test, Mapping):
        raise TypeError("result and test must be mappings.")
    if not isinstance(is_playwright_run, bool):
        raise TypeError("is_playwright_run must be a boolean.")
    raw = to_test_result_source(result, test, is_playwright_run).normalize()
    return build_row_entry(raw, config or _DEFAULT_CONFIG)


def _suite_list(container: Mapping[str, Any], key: str) -> List[Any]:
    items = container.get(key)
    if items is None and key not in container:
        return []
    if not isinstance(items, list):
        raise TypeError(f"'{key}' must be a list, got {type(items).__name__}")
    return items


def _process_suites(
    suites: Sequence[Mapping[str, Any]],
    result: Mapping[str, Any],
    is_playwright_run: bool,
    config: ClassificationConfig,
) -> List[ReportRowEntry]:
    rows: List[ReportRowEntry] = []
    for suite in suites:
        for test in _suite_list(suite, "tests"):
            rows.append(construct_report_payload_entry(result, test, is_playwright_run, config))
        rows.extend(_process_suites(_suite_list(suite, "suites"), result, is_playwright_run, config))
    return rows


def process_test_suites(
    results: Iterable[Mapping[str, Any]],
    is_playwright_run: bool,
    config: Optional[ClassificationConfig] = None,
) -> List[ReportRowEntry]:
    """Build one row per test found in *results*.

    Tests attached directly to a result take precedence over its suites;
    otherwise suites are walked depth first with the result as context.
    """
    config = config or _DEFAULT_CONFIG
    rows: List[ReportRowEntry] = []
    for result in results:
        tests = _suite_list(result, "tests")
        if tests:
            rows.extend(
                construct_report_payload_entry(result, test, is_playwright_run, config)
                for test in tests
            )
            continue
        rows.extend(_process_suites(_suite_list(result, "suites"), result, is_playwright_run, config))
    LOGGER.debug("Built %d report row(s)", len(rows))
    return rows


def _sort_key(row: ReportRowEntry) -> tuple:
    fields = (row.area, row.spec, row.test_name)
    return tuple(value.casefold() for value in fields) + fields


def sort_payload(rows: Iterable[ReportRowEntry]) -> List[ReportRowEntry]:
    """Return *rows* ordered by area, spec and test name, ignoring case."""
    materialized = list(rows)
    for index, row in enumerate(materialized):
        if not all(isinstance(value, str) for value in (row.area, row.spec, row.test_name)):
            raise ValueError(f"Row {index} is missing area, spec or test name text")
    return sorted(materialized, key=_sort_key)
