"""Framework-specific test records and their normalization.

Cypress (mochawesome) and Playwright report errors and areas differently.
Each framework gets its own record type with a ``normalize`` method so the
row builder works on one ``RawTestResult`` shape.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Union

from qa_shadow_report.util.report.model import RawTestResult

LOGGER = logging.getLogger(__name__)

PLAYWRIGHT_STATUS_MAP: Dict[str, str] = {
    "expected": "passed",
    "unexpected": "failed",
}


def _full_title(test: Mapping[str, Any]) -> str:
    full_title = test.get("fullTitle")
    if not isinstance(full_title, str):
        raise TypeError("Test record must provide a 'fullTitle' string")
    return full_title


@dataclass(frozen=True)
class PlaywrightTestResult:
    result: Mapping[str, Any]
    test: Mapping[str, Any]

    def normalize(self) -> RawTestResult:
        return RawTestResult(
            full_title=_full_title(self.test),
            title=self.test.get("title") or "",
            full_file=self.result.get("fullFile") or "",
            project_name=self.test.get("projectName") or "",
            state=self.test.get("state"),
            duration=self.test.get("duration"),
            # Playwright errors were flattened to plain strings.
            error=self.test.get("err"),
            is_playwright=True,
        )


@dataclass(frozen=True)
class CypressTestResult:
    result: Mapping[str, Any]
    test: Mapping[str, Any]

    def normalize(self) -> RawTestResult:
        err = self.test.get("err")
        message = err.get("message") if isinstance(err, Mapping) else None
        return RawTestResult(
            full_title=_full_title(self.test),
            title=self.test.get("title") or "",
            full_file=self.result.get("fullFile") or "",
            project_name=self.test.get("projectName") or "",
            state=self.test.get("state"),
            duration=self.test.get("duration"),
            error=message,
        )


TestResultSource = Union[PlaywrightTestResult, CypressTestResult]


def to_test_result_source(
    result: Mapping[str, Any], test: Mapping[str, Any], is_playwright_run: bool
) -> TestResultSource:
    if is_playwright_run:
        return PlaywrightTestResult(result=result, test=test)
    return CypressTestResult(result=result, test=test)


def _playwright_test(suite: Mapping[str, Any], spec: Mapping[str, Any], test: Mapping[str, Any]) -> Dict[str, Any]:
    status = test.get("status")
    state = PLAYWRIGHT_STATUS_MAP.get(status, status)
    attempts = test.get("results") or []
    errors = [
        attempt["error"].get("message", "")
        for attempt in attempts
        if isinstance(attempt.get("error"), Mapping)
    ]
    return {
        "title": spec.get("title", ""),
        "fullTitle": f"{suite.get('title', '')} {spec.get('title', '')}",
        "duration": sum(attempt.get("duration") or 0 for attempt in attempts),
        "state": state,
        "pass": state == "passed",
        "fail": state == "failed",
        "pending": state == "skipped",
        "err": errors[0] if errors else "",
        "projectName": test.get("projectName"),
    }


def transform_playwright_report(reports: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Convert Playwright JSON reports into mochawesome-style results.

    Every Playwright file suite becomes one result whose ``fullFile`` is the
    suite's file and whose tests carry ``fullTitle``, ``state``,
    ``duration``, ``err`` and ``projectName``.
    """
    transformed: List[Dict[str, Any]] = []
    for report in reports:
        for suite in report.get("suites") or []:
            tests = [
                _playwright_test(suite, spec, test)
                for spec in suite.get("specs") or []
                for test in spec.get("tests") or []
            ]
            transformed.append(
                {
                    "title": suite.get("title", ""),
                    "fullFile": suite.get("file") or "",
                    "file": suite.get("file") or "",
                    "tests": tests,
                    "suites": [],
                }
            )
    LOGGER.debug("Transformed Playwright reports into %d result(s)", len(transformed))
    return transformed
