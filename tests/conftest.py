from __future__ import annotations

import copy
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from qa_shadow_report.util.constants import ClassificationConfig  # noqa: E402  # pylint: disable=wrong-import-position


class FakeSheetBackend:
    """In-memory spreadsheet keyed by tab title, recording every call."""

    def __init__(self, tabs: Dict[str, List[List[Any]]] | None = None) -> None:
        self.tabs: Dict[str, List[List[Any]]] = {title: copy.deepcopy(rows) for title, rows in (tabs or {}).items()}
        self.calls: List[tuple] = []
        self.updates: List[Dict[str, Any]] = []
        self.batches: List[List[Dict[str, Any]]] = []
        self.fail_on_fetch: set[str] = set()

    def _title(self, tab_id: int) -> str:
        return list(self.tabs)[tab_id]

    async def list_tab_titles(self) -> List[str]:
        self.calls.append(("list_tab_titles",))
        return list(self.tabs)

    async def resolve_tab_id(self, title: str) -> int:
        self.calls.append(("resolve_tab_id", title))
        if title not in self.tabs:
            raise LookupError(f"No tab titled {title!r}")
        return list(self.tabs).index(title)

    async def fetch_tab_values(self, tab_id: int) -> List[List[Any]]:
        title = self._title(tab_id)
        self.calls.append(("fetch_tab_values", title))
        if title in self.fail_on_fetch:
            raise ConnectionError(f"fetch failed for {title}")
        return copy.deepcopy(self.tabs[title])

    async def create_tab(self, title: str) -> int:
        self.calls.append(("create_tab", title))
        self.tabs[title] = []
        return list(self.tabs).index(title)

    async def delete_tab(self, title: str) -> None:
        self.calls.append(("delete_tab", title))
        del self.tabs[title]

    async def append_values(self, title: str, rows: Sequence[Sequence[Any]]) -> None:
        self.calls.append(("append_values", title))
        self.tabs[title].extend(list(row) for row in rows)

    async def update_values(self, updates: Sequence[Dict[str, Any]]) -> None:
        self.calls.append(("update_values",))
        self.updates.extend(updates)

    async def batch_update(self, requests: Sequence[Dict[str, Any]]) -> None:
        self.calls.append(("batch_update",))
        self.batches.append(list(requests))


def daily_tab_rows(extra_header_rows: int = 0, body_rows: int = 2) -> List[List[str]]:
    """Rows shaped like a daily tab: header block, column titles, body, footer."""
    rows: List[List[str]] = [["# api tests passed", "api formula tests passed"] for _ in range(extra_header_rows)]
    rows.append(
        [
            "area",
            "spec",
            "test name",
            "type",
            "category",
            "team",
            "priority",
            "status",
            "state",
            "manual case",
            "error",
            "speed",
        ]
    )
    for index in range(body_rows):
        rows.append(["billing", "invoices", f"case {index}", "api", "smoke", "raptors", "", "", "passed", "", "", "0:1:0"])
    rows.append(["", "", "", "", "", "", "", "", "- END -"])
    return rows


@pytest.fixture()
def classification_config() -> ClassificationConfig:
    return ClassificationConfig(
        test_types=("api", "ui", "unit"),
        test_categories=("smoke", "regression"),
        team_names=("raptors", "Kimchi", "sloth"),
    )


@pytest.fixture()
def fake_backend_factory():
    return FakeSheetBackend


@pytest.fixture()
def make_daily_tab():
    return daily_tab_rows


@pytest.fixture()
def mochawesome_results() -> List[Dict[str, Any]]:
    return [
        {
            "fullFile": "cypress/e2e/api/billing/invoices.cy.js",
            "tests": [
                {
                    "title": "lists invoices [smoke][raptors][C-101]",
                    "fullTitle": "Invoices lists invoices [smoke][raptors][C-101]",
                    "state": "passed",
                    "duration": 1500,
                    "err": {},
                },
                {
                    "title": "rejects bad id",
                    "fullTitle": "Invoices rejects bad id [regression][Kimchi]",
                    "state": "failed",
                    "duration": 62000,
                    "err": {"message": "expected 404"},
                },
            ],
        },
        {
            "fullFile": "cypress/e2e/ui/accounts/login.cy.js",
            "suites": [
                {
                    "tests": [
                        {
                            "title": "signs in",
                            "fullTitle": "Login signs in [smoke]",
                            "state": "pending",
                            "duration": None,
                            "err": {},
                        }
                    ]
                }
            ],
        },
    ]
