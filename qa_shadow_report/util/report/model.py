"""In-memory shapes produced by the report builders."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RawTestResult:
    """One test execution normalized from a framework-specific record.

    ``error`` keeps whatever the framework reported so the truncator can
    decide how to render it.
    """

    full_title: str
    title: str = ""
    full_file: str = ""
    project_name: str = ""
    state: Any = None
    duration: Any = None
    error: Any = None
    is_playwright: bool = False


@dataclass(frozen=True)
class ReportRowEntry:
    area: str = ""
    spec: str = ""
    test_name: str = ""
    type: str = ""
    category: str = ""
    team: str = ""
    priority: str = ""
    status: str = ""
    state: str = ""
    manual_test_id: str = ""
    error: str = ""
    speed: str = ""

    def to_row(self) -> List[str]:
        return [
            self.area,
            self.spec,
            self.test_name,
            self.type,
            self.category,
            self.team,
            self.priority,
            self.status,
            self.state,
            self.manual_test_id,
            self.error,
            self.speed,
        ]

    def as_payload(self) -> Dict[str, str]:
        """Return the row keyed by its report field names."""
        return {
            "area": self.area,
            "spec": self.spec,
            "testName": self.test_name,
            "type": self.type,
            "category": self.category,
            "team": self.team,
            "priority": self.priority,
            "status": self.status,
            "state": self.state,
            "manualTestId": self.manual_test_id,
            "error": self.error,
            "speed": self.speed,
        }


@dataclass(frozen=True)
class AggregateFormulas:
    passed: str
    failed: str
    total: str


@dataclass(frozen=True)
class FormulaSet:
    """Formulas for one classification label.

    ``formulas`` holds the passed/failed/total counts; ``by_key`` maps each
    header placeholder key (``"formula tests passed"`` ...) to the formula
    that replaces it in the header block.
    """

    formulas: AggregateFormulas
    by_key: Dict[str, str] = field(default_factory=dict)


@dataclass
class DailyPayload:
    body_payload: List[List[str]] = field(default_factory=list)
    header_payload: List[List[str]] = field(default_factory=list)
    column_titles: List[str] = field(default_factory=list)
    footer_payload: List[List[str]] = field(default_factory=list)

    @property
    def body_row_count(self) -> int:
        return len(self.body_payload)

    @property
    def header_row_index(self) -> int:
        """Rows above the body: the header block plus the column-title row."""
        return len(self.header_payload) + 1

    @property
    def total_number_of_rows(self) -> int:
        return self.header_row_index + self.body_row_count

    def to_rows(self) -> List[List[str]]:
        """Return the tab content top to bottom."""
        return [
            *self.header_payload,
            list(self.column_titles),
            *self.body_payload,
            *self.footer_payload,
        ]


@dataclass(frozen=True)
class SummaryMetadata:
    summary_type: str
    start_date: str
    end_date: str

    def as_dict(self) -> Dict[str, str]:
        return {
            "summaryType": self.summary_type,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }


@dataclass
class SummaryPayload:
    """Everything a weekly or monthly roll-up sends to the spreadsheet."""

    metadata: Optional[SummaryMetadata] = None
    header_payload: List[Dict[str, Any]] = field(default_factory=list)
    body_payload: List[Dict[str, Any]] = field(default_factory=list)
    summary_header_style_payload: List[Dict[str, Any]] = field(default_factory=list)
    source_tab_titles: List[str] = field(default_factory=list)
