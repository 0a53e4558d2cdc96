"""Report construction: rows, header blocks, formulas and roll-up payloads."""

from .copy_paste import copy_paste_normal
from .daily_report import build_daily_payload, create_merge_queries
from .formulas import get_formulas, process_header_with_formulas
from .header_report import HeaderReportError, construct_header_report
from .row_builder import construct_report_payload_entry, process_test_suites
from .summary import (
    SummaryPayloadError,
    construct_monthly_payload_for_copy_paste,
    construct_weekly_payload_for_copy_paste,
)
from .truncation import enforce_max_length

__all__ = [
    "HeaderReportError",
    "SummaryPayloadError",
    "build_daily_payload",
    "construct_header_report",
    "construct_monthly_payload_for_copy_paste",
    "construct_report_payload_entry",
    "construct_weekly_payload_for_copy_paste",
    "copy_paste_normal",
    "create_merge_queries",
    "enforce_max_length",
    "get_formulas",
    "process_header_with_formulas",
    "process_test_suites",
]
