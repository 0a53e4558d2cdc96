from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from qa_shadow_report.tools.reporting.handlers import (
    handle_daily_report,
    handle_monthly_summary,
    handle_weekly_summary,
)
from qa_shadow_report.tools.reporting.normalization import transform_playwright_report
from qa_shadow_report.util.constants import get_classification_config, load_config
from qa_shadow_report.util.report.excel.workbook_backend import XlsxSheetBackend


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qa-shadow-report",
        description="Turn test-run results into daily reports and weekly or monthly roll-ups.",
    )
    parser.add_argument(
        "command",
        choices=("daily", "weekly", "monthly"),
        help="Report to build.",
    )
    parser.add_argument(
        "--results",
        type=Path,
        help="JSON results file (mochawesome, or Playwright with --playwright). Required for daily.",
    )
    parser.add_argument(
        "--workbook",
        type=Path,
        default=Path("qa-shadow-report.xlsx"),
        help="Workbook that holds the report tabs (default: qa-shadow-report.xlsx).",
    )
    parser.add_argument("--playwright", action="store_true", help="Results come from Playwright.")
    parser.add_argument("--csv", action="store_true", help="Write the daily report as CSV instead.")
    parser.add_argument(
        "--duplicate",
        action="store_true",
        help="Create the report even if today's (or this period's) tab already exists.",
    )
    parser.add_argument("--config-dir", type=Path, help="Directory containing config_report.yaml.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser


def _load_results(path: Path, is_playwright_run: bool) -> List[Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if is_playwright_run:
        reports = data if isinstance(data, list) else [data]
        return transform_playwright_report(reports)
    if isinstance(data, dict):
        return list(data.get("results") or [])
    return list(data)


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_level = getattr(logging, str(args.log_level).upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(asctime)s - %(levelname)s - %(message)s")

    config = get_classification_config(config=load_config(base_dir=args.config_dir))
    backend = XlsxSheetBackend(args.workbook)

    if args.command == "daily":
        if not args.results:
            logging.error("--results is required for the daily report")
            return 2
        if not args.results.exists():
            logging.error("Results file %s does not exist", args.results)
            return 2
        results = _load_results(args.results, args.playwright)
        outcome = asyncio.run(
            handle_daily_report(
                results,
                backend,
                is_playwright_run=args.playwright,
                csv=args.csv,
                duplicate=args.duplicate,
                config=config,
            )
        )
    else:
        if args.csv:
            logging.warning("CSV format is not supported for summary reports")
            return 0
        if args.command == "weekly":
            outcome = asyncio.run(handle_weekly_summary(backend, duplicate=args.duplicate, config=config))
        else:
            outcome = asyncio.run(handle_monthly_summary(backend, duplicate=args.duplicate))

    if outcome is None:
        logging.info("Nothing to do; use --duplicate to create another %s report.", args.command)
    else:
        logging.info("Report written: %s", outcome)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
