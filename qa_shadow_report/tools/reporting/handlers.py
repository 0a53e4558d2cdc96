from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from qa_shadow_report.util.constants import ClassificationConfig, get_classification_config
from qa_shadow_report.util.date_formatting import (
    create_compact_weekly_summary_title,
    create_summary_title,
    create_weekly_summary_title,
    format_tab_title,
    get_current_time,
    get_last_month_tab_titles,
)
from qa_shadow_report.util.report.csv_export import save_csv
from qa_shadow_report.util.report.model import SummaryPayload

from .daily_report import apply_header_formulas, build_daily_payload, create_merge_queries, daily_grid_styles
from .sheet_backend import SheetBackend
from .summary import construct_monthly_payload_for_copy_paste, construct_weekly_payload_for_copy_paste

LOGGER = logging.getLogger(__name__)


def _tab_title(base: str, duplicate: bool, now: Optional[datetime]) -> str:
    return f"{base}_{get_current_time(now)}" if duplicate else base


async def _send_summary(backend: SheetBackend, payload: SummaryPayload) -> None:
    if payload.header_payload:
        await backend.update_values(payload.header_payload)
    if payload.body_payload:
        await backend.batch_update(payload.body_payload)
    if payload.summary_header_style_payload:
        await backend.batch_update(payload.summary_header_style_payload)


async def handle_daily_report(
    results: Iterable[Mapping[str, Any]],
    backend: Optional[SheetBackend] = None,
    *,
    is_playwright_run: bool = False,
    csv: bool = False,
    duplicate: bool = False,
    config: Optional[ClassificationConfig] = None,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Optional[str | Path]:
    """Build today's report and write it as a new tab, or as CSV.

    Returns the tab title (or CSV path), or ``None`` when today's tab already
    exists and *duplicate* is not set.
    """
    config = config or get_classification_config()
    base_title = format_tab_title(today or date.today())
    try:
        payload = build_daily_payload(list(results), is_playwright_run, config)
        if csv:
            return save_csv(
                payload.column_titles,
                payload.body_payload,
                config.csv_downloads_path,
                _tab_title(base_title.replace(",", ""), duplicate, now).replace(" ", "_"),
            )
        if backend is None:
            raise ValueError("A spreadsheet backend is required unless writing CSV.")

        existing = await backend.list_tab_titles()
        if base_title in existing and not duplicate:
            LOGGER.warning("Daily report %s already exists; pass duplicate to create another", base_title)
            return None
        title = _tab_title(base_title, duplicate, now)

        apply_header_formulas(payload, config)
        tab_id = await backend.create_tab(title)
        await backend.append_values(title, payload.to_rows())
        await backend.batch_update(
            create_merge_queries(payload.body_payload, payload.header_row_index, tab_id)
            + daily_grid_styles(payload, tab_id)
        )
    except Exception as exc:
        LOGGER.exception("An error occurred in handle_daily_report")
        raise RuntimeError("Failed to handle daily report.") from exc
    LOGGER.info("Daily report %s created with %d test row(s)", title, payload.body_row_count)
    return title


def _summary_title(
    backend: SheetBackend, full_title: str, compact_title: str, duplicate: bool
) -> str:
    """Return *full_title*, or *compact_title* when the backend caps title length."""
    limit = getattr(backend, "max_title_length", None)
    suffix_length = len(f"_{get_current_time()}") if duplicate else 0
    if limit is not None and len(full_title) + suffix_length > limit:
        return compact_title
    return full_title


async def _discard_tab(backend: SheetBackend, title: str) -> None:
    try:
        await backend.delete_tab(title)
    except Exception:
        LOGGER.exception("Could not remove incomplete summary tab %s; rerun with duplicate", title)


async def handle_weekly_summary(
    backend: SheetBackend,
    *,
    duplicate: bool = False,
    config: Optional[ClassificationConfig] = None,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """Create this week's roll-up tab.

    A tab created before a failure is removed again so a plain retry
    rebuilds it.
    """
    config = config or get_classification_config()
    today = today or date.today()
    base_title = _summary_title(
        backend,
        create_weekly_summary_title(today, config.week_start_index),
        create_compact_weekly_summary_title(today, config.week_start_index),
        duplicate,
    )
    created: Optional[str] = None
    try:
        existing = await backend.list_tab_titles()
        if base_title in existing and not duplicate:
            LOGGER.info("No weekly summary required; %s already exists", base_title)
            return None
        title = _tab_title(base_title, duplicate, now)
        await backend.create_tab(title)
        created = title
        payload = await construct_weekly_payload_for_copy_paste(
            existing, title, backend, today=today, config=config
        )
        await _send_summary(backend, payload)
    except Exception as exc:
        LOGGER.exception("An error occurred in handle_weekly_summary")
        if created is not None:
            await _discard_tab(backend, created)
        raise RuntimeError("Failed to handle weekly summary.") from exc
    LOGGER.info("Weekly summary %s created from %d tab(s)", title, len(payload.source_tab_titles))
    return title


async def handle_monthly_summary(
    backend: SheetBackend,
    *,
    duplicate: bool = False,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Optional[str]:
    today = today or date.today()
    base_title = create_summary_title(today)
    created: Optional[str] = None
    try:
        existing = await backend.list_tab_titles()
        if base_title in existing and not duplicate:
            LOGGER.info("No monthly summary required; %s already exists", base_title)
            return None
        title = _tab_title(base_title, duplicate, now)
        source_titles = get_last_month_tab_titles(existing, today)
        await backend.create_tab(title)
        created = title
        payload = await construct_monthly_payload_for_copy_paste(source_titles, title, backend, today=today)
        await _send_summary(backend, payload)
    except Exception as exc:
        LOGGER.exception("An error occurred in handle_monthly_summary")
        if created is not None:
            await _discard_tab(backend, created)
        raise RuntimeError("Failed to handle summary.") from exc
    LOGGER.info("Monthly summary %s created from %d tab(s)", title, len(payload.source_tab_titles))
    return title
