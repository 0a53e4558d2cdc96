from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import date, datetime

import pytest

from qa_shadow_report.tools.reporting.handlers import (
    handle_daily_report,
    handle_monthly_summary,
    handle_weekly_summary,
)

WEDNESDAY = date(2024, 3, 20)


def _called(backend, name):
    return [call for call in backend.calls if call[0] == name]


def test_daily_report_creates_tab(fake_backend_factory, mochawesome_results, classification_config):
    backend = fake_backend_factory()

    title = asyncio.run(
        handle_daily_report(mochawesome_results, backend, config=classification_config, today=WEDNESDAY)
    )

    assert title == "Mar 20, 2024"
    rows = backend.tabs[title]
    assert len(rows) == 9
    assert rows[0][1].startswith("=COUNTIFS(D6:D8")
    assert rows[-1][-1] == "- END -"
    (requests,) = backend.batches
    assert sum("mergeCells" in request for request in requests) == 2
    assert any("updateSheetProperties" in request for request in requests)


def test_daily_report_skips_existing_tab(fake_backend_factory, mochawesome_results, classification_config):
    backend = fake_backend_factory({"Mar 20, 2024": [["old"]]})

    outcome = asyncio.run(
        handle_daily_report(mochawesome_results, backend, config=classification_config, today=WEDNESDAY)
    )

    assert outcome is None
    assert not _called(backend, "create_tab")
    assert backend.tabs["Mar 20, 2024"] == [["old"]]


def test_daily_report_duplicate_gets_time_suffix(fake_backend_factory, mochawesome_results, classification_config):
    backend = fake_backend_factory({"Mar 20, 2024": [["old"]]})

    title = asyncio.run(
        handle_daily_report(
            mochawesome_results,
            backend,
            duplicate=True,
            config=classification_config,
            today=WEDNESDAY,
            now=datetime(2024, 3, 20, 9, 5, 7),
        )
    )

    assert title == "Mar 20, 2024_090507"
    assert len(backend.tabs[title]) == 9


@pytest.mark.parametrize(
    "results",
    [
        [{"fullFile": "cypress/e2e/a/b.cy.js", "tests": [{"title": "no full title"}]}],
        [],
    ],
)
def test_daily_report_failures_are_wrapped(fake_backend_factory, classification_config, results):
    backend = fake_backend_factory()
    with pytest.raises(RuntimeError, match="Failed to handle daily report.") as excinfo:
        asyncio.run(handle_daily_report(results, backend, config=classification_config, today=WEDNESDAY))
    assert excinfo.value.__cause__ is not None


def test_daily_report_as_csv(tmp_path, mochawesome_results, classification_config):
    pytest.importorskip("pandas")
    config = replace(classification_config, csv_downloads_path=str(tmp_path))

    path = asyncio.run(handle_daily_report(mochawesome_results, csv=True, config=config, today=WEDNESDAY))

    assert path == tmp_path / "Mar_20_2024.csv"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("area,spec,test name")
    assert len(lines) == 4


def test_weekly_summary_collects_the_week(fake_backend_factory, make_daily_tab, classification_config):
    backend = fake_backend_factory(
        {
            "Mar 17, 2024": make_daily_tab(),
            "Mar 18, 2024": make_daily_tab(),
            "Mar 19, 2024": make_daily_tab(extra_header_rows=1),
        }
    )

    title = asyncio.run(handle_weekly_summary(backend, config=classification_config, today=WEDNESDAY))

    assert title == "Weekly Summary Monday Mar 18-24 2024"
    assert [update["values"] for update in backend.updates] == [[["Mon Mar 18, 2024"]], [["Tue Mar 19, 2024"]]]
    body, styles = backend.batches
    assert len(body) == 2
    assert all(request["copyPaste"]["destination"]["sheetId"] == 3 for request in body)
    assert len(styles) == 6


def test_weekly_summary_runs_once_per_week(fake_backend_factory, classification_config):
    backend = fake_backend_factory({"Weekly Summary Monday Mar 18-24 2024": []})
    assert asyncio.run(handle_weekly_summary(backend, config=classification_config, today=WEDNESDAY)) is None
    assert not _called(backend, "create_tab")


def test_monthly_summary_collects_last_month(fake_backend_factory, make_daily_tab):
    backend = fake_backend_factory(
        {"Feb 29, 2024": make_daily_tab(), "Mar 1, 2024": make_daily_tab(), "Mar 2, 2024": make_daily_tab()}
    )

    title = asyncio.run(handle_monthly_summary(backend, today=date(2024, 3, 2)))

    assert title == "Summary Feb 2024"
    assert backend.updates == [{"range": "Summary Feb 2024!A1", "values": [["Thu Feb 29, 2024"]]}]


def test_monthly_summary_duplicate(fake_backend_factory):
    backend = fake_backend_factory({"Summary Feb 2024": []})

    assert asyncio.run(handle_monthly_summary(backend, today=date(2024, 3, 2))) is None
    title = asyncio.run(
        handle_monthly_summary(backend, duplicate=True, today=date(2024, 3, 2), now=datetime(2024, 3, 2, 23, 0, 1))
    )
    assert title == "Summary Feb 2024_230001"
    assert backend.updates == []


def test_monthly_summary_failure_is_wrapped(fake_backend_factory, make_daily_tab):
    backend = fake_backend_factory({"Feb 12, 2024": make_daily_tab()})
    backend.fail_on_fetch = {"Feb 12, 2024"}

    with pytest.raises(RuntimeError, match="Failed to handle summary."):
        asyncio.run(handle_monthly_summary(backend, today=date(2024, 3, 2)))


def test_failed_summary_removes_its_tab_so_a_retry_rebuilds(fake_backend_factory, make_daily_tab):
    backend = fake_backend_factory({"Feb 12, 2024": make_daily_tab()})
    backend.fail_on_fetch = {"Feb 12, 2024"}

    with pytest.raises(RuntimeError):
        asyncio.run(handle_monthly_summary(backend, today=date(2024, 3, 2)))
    assert "Summary Feb 2024" not in backend.tabs
    assert ("delete_tab", "Summary Feb 2024") in backend.calls

    backend.fail_on_fetch = set()
    assert asyncio.run(handle_monthly_summary(backend, today=date(2024, 3, 2))) == "Summary Feb 2024"


def test_failed_weekly_summary_removes_its_tab(fake_backend_factory, make_daily_tab, classification_config):
    backend = fake_backend_factory({"Mar 18, 2024": make_daily_tab()})
    backend.fail_on_fetch = {"Mar 18, 2024"}

    with pytest.raises(RuntimeError, match="Failed to handle weekly summary."):
        asyncio.run(handle_weekly_summary(backend, config=classification_config, today=WEDNESDAY))
    assert list(backend.tabs) == ["Mar 18, 2024"]


def test_weekly_summary_uses_compact_title_when_backend_limits_length(
    fake_backend_factory, make_daily_tab, classification_config
):
    backend = fake_backend_factory({"Mar 18, 2024": make_daily_tab()})
    backend.max_title_length = 31

    title = asyncio.run(handle_weekly_summary(backend, config=classification_config, today=WEDNESDAY))
    assert title == "Week Mar 18-24 2024"
    assert asyncio.run(handle_weekly_summary(backend, config=classification_config, today=WEDNESDAY)) is None

    duplicate = asyncio.run(
        handle_weekly_summary(
            backend, duplicate=True, config=classification_config, today=WEDNESDAY, now=datetime(2024, 3, 20, 9, 0, 0)
        )
    )
    assert duplicate == "Week Mar 18-24 2024_090000"
