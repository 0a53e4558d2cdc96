from __future__ import annotations

import asyncio
from datetime import date

import pytest

from qa_shadow_report.tools.reporting.summary import (
    SummaryPayloadError,
    construct_monthly_payload_for_copy_paste,
    construct_weekly_payload_for_copy_paste,
    find_footer_row_index,
    find_header_row_index,
)
from qa_shadow_report.util.constants import ClassificationConfig

WEDNESDAY = date(2024, 3, 20)


def _fetch_order(backend):
    return [call[1] for call in backend.calls if call[0] == "fetch_tab_values"]


def test_tabs_are_processed_in_date_order(fake_backend_factory, make_daily_tab):
    titles = ["Mar 22,2024", "Mar 20,2024", "Mar 21,2024"]
    backend = fake_backend_factory({"Weekly Summary": [], **{title: make_daily_tab() for title in titles}})

    payload = asyncio.run(
        construct_weekly_payload_for_copy_paste(titles, "Weekly Summary", backend, today=WEDNESDAY)
    )

    assert _fetch_order(backend) == ["Mar 20,2024", "Mar 21,2024", "Mar 22,2024"]
    assert payload.source_tab_titles == ["Mar 20,2024", "Mar 21,2024", "Mar 22,2024"]
    source_ids = [item["copyPaste"]["source"]["sheetId"] for item in payload.body_payload]
    assert source_ids == [2, 3, 1]
    assert payload.header_payload[0] == {"range": "Weekly Summary!A1", "values": [["Wed Mar 20,2024"]]}
    assert payload.metadata.summary_type == "weekly"


def test_empty_title_list_still_reports_window(fake_backend_factory):
    backend = fake_backend_factory({"Weekly Summary": []})
    payload = asyncio.run(construct_weekly_payload_for_copy_paste([], "Weekly Summary", backend, today=WEDNESDAY))
    assert payload.body_payload == []
    assert payload.metadata.as_dict() == {
        "summaryType": "weekly",
        "startDate": "2024-03-18T00:00:00",
        "endDate": "2024-03-24T23:59:59.999999",
    }


def test_columns_do_not_overlap_and_headers_align(fake_backend_factory, make_daily_tab):
    backend = fake_backend_factory(
        {
            "Weekly Summary": [],
            "Mar 18, 2024": make_daily_tab(extra_header_rows=2, body_rows=3),
            "Mar 19, 2024": make_daily_tab(extra_header_rows=0, body_rows=1),
        }
    )
    payload = asyncio.run(
        construct_weekly_payload_for_copy_paste(list(backend.tabs), "Weekly Summary", backend, today=WEDNESDAY)
    )
    first, second = (item["copyPaste"] for item in payload.body_payload)

    assert (first["destination"]["startColumnIndex"], first["destination"]["endColumnIndex"]) == (0, 12)
    assert (second["destination"]["startColumnIndex"], second["destination"]["endColumnIndex"]) == (12, 24)
    # Column-title rows end up on the same destination row.
    assert first["destination"]["startRowIndex"] + 2 == second["destination"]["startRowIndex"] + 0
    assert first["source"]["endRowIndex"] == 7
    assert second["source"]["endRowIndex"] == 3
    assert payload.header_payload[1]["range"] == "Weekly Summary!M1"


def test_titles_outside_the_week_are_ignored(fake_backend_factory, make_daily_tab):
    backend = fake_backend_factory(
        {
            "Weekly Summary": [],
            "Mar 17, 2024": make_daily_tab(),
            "Mar 24, 2024": make_daily_tab(),
            "Mar 25, 2024": make_daily_tab(),
            "Summary Feb 2024": [],
        }
    )
    payload = asyncio.run(
        construct_weekly_payload_for_copy_paste(list(backend.tabs), "Weekly Summary", backend, today=WEDNESDAY)
    )
    assert payload.source_tab_titles == ["Mar 24, 2024"]


def test_week_start_comes_from_config(fake_backend_factory, make_daily_tab):
    backend = fake_backend_factory({"Weekly Summary": [], "Mar 17, 2024": make_daily_tab()})
    config = ClassificationConfig(week_start="Sunday")
    payload = asyncio.run(
        construct_weekly_payload_for_copy_paste(
            list(backend.tabs), "Weekly Summary", backend, today=WEDNESDAY, config=config
        )
    )
    assert payload.source_tab_titles == ["Mar 17, 2024"]
    assert payload.metadata.start_date == "2024-03-17T00:00:00"


@pytest.mark.parametrize(
    "titles, destination, failing_fetch, cause",
    [
        (["Mar 20, 2024"], "Missing Summary", set(), LookupError),
        (["Mar 19, 2024"], "Weekly Summary", {"Mar 19, 2024"}, ConnectionError),
        (["Mar 19, 2024", 7], "Weekly Summary", set(), TypeError),
    ],
)
def test_failures_are_wrapped(fake_backend_factory, make_daily_tab, titles, destination, failing_fetch, cause):
    backend = fake_backend_factory({"Weekly Summary": [], "Mar 19, 2024": make_daily_tab()})
    backend.fail_on_fetch = failing_fetch

    with pytest.raises(SummaryPayloadError, match="Error building weekly copy-paste payload.") as excinfo:
        asyncio.run(construct_weekly_payload_for_copy_paste(titles, destination, backend, today=WEDNESDAY))
    assert isinstance(excinfo.value.__cause__, cause)


def test_monthly_payload_uses_previous_month(fake_backend_factory, make_daily_tab):
    backend = fake_backend_factory(
        {
            "Summary Mar 2024": [],
            "Mar 30, 2024": make_daily_tab(),
            "Mar 5, 2024": make_daily_tab(),
            "Apr 1, 2024": make_daily_tab(),
        }
    )
    payload = asyncio.run(
        construct_monthly_payload_for_copy_paste(list(backend.tabs), "Summary Mar 2024", backend, today=date(2024, 4, 3))
    )
    assert payload.source_tab_titles == ["Mar 5, 2024", "Mar 30, 2024"]
    assert payload.metadata.as_dict()["summaryType"] == "monthly"
    assert payload.metadata.start_date == "2024-03-01T00:00:00"


def test_header_and_footer_lookup(make_daily_tab):
    rows = make_daily_tab(extra_header_rows=1, body_rows=2)
    assert find_header_row_index(rows) == 1
    assert find_footer_row_index(rows) == 4
    assert find_footer_row_index(rows[:-1]) == 3
    with pytest.raises(ValueError):
        find_header_row_index([["nothing"]])
