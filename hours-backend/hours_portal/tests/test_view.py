from __future__ import annotations

from datetime import datetime, timezone

import pytest

from hours_portal.models import BILLABLE, NON_BILLABLE, HourEntry
from hours_portal.repos.airtable_repo import AirtableRecord
from hours_portal.services.hours import summarize
from hours_portal.services.normalize import normalize_record
from hours_portal.services.view import (
    consultant_options,
    filter_entries,
    format_month_key,
    month_key,
    month_options,
)


def _entry(entry_id: str, when: str, consultants=("John Doe",), hours: float = 1.0, status: str = BILLABLE) -> HourEntry:
    return HourEntry(
        id=entry_id,
        client_id="recC1",
        date=datetime.fromisoformat(when).replace(tzinfo=timezone.utc),
        consultants=list(consultants),
        status=status,
        hours=hours,
    )


@pytest.fixture
def entries():
    return [
        _entry("jan", "2025-01-10", ["John Doe"], 2.0),
        _entry("mar", "2025-03-05", ["John Doe", "Jane Smith"], 3.0),
        _entry("feb", "2025-02-01", ["Jane Smith"], 1.5, NON_BILLABLE),
    ]


def test_sorts_descending_by_date(entries):
    assert [entry.id for entry in filter_entries(entries)] == ["mar", "feb", "jan"]


def test_month_filter_compares_year_and_month(entries):
    march = [_entry("m15", "2025-03-15")]
    assert [entry.id for entry in filter_entries(march, month="2025-03")] == ["m15"]
    assert filter_entries(march, month="2025-02") == []
    assert filter_entries([_entry("old", "2024-03-15")], month="2025-03") == []


def test_consultant_filter_matches_any_listed_name(entries):
    assert [entry.id for entry in filter_entries(entries, consultant="Jane Smith")] == ["mar", "feb"]
    assert [entry.id for entry in filter_entries(entries, consultant="John Doe")] == ["mar", "jan"]
    assert filter_entries(entries, consultant="Jane") == []


def test_combined_filters_and_summary_reflect_visible_entries(entries):
    visible = filter_entries(entries, month="2025-02", consultant="Jane Smith")
    assert [entry.id for entry in visible] == ["feb"]
    summary = summarize(visible)
    assert summary.billable == 0
    assert summary.non_billable == 1.5
    assert summary.total == 1.5


def test_ties_keep_fetch_order():
    same_day = [_entry("first", "2025-01-10"), _entry("second", "2025-01-10"), _entry("later", "2025-01-11")]
    assert [entry.id for entry in filter_entries(same_day)] == ["later", "first", "second"]


def test_invalid_month_is_rejected(entries):
    with pytest.raises(ValueError):
        filter_entries(entries, month="2025-13")


def test_month_helpers():
    assert month_key(datetime(2025, 1, 15)) == "2025-01"
    assert format_month_key("2025-01") == "January 2025"
    assert format_month_key("2025-12") == "December 2025"


def test_filter_options_come_from_all_entries(entries):
    assert [option.key for option in month_options(entries)] == ["2025-03", "2025-02", "2025-01"]
    assert month_options(entries)[0].label == "March 2025"
    assert consultant_options(entries) == ["Jane Smith", "John Doe"]


def test_offered_consultant_option_selects_padded_employee_name():
    record = AirtableRecord(id="h1", fields={"Employees": ["recE1"], "Date": "2025-01-10", "Hours": 1})
    entries = [normalize_record(record, "recC1", {"recE1": "John Doe "})]

    options = consultant_options(entries)

    assert options == ["John Doe"]
    assert [entry.id for entry in filter_entries(entries, consultant=options[0])] == ["h1"]
