from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from hours_portal.models import BILLABLE, NON_BILLABLE
from hours_portal.repos.airtable_repo import AirtableRecord
from hours_portal.services.normalize import (
    entry_to_record,
    first_present,
    normalize_record,
    parse_date,
    parse_hours,
    parse_internal,
    parse_status,
)

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def _record(**fields) -> AirtableRecord:
    return AirtableRecord(id="recHOUR1", fields=fields)


def test_date_array_uses_one_based_month():
    assert parse_date([2025, 1, 20], now=NOW) == datetime(2025, 1, 20, tzinfo=timezone.utc)


def test_date_strings_and_native_values():
    assert parse_date("2025-01-15", now=NOW) == datetime(2025, 1, 15, tzinfo=timezone.utc)
    assert parse_date("2025-03-05T09:30:00.000Z", now=NOW) == datetime(2025, 3, 5, 9, 30, tzinfo=timezone.utc)
    assert parse_date(date(2024, 12, 31), now=NOW) == datetime(2024, 12, 31, tzinfo=timezone.utc)
    assert parse_date(datetime(2024, 6, 1, 8, 0), now=NOW) == datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [None, "not a date", 42, [2025, "1", 20], [2025, 13, 1], {"y": 2025}, [2025, 1]])
def test_malformed_dates_fall_back_to_now(value):
    assert parse_date(value, now=NOW) == NOW


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, BILLABLE),
        (1, BILLABLE),
        ("Yes", BILLABLE),
        ("  y ", BILLABLE),
        ("YES", BILLABLE),
        ("Billable", BILLABLE),
        (False, NON_BILLABLE),
        ("No", NON_BILLABLE),
        (" n", NON_BILLABLE),
        ("Non-billable", NON_BILLABLE),
        ("maybe", NON_BILLABLE),
        (None, NON_BILLABLE),
        (0, NON_BILLABLE),
    ],
)
def test_status_heuristic(value, expected):
    assert parse_status(value) == expected


def test_billable_field_no_overrides_status_field():
    entry = normalize_record(_record(Billable="No", Status="Billable", Date="2025-01-01"), "recC1", now=NOW)
    assert entry.status == NON_BILLABLE


def test_internal_flag_defaults_to_false():
    assert parse_internal(None) is False
    assert parse_internal("whatever") is False
    assert parse_internal(True) is True
    assert parse_internal(" Yes ") is True
    assert parse_internal("no") is False


@pytest.mark.parametrize("value, expected", [(2.5, 2.5), (3, 3.0), ("1.25", 1.25), ("abc", 0.0), (None, 0.0), (True, 0.0), (-4, 0.0)])
def test_hours_parsing(value, expected):
    assert parse_hours(value) == expected


def test_alias_order_takes_first_non_empty_value():
    fields = {"Summary": "", "Description": "Fallback description", "Hours Logged": 4, "Hours": 9}
    assert first_present(fields, "description") == "Fallback description"
    assert first_present(fields, "hours") == 4
    assert first_present({}, "hours") is None


def test_linked_employees_resolve_through_name_map():
    record = _record(Employees=["recE1", "recE2"], Date="2025-02-01", **{"Hours Logged": 2})
    entry = normalize_record(record, "recC1", {"recE1": "John Doe"}, now=NOW)
    assert entry.consultants == ["John Doe", "recE2"]
    assert entry.consultant == "John Doe, recE2"


def test_plain_consultant_text_is_split_into_names():
    entry = normalize_record(_record(Consultant="John Doe, Jane Smith"), "recC1", now=NOW)
    assert entry.consultants == ["John Doe", "Jane Smith"]


def test_normalizes_full_record():
    record = _record(
        ClientID=["recC1"],
        Date="2025-01-15",
        Consultant="John Doe",
        Description="Test work",
        Status="Yes",
        Hours=2.5,
        Internal=False,
    )
    entry = normalize_record(record, "recC1", now=NOW)
    assert entry.id == "recHOUR1"
    assert entry.client_id == "recC1"
    assert entry.date == datetime(2025, 1, 15, tzinfo=timezone.utc)
    assert entry.description == "Test work"
    assert entry.status == BILLABLE
    assert entry.hours == 2.5
    assert entry.internal is False


def test_empty_record_is_filled_with_defaults():
    entry = normalize_record(_record(), "recC1", now=NOW)
    assert entry.date == NOW
    assert entry.consultants == []
    assert entry.description == ""
    assert entry.status == NON_BILLABLE
    assert entry.hours == 0.0
    assert entry.internal is False


def test_normalization_is_idempotent():
    record = _record(
        Clients=["recC1"],
        Date=[2025, 3, 15],
        Employees=["recE1", "recE2"],
        Summary="Workshop",
        Billable="Y",
        **{"Hours Logged": 1.75},
    )
    first = normalize_record(record, "recC1", {"recE1": "John Doe", "recE2": "Jane Smith"}, now=NOW)
    second = normalize_record(entry_to_record(first), "recC1", now=NOW)
    assert second == first
    assert normalize_record(entry_to_record(second), "recC1", now=NOW) == second


def test_round_trip_keeps_names_with_commas():
    record = _record(Clients=["recC1"], Date="2025-03-15", Employees=["recE1", "recE2"], Hours=2)
    first = normalize_record(record, "recC1", {"recE1": "Doe, John", "recE2": "Smith, Jane"}, now=NOW)
    assert first.consultants == ["Doe, John", "Smith, Jane"]

    second = normalize_record(entry_to_record(first), "recC1", now=NOW)
    assert second == first


def test_resolved_employee_names_are_trimmed():
    record = _record(Employees=["recE1", "recE2"], Date="2025-03-15")
    entry = normalize_record(record, "recC1", {"recE1": "  John Doe ", "recE2": "   "}, now=NOW)
    assert entry.consultants == ["John Doe", "recE2"]


def test_entry_serializes_with_camel_case_fields():
    entry = normalize_record(_record(Consultant="A, B", Date="2025-01-15", Hours=1), "recC1", now=NOW)
    payload = entry.model_dump(by_alias=True, mode="json")
    assert payload["clientId"] == "recC1"
    assert payload["consultant"] == "A, B"
    assert payload["status"] == NON_BILLABLE
