"""Turn loosely-typed Airtable hour records into canonical ``HourEntry`` objects.

Column names in the Hours Log table have drifted over time, so every logical
attribute is looked up through an ordered alias list and the first present,
non-empty value wins. Normalization is total: malformed values fall back to
defaults instead of raising.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..models import BILLABLE, NON_BILLABLE, EntryStatus, HourEntry
from ..repos.airtable_repo import AirtableRecord

FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "client": ("Clients", "ClientID", "Client ID", "ClientId", "clientID"),
    "employees": ("Employees",),
    "consultant": ("Consultant",),
    "description": ("Summary", "Description"),
    "billable": ("Billable", "Status"),
    "hours": ("Hours Logged", "Hours"),
    "internal": ("Internal",),
    "date": ("Date",),
}

TRUE_STRINGS = frozenset({"yes", "y"})
FALSE_STRINGS = frozenset({"no", "n"})
# Canonical labels, accepted so that a rendered entry normalizes to itself
BILLABLE_LABELS = frozenset({"billable"})
NON_BILLABLE_LABELS = frozenset({"non-billable", "nonbillable", "non billable"})


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def first_present(fields: Mapping[str, Any], attribute: str) -> Any:
    for name in FIELD_ALIASES[attribute]:
        value = fields.get(name)
        if not _is_empty(value):
            return value
    return None


def parse_flag(value: Any) -> Optional[bool]:
    """Read a checkbox or Yes/No single-select value; ``None`` when unrecognised."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    return None


def parse_status(value: Any) -> EntryStatus:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in FALSE_STRINGS or text in NON_BILLABLE_LABELS:
            return NON_BILLABLE
        if text in TRUE_STRINGS or text in BILLABLE_LABELS:
            return BILLABLE
        return NON_BILLABLE
    return BILLABLE if parse_flag(value) is True else NON_BILLABLE


def parse_internal(value: Any) -> bool:
    return parse_flag(value) is True


def parse_hours(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0.0
    if not isinstance(value, (int, float)):
        return 0.0
    hours = float(value)
    if math.isnan(hours) or math.isinf(hours) or hours < 0:
        return 0.0
    return hours


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _is_whole_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def parse_date(value: Any, *, now: Optional[datetime] = None) -> datetime:
    fallback = now or datetime.now(timezone.utc)
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return _as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            return fallback
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        year, month, day = value[0], value[1], value[2]
        if all(_is_whole_number(part) for part in (year, month, day)):
            try:
                return datetime(int(year), int(month), int(day), tzinfo=timezone.utc)
            except ValueError:
                return fallback
    return fallback


def split_names(value: str) -> List[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


def linked_ids(value: Any) -> List[str]:
    """Identifiers from a linked-record field (list of ids or a single id)."""
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if not _is_empty(item)]
    if isinstance(value, str) and value.strip():
        return [value]
    return []


def resolve_consultants(fields: Mapping[str, Any], employee_names: Mapping[str, str]) -> List[str]:
    employee_ids = linked_ids(first_present(fields, "employees"))
    if employee_ids:
        # names are trimmed; a blank name falls back to the id
        return [str(employee_names.get(employee_id) or "").strip() or employee_id for employee_id in employee_ids]

    consultant = first_present(fields, "consultant")
    if isinstance(consultant, str):
        return split_names(consultant)
    if isinstance(consultant, (list, tuple)):
        return [str(name).strip() for name in consultant if str(name).strip()]
    return []


def normalize_record(
    record: AirtableRecord,
    client_id: str,
    employee_names: Optional[Mapping[str, str]] = None,
    *,
    now: Optional[datetime] = None,
) -> HourEntry:
    fields = record.fields
    description = first_present(fields, "description")
    return HourEntry(
        id=record.id,
        client_id=client_id,
        date=parse_date(first_present(fields, "date"), now=now),
        consultants=resolve_consultants(fields, employee_names or {}),
        description=str(description) if description is not None else "",
        status=parse_status(first_present(fields, "billable")),
        hours=parse_hours(first_present(fields, "hours")),
        internal=parse_internal(first_present(fields, "internal")),
    )


def entry_to_fields(entry: HourEntry) -> Dict[str, Any]:
    """Render a canonical entry back into Hours Log field form."""
    return {
        "Clients": [entry.client_id],
        "Date": entry.date.isoformat(),
        # a list keeps names that contain commas intact
        "Consultant": list(entry.consultants),
        "Summary": entry.description,
        "Billable": "Yes" if entry.status == BILLABLE else "No",
        "Hours Logged": entry.hours,
        "Internal": entry.internal,
    }


def entry_to_record(entry: HourEntry) -> AirtableRecord:
    return AirtableRecord(id=entry.id, fields=entry_to_fields(entry))


def normalize_records(
    records: Sequence[AirtableRecord],
    client_id: str,
    employee_names: Optional[Mapping[str, str]] = None,
) -> List[HourEntry]:
    now = datetime.now(timezone.utc)
    return [normalize_record(record, client_id, employee_names, now=now) for record in records]
