from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence

from ..config import settings
from ..models import BILLABLE, NON_BILLABLE, HourEntry, HoursSummary
from ..repos.airtable_repo import AirtableError, AirtableRecord, AirtableRepo
from .employees import EmployeeNameResolver
from .normalize import first_present, linked_ids, normalize_records, parse_internal

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class HoursFetchError(Exception):
    pass


def round_hours(value: float) -> float:
    """Round half-up to two decimals on the shortest decimal form of ``value``."""
    return float(Decimal(repr(value)).quantize(CENT, rounding=ROUND_HALF_UP))


def summarize(entries: Iterable[HourEntry]) -> HoursSummary:
    billable = 0.0
    non_billable = 0.0
    for entry in entries:
        if entry.status == BILLABLE:
            billable += entry.hours
        elif entry.status == NON_BILLABLE:
            non_billable += entry.hours
    # total rounds the raw sum, not the two rounded partitions
    return HoursSummary(
        billable=round_hours(billable),
        non_billable=round_hours(non_billable),
        total=round_hours(billable + non_billable),
    )


def links_client(record: AirtableRecord, client_id: str) -> bool:
    value = first_present(record.fields, "client")
    if isinstance(value, (list, tuple)):
        return client_id in value
    if isinstance(value, str):
        return value == client_id
    return False


def filter_client_records(records: Sequence[AirtableRecord], client_id: str) -> List[AirtableRecord]:
    return [record for record in records if links_client(record, client_id)]


def exclude_internal(records: Sequence[AirtableRecord]) -> List[AirtableRecord]:
    return [record for record in records if not parse_internal(first_present(record.fields, "internal"))]


def collect_employee_ids(records: Iterable[AirtableRecord]) -> List[str]:
    ids: List[str] = []
    for record in records:
        ids.extend(linked_ids(first_present(record.fields, "employees")))
    return list(dict.fromkeys(ids))


def get_hours_by_client_id(
    client_id: str,
    *,
    repo: AirtableRepo,
    resolver: Optional[EmployeeNameResolver] = None,
) -> List[HourEntry]:
    """Hours logged against ``client_id``, internal entries removed, in fetch order."""
    try:
        records = repo.list_records(settings.hours_table)
    except AirtableError as exc:
        logger.exception("Error fetching hours for client %s from Airtable", client_id)
        raise HoursFetchError("Failed to fetch hours") from exc

    client_records = filter_client_records(records, client_id)
    visible_records = exclude_internal(client_records)
    logger.info(
        "hours client_id=%s fetched=%s matched=%s visible=%s",
        client_id,
        len(records),
        len(client_records),
        len(visible_records),
    )

    employee_ids = collect_employee_ids(visible_records)
    resolver = resolver or EmployeeNameResolver(repo)
    employee_names = resolver.resolve(employee_ids) if employee_ids else {}

    return normalize_records(visible_records, client_id, employee_names)
