from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from ..config import settings
from ..repos.airtable_repo import AirtableError, AirtableNotFound, AirtableRepo

logger = logging.getLogger(__name__)

DEFAULT_NAME_FIELD = "Name"
NAME_FIELD_FALLBACKS: Sequence[str] = ("Name", "Full Name")


class ResolutionStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"


@dataclass
class ResolutionResult:
    source: str
    status: ResolutionStatus
    names: Dict[str, str] = field(default_factory=dict)


def _pick_name_field(field_names: Iterable[str]) -> str:
    for name in field_names:
        if "name" in name.lower():
            return name
    return DEFAULT_NAME_FIELD


class TableNameStrategy:
    """Resolve employee ids against one candidate table."""

    def __init__(self, repo: AirtableRepo, table: str) -> None:
        self.repo = repo
        self.table = table

    def _discover_name_field(self) -> Optional[str]:
        sample = self.repo.list_records(self.table, max_records=1)
        if not sample:
            return None
        fields = list(sample[0].fields.keys())
        logger.debug("Employee table %r exists with fields %s", self.table, fields)
        return _pick_name_field(fields)

    def resolve(self, employee_ids: Sequence[str]) -> ResolutionResult:
        try:
            name_field = self._discover_name_field()
        except AirtableError as exc:
            logger.debug("Employee table %r unavailable: %s", self.table, exc)
            return ResolutionResult(source=self.table, status=ResolutionStatus.FAILURE)
        if name_field is None:
            return ResolutionResult(source=self.table, status=ResolutionStatus.FAILURE)

        names: Dict[str, str] = {}
        for employee_id in employee_ids:
            try:
                record = self.repo.find_record(self.table, employee_id)
            except AirtableNotFound:
                continue
            except AirtableError as exc:
                logger.debug("Lookup of %s in %r failed: %s", employee_id, self.table, exc)
                continue
            value = record.fields.get(name_field)
            if not value:
                value = next((record.fields[key] for key in NAME_FIELD_FALLBACKS if record.fields.get(key)), None)
            names[employee_id] = str(value) if value else employee_id

        if not names:
            status = ResolutionStatus.FAILURE
        elif len(names) == len(employee_ids):
            status = ResolutionStatus.SUCCESS
        else:
            status = ResolutionStatus.PARTIAL
        logger.info("Found %s of %s employee names in table %r", len(names), len(employee_ids), self.table)
        return ResolutionResult(source=self.table, status=status, names=names)


class EmployeeNameResolver:
    """Best-effort mapping of linked employee ids to display names.

    Candidate tables are tried in order and the first one that resolves at least
    one id is adopted for the whole call. Ids it misses stay unmapped and callers
    fall back to the raw id.
    """

    def __init__(
        self,
        repo: AirtableRepo,
        tables: Optional[Sequence[str]] = None,
        *,
        lookup_limit: Optional[int] = None,
    ) -> None:
        self.repo = repo
        self.tables = list(tables if tables is not None else settings.employee_tables)
        self.lookup_limit = settings.employee_lookup_limit if lookup_limit is None else lookup_limit

    def strategies(self) -> List[TableNameStrategy]:
        return [TableNameStrategy(self.repo, table) for table in self.tables]

    def resolve(self, employee_ids: Iterable[str]) -> Dict[str, str]:
        unique_ids = list(dict.fromkeys(employee_ids))
        if not unique_ids:
            return {}
        if len(unique_ids) > self.lookup_limit:
            logger.warning(
                "Capping employee lookups at %s of %s ids",
                self.lookup_limit,
                len(unique_ids),
            )
            unique_ids = unique_ids[: self.lookup_limit]

        for strategy in self.strategies():
            result = strategy.resolve(unique_ids)
            if result.status is not ResolutionStatus.FAILURE:
                return result.names

        logger.warning("Could not find any employee names; employee ids will be shown instead")
        return {}
