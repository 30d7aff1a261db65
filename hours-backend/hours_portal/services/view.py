from __future__ import annotations

import re
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models import HourEntry, MonthOption

MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def parse_month_key(value: str) -> Tuple[int, int]:
    match = MONTH_KEY_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"month must look like YYYY-MM, got {value!r}")
    return int(match.group(1)), int(match.group(2))


def month_key(value: datetime) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def format_month_key(key: str) -> str:
    year, month = parse_month_key(key)
    return f"{MONTH_NAMES[month - 1]} {year}"


def filter_entries(
    entries: Sequence[HourEntry],
    month: Optional[str] = None,
    consultant: Optional[str] = None,
) -> List[HourEntry]:
    filtered = list(entries)

    if month:
        year, month_number = parse_month_key(month)
        filtered = [entry for entry in filtered if entry.date.year == year and entry.date.month == month_number]

    if consultant:
        target = consultant.strip()
        filtered = [entry for entry in filtered if target in entry.consultants]

    # sorted() is stable, so fetch order breaks ties
    return sorted(filtered, key=lambda entry: entry.date, reverse=True)


def month_options(entries: Iterable[HourEntry]) -> List[MonthOption]:
    keys = sorted({month_key(entry.date) for entry in entries}, reverse=True)
    return [MonthOption(key=key, label=format_month_key(key)) for key in keys]


def consultant_options(entries: Iterable[HourEntry]) -> List[str]:
    names = {name.strip() for entry in entries for name in entry.consultants if name.strip()}
    return sorted(names)
