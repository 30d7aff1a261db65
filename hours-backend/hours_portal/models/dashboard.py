from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .clients import ClientRecord
from .hours import HourEntry, HoursSummary


class MonthOption(BaseModel):
    key: str
    label: str


class DashboardView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client: ClientRecord
    entries: List[HourEntry]
    summary: HoursSummary
    months: List[MonthOption] = Field(default_factory=list)
    consultants: List[str] = Field(default_factory=list)
    selected_month: Optional[str] = Field(default=None, alias="selectedMonth")
    selected_consultant: Optional[str] = Field(default=None, alias="selectedConsultant")
    hours_available: bool = Field(default=True, alias="hoursAvailable")
