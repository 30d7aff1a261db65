from __future__ import annotations

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

EntryStatus = Literal["Billable", "Non-billable"]

BILLABLE: EntryStatus = "Billable"
NON_BILLABLE: EntryStatus = "Non-billable"

CONSULTANT_SEPARATOR = ", "


class HourEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    client_id: str = Field(alias="clientId")
    date: datetime
    consultants: List[str] = Field(default_factory=list)
    description: str = ""
    status: EntryStatus = NON_BILLABLE
    hours: float = Field(default=0.0, ge=0)
    internal: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def consultant(self) -> str:
        return CONSULTANT_SEPARATOR.join(self.consultants)


class HoursSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    billable: float = 0.0
    non_billable: float = Field(default=0.0, alias="nonBillable")
    total: float = 0.0
