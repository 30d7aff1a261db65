from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ClientRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    company: Optional[str] = None
    generated_page_url: Optional[str] = Field(default=None, alias="generatedPageUrl")


class GeneratedUrlResponse(BaseModel):
    url: str


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AdminSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    expires_at: datetime = Field(alias="expiresAt")
    token: Optional[str] = None
