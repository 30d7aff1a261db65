from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..config import settings

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

NOT_FOUND_TYPES = frozenset({"NOT_FOUND", "MODEL_ID_NOT_FOUND", "TABLE_NOT_FOUND"})
UNKNOWN_FIELD_TYPES = frozenset({"UNKNOWN_FIELD_NAME"})


class AirtableError(Exception):
    """Raised when the Airtable API cannot serve a request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, error_type: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class AirtableConfigError(AirtableError):
    pass


class AirtableNotFound(AirtableError):
    pass


class AirtableUnknownField(AirtableError):
    pass


@dataclass
class AirtableRecord:
    id: str
    fields: Dict[str, Any] = field(default_factory=dict)
    created_time: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "AirtableRecord":
        if not isinstance(payload, dict) or not payload.get("id"):
            raise AirtableError("Airtable returned a record without an id")
        return cls(
            id=str(payload["id"]),
            fields=dict(payload.get("fields") or {}),
            created_time=payload.get("createdTime"),
        )


def _error_details(response: httpx.Response) -> tuple[Optional[str], str]:
    try:
        body = response.json()
    except ValueError:
        return None, response.text or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("type"), error.get("message") or error.get("type") or response.reason_phrase
    if isinstance(error, str):
        return error, body.get("message") or error
    return None, response.reason_phrase


class AirtableRepo:
    """Thin access layer over the Airtable REST API for one base."""

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_id: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.airtable_api_key
        self.base_id = base_id if base_id is not None else settings.airtable_base_id
        self.api_url = (api_url or settings.airtable_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.airtable_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def _http(self) -> httpx.Client:
        if not self.api_key:
            raise AirtableConfigError("AIRTABLE_API_KEY environment variable is required")
        if not self.base_id:
            raise AirtableConfigError("AIRTABLE_BASE_ID environment variable is required")
        if self._client is None:
            self._client = httpx.Client(
                base_url=f"{self.api_url}/{self.base_id}",
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self._http().request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise AirtableError(f"Airtable request failed: {exc}") from exc

        if response.is_success:
            try:
                payload = response.json()
            except ValueError as exc:
                raise AirtableError("Airtable returned an invalid response", status_code=response.status_code) from exc
            if not isinstance(payload, dict):
                raise AirtableError("Airtable returned an invalid response", status_code=response.status_code)
            return payload

        error_type, message = _error_details(response)
        if response.status_code == 404 or error_type in NOT_FOUND_TYPES:
            raise AirtableNotFound(message, status_code=response.status_code, error_type=error_type)
        if error_type in UNKNOWN_FIELD_TYPES or "unknown field" in message.lower():
            raise AirtableUnknownField(message, status_code=response.status_code, error_type=error_type)
        raise AirtableError(message, status_code=response.status_code, error_type=error_type)

    @staticmethod
    def _table_path(table: str) -> str:
        return "/" + quote(table, safe="")

    def list_records(self, table: str, *, max_records: Optional[int] = None) -> List[AirtableRecord]:
        records: List[AirtableRecord] = []
        offset: Optional[str] = None
        while True:
            params: Dict[str, Any] = {"pageSize": PAGE_SIZE}
            if max_records is not None:
                params["maxRecords"] = max_records
            if offset:
                params["offset"] = offset
            payload = self._request("GET", self._table_path(table), params=params)
            page = payload.get("records") or []
            if not isinstance(page, list):
                raise AirtableError("Airtable returned an invalid record page")
            records.extend(AirtableRecord.from_payload(item) for item in page)
            offset = payload.get("offset")
            if not offset or (max_records is not None and len(records) >= max_records):
                break
        if max_records is not None:
            records = records[:max_records]
        logger.debug("airtable list table=%s records=%s", table, len(records))
        return records

    def find_record(self, table: str, record_id: str) -> AirtableRecord:
        path = f"{self._table_path(table)}/{quote(record_id, safe='')}"
        return AirtableRecord.from_payload(self._request("GET", path))

    def update_record(self, table: str, record_id: str, fields: Dict[str, Any]) -> AirtableRecord:
        path = f"{self._table_path(table)}/{quote(record_id, safe='')}"
        return AirtableRecord.from_payload(self._request("PATCH", path, json={"fields": fields}))
