from __future__ import annotations

import json
from typing import Dict, Iterable, List, Optional, Set

import httpx
import pytest
from fastapi.testclient import TestClient

from hours_portal.config import settings
from hours_portal.dependencies import get_repo, get_store
from hours_portal.main import app
from hours_portal.repos.airtable_repo import AirtableRepo
from hours_portal.repos.url_store import FileClientUrlStore
from hours_portal.services.clients import field_name_cache

BASE_ID = "appTEST"


def _error(status_code: int, error_type: str, message: str) -> httpx.Response:
    return httpx.Response(status_code, json={"error": {"type": error_type, "message": message}})


class FakeAirtable:
    """In-memory stand-in for the Airtable REST API, served through httpx.MockTransport."""

    def __init__(self, tables: Optional[Dict[str, List[dict]]] = None, *, page_size: int = 100):
        self.tables: Dict[str, List[dict]] = {
            name: [{"id": record["id"], "fields": dict(record.get("fields", {}))} for record in records]
            for name, records in (tables or {}).items()
        }
        self.page_size = page_size
        self.writable_fields: Dict[str, Set[str]] = {}
        self.failing_tables: Set[str] = set()
        self.requests: List[httpx.Request] = []

    def add(self, table: str, records: Iterable[dict]) -> None:
        self.tables.setdefault(table, []).extend(
            {"id": record["id"], "fields": dict(record.get("fields", {}))} for record in records
        )

    def requested_tables(self) -> List[str]:
        return [request.url.path.split("/")[3] for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.split("/")
        # /v0/{base}/{table}[/{record}]
        table = parts[3]
        record_id = parts[4] if len(parts) > 4 else None

        if table in self.failing_tables:
            return _error(503, "SERVICE_UNAVAILABLE", "Airtable is unavailable")
        if table not in self.tables:
            return _error(404, "TABLE_NOT_FOUND", f"Could not find table {table}")
        records = self.tables[table]

        if record_id is None:
            return self._list(records, request)

        record = next((item for item in records if item["id"] == record_id), None)
        if record is None:
            return _error(404, "NOT_FOUND", "Could not find what you are looking for")

        if request.method == "PATCH":
            fields = json.loads(request.content)["fields"]
            allowed = self.writable_fields.get(table)
            if allowed is not None:
                unknown = [name for name in fields if name not in allowed]
                if unknown:
                    return _error(422, "UNKNOWN_FIELD_NAME", f'Unknown field name: "{unknown[0]}"')
            record["fields"].update(fields)
        return httpx.Response(200, json=record)

    def _list(self, records: List[dict], request: httpx.Request) -> httpx.Response:
        params = request.url.params
        start = int(params.get("offset", "0"))
        limit = min(int(params.get("pageSize", "100")), self.page_size)
        max_records = params.get("maxRecords")
        visible = records[: int(max_records)] if max_records else records
        page = visible[start : start + limit]
        payload: dict = {"records": page}
        if start + limit < len(visible):
            payload["offset"] = str(start + limit)
        return httpx.Response(200, json=payload)


@pytest.fixture(autouse=True)
def _reset_state(monkeypatch):
    field_name_cache.clear()
    monkeypatch.setattr(settings, "admin_accounts", None)
    monkeypatch.setattr(settings, "admin_email", None)
    monkeypatch.setattr(settings, "admin_password", None)
    monkeypatch.setattr(settings, "session_secret", "test-secret")
    monkeypatch.setattr(settings, "public_base_url", None)
    monkeypatch.setattr(settings, "vercel_url", None)
    yield
    field_name_cache.clear()
    app.dependency_overrides.clear()


@pytest.fixture
def airtable() -> FakeAirtable:
    return FakeAirtable()


@pytest.fixture
def repo(airtable: FakeAirtable) -> AirtableRepo:
    repo = AirtableRepo(api_key="keyTEST", base_id=BASE_ID, transport=httpx.MockTransport(airtable.handler))
    yield repo
    repo.close()


@pytest.fixture
def url_store(tmp_path) -> FileClientUrlStore:
    return FileClientUrlStore(tmp_path / "data" / "client-urls.json", readonly=False)


@pytest.fixture
def admin_account(monkeypatch):
    monkeypatch.setattr(settings, "admin_accounts", "admin@example.com:s3cret,ops@example.com:hunter2")
    return "admin@example.com", "s3cret"


@pytest.fixture
def client(repo: AirtableRepo, url_store: FileClientUrlStore):
    app.dependency_overrides[get_repo] = lambda: repo
    app.dependency_overrides[get_store] = lambda: url_store
    with TestClient(app) as c:
        yield c
