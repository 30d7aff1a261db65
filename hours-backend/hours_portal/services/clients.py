from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config import settings
from ..models import ClientRecord
from ..repos.airtable_repo import (
    AirtableError,
    AirtableNotFound,
    AirtableRecord,
    AirtableRepo,
    AirtableUnknownField,
)
from ..repos.url_store import ClientUrlStore, UrlStoreError

logger = logging.getLogger(__name__)

DEFAULT_URL_FIELD = "GeneratedPageURL"

URL_FIELD_ALIASES: Sequence[str] = (
    "GeneratedPageURL",
    "Generated Page URL",
    "GeneratedPageUrl",
    "generatedPageURL",
    "Generated URL",
    "Page URL",
    "Client URL",
    "Dashboard URL",
)

DEV_BASE_URL = "http://localhost:3000"


class ClientsFetchError(Exception):
    pass


class ClientUrlUpdateError(Exception):
    pass


class FieldNameCache:
    """Process-wide memo of discovered Airtable column names."""

    def __init__(self) -> None:
        self._names: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        return self._names.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._names[key] = value

    def clear(self) -> None:
        with self._lock:
            self._names.clear()


field_name_cache = FieldNameCache()


class ClientService:
    def __init__(
        self,
        repo: AirtableRepo,
        url_store: ClientUrlStore,
        cache: Optional[FieldNameCache] = None,
    ) -> None:
        self.repo = repo
        self.url_store = url_store
        self.cache = cache if cache is not None else field_name_cache
        self.table = settings.clients_table

    def find_url_field_name(self) -> str:
        cache_key = f"{self.table}.generated_page_url"
        cached = self.cache.get(cache_key)
        if cached:
            return cached

        try:
            sample = self.repo.list_records(self.table, max_records=1)
        except AirtableError as exc:
            logger.error("Error finding URL field name in %r: %s", self.table, exc)
            sample = []

        if sample:
            available = list(sample[0].fields.keys())
            for candidate in URL_FIELD_ALIASES:
                if candidate in available:
                    logger.info("Found URL field name: %s", candidate)
                    self.cache.set(cache_key, candidate)
                    return candidate
            logger.warning("Available fields in %s table: %s", self.table, available)
            logger.warning(
                "Could not find a generated URL field. Create one of these fields in Airtable: %s",
                list(URL_FIELD_ALIASES),
            )

        self.cache.set(cache_key, DEFAULT_URL_FIELD)
        return DEFAULT_URL_FIELD

    @staticmethod
    def _to_client(record: AirtableRecord, url_field: str, fallback_urls: Mapping[str, str]) -> ClientRecord:
        fields = record.fields
        airtable_url = fields.get(url_field)
        return ClientRecord(
            id=record.id,
            name=str(fields.get("Name") or ""),
            company=fields.get("Company") or None,
            generated_page_url=airtable_url or fallback_urls.get(record.id) or None,
        )

    def _fallback_urls(self) -> Dict[str, str]:
        try:
            return self.url_store.load_all()
        except Exception as exc:
            logger.warning("URL fallback store unavailable: %s", exc)
            return {}

    def get_all_clients(self) -> List[ClientRecord]:
        try:
            records = self.repo.list_records(self.table)
        except AirtableError as exc:
            logger.exception("Error fetching clients from Airtable")
            raise ClientsFetchError("Failed to fetch clients") from exc

        url_field = self.find_url_field_name()
        fallback_urls = self._fallback_urls()
        return [self._to_client(record, url_field, fallback_urls) for record in records]

    def get_client_by_id(self, client_id: str) -> Optional[ClientRecord]:
        try:
            record = self.repo.find_record(self.table, client_id)
        except AirtableNotFound:
            logger.info("Client %s not found in Airtable", client_id)
            return None
        except AirtableError as exc:
            logger.exception("Error fetching client %s from Airtable", client_id)
            raise ClientsFetchError("Failed to fetch client") from exc

        url_field = self.find_url_field_name()
        fallback: Dict[str, str] = {}
        if not record.fields.get(url_field):
            try:
                stored = self.url_store.get(client_id)
            except Exception as exc:
                logger.warning("URL fallback store unavailable: %s", exc)
                stored = None
            if stored:
                fallback[client_id] = stored
        return self._to_client(record, url_field, fallback)

    def update_client_generated_url(self, client_id: str, url: str) -> None:
        url_field = self.find_url_field_name()
        try:
            self.repo.update_record(self.table, client_id, {url_field: url})
            logger.info("Saved URL to Airtable for client %s", client_id)
            return
        except AirtableUnknownField as exc:
            logger.info("Airtable field %r not available, using fallback store for client %s", url_field, client_id)
            try:
                self._save_fallback(client_id, url)
            except ClientUrlUpdateError:
                raise ClientUrlUpdateError(self._field_hint(url_field)) from exc
            return
        except AirtableError as exc:
            logger.error("Error updating client %s URL in Airtable: %s", client_id, exc)
            try:
                self._save_fallback(client_id, url)
            except ClientUrlUpdateError:
                if exc.message and "field" in exc.message.lower():
                    raise ClientUrlUpdateError(self._field_hint(url_field)) from exc
                if exc.message:
                    raise ClientUrlUpdateError(f"Airtable error: {exc.message}") from exc
                raise
            logger.info("Saved URL to fallback store for client %s", client_id)

    def _field_hint(self, url_field: str) -> str:
        return f'Airtable field error. Please ensure "{url_field}" field exists in your {self.table} table.'

    def _save_fallback(self, client_id: str, url: str) -> None:
        try:
            self.url_store.save(client_id, url)
        except UrlStoreError as exc:
            logger.error("Error saving client URL to fallback store: %s", exc)
            raise ClientUrlUpdateError(
                "Failed to update client URL in both Airtable and fallback storage"
            ) from exc


def _first_header(headers: Mapping[str, Any], name: str) -> Optional[str]:
    value = headers.get(name)
    if not value:
        return None
    return str(value).split(",")[0].strip() or None


def resolve_base_url(headers: Mapping[str, Any]) -> str:
    if settings.public_base_url:
        return settings.public_base_url.rstrip("/")
    host = _first_header(headers, "host")
    if host:
        protocol = _first_header(headers, "x-forwarded-proto")
        if not protocol:
            protocol = "http" if "localhost" in host or host.startswith("127.") else "https"
        return f"{protocol}://{host}"
    if settings.vercel_url:
        return f"https://{settings.vercel_url}"
    return DEV_BASE_URL


def build_client_url(client_id: str, headers: Mapping[str, Any]) -> str:
    return f"{resolve_base_url(headers)}/client/{client_id}"
