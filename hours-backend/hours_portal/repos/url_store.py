from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

from psycopg.rows import dict_row

from ..config import settings
from ..db import database_ready, pool

logger = logging.getLogger(__name__)


class UrlStoreError(Exception):
    pass


class ClientUrlStore(Protocol):
    def load_all(self) -> Dict[str, str]: ...

    def get(self, client_id: str) -> Optional[str]: ...

    def save(self, client_id: str, url: str) -> None: ...


class FileClientUrlStore:
    """Client id -> dashboard URL mapping kept in a JSON file.

    Best effort only: on read-only hosts reads come back empty and writes are
    skipped, so Airtable stays the source of truth there.
    """

    def __init__(self, path: str | Path | None = None, *, readonly: Optional[bool] = None) -> None:
        self.path = Path(path or settings.url_store_path)
        self.readonly = settings.url_store_readonly if readonly is None else readonly

    def _ensure_directory(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Could not create data directory %s: %s", self.path.parent, exc)

    def load_all(self) -> Dict[str, str]:
        if self.readonly or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Error loading client URLs from %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.error("Ignoring malformed client URL file %s", self.path)
            return {}
        return {str(key): str(value) for key, value in data.items() if value}

    def get(self, client_id: str) -> Optional[str]:
        return self.load_all().get(client_id) or None

    def save(self, client_id: str, url: str) -> None:
        if self.readonly:
            logger.warning("File storage not available on this host; URL for %s stays in Airtable only", client_id)
            return
        self._ensure_directory()
        urls = self.load_all()
        urls[client_id] = url
        try:
            self.path.write_text(json.dumps(urls, indent=2), encoding="utf-8")
        except OSError as exc:
            raise UrlStoreError(f"Could not write {self.path}: {exc}") from exc


class DatabaseClientUrlStore:
    def load_all(self) -> Dict[str, str]:
        with pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT client_id, url FROM hours_portal.client_urls")
                rows = cur.fetchall()
        return {row["client_id"]: row["url"] for row in rows}

    def get(self, client_id: str) -> Optional[str]:
        with pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT url FROM hours_portal.client_urls WHERE client_id = %s",
                    (client_id,),
                )
                row = cur.fetchone()
        return row["url"] if row else None

    def save(self, client_id: str, url: str) -> None:
        try:
            with pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO hours_portal.client_urls (client_id, url, updated_at)
                        VALUES (%s, %s, NOW())
                        ON CONFLICT (client_id) DO UPDATE
                        SET url = EXCLUDED.url, updated_at = EXCLUDED.updated_at
                        """,
                        (client_id, url),
                    )
                conn.commit()
        except Exception as exc:
            raise UrlStoreError(f"Could not store URL for {client_id}: {exc}") from exc


def get_url_store() -> ClientUrlStore:
    if database_ready():
        return DatabaseClientUrlStore()
    return FileClientUrlStore()
