import logging
from typing import Iterable

from psycopg_pool import ConnectionPool

from .config import settings

logger = logging.getLogger(__name__)

# start closed, we'll open in app lifespan when a database is configured
pool = ConnectionPool(conninfo=settings.database_url or "", max_size=5, open=False)


SCHEMA_STATEMENTS: Iterable[str] = (
    """
    CREATE TABLE IF NOT EXISTS hours_portal.client_urls (
        client_id TEXT PRIMARY KEY,
        url TEXT NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
)


def database_configured() -> bool:
    return bool(settings.database_url)


def database_ready() -> bool:
    return database_configured() and not pool.closed


def open_pool() -> None:
    if pool.closed:
        pool.open()


def close_pool() -> None:
    if not pool.closed:
        pool.close()


def initialize_database() -> None:
    try:
        ensure_schema()
    except Exception:  # pragma: no cover - needs a live database
        logger.exception("Database initialization failed")
        raise


def ensure_schema() -> None:
    with pool.connection() as conn:
        with conn.cursor() as cur:
            cur.execute("CREATE SCHEMA IF NOT EXISTS hours_portal")
            cur.execute("SET search_path TO hours_portal, public")
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)
        conn.commit()
