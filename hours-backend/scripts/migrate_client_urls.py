from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict

from psycopg import connect

from hours_portal.config import settings
from hours_portal.db import SCHEMA_STATEMENTS
from hours_portal.repos.url_store import FileClientUrlStore


def load_file_urls(path: Path) -> Dict[str, str]:
    if not path.exists():
        raise SystemExit(f"No client URL file at {path}.")
    return FileClientUrlStore(path, readonly=False).load_all()


def persist_urls(urls: Dict[str, str], dry_run: bool = False) -> None:
    if not urls:
        print("No client URLs to migrate.")
        return

    with connect(settings.database_url) as conn:
        with conn.cursor() as cur:
            cur.execute("CREATE SCHEMA IF NOT EXISTS hours_portal")
            cur.execute("SET search_path TO hours_portal, public")
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)

            if dry_run:
                for client_id, url in sorted(urls.items()):
                    print(f"[dry-run] Would store {client_id} -> {url}")
                return

            for client_id, url in urls.items():
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


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Copy file-stored client URLs into Postgres.")
    parser.add_argument(
        "--path",
        default=settings.url_store_path,
        help=f"JSON file to read (default: {settings.url_store_path}).",
    )
    parser.add_argument("--dry-run", action="store_true", help="Preview actions without writing to the database.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if not settings.database_url:
        raise SystemExit("DATABASE_URL must be set to migrate client URLs.")

    urls = load_file_urls(Path(args.path))
    persist_urls(urls, dry_run=args.dry_run)
    print(f"Migrated {len(urls)} client URLs from {args.path}.")


if __name__ == "__main__":
    main()
