from __future__ import annotations

from typing import Iterator, Optional

from fastapi import Cookie, Depends, Header, HTTPException, status

from .repos.airtable_repo import AirtableRepo
from .repos.url_store import ClientUrlStore, get_url_store
from .services.auth import SESSION_COOKIE, AdminSession, AuthConfigError, verify_token
from .services.clients import ClientService, field_name_cache


def get_repo() -> Iterator[AirtableRepo]:
    repo = AirtableRepo()
    try:
        yield repo
    finally:
        repo.close()


def get_store() -> ClientUrlStore:
    return get_url_store()


def get_client_service(
    repo: AirtableRepo = Depends(get_repo),
    store: ClientUrlStore = Depends(get_store),
) -> ClientService:
    return ClientService(repo, store, field_name_cache)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_admin(
    authorization: Optional[str] = Header(default=None),
    session_cookie: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> AdminSession:
    token = _bearer_token(authorization) or session_cookie
    try:
        session = verify_token(token)
    except AuthConfigError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return session
