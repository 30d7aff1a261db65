from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..config import settings
from ..dependencies import require_admin
from ..models import AdminSessionResponse, LoginRequest
from ..services.auth import SESSION_COOKIE, AdminSession, AuthConfigError, authenticate, issue_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=AdminSessionResponse)
def login(payload: LoginRequest, response: Response) -> AdminSessionResponse:
    try:
        session = authenticate(payload.email, payload.password)
        token = issue_token(session) if session else None
    except AuthConfigError as exc:
        logger.error("Admin login unavailable: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    if session is None or token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    logger.info("admin_login email=%s", session.email)
    return AdminSessionResponse(email=session.email, expires_at=session.expires_at, token=token)


@router.post("/logout", status_code=status.HTTP_200_OK)
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return {"ok": True}


@router.get("/session", response_model=AdminSessionResponse)
def current_session(session: AdminSession = Depends(require_admin)) -> AdminSessionResponse:
    return AdminSessionResponse(email=session.email, expires_at=session.expires_at)
