from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ..dependencies import get_client_service, require_admin
from ..models import ClientRecord, DashboardView, GeneratedUrlResponse
from ..services.auth import AdminSession
from ..services.clients import ClientService, ClientsFetchError, ClientUrlUpdateError, build_client_url
from ..services.dashboard import build_dashboard
from ..services.view import MONTH_KEY_PATTERN

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=List[ClientRecord])
def list_clients(service: ClientService = Depends(get_client_service)) -> List[ClientRecord]:
    try:
        return service.get_all_clients()
    except ClientsFetchError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.get("/{client_id}", response_model=ClientRecord)
def get_client(client_id: str, service: ClientService = Depends(get_client_service)) -> ClientRecord:
    try:
        client = service.get_client_by_id(client_id)
    except ClientsFetchError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


@router.post("/{client_id}/generate", response_model=GeneratedUrlResponse)
def generate_client_url(
    client_id: str,
    request: Request,
    service: ClientService = Depends(get_client_service),
    session: AdminSession = Depends(require_admin),
) -> GeneratedUrlResponse:
    url = build_client_url(client_id, request.headers)
    try:
        service.update_client_generated_url(client_id, url)
    except ClientUrlUpdateError as exc:
        logger.error("generate_client_url client_id=%s failed: %s", client_id, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    logger.info("generate_client_url client_id=%s admin=%s url=%s", client_id, session.email, url)
    return GeneratedUrlResponse(url=url)


@router.get("/{client_id}/dashboard", response_model=DashboardView)
def client_dashboard(
    client_id: str,
    month: Optional[str] = Query(default=None, pattern=MONTH_KEY_PATTERN.pattern),
    consultant: Optional[str] = Query(default=None),
    service: ClientService = Depends(get_client_service),
) -> DashboardView:
    try:
        view = build_dashboard(
            client_id,
            clients=service,
            month=month or None,
            consultant=consultant or None,
        )
    except ClientsFetchError as exc:
        # an unreachable client record reads as a missing dashboard
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found") from exc
    if view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return view
