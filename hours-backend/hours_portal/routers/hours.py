from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_repo
from ..models import HourEntry
from ..repos.airtable_repo import AirtableRepo
from ..services.hours import HoursFetchError, get_hours_by_client_id

router = APIRouter(prefix="/api/hours", tags=["hours"])


@router.get("/{client_id}", response_model=List[HourEntry])
def hours_for_client(client_id: str, repo: AirtableRepo = Depends(get_repo)) -> List[HourEntry]:
    if not client_id.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Client ID is required")
    try:
        return get_hours_by_client_id(client_id, repo=repo)
    except HoursFetchError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
