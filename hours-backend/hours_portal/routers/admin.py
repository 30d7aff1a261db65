from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status

from ..dependencies import require_admin
from ..services.auth import AdminSession
from ..services.clients import field_name_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/cache/clear", status_code=status.HTTP_204_NO_CONTENT)
def clear_field_cache(session: AdminSession = Depends(require_admin)) -> Response:
    field_name_cache.clear()
    logger.info("field_name_cache cleared by %s", session.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
