from __future__ import annotations

import logging
from typing import Optional

from ..models import DashboardView
from .clients import ClientService
from .employees import EmployeeNameResolver
from .hours import HoursFetchError, get_hours_by_client_id, summarize
from .view import consultant_options, filter_entries, month_options

logger = logging.getLogger(__name__)


def build_dashboard(
    client_id: str,
    *,
    clients: ClientService,
    resolver: Optional[EmployeeNameResolver] = None,
    month: Optional[str] = None,
    consultant: Optional[str] = None,
) -> Optional[DashboardView]:
    """Public dashboard for one client, or ``None`` when the client is unknown.

    Hours that cannot be fetched leave the dashboard empty rather than failing it.
    """
    client = clients.get_client_by_id(client_id)
    if client is None:
        return None

    hours_available = True
    try:
        entries = get_hours_by_client_id(client_id, repo=clients.repo, resolver=resolver)
    except HoursFetchError:
        logger.warning("Showing empty dashboard for client %s; hours unavailable", client_id)
        entries = []
        hours_available = False

    visible = filter_entries(entries, month=month, consultant=consultant)
    return DashboardView(
        client=client,
        entries=visible,
        summary=summarize(visible),
        months=month_options(entries),
        consultants=consultant_options(entries),
        selected_month=month,
        selected_consultant=consultant,
        hours_available=hours_available,
    )
