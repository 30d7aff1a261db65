from .clients import AdminSessionResponse, ClientRecord, GeneratedUrlResponse, LoginRequest
from .dashboard import DashboardView, MonthOption
from .hours import BILLABLE, NON_BILLABLE, EntryStatus, HourEntry, HoursSummary

__all__ = [
    "AdminSessionResponse",
    "BILLABLE",
    "ClientRecord",
    "DashboardView",
    "EntryStatus",
    "GeneratedUrlResponse",
    "HourEntry",
    "HoursSummary",
    "LoginRequest",
    "MonthOption",
    "NON_BILLABLE",
]
