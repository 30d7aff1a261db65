"""Service layer namespace."""

__all__ = [
    "auth",
    "clients",
    "dashboard",
    "employees",
    "hours",
    "normalize",
    "view",
]
