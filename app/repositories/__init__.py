"""
Repositories - document store access for reports, settings and users.
"""

from app.repositories.base import (
    FIELD_DELETE,
    Aggregation,
    FindResult,
    ReportQuery,
    ReportRepository,
    SettingsRepository,
    SortSpec,
    UserRepository,
)
from app.repositories.memory import InMemoryReportRepository, InMemorySettingsRepository, InMemoryUserRepository

__all__ = [
    "FIELD_DELETE",
    "Aggregation",
    "FindResult",
    "ReportQuery",
    "ReportRepository",
    "SettingsRepository",
    "SortSpec",
    "UserRepository",
    "InMemoryReportRepository",
    "InMemorySettingsRepository",
    "InMemoryUserRepository",
]
