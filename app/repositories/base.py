"""
Storage contracts for reports, settings and registered users.

The services are written against these interfaces only. Production uses
Firestore; local development (USE_MOCK_DB) and tests use the in-memory store.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


class _FieldDelete:
    def __repr__(self) -> str:
        return "FIELD_DELETE"


# Marker value for update_one(): remove the field from the stored document
FIELD_DELETE = _FieldDelete()


@dataclass
class ReportQuery:
    """
    Filter clauses, all optional and ANDed together.

    search matches case-insensitively against title, content or author_name.
    created_from / created_to are inclusive bounds on created_at.
    """
    search: Optional[str] = None
    author_id: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    category: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    created_before: Optional[datetime] = None  # exclusive upper bound
    has_location: Optional[bool] = None
    exclude_statuses: Tuple[str, ...] = ()


@dataclass
class SortSpec:
    field: str = "created_at"
    descending: bool = True


@dataclass
class Aggregation:
    """
    Count documents matching `match`, optionally grouped.

    group_by names a document field. With bucket="day" the field is treated as
    a timestamp and grouped by its UTC calendar date (YYYY-MM-DD).
    Rows come back as {"key": <group value>, "count": <int>}; without group_by
    a single row with key None is returned.
    """
    match: Optional[ReportQuery] = None
    group_by: Optional[str] = None
    bucket: Optional[str] = None


@dataclass
class FindResult:
    documents: List[Dict[str, Any]] = field(default_factory=list)
    matched: int = 0


class ReportRepository(ABC):
    """Document store for reports. Documents carry their identifier under "id"."""

    @abstractmethod
    def find(self, query: ReportQuery, sort: SortSpec, skip: int = 0, limit: Optional[int] = None) -> FindResult:
        raise NotImplementedError

    @abstractmethod
    def find_one(self, report_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, document: Dict[str, Any]) -> str:
        raise NotImplementedError

    @abstractmethod
    def update_one(self, report_id: str, changes: Dict[str, Any]) -> None:
        """Set the given fields (FIELD_DELETE removes one). Raises NotFound if missing."""
        raise NotImplementedError

    @abstractmethod
    def delete_one(self, report_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def aggregate(self, pipeline: Aggregation) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def ping(self) -> bool:
        return True


class SettingsRepository(ABC):
    """Named configuration documents (e.g. "whatsapp_settings")."""

    @abstractmethod
    def get(self, name: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def set(self, name: str, data: Dict[str, Any]) -> None:
        raise NotImplementedError


class UserRepository(ABC):
    """Registered app installations, keyed by the client-chosen user id."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def set(self, user_id: str, data: Dict[str, Any]) -> None:
        raise NotImplementedError
