"""
In-memory repositories.

Used when USE_MOCK_DB=true (local development without Firebase credentials)
and by the test suite. Documents are deep-copied on the way in and out so
callers can never mutate stored state by accident.
"""

import copy
import threading
import uuid
from typing import Any, Dict, List, Optional

from app.core.errors import NotFound
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
from app.repositories.query import matches, run_aggregation, sort_documents


def _new_id() -> str:
    # Same length as Firestore auto-generated document IDs
    return uuid.uuid4().hex[:20]


class InMemoryReportRepository(ReportRepository):

    def __init__(self, documents: Optional[List[Dict[str, Any]]] = None):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        for doc in documents or []:
            self.insert(doc)

    def _snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(doc) for doc in self._docs.values()]

    def find(self, query: ReportQuery, sort: SortSpec, skip: int = 0, limit: Optional[int] = None) -> FindResult:
        matched = [doc for doc in self._snapshot() if matches(doc, query)]
        ordered = sort_documents(matched, sort)
        end = None if limit is None else skip + limit
        return FindResult(documents=ordered[skip:end], matched=len(matched))

    def find_one(self, report_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._docs.get(report_id)
            return copy.deepcopy(doc) if doc is not None else None

    def insert(self, document: Dict[str, Any]) -> str:
        doc = copy.deepcopy(document)
        report_id = doc.get("id") or _new_id()
        doc["id"] = report_id
        with self._lock:
            self._docs[report_id] = doc
        return report_id

    def update_one(self, report_id: str, changes: Dict[str, Any]) -> None:
        with self._lock:
            doc = self._docs.get(report_id)
            if doc is None:
                raise NotFound("Report", report_id)
            for key, value in changes.items():
                if value is FIELD_DELETE:
                    doc.pop(key, None)
                else:
                    doc[key] = copy.deepcopy(value)

    def delete_one(self, report_id: str) -> int:
        with self._lock:
            return 1 if self._docs.pop(report_id, None) is not None else 0

    def aggregate(self, pipeline: Aggregation) -> List[Dict[str, Any]]:
        return run_aggregation(self._snapshot(), pipeline)


class InMemorySettingsRepository(SettingsRepository):

    def __init__(self):
        self._docs: Dict[str, Dict[str, Any]] = {}

    def get(self, name: str) -> Optional[Dict[str, Any]]:
        doc = self._docs.get(name)
        return copy.deepcopy(doc) if doc is not None else None

    def set(self, name: str, data: Dict[str, Any]) -> None:
        self._docs[name] = copy.deepcopy(data)


class InMemoryUserRepository(UserRepository):

    def __init__(self):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._docs.get(user_id)
            return copy.deepcopy(doc) if doc is not None else None

    def set(self, user_id: str, data: Dict[str, Any]) -> None:
        doc = copy.deepcopy(data)
        doc["id"] = user_id
        with self._lock:
            self._docs[user_id] = doc
