"""
Firestore-backed repositories.

Equality clauses (author / status / priority / category) are pushed down to Firestore;
search, date range, location presence and the default status exclusion are
evaluated in Python because Firestore allows one range filter per query and
has no substring matching.
"""

import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from app.core.errors import NotFound, PersistenceError
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
from app.utils.firestore_helpers import where_filter

logger = logging.getLogger(__name__)


class FirestoreReportRepository(ReportRepository):

    def __init__(self, db: firestore.Client, collection: str = "reports"):
        self.db = db
        self.collection_name = collection

    @property
    def collection(self):
        return self.db.collection(self.collection_name)

    def _base_query(self, query: Optional[ReportQuery]):
        ref = self.collection
        if query is None:
            return ref
        if query.author_id:
            ref = where_filter(ref, "author_id", "==", query.author_id)
        if query.status:
            ref = where_filter(ref, "status", "==", query.status)
        if query.priority:
            ref = where_filter(ref, "priority", "==", query.priority)
        if query.category:
            ref = where_filter(ref, "category", "==", query.category)
        return ref

    def _stream(self, query: Optional[ReportQuery]) -> List[Dict[str, Any]]:
        try:
            documents = []
            for doc in self._base_query(query).stream():
                data = doc.to_dict() or {}
                data["id"] = doc.id
                documents.append(data)
            return documents
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Firestore query on {self.collection_name} failed: {e}", exc_info=True)
            raise PersistenceError(f"Failed to query reports: {e}") from e

    def find(self, query: ReportQuery, sort: SortSpec, skip: int = 0, limit: Optional[int] = None) -> FindResult:
        matched = [doc for doc in self._stream(query) if matches(doc, query)]
        ordered = sort_documents(matched, sort)
        end = None if limit is None else skip + limit
        return FindResult(documents=ordered[skip:end], matched=len(matched))

    def find_one(self, report_id: str) -> Optional[Dict[str, Any]]:
        try:
            doc = self.collection.document(report_id).get()
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Failed to read report {report_id}: {e}") from e
        if not doc.exists:
            return None
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return data

    def insert(self, document: Dict[str, Any]) -> str:
        doc_ref = self.collection.document()  # Auto-generate unique ID
        data = dict(document)
        data["id"] = doc_ref.id
        try:
            doc_ref.set(data)
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Failed to save report to Firestore: {e}", exc_info=True)
            raise PersistenceError(f"Failed to save report: {e}") from e
        return doc_ref.id

    def update_one(self, report_id: str, changes: Dict[str, Any]) -> None:
        payload = {
            key: (firestore.DELETE_FIELD if value is FIELD_DELETE else value)
            for key, value in changes.items()
        }
        try:
            self.collection.document(report_id).update(payload)
        except google_exceptions.NotFound as e:
            raise NotFound("Report", report_id) from e
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Failed to update report {report_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update report {report_id}: {e}") from e

    def delete_one(self, report_id: str) -> int:
        doc_ref = self.collection.document(report_id)
        try:
            if not doc_ref.get().exists:
                return 0
            doc_ref.delete()
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Failed to delete report {report_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete report {report_id}: {e}") from e
        return 1

    def aggregate(self, pipeline: Aggregation) -> List[Dict[str, Any]]:
        return run_aggregation(self._stream(pipeline.match), pipeline)

    def ping(self) -> bool:
        # Just a reference plus a single-document read
        list(self.collection.limit(1).stream())
        return True


class FirestoreSettingsRepository(SettingsRepository):

    def __init__(self, db: firestore.Client, collection: str = "settings"):
        self.db = db
        self.collection_name = collection

    def get(self, name: str) -> Optional[Dict[str, Any]]:
        try:
            doc = self.db.collection(self.collection_name).document(name).get()
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Failed to read settings {name}: {e}") from e
        return doc.to_dict() if doc.exists else None

    def set(self, name: str, data: Dict[str, Any]) -> None:
        try:
            self.db.collection(self.collection_name).document(name).set(data)
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Failed to save settings {name}: {e}") from e


class FirestoreUserRepository(UserRepository):
    """One document per user, the document id being the user id."""

    def __init__(self, db: firestore.Client, collection: str = "users"):
        self.db = db
        self.collection_name = collection

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            doc = self.db.collection(self.collection_name).document(user_id).get()
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Failed to read user {user_id}: {e}") from e
        if not doc.exists:
            return None
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return data

    def set(self, user_id: str, data: Dict[str, Any]) -> None:
        payload = dict(data)
        payload["id"] = user_id
        try:
            self.db.collection(self.collection_name).document(user_id).set(payload)
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Failed to save user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to save user {user_id}: {e}") from e
