"""
In-process evaluation of ReportQuery / SortSpec / Aggregation.

Firestore can only push down equality filters efficiently (one range filter,
no substring search), so both repositories evaluate the remaining clauses here.
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from app.repositories.base import Aggregation, ReportQuery, SortSpec
from app.utils.clock import as_utc_datetime

SEARCH_FIELDS = ("title", "content", "author_name")


def has_location(document: Dict[str, Any]) -> bool:
    location = document.get("location")
    if not isinstance(location, dict):
        return False
    return location.get("latitude") is not None and location.get("longitude") is not None


def matches(document: Dict[str, Any], query: Optional[ReportQuery]) -> bool:
    if query is None:
        return True

    if query.search:
        term = query.search.lower()
        if not any(
            isinstance(document.get(name), str) and term in document[name].lower()
            for name in SEARCH_FIELDS
        ):
            return False

    if query.author_id and document.get("author_id") != query.author_id:
        return False
    if query.status and document.get("status") != query.status:
        return False
    if query.priority and document.get("priority") != query.priority:
        return False
    if query.category and document.get("category") != query.category:
        return False
    if query.exclude_statuses and document.get("status") in query.exclude_statuses:
        return False

    if query.created_from or query.created_to or query.created_before:
        created_at = as_utc_datetime(document.get("created_at"))
        if created_at is None:
            return False
        if query.created_from and created_at < query.created_from:
            return False
        if query.created_to and created_at > query.created_to:
            return False
        if query.created_before and created_at >= query.created_before:
            return False

    if query.has_location is not None and has_location(document) != query.has_location:
        return False

    return True


def _sort_value(document: Dict[str, Any], field: str) -> Any:
    value = document.get(field)
    if field.endswith("_at"):
        return as_utc_datetime(value)
    return value


def sort_documents(documents: Iterable[Dict[str, Any]], sort: SortSpec) -> List[Dict[str, Any]]:
    """
    Sort by sort.field, ties broken by id. Documents without the field go last
    regardless of direction.
    """
    present, missing = [], []
    for doc in documents:
        (missing if _sort_value(doc, sort.field) is None else present).append(doc)

    try:
        present.sort(key=lambda d: (_sort_value(d, sort.field), str(d.get("id", ""))), reverse=sort.descending)
    except TypeError:
        # Mixed legacy value types: fall back to string comparison
        present.sort(key=lambda d: (str(_sort_value(d, sort.field)), str(d.get("id", ""))), reverse=sort.descending)

    missing.sort(key=lambda d: str(d.get("id", "")))
    return present + missing


def _group_key(document: Dict[str, Any], pipeline: Aggregation) -> Any:
    value = document.get(pipeline.group_by)
    if pipeline.bucket == "day":
        dt = as_utc_datetime(value)
        return dt.strftime("%Y-%m-%d") if dt else None
    return value


def run_aggregation(documents: Iterable[Dict[str, Any]], pipeline: Aggregation) -> List[Dict[str, Any]]:
    if not pipeline.group_by:
        total = sum(1 for doc in documents if matches(doc, pipeline.match))
        return [{"key": None, "count": total}]

    counts: Dict[Any, int] = defaultdict(int)
    for doc in documents:
        if matches(doc, pipeline.match):
            counts[_group_key(doc, pipeline)] += 1
    return [{"key": key, "count": count} for key, count in counts.items()]
