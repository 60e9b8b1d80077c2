"""
Report service - lifecycle of citizen reports.

Handles intake, admin status transitions, content edits, listing and deletion.

DESIGN NOTE:
- Status is always "pending" on intake, whatever the client sends
- Address enrichment is best-effort and never blocks a write
- Image upload failure aborts intake before anything is stored
- WhatsApp notification runs after the status change is persisted and its
  failure never changes the result returned to the admin
- Concurrent writes to the same report are last-write-wins
"""

import logging
import math
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from app.core.auth import AdminIdentity
from app.core.errors import NotFound, ValidationError
from app.models.report import (
    LocationInput,
    Pagination,
    ReportCategory,
    ReportCreate,
    ReportPage,
    ReportPriority,
    ReportResponse,
    ReportStatus,
    ReportUpdate,
)
from app.repositories.base import FIELD_DELETE, ReportQuery, ReportRepository, SortSpec
from app.services.enrichment_service import AddressEnrichmentService
from app.services.media_service import MediaIngestionService
from app.services.status_workflow import StatusWorkflowEngine
from app.services.whatsapp_service import PROCESSING_MESSAGE, NotificationDispatcher
from app.utils.clock import as_utc_datetime, utc_now

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = tuple(ReportResponse.model_fields)


def _unique_tags(tags: Optional[List[str]]) -> List[str]:
    seen = []
    for tag in tags or []:
        if tag not in seen:
            seen.append(tag)
    return seen


def _parse_enum(enum_cls, value: Optional[str], label: str) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {label} '{value}'. Allowed: {allowed}")


class ReportService:

    def __init__(
        self,
        repository: ReportRepository,
        enrichment: AddressEnrichmentService,
        media: MediaIngestionService,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Callable[[], datetime] = utc_now,
        default_page_size: int = 10,
        max_page_size: int = 100,
    ):
        self.repository = repository
        self.enrichment = enrichment
        self.media = media
        self.dispatcher = dispatcher
        self.clock = clock
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.workflow = StatusWorkflowEngine()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _require(self, report_id: str) -> Dict[str, Any]:
        document = self.repository.find_one(report_id)
        if document is None:
            raise NotFound("Report", report_id)
        return document

    def get_report(self, report_id: str) -> ReportResponse:
        return ReportResponse.from_document(self._require(report_id))

    def list_reports(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        has_location: Optional[bool] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: Optional[int] = None,
    ) -> ReportPage:
        """
        Filtered, sorted, paginated report listing.

        Rejected reports are only returned when explicitly asked for with
        status="rejected".
        """
        limit = limit or self.default_page_size
        if page < 1:
            raise ValidationError("page must be >= 1")
        if limit < 1 or limit > self.max_page_size:
            raise ValidationError(f"limit must be between 1 and {self.max_page_size}")
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(f"Cannot sort by '{sort_by}'")
        if sort_order not in ("asc", "desc"):
            raise ValidationError("sort_order must be 'asc' or 'desc'")

        created_from = as_utc_datetime(created_from)
        created_to = as_utc_datetime(created_to)
        if created_from and created_to and created_from > created_to:
            raise ValidationError("created_from must not be after created_to")

        status_value = _parse_enum(ReportStatus, status, "status")
        query = ReportQuery(
            search=(search or "").strip() or None,
            status=status_value,
            priority=_parse_enum(ReportPriority, priority, "priority"),
            category=_parse_enum(ReportCategory, category, "category"),
            created_from=created_from,
            created_to=created_to,
            has_location=has_location,
            exclude_statuses=() if status_value else (ReportStatus.REJECTED.value,),
        )

        result = self.repository.find(
            query,
            SortSpec(field=sort_by, descending=sort_order == "desc"),
            skip=(page - 1) * limit,
            limit=limit,
        )

        total_pages = math.ceil(result.matched / limit) if result.matched else 0
        return ReportPage(
            reports=[ReportResponse.from_document(doc) for doc in result.documents],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=result.matched,
                total_pages=total_pages,
                has_next=page < total_pages,
                has_prev=page > 1,
            ),
        )

    def get_allowed_transitions(self, report_id: str) -> Dict[str, Any]:
        current_status = self._require(report_id).get("status")
        return {
            "current_status": current_status,
            "allowed_transitions": self.workflow.get_allowed_transitions(current_status),
            "expected_transitions": self.workflow.get_expected_transitions(current_status),
            "terminal": self.workflow.is_terminal(current_status),
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _enrich(self, location: Optional[LocationInput]) -> Optional[Dict[str, Any]]:
        if location is None:
            return None
        return self.enrichment.enrich_location(location.model_dump())

    def _next_timestamp(self, current: Dict[str, Any]) -> datetime:
        # updated_at never moves backwards, even with clock skew between instances
        now = self.clock()
        previous = as_utc_datetime(current.get("updated_at"))
        return max(now, previous) if previous else now

    def create_report(self, report_data: ReportCreate) -> ReportResponse:
        """
        Public intake.

        Flow:
        1. Resolve address for the location (best-effort)
        2. Upload images in order (any failure aborts, nothing stored)
        3. Insert with status "pending"
        4. Return the stored report
        """
        location = self._enrich(report_data.location)
        images = self.media.ingest([image.model_dump() for image in report_data.images or []])

        now = self.clock()
        document = {
            "title": report_data.title,
            "content": report_data.content,
            "author_id": report_data.author_id,
            "author_name": report_data.author_name,
            "category": report_data.category.value,
            "priority": report_data.priority.value,
            "status": self.workflow.INITIAL_STATUS.value,
            "tags": _unique_tags(report_data.tags),
            "images": images,
            "location": location,
            "created_at": now,
            "updated_at": now,
        }

        report_id = self.repository.insert(document)
        logger.info(f"Report saved: {report_id} (category={document['category']})")
        return self.get_report(report_id)

    def transition(
        self,
        report_id: str,
        new_status: str,
        admin: AdminIdentity,
        rejection_reason: Optional[str] = None,
        location: Optional[LocationInput] = None,
    ) -> ReportResponse:
        """
        Move a report to new_status.

        Raises:
            ValidationError: unknown status
            NotFound: no report with that id
            PersistenceError: store write failed
        """
        status = self.workflow.parse_status(new_status)
        current = self._require(report_id)

        now = self._next_timestamp(current)
        changes: Dict[str, Any] = {"status": status.value, "updated_at": now}

        if self.workflow.stamps_reviewer(status):
            changes["reviewed_by"] = admin.id
            changes["reviewed_at"] = now

        if status == ReportStatus.REJECTED:
            reason = self.workflow.normalize_rejection_reason(rejection_reason)
            if reason is not None:
                changes["rejection_reason"] = reason
        elif current.get("rejection_reason") is not None:
            changes["rejection_reason"] = FIELD_DELETE

        if location is not None:
            changes["location"] = self._enrich(location)

        self.repository.update_one(report_id, changes)
        updated = self._require(report_id)
        logger.info(f"✅ Admin {admin.id} moved report {report_id}: {current.get('status')} -> {status.value}")

        if status == ReportStatus.PROCESSING:
            self._notify_processing(updated)

        return ReportResponse.from_document(updated)

    def _notify_processing(self, report: Dict[str, Any]) -> None:
        """Best-effort. The status change is already persisted."""
        if self.dispatcher is None:
            return
        category = report.get("category")
        if not category:
            logger.info(f"Report {report['id']} has no category, skipping WhatsApp notification")
            return
        try:
            self.dispatcher.notify(category, PROCESSING_MESSAGE)
        except Exception as e:
            logger.warning(f"⚠️ WhatsApp notification failed for report {report['id']}: {e}")

    def update_content(self, report_id: str, update: ReportUpdate) -> ReportResponse:
        """
        Edit report content. Never touches status or review metadata and never notifies.
        """
        current = self._require(report_id)

        fields = {key: value for key, value in update.model_dump(exclude_unset=True).items() if value is not None}
        if not fields:
            raise ValidationError("No fields to update")

        changes: Dict[str, Any] = {}
        for key in ("title", "content"):
            if key in fields:
                changes[key] = fields[key]
        if "category" in fields:
            changes["category"] = update.category.value
        if "priority" in fields:
            changes["priority"] = update.priority.value
        if "tags" in fields:
            changes["tags"] = _unique_tags(update.tags)
        if "location" in fields:
            changes["location"] = self._enrich(update.location)
        if "images" in fields:
            changes["images"] = self.media.ingest([image.model_dump() for image in update.images])

        changes["updated_at"] = self._next_timestamp(current)
        self.repository.update_one(report_id, changes)
        logger.info(f"Report {report_id} content updated: {', '.join(sorted(fields))}")
        return self.get_report(report_id)

    def delete_report(self, report_id: str) -> None:
        """Hard delete. Deleting twice raises NotFound the second time."""
        if self.repository.delete_one(report_id) == 0:
            raise NotFound("Report", report_id)
        logger.info(f"Report {report_id} deleted")
