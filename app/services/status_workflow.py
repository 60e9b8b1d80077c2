"""
Status Workflow - report status rules.

Normal flow:
    pending -> processing -> completed
    pending | processing -> rejected

Admins may move a report to any status, including re-opening completed or
rejected reports to correct mistakes. The transition table below documents the
expected flow for UIs; it is not used to refuse a transition.
"""

from typing import Dict, List, Optional

from app.core.errors import ValidationError
from app.models.report import ReportStatus


class StatusWorkflowEngine:
    """
    Rules:
    - Every status is reachable from every status
    - Leaving "pending" stamps reviewer metadata
    - Rejection reason only lives on rejected reports
    """

    INITIAL_STATUS = ReportStatus.PENDING

    TERMINAL_STATUSES = (ReportStatus.COMPLETED, ReportStatus.REJECTED)

    # Expected next statuses, for display
    EXPECTED_TRANSITIONS: Dict[ReportStatus, List[ReportStatus]] = {
        ReportStatus.PENDING: [ReportStatus.PROCESSING, ReportStatus.REJECTED],
        ReportStatus.PROCESSING: [ReportStatus.COMPLETED, ReportStatus.REJECTED],
        ReportStatus.COMPLETED: [],
        ReportStatus.REJECTED: [],
    }

    # Statuses whose entry records who reviewed the report and when
    REVIEW_STATUSES = (ReportStatus.PROCESSING, ReportStatus.COMPLETED, ReportStatus.REJECTED)

    @classmethod
    def parse_status(cls, value) -> ReportStatus:
        """
        Raises:
            ValidationError: value is not a known status
        """
        if isinstance(value, ReportStatus):
            return value
        try:
            return ReportStatus(value)
        except ValueError:
            allowed = ", ".join(s.value for s in ReportStatus)
            raise ValidationError(f"Invalid status '{value}'. Allowed: {allowed}")

    @classmethod
    def is_terminal(cls, status: Optional[str]) -> bool:
        return status in {s.value for s in cls.TERMINAL_STATUSES}

    @classmethod
    def get_allowed_transitions(cls, current_status: Optional[str]) -> List[str]:
        return [s.value for s in ReportStatus if s.value != current_status]

    @classmethod
    def get_expected_transitions(cls, current_status: Optional[str]) -> List[str]:
        try:
            current = ReportStatus(current_status)
        except ValueError:
            return [ReportStatus.PROCESSING.value, ReportStatus.REJECTED.value]
        return [s.value for s in cls.EXPECTED_TRANSITIONS[current]]

    @classmethod
    def stamps_reviewer(cls, to_status: ReportStatus) -> bool:
        return to_status in cls.REVIEW_STATUSES

    @classmethod
    def normalize_rejection_reason(cls, reason: Optional[str]) -> Optional[str]:
        """Empty string means no reason. Other values are stored untrimmed."""
        if reason is None or reason == "":
            return None
        return reason
