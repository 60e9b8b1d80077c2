"""
Domain errors raised by the report services.

Routers translate these into HTTP responses; services never build HTTP errors.
"""

from typing import Optional


class ReportServiceError(Exception):
    """Base class for every error raised by the service layer."""


class ValidationError(ReportServiceError):
    """Malformed input: bad enum value, missing paired field, unknown category."""


class NotFound(ReportServiceError):
    """The addressed report or setting does not exist."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")


class UploadFailed(ReportServiceError):
    """
    Media ingestion could not complete.

    reason is one of:
    - "not_configured": storage bucket missing (deployment problem)
    - "invalid_payload": image could not be decoded
    - "storage_error": transient storage failure, caller may retry
    """

    NOT_CONFIGURED = "not_configured"
    INVALID_PAYLOAD = "invalid_payload"
    STORAGE_ERROR = "storage_error"

    def __init__(self, message: str, reason: str = STORAGE_ERROR, filename: Optional[str] = None):
        self.reason = reason
        self.filename = filename
        super().__init__(message)


class EnrichmentUnavailable(ReportServiceError):
    """Reverse geocoding failed. Never surfaced to API callers."""


class NotificationFailed(ReportServiceError):
    """Outbound WhatsApp message could not be sent. Never surfaced to API callers."""


class PersistenceError(ReportServiceError):
    """Any repository failure other than not-found."""
