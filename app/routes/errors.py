"""
Translate service-layer errors into HTTP errors.
"""

import logging

from fastapi import HTTPException, status

from app.core.errors import (
    NotFound,
    PersistenceError,
    ReportServiceError,
    UploadFailed,
    ValidationError,
)

logger = logging.getLogger(__name__)

UPLOAD_STATUS_CODES = {
    UploadFailed.INVALID_PAYLOAD: status.HTTP_400_BAD_REQUEST,
    UploadFailed.NOT_CONFIGURED: status.HTTP_503_SERVICE_UNAVAILABLE,
    UploadFailed.STORAGE_ERROR: status.HTTP_502_BAD_GATEWAY,
}


def http_error(exc: ReportServiceError, action: str) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, UploadFailed):
        return HTTPException(
            status_code=UPLOAD_STATUS_CODES.get(exc.reason, status.HTTP_502_BAD_GATEWAY),
            detail=f"Image upload failed ({exc.reason}): {exc}",
        )
    if isinstance(exc, PersistenceError):
        logger.error(f"❌ {action} failed: {exc}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"{action} failed: {exc}",
    )
