"""
Admin endpoints - report triage.

DESIGN PRINCIPLES:
- Every endpoint here requires an authenticated admin identity
- Status changes go through one endpoint; content edits never touch status
- Any status can be set from any status (admins correct their own mistakes)
- WhatsApp notification on "processing" never changes the response
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import AdminIdentity, get_current_admin
from app.core.container import Services, get_services
from app.core.errors import ReportServiceError
from app.models.report import ReportUpdate, StatusTransitionRequest
from app.routes.errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.patch("/reports/{report_id}/status")
async def change_status(
    report_id: str,
    request: StatusTransitionRequest,
    admin: AdminIdentity = Depends(get_current_admin),
    services: Services = Depends(get_services),
):
    """
    Change report status.

    **Side effects:**
    - processing / completed / rejected record the reviewing admin and time
    - rejected stores the optional rejection_reason
    - processing sends a WhatsApp message to the category's linked number

    Raises:
        404: Report not found
        422: Unknown status
        500: Server error
    """
    try:
        updated_report = services.reports.transition(
            report_id=report_id,
            new_status=request.status.value,
            admin=admin,
            rejection_reason=request.rejection_reason,
            location=request.location,
        )
        return {
            "success": True,
            "message": f"Status updated to {request.status.value}",
            "report": updated_report,
        }
    except HTTPException:
        raise
    except ReportServiceError as e:
        raise http_error(e, "Status update")
    except Exception as e:
        logger.error(f"❌ Status update for {report_id} failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update status: {str(e)}"
        )


@router.patch("/reports/{report_id}")
async def update_report(
    report_id: str,
    request: ReportUpdate,
    admin: AdminIdentity = Depends(get_current_admin),
    services: Services = Depends(get_services),
):
    """Edit title, content, category, priority, tags, images or location."""
    try:
        updated_report = services.reports.update_content(report_id, request)
        return {
            "success": True,
            "message": "Report updated",
            "report": updated_report,
        }
    except ReportServiceError as e:
        raise http_error(e, "Report update")
    except Exception as e:
        logger.error(f"❌ Update of {report_id} by {admin.id} failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update report: {str(e)}"
        )


@router.delete("/reports/{report_id}")
async def delete_report(
    report_id: str,
    admin: AdminIdentity = Depends(get_current_admin),
    services: Services = Depends(get_services),
):
    try:
        services.reports.delete_report(report_id)
        logger.info(f"Admin {admin.id} deleted report {report_id}")
        return {"success": True, "message": f"Report {report_id} deleted"}
    except ReportServiceError as e:
        raise http_error(e, "Report deletion")
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete report: {str(e)}"
        )


@router.get("/reports/{report_id}/allowed-transitions")
async def get_allowed_transitions(
    report_id: str,
    admin: AdminIdentity = Depends(get_current_admin),
    services: Services = Depends(get_services),
):
    """
    Statuses the report can be moved to, plus the usual next steps for UIs.
    """
    try:
        return {"success": True, "report_id": report_id, **services.reports.get_allowed_transitions(report_id)}
    except ReportServiceError as e:
        raise http_error(e, "Transition lookup")
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to get allowed transitions: {str(e)}"
        )
