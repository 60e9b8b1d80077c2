"""
Report endpoints - public intake and read access.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.container import Services, get_services
from app.core.errors import ReportServiceError
from app.models.report import ReportCreate
from app.routes.errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_report(report: ReportCreate, services: Services = Depends(get_services)):
    """
    Submit a new citizen report.

    This endpoint:
    1. Validates the report data (category required)
    2. Resolves an address for the location when none was given
    3. Uploads inline images
    4. Stores the report with status "pending"
    """
    try:
        logger.info(f"📝 POST /reports - category={report.category.value}, images={len(report.images or [])}")
        created = services.reports.create_report(report)
        return {
            "success": True,
            "message": "Report submitted",
            "report": created,
        }
    except HTTPException:
        raise
    except ReportServiceError as e:
        raise http_error(e, "Report creation")
    except Exception as e:
        logger.error(f"❌ POST /reports - Report creation failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Report creation failed: {str(e)}"
        )


@router.get("")
async def list_reports(
    search: Optional[str] = Query(None, description="Substring of title, content or author name"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    category: Optional[str] = Query(None, description="Filter by category"),
    created_from: Optional[datetime] = Query(None, description="Created at or after"),
    created_to: Optional[datetime] = Query(None, description="Created at or before"),
    has_location: Optional[bool] = Query(None, description="Only reports with (or without) coordinates"),
    sort_by: str = Query("created_at", description="Field to sort by"),
    sort_order: str = Query("desc", description="asc | desc"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, description="Page size"),
    services: Services = Depends(get_services),
):
    """
    List reports. Rejected reports are hidden unless status=rejected is requested.
    """
    try:
        result = services.reports.list_reports(
            search=search,
            status=status_filter,
            priority=priority,
            category=category,
            created_from=created_from,
            created_to=created_to,
            has_location=has_location,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        return {
            "success": True,
            "reports": result.reports,
            "pagination": result.pagination,
            "filters": {
                "search": search,
                "status": status_filter,
                "priority": priority,
                "category": category,
                "created_from": created_from,
                "created_to": created_to,
                "has_location": has_location,
                "sort_by": sort_by,
                "sort_order": sort_order,
            },
        }
    except ReportServiceError as e:
        raise http_error(e, "Report listing")
    except Exception as e:
        logger.error(f"❌ GET /reports failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to retrieve reports: {str(e)}",
        )


@router.get("/{report_id}")
async def get_report(report_id: str, services: Services = Depends(get_services)):
    try:
        return {"success": True, "report": services.reports.get_report(report_id)}
    except ReportServiceError as e:
        raise http_error(e, "Report lookup")
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to retrieve report: {str(e)}",
        )
