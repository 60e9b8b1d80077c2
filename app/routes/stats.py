"""
Dashboard statistics endpoints.

Computed from the report collection on every request; nothing is cached.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import AdminIdentity, get_current_admin
from app.core.container import Services, get_services
from app.core.errors import ReportServiceError
from app.routes.errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("")
async def get_dashboard_stats(
    admin: AdminIdentity = Depends(get_current_admin),
    services: Services = Depends(get_services),
):
    """
    Status counts, 7/30-day report counts and their trend against the
    previous window. A trend is null when the previous window is empty.
    """
    try:
        return {"success": True, "stats": services.statistics.dashboard()}
    except ReportServiceError as e:
        raise http_error(e, "Dashboard stats")
    except Exception as e:
        logger.error(f"❌ GET /stats failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to compute stats: {str(e)}"
        )


@router.get("/charts")
async def get_chart_data(
    admin: AdminIdentity = Depends(get_current_admin),
    services: Services = Depends(get_services),
):
    """Daily counts for the last 30 UTC days and counts per category."""
    try:
        return {"success": True, "charts": services.statistics.charts()}
    except ReportServiceError as e:
        raise http_error(e, "Chart data")
    except Exception as e:
        logger.error(f"❌ GET /stats/charts failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to compute chart data: {str(e)}"
        )
