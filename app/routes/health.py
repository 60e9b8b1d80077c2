"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, Depends, HTTPException

from app.core.container import Services, get_services
from app.core.settings import settings
from app.utils.clock import utc_now


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": utc_now().isoformat()
    }


@router.get("/db")
async def database_health(services: Services = Depends(get_services)):
    """
    Database connectivity check.
    Reads at most one report document.
    """
    try:
        services.repository.ping()
        return {
            "status": "healthy",
            "database": type(services.repository).__name__,
            "connected": True,
            "timestamp": utc_now().isoformat()
        }
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )
