"""
Notification settings endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import AdminIdentity, get_current_admin
from app.core.container import Services, get_services
from app.core.errors import ReportServiceError
from app.models.notification import WhatsAppSettingsUpdate
from app.routes.errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/whatsapp")
async def get_whatsapp_settings(
    admin: AdminIdentity = Depends(get_current_admin),
    services: Services = Depends(get_services),
):
    """Per-category recipients. Created with empty, unlinked entries on first read."""
    try:
        return {"success": True, "settings": services.notification_settings.get_whatsapp_settings()}
    except ReportServiceError as e:
        raise http_error(e, "WhatsApp settings lookup")
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load WhatsApp settings: {str(e)}"
        )


@router.patch("/whatsapp")
async def update_whatsapp_settings(
    request: WhatsAppSettingsUpdate,
    admin: AdminIdentity = Depends(get_current_admin),
    services: Services = Depends(get_services),
):
    try:
        updated = services.notification_settings.update_whatsapp_settings(request.categories)
        logger.info(f"Admin {admin.id} updated WhatsApp settings")
        return {"success": True, "message": "WhatsApp settings updated", "settings": updated}
    except ReportServiceError as e:
        raise http_error(e, "WhatsApp settings update")
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update WhatsApp settings: {str(e)}"
        )
