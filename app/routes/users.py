"""
User registry endpoints used by the mobile app.
Public like report intake: the app identifies itself by the id in the path.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.container import Services, get_services
from app.core.errors import ReportServiceError
from app.models.user import PushTokenUpdate, UserRegister
from app.routes.errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/{user_id}", status_code=status.HTTP_201_CREATED)
async def register_user(user_id: str, request: UserRegister, services: Services = Depends(get_services)):
    try:
        logger.info(f"📱 POST /users/{user_id} - device={request.device_type}, app={request.app_version}")
        user = services.users.register(user_id, request)
        return {"success": True, "message": "User registered", "user": user}
    except ReportServiceError as e:
        raise http_error(e, "User registration")
    except Exception as e:
        logger.error(f"❌ POST /users/{user_id} failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"User registration failed: {str(e)}"
        )


@router.put("/{user_id}")
async def update_push_token(user_id: str, request: PushTokenUpdate, services: Services = Depends(get_services)):
    try:
        user = services.users.set_push_token(user_id, request.push_token)
        return {"success": True, "message": "User updated", "user": user}
    except ReportServiceError as e:
        raise http_error(e, "User update")
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update user: {str(e)}"
        )


@router.get("/{user_id}")
async def get_user(user_id: str, services: Services = Depends(get_services)):
    """The user's device details plus how many reports they have submitted."""
    try:
        return {"success": True, "user": services.users.get_user(user_id)}
    except ReportServiceError as e:
        raise http_error(e, "User lookup")
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to retrieve user: {str(e)}"
        )
