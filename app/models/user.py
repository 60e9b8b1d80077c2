"""
User models for the mobile app's device registry.
A user is an app installation; its id is what reports carry as author_id.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class UserRegister(BaseModel):
    """Device details sent by the app on first launch."""
    device_type: Optional[str] = Field(None, max_length=50, description="e.g. android, ios")
    os_version: Optional[str] = Field(None, max_length=50)
    app_version: Optional[str] = Field(None, max_length=50)
    language: Optional[str] = Field(None, max_length=10, description="Preferred UI language")

    class Config:
        json_schema_extra = {
            "example": {
                "device_type": "android",
                "os_version": "14",
                "app_version": "1.2.0",
                "language": "ar",
            }
        }
        extra = "ignore"


class PushTokenUpdate(BaseModel):
    push_token: str = Field(..., min_length=1, max_length=4096, description="Push notification token")


class UserResponse(BaseModel):
    """Model for user responses."""
    id: str = Field(..., description="Client-chosen user id")
    device_type: Optional[str] = None
    os_version: Optional[str] = None
    app_version: Optional[str] = None
    language: Optional[str] = None
    push_token: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    report_count: int = Field(default=0, description="Reports submitted with this author_id")
