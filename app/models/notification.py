"""
Pydantic models for per-category WhatsApp notification settings.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, Optional


class CategoryNotificationSetting(BaseModel):
    """Recipient for one category. Unlinked or empty phone means no message is sent."""
    phone: str = Field(default="", max_length=32, description="Recipient phone number")
    linked: bool = Field(default=False, description="Whether notifications are enabled")


class WhatsAppSettings(BaseModel):
    categories: Dict[str, CategoryNotificationSetting] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None


class WhatsAppSettingsUpdate(BaseModel):
    """Partial update: only the listed categories are replaced."""
    categories: Dict[str, CategoryNotificationSetting] = Field(..., description="Settings keyed by category")
