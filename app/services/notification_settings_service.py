"""
Notification settings - per-category WhatsApp recipient configuration.

Stored as a single settings document. Created lazily with an unlinked, empty
entry for every known category the first time it is read.
"""

import logging
from typing import Callable, Dict, Optional

from app.core.errors import ValidationError
from app.models.notification import CategoryNotificationSetting, WhatsAppSettings
from app.models.report import ReportCategory
from app.repositories.base import SettingsRepository
from app.utils.clock import utc_now

logger = logging.getLogger(__name__)

WHATSAPP_SETTINGS_NAME = "whatsapp_settings"


def default_categories() -> Dict[str, CategoryNotificationSetting]:
    return {category.value: CategoryNotificationSetting() for category in ReportCategory}


class NotificationSettingsService:

    def __init__(self, repository: SettingsRepository, clock: Callable = utc_now):
        self.repository = repository
        self.clock = clock

    def get_whatsapp_settings(self) -> WhatsAppSettings:
        stored = self.repository.get(WHATSAPP_SETTINGS_NAME)
        if stored is None:
            settings = WhatsAppSettings(categories=default_categories(), updated_at=self.clock())
            self._save(settings)
            logger.info("Created default WhatsApp settings")
            return settings

        categories = default_categories()
        for name, value in (stored.get("categories") or {}).items():
            # Legacy entries for categories that no longer exist are kept as-is
            categories[name] = CategoryNotificationSetting(**(value or {}))
        return WhatsAppSettings(categories=categories, updated_at=stored.get("updated_at"))

    def update_whatsapp_settings(self, categories: Dict[str, CategoryNotificationSetting]) -> WhatsAppSettings:
        known = {category.value for category in ReportCategory}
        unknown = sorted(set(categories) - known)
        if unknown:
            raise ValidationError(f"Unknown categories: {', '.join(unknown)}")

        settings = self.get_whatsapp_settings()
        settings.categories.update(categories)
        settings.updated_at = self.clock()
        self._save(settings)
        logger.info(f"WhatsApp settings updated for: {', '.join(sorted(categories)) or 'none'}")
        return settings

    def get_category_setting(self, category: str) -> Optional[CategoryNotificationSetting]:
        return self.get_whatsapp_settings().categories.get(category)

    def _save(self, settings: WhatsAppSettings) -> None:
        self.repository.set(WHATSAPP_SETTINGS_NAME, settings.model_dump())
