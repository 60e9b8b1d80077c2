"""
WhatsApp notification - tell the responsible team about reports entering "processing".

DESIGN PRINCIPLES:
- WhatsApp is a COMMUNICATION CHANNEL, not a source of truth
- One recipient per category, configured by admins (see notification_settings_service)
- Unlinked categories or empty phone numbers mean "no message", not an error
- The dispatcher propagates failures; the report service decides to swallow them

Messages go through the WhatsApp Cloud API (Facebook Graph API) and only reach
recipients inside the 24-hour messaging window unless a template is used.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from app.core.errors import NotificationFailed
from app.services.notification_settings_service import NotificationSettingsService

logger = logging.getLogger(__name__)

PROCESSING_MESSAGE = "You have a new report to process."


def normalize_phone(phone: Optional[str]) -> str:
    """Digits only, no + prefix: "+20 123-456-7890" -> "201234567890"."""
    return re.sub(r"\D", "", phone or "")


class Messenger(ABC):

    @abstractmethod
    def send(self, to: str, text: str) -> str:
        """Send a text message. Returns the provider message id. Raises NotificationFailed."""
        raise NotImplementedError


class WhatsAppClient(Messenger):
    """Thin client for POST {base}/{phone_number_id}/messages."""

    def __init__(
        self,
        access_token: Optional[str],
        phone_number_id: Optional[str],
        api_base: str = "https://graph.facebook.com/v22.0",
        timeout: float = 5.0,
    ):
        self.access_token = access_token
        self.phone_number_id = phone_number_id
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    def send(self, to: str, text: str) -> str:
        if not self.access_token:
            raise NotificationFailed("WhatsApp API is not configured: WHATSAPP_ACCESS_TOKEN is missing")
        if not self.phone_number_id:
            raise NotificationFailed("WhatsApp API is not configured: WHATSAPP_PHONE_NUMBER_ID is missing")

        body = {
            "messaging_product": "whatsapp",
            "to": normalize_phone(to),
            "type": "text",
            "text": {"body": text},
        }
        url = f"{self.api_base}/{self.phone_number_id}/messages"

        try:
            resp = requests.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {self.access_token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NotificationFailed(f"WhatsApp API request failed: {e}") from e

        try:
            data: Dict[str, Any] = resp.json()
        except ValueError:
            data = {}

        if not resp.ok:
            error = data.get("error") or {}
            message = error.get("message") or error.get("error_user_msg") or resp.reason
            raise NotificationFailed(f"WhatsApp API error: {message}")

        messages = data.get("messages") or [{}]
        return messages[0].get("id", "")


class NotificationDispatcher:

    def __init__(self, settings_service: NotificationSettingsService, messenger: Messenger):
        self.settings_service = settings_service
        self.messenger = messenger

    def notify(self, category: str, text: str = PROCESSING_MESSAGE) -> Optional[str]:
        """
        Send text to the recipient linked to the category.

        Returns the message id, or None when the category has no linked recipient.

        Raises:
            NotificationFailed: settings lookup or provider failure
        """
        try:
            setting = self.settings_service.get_category_setting(category)
        except Exception as e:
            raise NotificationFailed(f"Could not load WhatsApp settings for '{category}': {e}") from e

        phone = normalize_phone(setting.phone) if setting else ""
        if not setting or not setting.linked or not phone:
            logger.info(f"No linked WhatsApp recipient for category '{category}', skipping notification")
            return None

        message_id = self.messenger.send(phone, text)
        logger.info(f"✅ WhatsApp notification sent for category '{category}' (message {message_id})")
        return message_id
