"""
User Service - registry of mobile app installations.

The app registers itself once with its device details, later attaches a push
token, and can ask how many reports it has submitted (matched on author_id).
"""

import logging
from typing import Any, Callable, Dict

from app.core.errors import NotFound, ValidationError
from app.models.user import UserRegister, UserResponse
from app.repositories.base import Aggregation, ReportQuery, ReportRepository, UserRepository
from app.utils.clock import utc_now

logger = logging.getLogger(__name__)

DEVICE_FIELDS = ("device_type", "os_version", "app_version", "language")


class UserService:

    def __init__(self, repository: UserRepository, reports: ReportRepository, clock: Callable = utc_now):
        self.repository = repository
        self.reports = reports
        self.clock = clock

    def _require(self, user_id: str) -> Dict[str, Any]:
        stored = self.repository.get(user_id)
        if stored is None:
            raise NotFound("User", user_id)
        return stored

    def register(self, user_id: str, details: UserRegister) -> UserResponse:
        """
        Create the user, or refresh the device details of an existing one.
        The push token and created_at of an existing user are kept.
        """
        if not user_id or not user_id.strip():
            raise ValidationError("User id must not be blank")

        now = self.clock()
        stored = self.repository.get(user_id)
        if stored is None:
            data = {"push_token": None, "created_at": now}
            logger.info(f"✅ User registered: {user_id}")
        else:
            data = dict(stored)
            logger.info(f"User {user_id} re-registered, device details refreshed")

        for name in DEVICE_FIELDS:
            data[name] = getattr(details, name)
        data["updated_at"] = now
        self.repository.set(user_id, data)
        return self.get_user(user_id)

    def set_push_token(self, user_id: str, push_token: str) -> UserResponse:
        stored = self._require(user_id)
        stored["push_token"] = push_token
        stored["updated_at"] = self.clock()
        self.repository.set(user_id, stored)
        logger.info(f"Push token updated for user {user_id}")
        return self.get_user(user_id)

    def count_reports(self, user_id: str) -> int:
        rows = self.reports.aggregate(Aggregation(match=ReportQuery(author_id=user_id)))
        return rows[0]["count"] if rows else 0

    def get_user(self, user_id: str) -> UserResponse:
        stored = self._require(user_id)
        return UserResponse(
            id=user_id,
            device_type=stored.get("device_type"),
            os_version=stored.get("os_version"),
            app_version=stored.get("app_version"),
            language=stored.get("language"),
            push_token=stored.get("push_token"),
            created_at=stored.get("created_at"),
            updated_at=stored.get("updated_at"),
            report_count=self.count_reports(user_id),
        )
