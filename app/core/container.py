"""
Service wiring.

Everything with shared state (repositories, storage, geocode cache, HTTP clients)
is built once here and stored on app.state.services. Routes get it through the
get_services dependency; tests build their own container over in-memory parts.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from fastapi import Request

from app.core.settings import Settings
from app.repositories.base import ReportRepository, SettingsRepository, UserRepository
from app.repositories.memory import InMemoryReportRepository, InMemorySettingsRepository, InMemoryUserRepository
from app.services.analytics_service import StatisticsService
from app.services.enrichment_service import AddressEnrichmentService
from app.services.geocoding import GeocodeCache, GeocodingProvider, build_geocoding_provider
from app.services.media_service import MediaIngestionService
from app.services.notification_settings_service import NotificationSettingsService
from app.services.report_service import ReportService
from app.services.storage import FirebaseObjectStorage, InMemoryObjectStorage, ObjectStorage
from app.services.user_service import UserService
from app.services.whatsapp_service import Messenger, NotificationDispatcher, WhatsAppClient
from app.utils.clock import utc_now

logger = logging.getLogger(__name__)


@dataclass
class Services:
    reports: ReportService
    statistics: StatisticsService
    notification_settings: NotificationSettingsService
    enrichment: AddressEnrichmentService
    repository: ReportRepository
    users: UserService


def build_services(
    settings: Settings,
    repository: Optional[ReportRepository] = None,
    settings_repository: Optional[SettingsRepository] = None,
    users_repository: Optional[UserRepository] = None,
    storage: Optional[ObjectStorage] = None,
    geocoder: Optional[GeocodingProvider] = None,
    messenger: Optional[Messenger] = None,
    clock: Callable[[], datetime] = utc_now,
) -> Services:
    """
    Build the service graph. Any collaborator passed in replaces the one
    that would be derived from settings.
    """
    if repository is None or settings_repository is None or users_repository is None or storage is None:
        if settings.USE_MOCK_DB:
            logger.warning("⚠️ USE_MOCK_DB is set: reports, users and images are kept in memory")
            repository = repository or InMemoryReportRepository()
            settings_repository = settings_repository or InMemorySettingsRepository()
            users_repository = users_repository or InMemoryUserRepository()
            storage = storage or InMemoryObjectStorage()
        else:
            from app.config.firebase import get_db
            from app.repositories.firestore import (
                FirestoreReportRepository,
                FirestoreSettingsRepository,
                FirestoreUserRepository,
            )

            db = get_db()
            repository = repository or FirestoreReportRepository(db, settings.REPORTS_COLLECTION)
            settings_repository = settings_repository or FirestoreSettingsRepository(
                db, settings.SETTINGS_COLLECTION
            )
            users_repository = users_repository or FirestoreUserRepository(db, settings.USERS_COLLECTION)
            storage = storage or FirebaseObjectStorage(
                settings.FIREBASE_STORAGE_BUCKET, timeout=settings.STORAGE_TIMEOUT_SECONDS
            )

    enrichment = AddressEnrichmentService(
        provider=geocoder or build_geocoding_provider(settings),
        cache=GeocodeCache(),
        default_language=settings.GEOCODING_LANGUAGE,
    )
    notification_settings = NotificationSettingsService(settings_repository, clock=clock)
    dispatcher = NotificationDispatcher(
        notification_settings,
        messenger
        or WhatsAppClient(
            access_token=settings.WHATSAPP_ACCESS_TOKEN,
            phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
            api_base=settings.WHATSAPP_API_BASE,
            timeout=settings.WHATSAPP_TIMEOUT_SECONDS,
        ),
    )

    reports = ReportService(
        repository=repository,
        enrichment=enrichment,
        media=MediaIngestionService(storage),
        dispatcher=dispatcher,
        clock=clock,
        default_page_size=settings.DEFAULT_PAGE_SIZE,
        max_page_size=settings.MAX_PAGE_SIZE,
    )

    return Services(
        reports=reports,
        statistics=StatisticsService(repository, clock=clock),
        notification_settings=notification_settings,
        enrichment=enrichment,
        repository=repository,
        users=UserService(users_repository, repository, clock=clock),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
