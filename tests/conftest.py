from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.auth import AdminIdentity
from app.core.container import build_services
from app.core.errors import NotificationFailed
from app.core.settings import Settings
from app.main import create_app
from app.repositories.memory import InMemoryReportRepository, InMemorySettingsRepository, InMemoryUserRepository
from app.services.geocoding import GeocodingProvider, empty_result
from app.services.storage import InMemoryObjectStorage
from app.services.whatsapp_service import Messenger

FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)

# base64 of b"hello"
PNG_DATA_URL = "data:image/png;base64,aGVsbG8="

ADMIN_HEADERS = {"X-Admin-Id": "admin-1", "X-Admin-Email": "admin@example.com"}


class FixedClock:

    def __init__(self, now=FIXED_NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class StubGeocoder(GeocodingProvider):
    """Counts calls. Returns a fixed address, an error result, or raises."""

    name = "stub"

    def __init__(self, address="Aleppo, Syria", error=None, raises=False, is_configured=True):
        self.address = address
        self.error = error
        self.raises = raises
        self.is_configured = is_configured
        self.calls = []

    @property
    def configured(self):
        return self.is_configured

    def reverse_geocode(self, latitude, longitude, language="en"):
        self.calls.append((latitude, longitude, language))
        if self.raises:
            raise RuntimeError("provider exploded")
        if self.error:
            return empty_result(self.name, self.error)
        return {"formatted_address": self.address, "error": None, "provider": self.name}


class StubMessenger(Messenger):

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send(self, to, text):
        self.sent.append((to, text))
        if self.fail:
            raise NotificationFailed("WhatsApp API error: stubbed failure")
        return f"wamid.{len(self.sent)}"


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def geocoder():
    return StubGeocoder()


@pytest.fixture
def messenger():
    return StubMessenger()


@pytest.fixture
def repository():
    return InMemoryReportRepository()


@pytest.fixture
def settings_repository():
    return InMemorySettingsRepository()


@pytest.fixture
def users_repository():
    return InMemoryUserRepository()


@pytest.fixture
def storage():
    return InMemoryObjectStorage()


@pytest.fixture
def test_settings():
    return Settings(USE_MOCK_DB=True, GEOCODING_PROVIDER="none", DEFAULT_PAGE_SIZE=10, MAX_PAGE_SIZE=100)


@pytest.fixture
def services(test_settings, repository, settings_repository, users_repository, storage, geocoder, messenger, clock):
    return build_services(
        test_settings,
        repository=repository,
        settings_repository=settings_repository,
        users_repository=users_repository,
        storage=storage,
        geocoder=geocoder,
        messenger=messenger,
        clock=clock,
    )


@pytest.fixture
def report_service(services):
    return services.reports


@pytest.fixture
def admin():
    return AdminIdentity(id="admin-1", email="admin@example.com")


@pytest.fixture
def client(services):
    with TestClient(create_app(services)) as test_client:
        yield test_client
