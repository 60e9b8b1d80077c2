from datetime import timedelta

import pytest

from app.core.errors import NotFound, ValidationError
from app.models.user import UserRegister
from app.repositories.memory import InMemoryReportRepository, InMemoryUserRepository
from app.services.user_service import UserService

from tests.conftest import FIXED_NOW, FixedClock


@pytest.fixture
def report_repository():
    return InMemoryReportRepository()


@pytest.fixture
def user_clock():
    return FixedClock()


@pytest.fixture
def users(report_repository, user_clock):
    return UserService(InMemoryUserRepository(), report_repository, clock=user_clock)


def android(**fields):
    return UserRegister(**{"device_type": "android", "os_version": "14", "app_version": "1.2.0", "language": "ar", **fields})


def test_register_new_user(users):
    user = users.register("device-1", android())

    assert user.id == "device-1"
    assert user.device_type == "android"
    assert user.language == "ar"
    assert user.push_token is None
    assert user.created_at == FIXED_NOW
    assert user.report_count == 0


def test_register_again_refreshes_device_details(users, user_clock):
    users.register("device-1", android())
    users.set_push_token("device-1", "token-abc")
    user_clock.advance(days=1)

    user = users.register("device-1", android(app_version="1.3.0"))

    assert user.app_version == "1.3.0"
    assert user.push_token == "token-abc"
    assert user.created_at == FIXED_NOW
    assert user.updated_at == FIXED_NOW + timedelta(days=1)


def test_register_blank_id_is_rejected(users):
    with pytest.raises(ValidationError):
        users.register("  ", android())


def test_set_push_token(users):
    users.register("device-1", android())

    user = users.set_push_token("device-1", "token-abc")

    assert user.push_token == "token-abc"


def test_set_push_token_for_unknown_user(users):
    with pytest.raises(NotFound):
        users.set_push_token("missing", "token-abc")


def test_get_unknown_user(users):
    with pytest.raises(NotFound):
        users.get_user("missing")


def test_report_count_matches_author_id(users, report_repository):
    users.register("device-1", android())
    for author_id, status in [("device-1", "pending"), ("device-1", "rejected"), ("device-2", "pending"), (None, "pending")]:
        report_repository.insert({"author_id": author_id, "status": status, "category": "road"})

    assert users.get_user("device-1").report_count == 2
    assert users.count_reports("device-2") == 1
    assert users.count_reports("nobody") == 0
