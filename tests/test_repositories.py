from datetime import timedelta

import pytest
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from app.core.errors import NotFound
from app.repositories.base import FIELD_DELETE, Aggregation, ReportQuery, SortSpec
from app.repositories.firestore import FirestoreReportRepository, FirestoreSettingsRepository, FirestoreUserRepository
from app.repositories.memory import InMemoryReportRepository, InMemoryUserRepository

from tests.conftest import FIXED_NOW


class FakeSnapshot:

    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocRef:

    def __init__(self, store, doc_id):
        self.store = store
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self.store.get(self.id))

    def set(self, data):
        self.store[self.id] = dict(data)

    def update(self, changes):
        if self.id not in self.store:
            raise google_exceptions.NotFound(f"No document to update: {self.id}")
        for key, value in changes.items():
            if value is firestore.DELETE_FIELD:
                self.store[self.id].pop(key, None)
            else:
                self.store[self.id][key] = value

    def delete(self):
        self.store.pop(self.id, None)


class FakeQuery:

    def __init__(self, store, filters=(), max_results=None):
        self.store = store
        self.filters = list(filters)
        self.max_results = max_results

    def where(self, field, op, value):
        assert op == "=="
        return FakeQuery(self.store, self.filters + [(field, value)], self.max_results)

    def limit(self, count):
        return FakeQuery(self.store, self.filters, count)

    def stream(self):
        results = [
            FakeSnapshot(doc_id, data)
            for doc_id, data in self.store.items()
            if all(data.get(field) == value for field, value in self.filters)
        ]
        return iter(results[: self.max_results] if self.max_results else results)


class FakeCollection(FakeQuery):

    def __init__(self, store):
        super().__init__(store)
        self.counter = 0

    def document(self, doc_id=None):
        if doc_id is None:
            self.counter += 1
            doc_id = f"auto{self.counter}"
        return FakeDocRef(self.store, doc_id)


class FakeClient:

    def __init__(self):
        self.collections = {}

    def collection(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection({})
        return self.collections[name]


@pytest.fixture(params=["memory", "firestore"])
def repo(request):
    if request.param == "memory":
        return InMemoryReportRepository()
    return FirestoreReportRepository(FakeClient(), "reports")


def seed(repo):
    ids = []
    for index, (status, category) in enumerate([
        ("pending", "road"),
        ("processing", "road"),
        ("rejected", "water"),
        ("pending", "water"),
    ]):
        ids.append(repo.insert({
            "title": f"Report {index}",
            "status": status,
            "category": category,
            "created_at": FIXED_NOW - timedelta(days=index),
        }))
    return ids


def test_insert_and_find_one(repo):
    report_id = repo.insert({"title": "Hello", "status": "pending"})

    doc = repo.find_one(report_id)

    assert doc["id"] == report_id
    assert doc["title"] == "Hello"
    assert repo.find_one("missing") is None


def test_find_combines_pushed_down_and_local_clauses(repo):
    seed(repo)

    result = repo.find(
        ReportQuery(category="road", exclude_statuses=("rejected",), created_from=FIXED_NOW - timedelta(days=1)),
        SortSpec(field="created_at", descending=False),
    )

    assert result.matched == 2
    assert [doc["title"] for doc in result.documents] == ["Report 1", "Report 0"]


def test_find_paginates_after_matching(repo):
    seed(repo)

    result = repo.find(ReportQuery(), SortSpec(), skip=1, limit=2)

    assert result.matched == 4
    assert [doc["title"] for doc in result.documents] == ["Report 1", "Report 2"]


def test_update_one_sets_and_deletes_fields(repo):
    report_id = repo.insert({"status": "rejected", "rejection_reason": "spam"})

    repo.update_one(report_id, {"status": "pending", "rejection_reason": FIELD_DELETE})

    doc = repo.find_one(report_id)
    assert doc["status"] == "pending"
    assert "rejection_reason" not in doc


def test_update_missing_raises_not_found(repo):
    with pytest.raises(NotFound):
        repo.update_one("missing", {"status": "pending"})


def test_delete_one_returns_count(repo):
    report_id = repo.insert({"status": "pending"})

    assert repo.delete_one(report_id) == 1
    assert repo.delete_one(report_id) == 0


def test_aggregate_groups(repo):
    seed(repo)

    by_status = {row["key"]: row["count"] for row in repo.aggregate(Aggregation(group_by="status"))}
    total = repo.aggregate(Aggregation(match=ReportQuery(category="water")))

    assert by_status == {"pending": 2, "processing": 1, "rejected": 1}
    assert total == [{"key": None, "count": 2}]


def test_aggregate_by_day(repo):
    seed(repo)

    rows = repo.aggregate(Aggregation(group_by="created_at", bucket="day"))

    assert {row["key"] for row in rows} == {"2024-06-15", "2024-06-14", "2024-06-13", "2024-06-12"}


def test_firestore_settings_repository_round_trip():
    repo = FirestoreSettingsRepository(FakeClient(), "settings")

    assert repo.get("whatsapp_settings") is None
    repo.set("whatsapp_settings", {"categories": {}})
    assert repo.get("whatsapp_settings") == {"categories": {}}


def test_find_by_author_id(repo):
    repo.insert({"title": "Mine", "status": "pending", "author_id": "device-1"})
    repo.insert({"title": "Theirs", "status": "pending", "author_id": "device-2"})

    result = repo.find(ReportQuery(author_id="device-1"), SortSpec())
    total = repo.aggregate(Aggregation(match=ReportQuery(author_id="device-2")))

    assert [doc["title"] for doc in result.documents] == ["Mine"]
    assert total == [{"key": None, "count": 1}]


@pytest.fixture(params=["memory", "firestore"])
def user_repo(request):
    if request.param == "memory":
        return InMemoryUserRepository()
    return FirestoreUserRepository(FakeClient(), "users")


def test_user_repository_round_trip(user_repo):
    assert user_repo.get("device-1") is None

    user_repo.set("device-1", {"device_type": "ios", "push_token": None})

    assert user_repo.get("device-1") == {"id": "device-1", "device_type": "ios", "push_token": None}
