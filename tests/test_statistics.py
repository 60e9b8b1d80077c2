from datetime import timedelta

import pytest

from app.repositories.memory import InMemoryReportRepository
from app.services.analytics_service import StatisticsService, percent_change

from tests.conftest import FIXED_NOW, FixedClock


def seed(repository, status="pending", category="road", created_at=FIXED_NOW):
    repository.insert({"status": status, "category": category, "created_at": created_at})


@pytest.fixture
def stats_repository():
    return InMemoryReportRepository()


@pytest.fixture
def statistics(stats_repository):
    return StatisticsService(stats_repository, clock=FixedClock())


def test_status_snapshot(statistics, stats_repository):
    for status in ["pending", "pending", "processing", "rejected"]:
        seed(stats_repository, status=status)

    snapshot = statistics.status_snapshot()

    assert snapshot.model_dump() == {"total": 4, "pending": 2, "processing": 1, "completed": 0, "rejected": 1}


def test_status_snapshot_counts_unknown_statuses_in_total_only(statistics, stats_repository):
    seed(stats_repository, status="Completed")
    seed(stats_repository, status="archived")
    seed(stats_repository, status=None)

    snapshot = statistics.status_snapshot()

    assert snapshot.total == 3
    assert snapshot.completed == 1
    assert snapshot.pending == 0


def test_trend_without_baseline_is_none(statistics, stats_repository):
    seed(stats_repository, created_at=FIXED_NOW - timedelta(days=1))

    trend = statistics.trend(7)

    assert trend.current == 1
    assert trend.previous == 0
    assert trend.percent_change is None


def test_trend_on_empty_store(statistics):
    trend = statistics.trend(30)

    assert (trend.current, trend.previous, trend.percent_change) == (0, 0, None)


def test_trend_window_boundaries(statistics, stats_repository):
    seed(stats_repository, created_at=FIXED_NOW)                        # current (inclusive end)
    seed(stats_repository, created_at=FIXED_NOW - timedelta(days=7))    # current (inclusive start)
    seed(stats_repository, created_at=FIXED_NOW - timedelta(days=10))   # previous
    seed(stats_repository, created_at=FIXED_NOW - timedelta(days=14))   # previous (inclusive start)
    seed(stats_repository, created_at=FIXED_NOW - timedelta(days=15))   # outside both

    trend = statistics.trend(7)

    assert trend.current == 2
    assert trend.previous == 2
    assert trend.percent_change == 0


@pytest.mark.parametrize("current,previous,expected", [
    (3, 2, 50),
    (1, 3, -67),
    (1, 8, -87),
    (5, 8, -37),
    (0, 4, -100),
    (2, 0, None),
])
def test_percent_change_rounding(current, previous, expected):
    assert percent_change(current, previous) == expected


def test_daily_counts_is_dense_and_ends_today(statistics, stats_repository):
    seed(stats_repository, created_at=FIXED_NOW)
    seed(stats_repository, created_at=FIXED_NOW - timedelta(hours=11))
    seed(stats_repository, created_at=FIXED_NOW - timedelta(days=29))
    seed(stats_repository, created_at=FIXED_NOW - timedelta(days=30))
    seed(stats_repository, created_at="2024-06-10T08:00:00Z")

    daily = statistics.daily_counts()

    assert len(daily) == 30
    assert daily[0].date == "2024-05-17"
    assert daily[-1].date == "2024-06-15"
    assert daily[-1].count == 2
    assert daily[0].count == 1
    counts = {entry.date: entry.count for entry in daily}
    assert counts["2024-06-10"] == 1
    assert sum(counts.values()) == 4


def test_daily_counts_on_empty_store(statistics):
    daily = statistics.daily_counts(30)

    assert len(daily) == 30
    assert all(entry.count == 0 for entry in daily)
    assert len({entry.date for entry in daily}) == 30


def test_category_counts(statistics, stats_repository):
    for category in ["road", "road", "water", "water", "mine", "", None]:
        seed(stats_repository, category=category)

    by_category = statistics.category_counts()

    assert [(c.category, c.count) for c in by_category] == [
        ("other", 2),
        ("road", 2),
        ("water", 2),
        ("mine", 1),
    ]


def test_category_counts_keeps_non_string_categories(statistics, stats_repository):
    seed(stats_repository, category=7)
    seed(stats_repository, category=" road ")
    seed(stats_repository, category="road")

    by_category = statistics.category_counts()

    assert [(c.category, c.count) for c in by_category] == [("road", 2), ("7", 1)]


def test_dashboard(statistics, stats_repository):
    seed(stats_repository, status="pending", created_at=FIXED_NOW - timedelta(days=1))
    seed(stats_repository, status="processing", created_at=FIXED_NOW - timedelta(days=3))
    seed(stats_repository, status="completed", created_at=FIXED_NOW - timedelta(days=9))
    seed(stats_repository, status="rejected", created_at=FIXED_NOW - timedelta(days=40))

    stats = statistics.dashboard()

    assert stats.by_status.total == 4
    assert stats.by_period.last_7_days == 2
    assert stats.by_period.previous_7_days == 1
    assert stats.by_period.last_30_days == 3
    assert stats.by_period.previous_30_days == 1
    assert stats.trend_7_days == 100
    assert stats.trend_30_days == 200


def test_charts(statistics, stats_repository):
    seed(stats_repository, category="water")

    charts = statistics.charts()

    assert len(charts.daily) == 30
    assert charts.by_category[0].category == "water"
