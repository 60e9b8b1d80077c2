"""
Analytics Service - dashboard statistics over the report collection.

Everything is computed from the repository at request time: no caching and no
incrementally maintained counters.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from app.models.report import ReportStatus
from app.models.stats import (
    CategoryCount,
    ChartsData,
    DailyCount,
    DashboardStats,
    PeriodCounts,
    StatusSnapshot,
    Trend,
)
from app.repositories.base import Aggregation, ReportQuery, ReportRepository
from app.utils.clock import start_of_utc_day, utc_now

logger = logging.getLogger(__name__)

OTHER_CATEGORY = "other"
DAILY_WINDOW_DAYS = 30


def percent_change(current: int, previous: int) -> Optional[int]:
    """Rounded percentage change, or None when there is no baseline."""
    if previous == 0:
        return None
    # Half-up rounding, matching what dashboards have always shown
    return math.floor(100 * (current - previous) / previous + 0.5)


class StatisticsService:
    """Service for generating dashboard statistics."""

    def __init__(self, repository: ReportRepository, clock: Callable[[], datetime] = utc_now):
        self.repository = repository
        self.clock = clock

    def _count(self, query: ReportQuery) -> int:
        rows = self.repository.aggregate(Aggregation(match=query))
        return rows[0]["count"] if rows else 0

    def status_snapshot(self) -> StatusSnapshot:
        """
        Counts per status. Unknown legacy statuses only count toward total.
        """
        rows = self.repository.aggregate(Aggregation(group_by="status"))
        snapshot = StatusSnapshot()
        known = {status.value for status in ReportStatus}
        for row in rows:
            snapshot.total += row["count"]
            key = str(row["key"] or "").lower()
            if key in known:
                setattr(snapshot, key, getattr(snapshot, key) + row["count"])
        return snapshot

    def trend(self, window_days: int, now: Optional[datetime] = None) -> Trend:
        """
        current: created in [now - window, now]
        previous: created in [now - 2*window, now - window)
        """
        if window_days < 1:
            raise ValueError("window_days must be >= 1")

        now = now or self.clock()
        window = timedelta(days=window_days)
        current = self._count(ReportQuery(created_from=now - window, created_to=now))
        previous = self._count(ReportQuery(created_from=now - 2 * window, created_before=now - window))
        return Trend(
            window_days=window_days,
            current=current,
            previous=previous,
            percent_change=percent_change(current, previous),
        )

    def daily_counts(self, days: int = DAILY_WINDOW_DAYS) -> List[DailyCount]:
        """
        Dense series: one entry per UTC date, oldest first, ending today inclusive.
        """
        today = start_of_utc_day(self.clock())
        start = today - timedelta(days=days - 1)
        rows = self.repository.aggregate(
            Aggregation(
                match=ReportQuery(created_from=start, created_before=today + timedelta(days=1)),
                group_by="created_at",
                bucket="day",
            )
        )
        by_date: Dict[str, int] = {row["key"]: row["count"] for row in rows if row["key"]}

        series = []
        for offset in range(days):
            key = (start + timedelta(days=offset)).strftime("%Y-%m-%d")
            series.append(DailyCount(date=key, count=by_date.get(key, 0)))
        return series

    def category_counts(self) -> List[CategoryCount]:
        """
        Counts per category, highest first. Missing or blank categories go to "other".
        """
        rows = self.repository.aggregate(Aggregation(group_by="category"))
        counts: Dict[str, int] = {}
        for row in rows:
            key = row["key"]
            name = str(key).strip() if key is not None else ""
            name = name or OTHER_CATEGORY
            counts[name] = counts.get(name, 0) + row["count"]

        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [CategoryCount(category=name, count=count) for name, count in ordered]

    def dashboard(self) -> DashboardStats:
        now = self.clock()
        week = self.trend(7, now=now)
        month = self.trend(30, now=now)
        stats = DashboardStats(
            by_status=self.status_snapshot(),
            by_period=PeriodCounts(
                last_7_days=week.current,
                previous_7_days=week.previous,
                last_30_days=month.current,
                previous_30_days=month.previous,
            ),
            trend_7_days=week.percent_change,
            trend_30_days=month.percent_change,
        )
        logger.info(f"Dashboard stats computed: total={stats.by_status.total}")
        return stats

    def charts(self) -> ChartsData:
        return ChartsData(daily=self.daily_counts(), by_category=self.category_counts())
