"""
Pydantic models for dashboard statistics.
"""

from pydantic import BaseModel
from typing import List, Optional


class StatusSnapshot(BaseModel):
    total: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    rejected: int = 0


class Trend(BaseModel):
    window_days: int
    current: int
    previous: int
    # None when there is no baseline (previous == 0)
    percent_change: Optional[int] = None


class PeriodCounts(BaseModel):
    last_7_days: int
    previous_7_days: int
    last_30_days: int
    previous_30_days: int


class DashboardStats(BaseModel):
    by_status: StatusSnapshot
    by_period: PeriodCounts
    trend_7_days: Optional[int] = None
    trend_30_days: Optional[int] = None


class DailyCount(BaseModel):
    date: str  # YYYY-MM-DD (UTC)
    count: int


class CategoryCount(BaseModel):
    category: str
    count: int


class ChartsData(BaseModel):
    daily: List[DailyCount]
    by_category: List[CategoryCount]
