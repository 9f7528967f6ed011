"""Analytics metric rows shared between the gateway and its consumers."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DailyMetric(BaseModel):
    date: str
    users_active: int
    page_views: int
    revenue: float
    bounce_rate: float
    avg_session_duration: int


class HourlyMetric(BaseModel):
    timestamp: str
    users_active: int
    page_views: int
    revenue: float


class DateRange(BaseModel):
    start: str | None = None
    end: str | None = None


class MetricsSummary(BaseModel):
    total_active_users: int
    total_page_views: int
    total_revenue: float
    average_daily_users: int
    average_daily_page_views: int
    date_range: DateRange = Field(default_factory=DateRange)
