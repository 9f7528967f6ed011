"""Shared schema exports."""

from .cache import CacheInvalidationRequest, CacheInvalidationResponse
from .metrics import DailyMetric, DateRange, HourlyMetric, MetricsSummary

__all__ = [
    "CacheInvalidationRequest",
    "CacheInvalidationResponse",
    "DailyMetric",
    "DateRange",
    "HourlyMetric",
    "MetricsSummary",
]
