"""Mock analytics dataset and the expensive queries the gateway protects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
import logging
import random
from threading import Lock
import time

from schemas import DailyMetric, DateRange, HourlyMetric, MetricsSummary

from .context import ComputationResult
from .validation import DateRangeQuery

logger = logging.getLogger(__name__)

DAILY_START = date(2023, 1, 1)
DAILY_END = date(2024, 12, 31)
HOURLY_START = date(2024, 1, 1)
HOURLY_END = date(2024, 12, 31)


def _days(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


@dataclass(frozen=True)
class MetricsDataset:
    """Immutable generated metric rows."""

    daily: tuple[DailyMetric, ...]
    hourly: tuple[HourlyMetric, ...]

    @classmethod
    def generate(cls, seed: int | None = None) -> "MetricsDataset":
        rng = random.Random(seed)
        daily = tuple(
            DailyMetric(
                date=day.isoformat(),
                users_active=rng.randint(1000, 5999),
                page_views=rng.randint(10000, 59999),
                revenue=round(rng.uniform(1000, 11000), 2),
                bounce_rate=round(rng.uniform(20, 80), 2),
                avg_session_duration=rng.randint(2, 31),
            )
            for day in _days(DAILY_START, DAILY_END)
        )
        hourly = tuple(
            HourlyMetric(
                timestamp=f"{day.isoformat()}T{hour:02d}:00:00Z",
                users_active=rng.randint(50, 549),
                page_views=rng.randint(500, 5499),
                revenue=round(rng.uniform(100, 1100), 2),
            )
            for day in _days(HOURLY_START, HOURLY_END)
            for hour in range(24)
        )
        return cls(daily=daily, hourly=hourly)


_dataset_lock = Lock()
_dataset: MetricsDataset | None = None


def get_dataset() -> MetricsDataset:
    """Return the process-wide dataset, generating it on first use."""
    global _dataset
    if _dataset is None:
        with _dataset_lock:
            if _dataset is None:
                logger.info("generating mock metrics dataset")
                _dataset = MetricsDataset.generate()
    return _dataset


class MetricsService:
    """Filtering and aggregation over the metrics dataset.

    Each query sleeps for ``compute_delay_seconds`` to stand in for an
    expensive backend.
    """

    def __init__(self, dataset: MetricsDataset | None = None, *, compute_delay_seconds: float = 0.0) -> None:
        self._dataset = dataset
        self._delay = compute_delay_seconds

    @property
    def dataset(self) -> MetricsDataset:
        return self._dataset if self._dataset is not None else get_dataset()

    def _simulate_work(self) -> None:
        if self._delay > 0:
            time.sleep(self._delay)

    def daily_rows(self, query: DateRangeQuery) -> list[DailyMetric]:
        rows = [
            row
            for row in self.dataset.daily
            if (not query.start_date or row.date >= query.start_date)
            and (not query.end_date or row.date <= query.end_date)
        ]
        self._simulate_work()
        return rows

    def hourly_rows(self, query: DateRangeQuery) -> list[HourlyMetric]:
        # bounds match whole days of the hourly timestamps
        rows = [
            row
            for row in self.dataset.hourly
            if (not query.start_date or row.timestamp[:10] >= query.start_date)
            and (not query.end_date or row.timestamp[:10] <= query.end_date)
        ]
        self._simulate_work()
        return rows

    def daily(self, query: DateRangeQuery) -> ComputationResult:
        rows = self.daily_rows(query)
        return ComputationResult(payload=_envelope([row.model_dump() for row in rows]))

    def hourly(self, query: DateRangeQuery) -> ComputationResult:
        rows = self.hourly_rows(query)
        return ComputationResult(payload=_envelope([row.model_dump() for row in rows]))

    def summary(self, query: DateRangeQuery) -> ComputationResult:
        rows = self.daily_rows(query)
        if not rows:
            return ComputationResult(
                payload={
                    "success": False,
                    "error": {"message": "No metrics in the requested range", "statusCode": 404},
                },
                success=False,
                status_code=404,
            )
        total_users = sum(row.users_active for row in rows)
        total_views = sum(row.page_views for row in rows)
        summary = MetricsSummary(
            total_active_users=total_users,
            total_page_views=total_views,
            total_revenue=round(sum(row.revenue for row in rows), 2),
            average_daily_users=round(total_users / len(rows)),
            average_daily_page_views=round(total_views / len(rows)),
            date_range=DateRange(
                start=query.start_date or rows[0].date,
                end=query.end_date or rows[-1].date,
            ),
        )
        return ComputationResult(
            payload={"success": True, "data": summary.model_dump(), "timestamp": _now(), "cached": False}
        )


def _envelope(data: list[dict]) -> dict:
    return {"success": True, "data": data, "count": len(data), "timestamp": _now(), "cached": False}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
