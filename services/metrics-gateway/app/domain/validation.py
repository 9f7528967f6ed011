"""Query parameter validation for the metrics endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import re

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, slots=True)
class DateRangeQuery:
    start_date: str | None = None
    end_date: str | None = None


def is_valid_date(value: str) -> bool:
    if not _DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_date_range(start_date: str | None, end_date: str | None) -> DateRangeQuery:
    """Validate optional ``YYYY-MM-DD`` bounds; raises ``ValueError`` on bad input."""
    if start_date and not is_valid_date(start_date):
        raise ValueError("Invalid start_date format. Use YYYY-MM-DD")
    if end_date and not is_valid_date(end_date):
        raise ValueError("Invalid end_date format. Use YYYY-MM-DD")
    if start_date and end_date and start_date > end_date:
        raise ValueError("start_date must not be after end_date")
    return DateRangeQuery(start_date=start_date or None, end_date=end_date or None)
