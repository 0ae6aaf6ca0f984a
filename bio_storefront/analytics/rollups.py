"""
Rollup Helpers

Windowing and bucketing shared by the analytics and sales summaries.
Stored timestamps are naive UTC and are bucketed by their calendar date
without conversion.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy import Date, func

from bio_storefront.database.models import utcnow
from bio_storefront.errors import ValidationError


class Period(str, Enum):
    """Reporting window"""
    DAY = "1d"
    WEEK = "7d"
    MONTH = "30d"

    @property
    def days(self) -> int:
        return {"1d": 1, "7d": 7, "30d": 30}[self.value]


def parse_period(value: Optional[str], default: Period = Period.WEEK) -> Period:
    """
    Period for a query string value; ``None`` or empty selects ``default``.

    Raises:
        ValidationError: any value outside 1d, 7d, 30d
    """
    if value is None or value == "":
        return default
    try:
        return Period(value)
    except ValueError:
        raise ValidationError(
            f"Invalid period '{value}'",
            details={"allowed": [p.value for p in Period]},
        )


def window_start(period: Period, now: Optional[datetime] = None) -> datetime:
    """Inclusive lower bound of the window ending at ``now``"""
    now = now or utcnow()
    return now - timedelta(days=period.days)


def calendar_day(column):
    """``DATE(column)`` typed so every dialect hands back ``datetime.date``"""
    return func.date(column, type_=Date)


def day_range(period: Period, now: Optional[datetime] = None) -> List[date]:
    """The ``period.days`` calendar dates ending today, oldest first"""
    today = (now or utcnow()).date()
    return [today - timedelta(days=offset) for offset in range(period.days - 1, -1, -1)]


def dense_series(
    days: Iterable[date],
    buckets: Dict[date, Dict[str, Any]],
    empty: Callable[[], Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """One entry per day, zero-filled where ``buckets`` has nothing"""
    series = []
    for day in days:
        entry = {"date": day.isoformat()}
        entry.update(buckets.get(day) or empty())
        series.append(entry)
    return series


def top_n(groups: Iterable[Dict[str, Any]], limit: int, key: str = "count") -> List[Dict[str, Any]]:
    """
    Largest ``limit`` groups by ``key``.

    ``groups`` arrive in first-seen order; ``sorted`` is stable, so equal
    counts keep that order.
    """
    return sorted(groups, key=lambda g: g[key], reverse=True)[:limit]


def click_through_rate(clicks: int, views: int) -> float:
    """Clicks per hundred views to one decimal, halves rounded up"""
    if not views:
        return 0.0
    rate = Decimal(clicks) * 100 / Decimal(views)
    return float(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
