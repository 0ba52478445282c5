"""
Price performance calculation over fixed look-back windows.

All functions are pure: given the same series and anchor date they return
the same result. Dates are calendar dates (daily closes carry no time).
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from .models import PerformanceResult, PricePoint


class PerformanceError(Exception):
    """Base error for performance calculation."""


class CurrentPriceUnavailable(PerformanceError):
    """Series has no price on or before the anchor date."""


@dataclass(frozen=True)
class ReferenceDates:
    """Anchor date plus the four look-back dates."""
    now: date
    week_ago: date
    month_ago: date
    year_ago: date
    five_years_ago: date


def subtract_months(day: date, months: int) -> date:
    """
    Calendar month subtraction, clamped to the end of the target month.

    Example:
        subtract_months(date(2024, 3, 31), 1) -> date(2024, 2, 29)
    """
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def subtract_years(day: date, years: int) -> date:
    """Same as subtract_months with whole years (Feb 29 clamps to Feb 28)."""
    return subtract_months(day, years * 12)


def reference_dates(now: date) -> ReferenceDates:
    return ReferenceDates(
        now=now,
        week_ago=now - timedelta(days=7),
        month_ago=subtract_months(now, 1),
        year_ago=subtract_years(now, 1),
        five_years_ago=subtract_years(now, 5),
    )


def price_on_or_before(series: Iterable[PricePoint], target: date) -> Optional[float]:
    """
    Close of the most recent point dated on or before ``target``.

    Returns None when the series is empty or starts after ``target``.
    """
    best: Optional[PricePoint] = None
    for point in series:
        if point.date <= target and (best is None or point.date > best.date):
            best = point
    return best.close if best is not None else None


def percent_change(old: Optional[float], new: float) -> float:
    """Signed percentage change; 0 when there is no usable old price."""
    if old is None or old == 0:
        return 0.0
    return (new - old) / old * 100


def calculate_performance(series: Iterable[PricePoint], now: date) -> PerformanceResult:
    """
    Compute weekly, monthly, yearly and five-yearly change relative to ``now``.

    Raises:
        CurrentPriceUnavailable: if no price exists on or before ``now``.
    """
    points = tuple(series)
    dates = reference_dates(now)

    current = price_on_or_before(points, dates.now)
    if current is None:
        raise CurrentPriceUnavailable(f"No price on or before {dates.now.isoformat()}")

    return PerformanceResult(
        weekly_change=percent_change(price_on_or_before(points, dates.week_ago), current),
        monthly_change=percent_change(price_on_or_before(points, dates.month_ago), current),
        yearly_change=percent_change(price_on_or_before(points, dates.year_ago), current),
        five_yearly_change=percent_change(price_on_or_before(points, dates.five_years_ago), current),
    )
