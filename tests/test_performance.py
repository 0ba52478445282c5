"""Tests for the pure performance calculator."""

from datetime import date

import pytest

from fintrack.domain.models import PerformanceResult, PricePoint
from fintrack.domain.performance import (
    CurrentPriceUnavailable,
    PerformanceError,
    calculate_performance,
    percent_change,
    price_on_or_before,
    reference_dates,
    subtract_months,
    subtract_years,
)


def _series(*rows):
    """Build a newest-first series from (iso_date, close) pairs."""
    points = [PricePoint(date=date.fromisoformat(d), close=c) for d, c in rows]
    return tuple(sorted(points, key=lambda p: p.date, reverse=True))


class TestPriceOnOrBefore:
    """Lookup of the latest close on or before a date."""

    def test_series_straddling_target(self):
        series = _series(("2024-07-10", 110.0), ("2024-07-05", 105.0), ("2024-07-01", 100.0))
        assert price_on_or_before(series, date(2024, 7, 7)) == 105.0

    def test_exact_date_match(self):
        series = _series(("2024-07-10", 110.0), ("2024-07-05", 105.0))
        assert price_on_or_before(series, date(2024, 7, 10)) == 110.0

    def test_series_entirely_after_target(self):
        series = _series(("2024-07-10", 110.0), ("2024-07-05", 105.0))
        assert price_on_or_before(series, date(2024, 7, 1)) is None

    def test_empty_series(self):
        assert price_on_or_before((), date(2024, 7, 1)) is None

    def test_unsorted_input_still_finds_latest(self):
        series = (
            PricePoint(date(2024, 7, 1), 100.0),
            PricePoint(date(2024, 7, 5), 105.0),
            PricePoint(date(2024, 7, 3), 103.0),
        )
        assert price_on_or_before(series, date(2024, 7, 4)) == 103.0


class TestPercentChange:
    """Change function laws."""

    def test_increase(self):
        assert percent_change(100, 150) == 50.0

    def test_decrease(self):
        assert percent_change(100, 50) == -50.0

    @pytest.mark.parametrize("old", [None, 0, 0.0])
    def test_missing_or_zero_old_price(self, old):
        assert percent_change(old, 123.45) == 0.0


class TestCalendarArithmetic:
    """Month/year subtraction clamps to the end of the target month."""

    def test_month_end_clamps_in_leap_year(self):
        assert subtract_months(date(2024, 3, 31), 1) == date(2024, 2, 29)

    def test_month_end_clamps_in_common_year(self):
        assert subtract_months(date(2023, 3, 31), 1) == date(2023, 2, 28)

    def test_thirty_first_into_thirty_day_month(self):
        assert subtract_months(date(2024, 5, 31), 1) == date(2024, 4, 30)

    def test_crosses_year_boundary(self):
        assert subtract_months(date(2024, 1, 31), 1) == date(2023, 12, 31)

    def test_mid_month_keeps_day(self):
        assert subtract_months(date(2024, 7, 28), 1) == date(2024, 6, 28)

    def test_leap_day_minus_one_year(self):
        assert subtract_years(date(2024, 2, 29), 1) == date(2023, 2, 28)

    def test_reference_dates(self):
        refs = reference_dates(date(2024, 7, 28))
        assert refs.now == date(2024, 7, 28)
        assert refs.week_ago == date(2024, 7, 21)
        assert refs.month_ago == date(2024, 6, 28)
        assert refs.year_ago == date(2023, 7, 28)
        assert refs.five_years_ago == date(2019, 7, 28)


class TestCalculatePerformance:
    """End-to-end calculation over a fixed series."""

    def test_toy_series(self):
        series = _series(("2024-07-28", 120.0), ("2024-07-21", 100.0), ("2023-07-28", 80.0))
        result = calculate_performance(series, date(2024, 7, 28))

        assert result.weekly_change == pytest.approx(20.0)
        assert result.yearly_change == pytest.approx(50.0)
        # One month back (2024-06-28) falls through to the 2023-07-28 close
        assert result.monthly_change == pytest.approx(50.0)
        # Nothing five years old
        assert result.five_yearly_change == 0.0

    def test_short_series_degrades_fields_to_zero(self):
        series = _series(("2024-07-28", 120.0), ("2024-07-21", 100.0))
        result = calculate_performance(series, date(2024, 7, 28))

        assert result.weekly_change == pytest.approx(20.0)
        assert result.monthly_change == 0.0
        assert result.yearly_change == 0.0
        assert result.five_yearly_change == 0.0

    def test_full_history(self):
        series = _series(
            ("2024-07-26", 200.0),  # Friday close used for a Sunday anchor
            ("2024-07-19", 160.0),
            ("2024-06-28", 250.0),
            ("2023-07-28", 100.0),
            ("2019-07-26", 50.0),
        )
        result = calculate_performance(series, date(2024, 7, 28))

        assert result.weekly_change == pytest.approx(25.0)
        assert result.monthly_change == pytest.approx(-20.0)
        assert result.yearly_change == pytest.approx(100.0)
        assert result.five_yearly_change == pytest.approx(300.0)

    def test_zero_reference_price_yields_zero(self):
        series = _series(("2024-07-28", 120.0), ("2024-07-21", 0.0))
        result = calculate_performance(series, date(2024, 7, 28))
        assert result.weekly_change == 0.0

    def test_future_only_series_raises(self):
        series = _series(("2024-08-01", 120.0))
        with pytest.raises(CurrentPriceUnavailable):
            calculate_performance(series, date(2024, 7, 28))

    def test_empty_series_raises_performance_error(self):
        with pytest.raises(PerformanceError):
            calculate_performance((), date(2024, 7, 28))

    def test_idempotent(self):
        series = _series(("2024-07-28", 120.0), ("2024-07-21", 100.0), ("2023-07-28", 80.0))
        first = calculate_performance(series, date(2024, 7, 28))
        second = calculate_performance(series, date(2024, 7, 28))
        assert first == second

    def test_accepts_generator(self):
        series = _series(("2024-07-28", 120.0), ("2024-07-21", 100.0))
        result = calculate_performance((p for p in series), date(2024, 7, 28))
        assert result.weekly_change == pytest.approx(20.0)


class TestPerformanceResult:

    def test_defaults_are_zero(self):
        result = PerformanceResult()
        assert result.to_dict() == {
            "weeklyChange": 0.0,
            "monthlyChange": 0.0,
            "yearlyChange": 0.0,
            "fiveYearlyChange": 0.0,
        }

    def test_wire_keys(self):
        result = PerformanceResult(1.0, 2.0, 3.0, 4.0)
        assert result.to_dict() == {
            "weeklyChange": 1.0,
            "monthlyChange": 2.0,
            "yearlyChange": 3.0,
            "fiveYearlyChange": 4.0,
        }
