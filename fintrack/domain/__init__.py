"""Domain layer - models and performance calculation."""

from .models import (
    FetchStatus,
    FinancialTip,
    InvestmentAdvice,
    InvestmentHolding,
    MonthlyReport,
    PerformanceResult,
    PortfolioPerformanceResult,
    PricePoint,
    PriceSeries,
    Signal,
    SymbolMatch,
    TimeSeriesResult,
)
from .performance import (
    CurrentPriceUnavailable,
    PerformanceError,
    calculate_performance,
    percent_change,
    price_on_or_before,
    reference_dates,
    subtract_months,
)

__all__ = [
    "FetchStatus",
    "FinancialTip",
    "InvestmentAdvice",
    "InvestmentHolding",
    "MonthlyReport",
    "PerformanceResult",
    "PortfolioPerformanceResult",
    "PricePoint",
    "PriceSeries",
    "Signal",
    "SymbolMatch",
    "TimeSeriesResult",
    "CurrentPriceUnavailable",
    "PerformanceError",
    "calculate_performance",
    "percent_change",
    "price_on_or_before",
    "reference_dates",
    "subtract_months",
]
