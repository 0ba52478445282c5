"""Domain models for asset performance."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Any, Tuple


@dataclass(frozen=True)
class PricePoint:
    """Daily closing price."""
    date: date
    close: float


# Series are kept sorted newest first
PriceSeries = Tuple[PricePoint, ...]


@dataclass(frozen=True)
class PerformanceResult:
    """Percentage price change over the four look-back windows."""
    weekly_change: float = 0.0
    monthly_change: float = 0.0
    yearly_change: float = 0.0
    five_yearly_change: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "weeklyChange": self.weekly_change,
            "monthlyChange": self.monthly_change,
            "yearlyChange": self.yearly_change,
            "fiveYearlyChange": self.five_yearly_change,
        }


# Ticker -> result; failed tickers are absent
PortfolioPerformanceResult = Dict[str, PerformanceResult]


class FetchStatus(str, Enum):
    """Outcome of a time-series request."""
    OK = "ok"
    NO_CREDENTIAL = "no_credential"
    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"
    NETWORK_ERROR = "network_error"


@dataclass(frozen=True)
class TimeSeriesResult:
    """Result from the market data provider."""
    status: FetchStatus
    ticker: str
    series: PriceSeries = field(default_factory=tuple)
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is FetchStatus.OK


@dataclass(frozen=True)
class SymbolMatch:
    """Symbol search hit."""
    symbol: str
    instrument_name: str
    exchange: str
    country: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "instrument_name": self.instrument_name,
            "exchange": self.exchange,
            "country": self.country,
        }


class Signal(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


@dataclass(frozen=True)
class InvestmentAdvice:
    """AI-generated recommendation for one asset."""
    signal: Signal
    advice: str
    disclaimer: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "signal": self.signal.value,
            "advice": self.advice,
            "disclaimer": self.disclaimer,
        }


@dataclass(frozen=True)
class InvestmentHolding:
    name: str
    type: str
    value: float


@dataclass(frozen=True)
class MonthlyReport:
    """Narrative monthly summary plus actionable feedback."""
    report: str
    feedback: str

    def to_dict(self) -> Dict[str, str]:
        return {"report": self.report, "feedback": self.feedback}


@dataclass(frozen=True)
class FinancialTip:
    tip: str

    def to_dict(self) -> Dict[str, str]:
        return {"tip": self.tip}
