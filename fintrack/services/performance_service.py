"""
Asset and portfolio performance service.

Runs fetch + calculate per ticker. Provider failures and series without a
current price degrade to synthetic figures. A single-asset lookup also
degrades on unexpected errors; in a portfolio, a ticker that raises or
times out is isolated and dropped from the mapping.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from ..domain.models import FetchStatus, PerformanceResult, PortfolioPerformanceResult
from ..domain.performance import CurrentPriceUnavailable, calculate_performance
from ..providers.mock import synthetic_performance
from ..providers.twelvedata import TwelveDataProvider

logger = logging.getLogger(__name__)

DEFAULT_TICKER_TIMEOUT = 45.0


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass(frozen=True)
class AssetEvaluation:
    """Performance for one ticker plus where the numbers came from."""
    ticker: str
    performance: PerformanceResult
    status: FetchStatus
    synthetic: bool = False
    reason: str = ""


class PerformanceService:
    """
    Computes performance for single assets and whole portfolios.

    Dependencies are injected so tests can pin the clock, seed the mock
    generator, or substitute the provider.
    """

    def __init__(
        self,
        provider: TwelveDataProvider,
        clock: Optional[Callable[[], date]] = None,
        rng: Optional[random.Random] = None,
        ticker_timeout: Optional[float] = DEFAULT_TICKER_TIMEOUT,
    ):
        self.provider = provider
        self.clock = clock or utc_today
        self.rng = rng
        self.ticker_timeout = ticker_timeout

    async def evaluate_asset(self, ticker: str) -> AssetEvaluation:
        """Fetch and calculate one ticker, substituting synthetic data on any failure."""
        try:
            return await self._evaluate(ticker)
        except Exception as exc:
            logger.error(
                "Performance for %s failed, using synthetic data: %s: %s",
                ticker,
                type(exc).__name__,
                exc,
            )
            return self._synthetic(ticker, FetchStatus.NETWORK_ERROR, "unexpected_error")

    async def _evaluate(self, ticker: str) -> AssetEvaluation:
        outcome = await self.provider.fetch_time_series(ticker)

        if not outcome.success:
            if outcome.status is FetchStatus.NO_CREDENTIAL:
                logger.info("Using synthetic performance for %s (no API key)", ticker)
            else:
                logger.warning(
                    "Using synthetic performance for %s: %s (%s)",
                    ticker,
                    outcome.status.value,
                    outcome.message,
                )
            return self._synthetic(ticker, outcome.status, outcome.status.value)

        try:
            performance = calculate_performance(outcome.series, self.clock())
        except CurrentPriceUnavailable as exc:
            logger.warning("Using synthetic performance for %s: %s", ticker, exc)
            return self._synthetic(ticker, outcome.status, "no_current_price")

        return AssetEvaluation(ticker=ticker, performance=performance, status=outcome.status)

    async def compute_asset_performance(self, ticker: str) -> PerformanceResult:
        evaluation = await self.evaluate_asset(ticker)
        return evaluation.performance

    async def evaluate_portfolio(self, tickers: Iterable[str]) -> Dict[str, AssetEvaluation]:
        """
        Evaluate all tickers concurrently and wait for every one to settle.

        Duplicates are collapsed. Tickers whose task raised or exceeded
        ``ticker_timeout`` are logged and left out of the result.
        """
        unique = _unique_tickers(tickers)
        if not unique:
            return {}

        logger.info("Computing performance for %d tickers", len(unique))

        outcomes = await asyncio.gather(
            *(self._evaluate_with_timeout(ticker) for ticker in unique),
            return_exceptions=True,
        )

        evaluations: Dict[str, AssetEvaluation] = {}
        for ticker, outcome in zip(unique, outcomes):
            if isinstance(outcome, asyncio.TimeoutError):
                logger.error("Performance for %s timed out after %ss, dropping", ticker, self.ticker_timeout)
                continue
            if isinstance(outcome, Exception):
                logger.error(
                    "Performance for %s failed, dropping: %s: %s",
                    ticker,
                    type(outcome).__name__,
                    outcome,
                )
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            evaluations[ticker] = outcome

        dropped = len(unique) - len(evaluations)
        if dropped:
            logger.warning("Portfolio performance: %d/%d tickers dropped", dropped, len(unique))
        return evaluations

    async def compute_portfolio_performance(self, tickers: Iterable[str]) -> PortfolioPerformanceResult:
        evaluations = await self.evaluate_portfolio(tickers)
        return {ticker: evaluation.performance for ticker, evaluation in evaluations.items()}

    async def _evaluate_with_timeout(self, ticker: str) -> AssetEvaluation:
        if self.ticker_timeout is None:
            return await self._evaluate(ticker)
        return await asyncio.wait_for(self._evaluate(ticker), timeout=self.ticker_timeout)

    def _synthetic(self, ticker: str, status: FetchStatus, reason: str) -> AssetEvaluation:
        return AssetEvaluation(
            ticker=ticker,
            performance=synthetic_performance(self.rng),
            status=status,
            synthetic=True,
            reason=reason,
        )


def _unique_tickers(tickers: Iterable[str]) -> List[str]:
    """Strip blanks and duplicates, keeping first-seen order."""
    seen = {}
    for ticker in tickers:
        cleaned = (ticker or "").strip()
        if cleaned and cleaned not in seen:
            seen[cleaned] = None
    return list(seen)
