"""
Twelve Data market data provider.

Fetches daily time series for performance calculation and runs symbol
search. Every expected failure is returned as a tagged TimeSeriesResult
rather than raised:

- "no_credential": API key missing or placeholder (no request is made)
- "rate_limited": HTTP 429 or payload code 429
- "malformed_response": non-2xx status, non-JSON body, error payload,
  or no usable rows
- "network_error": timeout or transport failure
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
import pandas as pd

from ..config import TWELVEDATA_BASE_URL, is_real_api_key
from ..domain.models import FetchStatus, PricePoint, PriceSeries, SymbolMatch, TimeSeriesResult

logger = logging.getLogger(__name__)

# ~8 years of trading days, enough for the five-year look-back
TIME_SERIES_OUTPUT_SIZE = 2000


class TwelveDataProvider:
    """
    Daily time series and symbol search backed by api.twelvedata.com.

    One GET per call, no retries: a failed attempt is final for the call.
    """

    def __init__(
        self,
        api_key: Optional[str],
        http_client: httpx.AsyncClient,
        base_url: str = TWELVEDATA_BASE_URL,
        timeout: float = 30,
        default_country: Optional[str] = None,
    ):
        """
        Args:
            api_key: Twelve Data API key (None or placeholder forces the mock path)
            http_client: Shared httpx.AsyncClient
            base_url: API root, overridable for tests/proxies
            timeout: Per-request timeout in seconds
            default_country: Country applied to symbol searches that name none
        """
        self.name = "TwelveData"
        self.api_key = api_key
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.default_country = default_country or None

    @property
    def has_credential(self) -> bool:
        return is_real_api_key(self.api_key)

    async def fetch_time_series(self, ticker: str) -> TimeSeriesResult:
        """
        Fetch the daily close history for ``ticker``, newest first.

        Never raises for provider or network failures; inspect ``status``.
        """
        if not self.has_credential:
            logger.warning(f"[TwelveData] API key not configured, skipping fetch for {ticker}")
            return TimeSeriesResult(
                status=FetchStatus.NO_CREDENTIAL,
                ticker=ticker,
                message="API key missing or placeholder",
            )

        params = {
            "symbol": ticker,
            "interval": "1day",
            "outputsize": TIME_SERIES_OUTPUT_SIZE,
            "apikey": self.api_key,
        }

        logger.info(f"[TwelveData] Fetching time series for {ticker}")

        try:
            response = await self.http_client.get(
                f"{self.base_url}/time_series",
                params=params,
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            logger.warning(f"[TwelveData] Timeout fetching {ticker}")
            return TimeSeriesResult(
                status=FetchStatus.NETWORK_ERROR, ticker=ticker, message="Request timed out"
            )
        except httpx.DecodingError as e:
            logger.warning(f"[TwelveData] Undecodable response body for {ticker}: {e}")
            return TimeSeriesResult(
                status=FetchStatus.MALFORMED_RESPONSE, ticker=ticker, message=f"DecodingError: {e}"
            )
        except httpx.RequestError as e:
            logger.warning(f"[TwelveData] Network error for {ticker}: {type(e).__name__}: {e}")
            return TimeSeriesResult(
                status=FetchStatus.NETWORK_ERROR, ticker=ticker, message=f"{type(e).__name__}: {e}"
            )

        if response.status_code == 429:
            logger.warning(f"[TwelveData] Rate limited (HTTP 429) for {ticker}")
            return TimeSeriesResult(
                status=FetchStatus.RATE_LIMITED, ticker=ticker, message="HTTP 429"
            )

        if not response.is_success:
            logger.warning(f"[TwelveData] HTTP {response.status_code} for {ticker}")
            return TimeSeriesResult(
                status=FetchStatus.MALFORMED_RESPONSE,
                ticker=ticker,
                message=f"HTTP {response.status_code}",
            )

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"[TwelveData] Non-JSON response for {ticker}")
            return TimeSeriesResult(
                status=FetchStatus.MALFORMED_RESPONSE, ticker=ticker, message="Response is not JSON"
            )

        return self._result_from_payload(payload, ticker)

    def _result_from_payload(self, payload: Any, ticker: str) -> TimeSeriesResult:
        if not isinstance(payload, dict):
            logger.warning(f"[TwelveData] Unexpected payload type for {ticker}: {type(payload).__name__}")
            return TimeSeriesResult(
                status=FetchStatus.MALFORMED_RESPONSE, ticker=ticker, message="Payload is not an object"
            )

        message = str(payload.get("message", ""))

        # Twelve Data reports quota errors in the body with HTTP 200
        if payload.get("code") == 429:
            logger.warning(f"[TwelveData] Rate limit reached for {ticker}: {message}")
            return TimeSeriesResult(status=FetchStatus.RATE_LIMITED, ticker=ticker, message=message)

        if payload.get("status") != "ok" or not payload.get("values"):
            logger.warning(f"[TwelveData] Error payload for {ticker}: {message or 'no values'}")
            return TimeSeriesResult(
                status=FetchStatus.MALFORMED_RESPONSE,
                ticker=ticker,
                message=message or "Missing values",
            )

        series = self._parse_values(payload["values"], ticker)
        if not series:
            return TimeSeriesResult(
                status=FetchStatus.MALFORMED_RESPONSE, ticker=ticker, message="No parseable rows"
            )

        logger.info(f"[TwelveData] ✓ Success: {len(series)} rows for {ticker}")
        return TimeSeriesResult(status=FetchStatus.OK, ticker=ticker, series=series)

    def _parse_values(self, values: Any, ticker: str) -> Optional[PriceSeries]:
        """
        Normalize the ``values`` array into PricePoints sorted newest first.

        Rows with an unparseable date or close are dropped.
        """
        if not isinstance(values, list):
            logger.warning(f"[TwelveData] 'values' is not a list for {ticker}")
            return None

        rows = [row for row in values if isinstance(row, dict)]
        df = pd.DataFrame(rows)

        required = {"datetime", "close"}
        if df.empty or not required.issubset(df.columns):
            missing = required - set(df.columns)
            logger.warning(f"[TwelveData] Missing columns for {ticker}: {missing or 'no rows'}")
            return None

        df = df[["datetime", "close"]].copy()
        df["datetime"] = pd.to_datetime(df["datetime"], errors="coerce")
        df["close"] = pd.to_numeric(df["close"], errors="coerce")
        df = df.dropna()

        if df.empty:
            logger.warning(f"[TwelveData] No rows left after normalization for {ticker}")
            return None

        df = df.sort_values("datetime", ascending=False)
        logger.debug(f"[TwelveData] Parsed {len(df)} rows for {ticker}")
        return tuple(
            PricePoint(date=ts.date(), close=float(close))
            for ts, close in zip(df["datetime"], df["close"])
        )

    async def search_symbols(
        self,
        query: str,
        country: Optional[str] = None,
        limit: int = 10,
    ) -> List[SymbolMatch]:
        """
        Search instruments by symbol or name.

        Falls back to ``default_country`` when no country is given.
        Returns an empty list when the key is missing or the request fails.
        """
        query = query.strip()
        if not query:
            return []

        if not self.has_credential:
            logger.warning("[TwelveData] API key not configured, skipping symbol search")
            return []

        params: Dict[str, Any] = {"symbol": query, "outputsize": limit}
        country = country or self.default_country
        if country:
            params["country"] = country

        try:
            response = await self.http_client.get(
                f"{self.base_url}/symbol_search",
                params=params,
                headers={"Authorization": f"apikey {self.api_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[TwelveData] Symbol search failed for {query!r}: {type(e).__name__}: {e}")
            return []

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            logger.debug(f"[TwelveData] No symbol results for {query!r}")
            return []

        matches = []
        for item in data:
            if not isinstance(item, dict) or not item.get("symbol"):
                continue
            matches.append(
                SymbolMatch(
                    symbol=str(item["symbol"]),
                    instrument_name=str(item.get("instrument_name", "")),
                    exchange=str(item.get("exchange", "")),
                    country=str(item.get("country", "")),
                )
            )
        return matches[:limit]
