"""Web API - FastAPI application exposing performance, symbol search, advice, reports and tips."""

import logging
import re
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, HTTPException, Query, Request, status
from pydantic import BaseModel

from .domain.models import InvestmentHolding
from .services.advice_service import AdviceService
from .services.performance_service import PerformanceService

logger = logging.getLogger(__name__)

TICKER_PATTERN = re.compile(r"[A-Za-z0-9.\-:]{1,20}")
MAX_TICKERS = 100


# ============== PYDANTIC MODELS ==============

class PortfolioRequest(BaseModel):
    tickers: List[str]


class AdviceRequest(BaseModel):
    asset_name: str


class HoldingModel(BaseModel):
    name: str
    type: str
    value: float


class ReportRequest(BaseModel):
    income: float
    expenses: float
    spending_by_category: Dict[str, float] = {}
    investment_portfolio: List[HoldingModel] = []


class TipRequest(BaseModel):
    current_month_spending: float
    previous_month_spending: float
    savings: float = 0.0
    investment_performance: str = ""
    financial_goals: str = ""


# ============== HELPERS ==============

def _require_api_auth(request: Request, x_api_key: Optional[str]) -> None:
    """Enforce API key auth when a token is configured."""
    token = request.app.state.api_token
    if not token:
        return
    if not x_api_key or x_api_key != token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


def _require_advice_service(request: Request) -> AdviceService:
    advice_service = request.app.state.advice_service
    if advice_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Advice service not configured",
        )
    return advice_service


def _validate_ticker(ticker: str) -> str:
    cleaned = ticker.strip()
    if not TICKER_PATTERN.fullmatch(cleaned):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid ticker: {ticker!r}",
        )
    return cleaned


# ============== FASTAPI APP ==============

def create_app(
    service: PerformanceService,
    advice_service: Optional[AdviceService] = None,
    api_token: Optional[str] = None,
    lifespan: Any = None,
) -> FastAPI:
    """Build the FastAPI app around already-wired services."""
    app = FastAPI(title="Portfolio Performance API", lifespan=lifespan)
    app.state.performance_service = service
    app.state.advice_service = advice_service
    app.state.api_token = api_token

    @app.get("/healthz")
    async def healthz():
        """Unauthenticated health check."""
        return {"status": "ok"}

    @app.post("/api/performance")
    async def portfolio_performance(
        body: PortfolioRequest,
        request: Request,
        x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    ):
        """Performance for every ticker in the portfolio; failed tickers are omitted."""
        _require_api_auth(request, x_api_key)

        if not body.tickers:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="At least one ticker is required",
            )
        if len(body.tickers) > MAX_TICKERS:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"At most {MAX_TICKERS} tickers per request",
            )
        tickers = [_validate_ticker(t) for t in body.tickers]

        evaluations = await request.app.state.performance_service.evaluate_portfolio(tickers)
        return {
            "results": {t: e.performance.to_dict() for t, e in evaluations.items()},
            "synthetic": sorted(t for t, e in evaluations.items() if e.synthetic),
        }

    @app.get("/api/performance/{ticker}")
    async def asset_performance(
        ticker: str,
        request: Request,
        x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    ):
        """Performance for a single asset."""
        _require_api_auth(request, x_api_key)
        ticker = _validate_ticker(ticker)

        evaluation = await request.app.state.performance_service.evaluate_asset(ticker)
        return {
            "ticker": ticker,
            "performance": evaluation.performance.to_dict(),
            "synthetic": evaluation.synthetic,
        }

    @app.get("/api/symbols")
    async def symbol_search(
        request: Request,
        q: str = Query(..., min_length=1, max_length=50),
        country: Optional[str] = None,
        x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    ):
        """Instrument lookup for the add-investment form."""
        _require_api_auth(request, x_api_key)
        provider = request.app.state.performance_service.provider
        matches = await provider.search_symbols(q, country=country)
        return {"results": [m.to_dict() for m in matches]}

    @app.post("/api/advice")
    async def investment_advice(
        body: AdviceRequest,
        request: Request,
        x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    ) -> Dict[str, str]:
        """BUY/SELL/HOLD recommendation for a named asset."""
        _require_api_auth(request, x_api_key)
        advice_service = _require_advice_service(request)

        asset_name = body.asset_name.strip()
        if not asset_name:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="asset_name must not be empty",
            )

        advice = await advice_service.generate_advice(asset_name)
        return advice.to_dict()

    @app.post("/api/report")
    async def monthly_report(
        body: ReportRequest,
        request: Request,
        x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    ) -> Dict[str, str]:
        """Monthly financial report with feedback."""
        _require_api_auth(request, x_api_key)
        advice_service = _require_advice_service(request)

        holdings = [
            InvestmentHolding(name=h.name, type=h.type, value=h.value)
            for h in body.investment_portfolio
        ]
        report = await advice_service.generate_monthly_report(
            body.income,
            body.expenses,
            body.spending_by_category,
            holdings,
        )
        return report.to_dict()

    @app.post("/api/tip")
    async def financial_tip(
        body: TipRequest,
        request: Request,
        x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    ) -> Dict[str, str]:
        """Personalized saving tip based on month-over-month spending."""
        _require_api_auth(request, x_api_key)
        advice_service = _require_advice_service(request)

        tip = await advice_service.generate_financial_tip(
            body.current_month_spending,
            body.previous_month_spending,
            body.savings,
            body.investment_performance,
            body.financial_goals,
        )
        return tip.to_dict()

    return app
