"""Main entry point for the portfolio performance API."""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .config import Config
from .http_client import create_http_client
from .providers.twelvedata import TwelveDataProvider
from .services.advice_service import AdviceService
from .services.performance_service import PerformanceService
from .web_api import create_app

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx logs every request at INFO, including the apikey query parameter
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_app(config: Config) -> FastAPI:
    """Wire client, provider and services into the FastAPI app."""
    http_client = create_http_client(config)

    provider = TwelveDataProvider(
        api_key=config.twelvedata_api_key,
        http_client=http_client,
        base_url=config.twelvedata_base_url,
        timeout=config.http_timeout,
        default_country=config.symbol_search_country,
    )
    service = PerformanceService(provider, ticker_timeout=config.ticker_timeout)
    advice_service = AdviceService(config, http_client)

    if config.has_twelvedata_key:
        logger.info("✓ Twelve Data provider configured")
    else:
        logger.warning("TWELVEDATA_API_KEY not set, performance figures will be synthetic")
    if not advice_service.enabled:
        logger.warning("OPENAI_API_KEY not set, advice, reports and tips will use fallback text")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await http_client.aclose()
        logger.info("HTTP client closed")

    return create_app(
        service,
        advice_service=advice_service,
        api_token=config.web_api_token,
        lifespan=lifespan,
    )


def main() -> None:
    """Console entry point."""
    config = Config.from_env()
    configure_logging(config.log_level)

    app = build_app(config)
    logger.info("Starting web API on %s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
