"""Shared HTTP client factory."""

import logging

import httpx

from .config import Config

logger = logging.getLogger(__name__)


def create_http_client(config: Config) -> httpx.AsyncClient:
    """
    Create the process-wide HTTP client with connection pooling.

    The caller owns the client and must close it with ``aclose()``.
    """
    logger.debug(
        "Creating HTTP client (timeout=%ss, max_connections=%d)",
        config.http_timeout,
        config.max_connections,
    )
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout),
        limits=httpx.Limits(
            max_keepalive_connections=config.max_connections,
            max_connections=config.max_connections,
        ),
    )
