"""Configuration management for the portfolio performance service."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Value shipped in sample env files; treated the same as a missing key
PLACEHOLDER_API_KEY = "YOUR_API_KEY"

TWELVEDATA_BASE_URL = "https://api.twelvedata.com"
OPENAI_CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_SYMBOL_SEARCH_COUNTRY = "India"


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # Twelve Data API (optional; without it performance figures are synthetic)
    twelvedata_api_key: Optional[str] = None
    twelvedata_base_url: str = TWELVEDATA_BASE_URL
    symbol_search_country: Optional[str] = DEFAULT_SYMBOL_SEARCH_COUNTRY  # Empty means all countries

    # OpenAI (optional, investment advice)
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_url: str = OPENAI_CHAT_COMPLETIONS_URL

    # Network settings
    http_timeout: int = 30
    ticker_timeout: float = 45.0  # Upper bound for one ticker's fetch + calculation
    max_connections: int = 20

    # Web API
    web_api_token: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        twelvedata_key = (
            os.getenv("TWELVEDATA_API_KEY", "").strip()
            or os.getenv("TWELVE_DATA_API_KEY", "").strip()
        )

        return cls(
            twelvedata_api_key=twelvedata_key or None,
            twelvedata_base_url=os.getenv("TWELVEDATA_BASE_URL", TWELVEDATA_BASE_URL).strip() or TWELVEDATA_BASE_URL,
            symbol_search_country=os.getenv("SYMBOL_SEARCH_COUNTRY", DEFAULT_SYMBOL_SEARCH_COUNTRY).strip() or None,
            openai_api_key=os.getenv("OPENAI_API_KEY", "").strip() or None,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini",
            http_timeout=int(os.getenv("HTTP_TIMEOUT", "30")),
            ticker_timeout=float(os.getenv("TICKER_TIMEOUT", "45")),
            max_connections=int(os.getenv("MAX_CONNECTIONS", "20")),
            web_api_token=os.getenv("WEB_API_TOKEN", "").strip() or None,
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )

    @property
    def has_twelvedata_key(self) -> bool:
        """True when a real (non-placeholder) Twelve Data key is configured."""
        return is_real_api_key(self.twelvedata_api_key)


def is_real_api_key(api_key: Optional[str]) -> bool:
    """Check that a key is present and is not the sample placeholder."""
    if not api_key:
        return False
    return api_key.strip() not in ("", PLACEHOLDER_API_KEY)
