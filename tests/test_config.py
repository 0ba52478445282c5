"""Tests for environment configuration."""

from fintrack.config import Config, is_real_api_key

ENV_VARS = (
    "TWELVEDATA_API_KEY",
    "TWELVE_DATA_API_KEY",
    "SYMBOL_SEARCH_COUNTRY",
    "OPENAI_API_KEY",
    "HTTP_TIMEOUT",
    "TICKER_TIMEOUT",
    "WEB_API_TOKEN",
    "LOG_LEVEL",
)


def _clear(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clear(monkeypatch)
    config = Config.from_env()

    assert config.twelvedata_api_key is None
    assert config.has_twelvedata_key is False
    assert config.symbol_search_country == "India"
    assert config.openai_api_key is None
    assert config.http_timeout == 30
    assert config.ticker_timeout == 45.0
    assert config.web_api_token is None
    assert config.log_level == "INFO"


def test_twelvedata_key_aliases(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("TWELVE_DATA_API_KEY", " legacy-key ")
    assert Config.from_env().twelvedata_api_key == "legacy-key"

    monkeypatch.setenv("TWELVEDATA_API_KEY", "primary-key")
    assert Config.from_env().twelvedata_api_key == "primary-key"


def test_overrides(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("HTTP_TIMEOUT", "10")
    monkeypatch.setenv("TICKER_TIMEOUT", "2.5")
    monkeypatch.setenv("WEB_API_TOKEN", "secret")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("SYMBOL_SEARCH_COUNTRY", "United States")

    config = Config.from_env()

    assert config.http_timeout == 10
    assert config.ticker_timeout == 2.5
    assert config.web_api_token == "secret"
    assert config.log_level == "DEBUG"
    assert config.symbol_search_country == "United States"


def test_blank_search_country_means_all(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("SYMBOL_SEARCH_COUNTRY", "  ")
    assert Config.from_env().symbol_search_country is None


def test_placeholder_key_is_not_real():
    assert is_real_api_key("YOUR_API_KEY") is False
    assert is_real_api_key(None) is False
    assert is_real_api_key("") is False
    assert is_real_api_key("abc") is True
    assert Config(twelvedata_api_key="YOUR_API_KEY").has_twelvedata_key is False
