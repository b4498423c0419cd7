from functools import lru_cache
from typing import Tuple

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from fxquote.models.constants import (
    REFERENCE_CURRENCY,
    SUPPORTED_CURRENCIES,
    pair_capacity,
)

ALLOWED_RATE_PROVIDERS = {"static", "external-http"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    RATES_CACHE_TTL_SECONDS, EXCHANGE_RATE_PROVIDER, HTTP_TIMEOUT_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "FX Quote API"
    debug: bool = False
    version: str = "0.1.0"

    # Currencies
    supported_currencies: Tuple[str, ...] = SUPPORTED_CURRENCIES
    reference_currency: str = REFERENCE_CURRENCY

    # Exchange rates / caching
    rates_cache_ttl_seconds: float = 10.0
    exchange_api_url: AnyHttpUrl = "https://api.exchangerate-api.com/v4/latest/USD"  # type: ignore[assignment]
    http_timeout_seconds: float = 5.0
    http_retries: int = 1
    http_backoff_seconds: float = 0.5

    # Allowed: 'static' (built-in fixed table), 'external-http' (live API)
    exchange_rate_provider: str = "external-http"

    @property
    def cache_capacity(self) -> int:
        return pair_capacity(len(self.supported_currencies))

    def init_post_load(self) -> None:
        """Normalize currency codes and validate derived fields."""
        self.supported_currencies = tuple(
            dict.fromkeys(c.strip().upper() for c in self.supported_currencies)
        )
        self.reference_currency = self.reference_currency.strip().upper()
        if len(self.supported_currencies) < 2:
            raise ValueError("at least two supported currencies are required")
        if self.reference_currency not in self.supported_currencies:
            raise ValueError(
                f"reference_currency '{self.reference_currency}' must be one of {self.supported_currencies}"
            )
        if self.rates_cache_ttl_seconds <= 0:
            raise ValueError("rates_cache_ttl_seconds must be positive")
        if self.exchange_rate_provider not in ALLOWED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {ALLOWED_RATE_PROVIDERS}"
            )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
