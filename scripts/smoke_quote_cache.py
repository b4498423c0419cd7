"""Smoke script for the quote cache.

Demonstrates:
 1. First /debug call misses the cache and fetches rates.
 2. A second call within the TTL is served from the cache.
 3. Forcing expiry (backdating the clock) makes the next call fetch again.

Uses the static provider so it runs offline. NOTE: this is a lightweight
diagnostic, not a formal test.
"""

from pprint import pprint

from fastapi.testclient import TestClient

from fxquote.core.config import Settings
from fxquote.main import create_app
from fxquote.services.quote_service import QuoteService
from fxquote.services.rates import StaticRateFetcher


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def run():
    settings = Settings(exchange_rate_provider="static")
    settings.init_post_load()
    clock = _Clock()
    service = QuoteService(
        StaticRateFetcher(),
        settings.supported_currencies,
        cache_ttl_seconds=settings.rates_cache_ttl_seconds,
        clock=clock,
    )
    client = TestClient(create_app(settings_override=settings, quote_service=service))
    params = {"baseCurrency": "USD", "quoteCurrency": "ILS", "baseAmount": 250}
    out = {}

    out["initial"] = client.get("/debug", params=params).json()["debugInfo"]
    out["second"] = client.get("/debug", params=params).json()["debugInfo"]

    clock.now += settings.rates_cache_ttl_seconds + 1
    body = client.get("/debug", params=params).json()
    out["forced_refresh"] = body["debugInfo"]
    out["cache"] = body["cacheInfo"]

    pprint(out)


if __name__ == "__main__":
    run()
