from __future__ import annotations

from typing import Dict, Mapping

import pytest
from fastapi.testclient import TestClient

from fxquote.core.config import Settings
from fxquote.core.errors import RateFetchError
from fxquote.main import create_app
from fxquote.services.quote_service import QuoteService
from fxquote.services.rates import RateFetcher

CURRENCIES = ("USD", "EUR", "GBP", "ILS")


class FakeClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubFetcher(RateFetcher):
    def __init__(self, rates: Mapping[str, float] | None = None, fail: bool = False):
        self.rates: Dict[str, float] = dict(rates or {"USD": 1.0, "EUR": 0.9, "GBP": 0.8, "ILS": 3.6})
        self.fail = fail
        self.calls = 0

    def fetch_rates(self) -> Mapping[str, float]:
        self.calls += 1
        if self.fail:
            raise RateFetchError("rate source unavailable")
        return dict(self.rates)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetcher() -> StubFetcher:
    return StubFetcher()


@pytest.fixture
def service(fetcher: StubFetcher, clock: FakeClock) -> QuoteService:
    return QuoteService(fetcher, CURRENCIES, cache_ttl_seconds=10, clock=clock)


@pytest.fixture
def client(service: QuoteService):
    settings = Settings(exchange_rate_provider="static")
    app = create_app(settings_override=settings, quote_service=service)
    with TestClient(app) as c:
        yield c
