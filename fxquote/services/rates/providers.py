"""Concrete rate fetchers and factory.

'static' serves a fixed in-process table for offline development; 'external-http'
pulls the live table (base USD) from exchangerate-api.com.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Type

from fxquote.core.config import Settings
from fxquote.core.errors import RateFetchError
from fxquote.services.http_client import HttpError, get_json

from .base import RateFetcher

logger = logging.getLogger("fxquote.rates")

_STATIC_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "ILS": 3.71,
}


def _parse_rate_table(payload: Any) -> Dict[str, float]:
    rates = payload.get("rates") if isinstance(payload, dict) else None
    if not isinstance(rates, dict) or not rates:
        raise RateFetchError("Rate source returned no rates")
    parsed: Dict[str, float] = {}
    for code, value in rates.items():
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if value > 0:
            parsed[str(code).upper()] = float(value)
    if not parsed:
        raise RateFetchError("Rate source returned no usable rates")
    return parsed


class StaticRateFetcher(RateFetcher):
    def __init__(self, rates: Mapping[str, float] | None = None, reference_currency: str = "USD"):
        self.reference_currency = reference_currency
        self._rates = dict(rates if rates is not None else _STATIC_RATES)

    def fetch_rates(self) -> Mapping[str, float]:
        return dict(self._rates)


class ExternalHTTPRateFetcher(RateFetcher):
    def __init__(
        self,
        url: str,
        *,
        reference_currency: str = "USD",
        timeout: float = 5.0,
        retries: int = 1,
        backoff: float = 0.5,
    ):
        self.url = url
        self.reference_currency = reference_currency
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff

    def fetch_rates(self) -> Mapping[str, float]:
        try:
            payload = get_json(
                self.url,
                timeout=self._timeout,
                retries=self._retries,
                backoff=self._backoff,
            )
        except HttpError as e:
            raise RateFetchError(str(e)) from e
        rates = _parse_rate_table(payload)
        logger.info("fetched %d rates from %s", len(rates), self.url)
        return rates


_FETCHER_REGISTRY: Dict[str, Type[RateFetcher]] = {
    "static": StaticRateFetcher,
    "external-http": ExternalHTTPRateFetcher,
}


def make_rate_fetcher(kind: str, settings: Settings) -> RateFetcher:
    cls = _FETCHER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    if cls is ExternalHTTPRateFetcher:
        return ExternalHTTPRateFetcher(
            str(settings.exchange_api_url),
            reference_currency=settings.reference_currency,
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
            backoff=settings.http_backoff_seconds,
        )
    return StaticRateFetcher(reference_currency=settings.reference_currency)
