"""Quote service: cached cross rates + rounding.

Purpose:
    Turn (base, quote, amount) into a rounded quote amount using a cross rate
    derived from the configured RateFetcher, caching each pair for the
    configured TTL.

Design:
    - One instance per application (built by the app factory, injected into
      routes). It owns the ExpiringLRUCache and the debug request counter.
    - Cache keys are "<BASE>-<QUOTE>"; capacity is N*(N-1) so every ordered
      pair fits without eviction.
    - Misses for the same pair are serialized through a per-pair lock so only
      one caller fetches; the fetch itself runs outside the cache lock.
    - Nothing is retried here. Retries belong to the fetcher.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple

from fxquote.core.config import Settings
from fxquote.core.errors import QuoteError, RateFetchError, UnsupportedCurrencyError
from fxquote.models.quote import CacheInfo, DebugInfo, ExpiryInfo, QuoteResult
from fxquote.services.lru_cache import ExpiringLRUCache
from fxquote.services.rates import RateFetcher, make_rate_fetcher
from fxquote.services.rounding import RoundingPolicy, apply_rounding_policy

logger = logging.getLogger("fxquote.quotes")

DEFAULT_ROUNDING_POLICY = RoundingPolicy.ROUND_HALF_EVEN


def pair_key(base: str, quote: str) -> str:
    return f"{base}-{quote}"


class QuoteService:
    def __init__(
        self,
        fetcher: RateFetcher,
        supported_currencies: Iterable[str],
        *,
        cache_ttl_seconds: float = 10.0,
        cache_capacity: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._fetcher = fetcher
        self._supported = tuple(supported_currencies)
        n = len(self._supported)
        capacity = cache_capacity if cache_capacity is not None else n * (n - 1)
        self._cache: ExpiringLRUCache[str, float] = ExpiringLRUCache(
            capacity, cache_ttl_seconds, clock=clock
        )
        self._request_count = 0
        self._count_lock = threading.Lock()
        self._pair_locks: Dict[str, threading.Lock] = {}
        self._pair_locks_guard = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "QuoteService":
        fetcher = make_rate_fetcher(settings.exchange_rate_provider, settings)
        return cls(
            fetcher,
            settings.supported_currencies,
            cache_ttl_seconds=settings.rates_cache_ttl_seconds,
            cache_capacity=settings.cache_capacity,
        )

    @property
    def cache(self) -> ExpiringLRUCache[str, float]:
        return self._cache

    @property
    def total_requests(self) -> int:
        return self._request_count

    # Public API -----------------------------------------------
    def get_quote(
        self,
        base: str,
        quote: str,
        amount: float,
        debug: bool = False,
        policy: RoundingPolicy | str = DEFAULT_ROUNDING_POLICY,
    ) -> QuoteResult:
        started = time.perf_counter()
        exchange_rate, cached = self._get_exchange_rate(base, quote)
        raw_quote_amount = amount * exchange_rate
        if not math.isfinite(raw_quote_amount):
            raise QuoteError("Quote amount out of range")
        quote_amount = apply_rounding_policy(raw_quote_amount, 0, policy)

        result = QuoteResult(
            exchange_rate=round(exchange_rate, 3),
            quote_amount=quote_amount,
            cached=cached,
        )
        if debug:
            response_time_ms = (time.perf_counter() - started) * 1000
            result.debug_info = DebugInfo(
                raw_quote_amount=raw_quote_amount,
                rounding_policy=RoundingPolicy(policy).value,
                response_time_ms=round(response_time_ms, 3),
                cached=cached,
                total_requests=self._increment_requests(),
            )
            result.cache_info = self.get_cache_stats()
        return result

    def get_cache_stats(self) -> CacheInfo:
        size = self._cache.size()
        capacity = self._cache.capacity
        return CacheInfo(
            size=size,
            capacity=capacity,
            utilization_percentage=100 * size / capacity,
            most_recently_cached=self._cache.most_recent_key(),
            least_recently_cached=self._cache.least_recent_key(),
            cache_order=self._cache.ordered_keys(),
            expiry_data=[ExpiryInfo(**e) for e in self._cache.keys_with_expirations()],
        )

    # Internal --------------------------------------------------
    def _increment_requests(self) -> int:
        with self._count_lock:
            self._request_count += 1
            return self._request_count

    def _pair_lock(self, key: str) -> threading.Lock:
        with self._pair_locks_guard:
            return self._pair_locks.setdefault(key, threading.Lock())

    def _get_exchange_rate(self, base: str, quote: str) -> Tuple[float, bool]:
        for code in (base, quote):
            if code not in self._supported:
                raise UnsupportedCurrencyError(code, self._supported)
        if base == quote:
            return 1.0, False
        key = pair_key(base, quote)

        rate = self._cache.get(key)
        if rate is not None:
            logger.debug("cache hit", extra={"pair": key})
            return rate, True

        with self._pair_lock(key):
            # Another caller may have filled the pair while we waited.
            rate = self._cache.get(key)
            if rate is not None:
                logger.debug("cache hit after wait", extra={"pair": key})
                return rate, True
            logger.debug("cache miss", extra={"pair": key})
            rates = self._fetcher.fetch_rates()
            rate = self._lookup(rates, quote) / self._lookup(rates, base)
            self._cache.set(key, rate)
            return rate, False

    def _lookup(self, rates: Mapping[str, float], code: str) -> float:
        if code == self._fetcher.reference_currency:
            return 1.0
        value = rates.get(code)
        if value is None or value <= 0:
            logger.warning("rate table missing %s", code)
            raise RateFetchError(f"No rate available for {code}")
        return float(value)
