from __future__ import annotations

import http.client

import pytest

from fxquote.core.config import Settings
from fxquote.core.errors import RateFetchError
from fxquote.services import http_client
from fxquote.services.rates import providers
from fxquote.services.rates.providers import (
    ExternalHTTPRateFetcher,
    StaticRateFetcher,
    make_rate_fetcher,
)


def test_static_fetcher_returns_copy():
    fetcher = StaticRateFetcher()
    rates = fetcher.fetch_rates()
    assert rates["USD"] == 1.0
    rates["EUR"] = 123  # type: ignore[index]
    assert fetcher.fetch_rates()["EUR"] != 123


def test_external_fetcher_parses_rates(monkeypatch):
    calls = []

    def fake_get_json(url, *, timeout, retries, backoff):
        calls.append((url, timeout, retries))
        return {"base": "USD", "rates": {"USD": 1, "EUR": 0.9, "BAD": "x", "ZERO": 0, "FLAG": True}}

    monkeypatch.setattr(providers, "get_json", fake_get_json)
    fetcher = ExternalHTTPRateFetcher("https://rates.test/latest/USD", timeout=2.0, retries=0)

    assert fetcher.fetch_rates() == {"USD": 1.0, "EUR": 0.9}
    assert calls == [("https://rates.test/latest/USD", 2.0, 0)]


@pytest.mark.parametrize("payload", [{}, {"rates": []}, {"rates": {}}, {"rates": {"EUR": "0.9"}}])
def test_external_fetcher_rejects_malformed_payload(monkeypatch, payload):
    monkeypatch.setattr(providers, "get_json", lambda *a, **k: payload)
    with pytest.raises(RateFetchError):
        ExternalHTTPRateFetcher("https://rates.test").fetch_rates()


def test_external_fetcher_wraps_http_errors(monkeypatch):
    def boom(*a, **k):
        raise http_client.HttpError("Failed to fetch JSON")

    monkeypatch.setattr(providers, "get_json", boom)
    with pytest.raises(RateFetchError, match="Failed to fetch JSON"):
        ExternalHTTPRateFetcher("https://rates.test").fetch_rates()


def test_get_json_retries_then_raises(monkeypatch):
    attempts = []

    def fail(request, timeout):
        attempts.append(timeout)
        raise TimeoutError("timed out")

    monkeypatch.setattr(http_client.urllib.request, "urlopen", fail)
    monkeypatch.setattr(http_client.time, "sleep", lambda s: None)

    with pytest.raises(http_client.HttpError):
        http_client.get_json("https://rates.test", timeout=1.5, retries=2)
    assert attempts == [1.5, 1.5, 1.5]


def test_factory():
    settings = Settings(exchange_rate_provider="static", http_timeout_seconds=3)
    assert isinstance(make_rate_fetcher("static", settings), StaticRateFetcher)
    ext = make_rate_fetcher("external-http", settings)
    assert isinstance(ext, ExternalHTTPRateFetcher)
    assert ext.url == "https://api.exchangerate-api.com/v4/latest/USD"
    with pytest.raises(ValueError):
        make_rate_fetcher("carrier-pigeon", settings)


@pytest.mark.parametrize(
    "error",
    [
        http.client.RemoteDisconnected("Remote end closed connection without response"),
        http.client.IncompleteRead(b"{"),
        ConnectionResetError("reset by peer"),
    ],
)
def test_connection_errors_become_rate_fetch_errors(monkeypatch, error):
    attempts = []

    def drop(request, timeout):
        attempts.append(timeout)
        raise error

    monkeypatch.setattr(http_client.urllib.request, "urlopen", drop)
    monkeypatch.setattr(http_client.time, "sleep", lambda s: None)

    with pytest.raises(RateFetchError):
        ExternalHTTPRateFetcher("https://rates.test", retries=1).fetch_rates()
    assert len(attempts) == 2  # retried before giving up
