from .base import RateFetcher
from .providers import (
    ExternalHTTPRateFetcher,
    StaticRateFetcher,
    make_rate_fetcher,
)

__all__ = [
    "RateFetcher",
    "ExternalHTTPRateFetcher",
    "StaticRateFetcher",
    "make_rate_fetcher",
]
