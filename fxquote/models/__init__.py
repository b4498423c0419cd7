"""Pydantic models for the FX quote API."""

from .constants import REFERENCE_CURRENCY, SUPPORTED_CURRENCIES  # re-export
from .quote import (
    CacheInfo,
    DebugInfo,
    ExpiryInfo,
    QuoteOut,
    QuoteRequest,
    QuoteResult,
)

__all__ = [
    "REFERENCE_CURRENCY",
    "SUPPORTED_CURRENCIES",
    "CacheInfo",
    "DebugInfo",
    "ExpiryInfo",
    "QuoteOut",
    "QuoteRequest",
    "QuoteResult",
]
