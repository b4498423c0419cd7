"""Domain constants for validation and cache sizing.

Kept as plain module-level values; the settings layer reads its defaults
from here so the validator and the cache agree on the supported set.
"""

from typing import Tuple

SUPPORTED_CURRENCIES: Tuple[str, ...] = ("USD", "EUR", "GBP", "ILS")
REFERENCE_CURRENCY: str = "USD"


def is_supported_currency(code: str) -> bool:
    return code in SUPPORTED_CURRENCIES


def pair_capacity(currency_count: int) -> int:
    """Number of ordered base/quote pairs with base != quote (e.g. USD-EUR and EUR-USD)."""
    return currency_count * (currency_count - 1)
