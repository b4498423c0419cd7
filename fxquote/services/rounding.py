"""Rounding policies applied to quote amounts.

Centralized so the quote service and any future endpoint use identical
rounding semantics. ``roundHalfDown`` and ``roundHalfEven`` keep the exact
formulas the product has always used (both behave as half-up for positive
amounts) rather than their textbook definitions.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from fxquote.core.errors import InvalidPolicyError


class RoundingPolicy(str, Enum):
    ROUND_HALF_UP = "roundHalfUp"
    ROUND_HALF_DOWN = "roundHalfDown"
    ROUND_HALF_EVEN = "roundHalfEven"
    ROUND_UP = "roundUp"
    ROUND_DOWN = "roundDown"
    TRUNCATE = "truncate"


def _half_up(value: float) -> float:
    # Half away from zero; Decimal(str()) avoids binary artefacts like 2.675.
    return float(Decimal(str(value)).to_integral_value(rounding=ROUND_HALF_UP))


def _round_half_toward_positive(value: float) -> float:
    # Half toward +inf: round(-3.5) == -3, round(2.5) == 3.
    return math.floor(value + 0.5)


def _parse_policy(policy: RoundingPolicy | str) -> RoundingPolicy:
    try:
        return RoundingPolicy(policy)
    except ValueError:
        raise InvalidPolicyError(policy) from None


def apply_rounding_policy(
    amount: float, decimals: int, policy: RoundingPolicy | str
) -> float:
    policy = _parse_policy(policy)
    factor = 10**decimals
    scaled = amount * factor

    if policy is RoundingPolicy.ROUND_HALF_UP:
        result = _half_up(scaled)
    elif policy is RoundingPolicy.ROUND_HALF_DOWN:
        result = math.floor(scaled + 0.5)
    elif policy is RoundingPolicy.ROUND_HALF_EVEN:
        if math.floor(scaled) % 2 == 0:
            result = _round_half_toward_positive(scaled)
        else:
            result = math.floor(scaled + 0.5)
    elif policy is RoundingPolicy.ROUND_UP:
        result = math.ceil(scaled)
    elif policy is RoundingPolicy.ROUND_DOWN:
        result = math.floor(scaled)
    else:
        result = math.trunc(scaled)
    return result / factor
