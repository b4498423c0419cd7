"""Rounding policies.

roundHalfDown and roundHalfEven intentionally keep their historic formulas,
so the expected values below are the literal outputs, not textbook rounding.
"""

from __future__ import annotations

import pytest

from fxquote.core.errors import InvalidPolicyError
from fxquote.services.rounding import RoundingPolicy, apply_rounding_policy

ALL_POLICIES = list(RoundingPolicy)


@pytest.mark.parametrize(
    "amount,policy,expected",
    [
        (2.5, "roundUp", 3),
        (2.5, "roundDown", 2),
        (2.4, "truncate", 2),
        (-2.5, "truncate", -2),
        (2.5, "roundHalfUp", 3),
        (-2.5, "roundHalfUp", -3),
        (2.4, "roundHalfUp", 2),
        (2.1, "roundUp", 3),
        (-2.1, "roundDown", -3),
        (-2.7, "truncate", -2),
    ],
)
def test_basic_policies(amount, policy, expected):
    assert apply_rounding_policy(amount, 0, policy) == expected


@pytest.mark.parametrize(
    "amount,expected",
    [
        (2.5, 3),  # half-down by name, half-up in practice
        (2.4, 2),
        (-2.5, -2),
        (-2.6, -3),
    ],
)
def test_round_half_down_literal_formula(amount, expected):
    assert apply_rounding_policy(amount, 0, RoundingPolicy.ROUND_HALF_DOWN) == expected


@pytest.mark.parametrize(
    "amount,expected",
    [
        (2.5, 3),  # floor is even -> half-up; banker's rounding would give 2
        (3.5, 4),  # floor is odd -> floor(x + 0.5)
        (4.4, 4),
        (9000.0, 9000),
        (8999.5, 9000),
        (-3.5, -3),  # floor is even -> half toward +inf
        (-2.5, -2),  # floor is odd -> floor(x + 0.5)
    ],
)
def test_round_half_even_literal_formula(amount, expected):
    assert apply_rounding_policy(amount, 0, RoundingPolicy.ROUND_HALF_EVEN) == expected


def test_decimals_scale_result():
    assert apply_rounding_policy(1.23456, 2, "roundHalfUp") == 1.23
    assert apply_rounding_policy(1.239, 2, "truncate") == 1.23
    assert apply_rounding_policy(1.231, 2, "roundUp") == 1.24


@pytest.mark.parametrize("policy", ALL_POLICIES)
@pytest.mark.parametrize("amount", [0.0, 1.5, 2.5, -2.5, 1234.4999, 8999.9, -7.01])
def test_idempotent(policy, amount):
    once = apply_rounding_policy(amount, 0, policy)
    assert apply_rounding_policy(once, 0, policy) == once


def test_unknown_policy_raises():
    with pytest.raises(InvalidPolicyError):
        apply_rounding_policy(2.5, 0, "roundSideways")
