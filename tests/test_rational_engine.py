"""
Rational approximation, prime factors and the search for a base in which a value terminates.
"""

import math

import pytest

from TextCalc import RationalEngine


@pytest.mark.parametrize("value,expected", [
    (0.5, (1, 2)),
    (1 / 3, (1, 3)),
    (0.75, (3, 4)),
    (2.0, (2, 1)),
    (-0.25, (-1, 4)),
    (22 / 7, (22, 7)),
    (math.pi, (355, 113)),
])
def test_approximate_rational(value, expected):
    assert RationalEngine.approximate_rational(value) == expected


def test_approximate_rational_respects_max_denominator():
    assert RationalEngine.approximate_rational(math.pi, max_denominator=10) == (22, 7)
    assert RationalEngine.approximate_rational(1 / 3, max_denominator=2) == (1, 2)


@pytest.mark.parametrize("n,expected", [
    (1, []),
    (2, [2]),
    (12, [2, 2, 3]),
    (97, [97]),
    (360, [2, 2, 2, 3, 3, 5]),
    (9973, [9973]),
    (10000, [2, 2, 2, 2, 5, 5, 5, 5]),
])
def test_prime_factors(n, expected):
    assert RationalEngine.prime_factors(n) == expected


@pytest.mark.parametrize("value,expected", [
    (0.5, False),
    (0.1, False),
    (2.0, False),
    (0.125, False),
    (1 / 3, True),
    (1 / 7, True),
    (5 / 6, True),
    (math.inf, False),
])
def test_has_repeating_decimal(value, expected):
    assert RationalEngine.has_repeating_decimal(value) is expected


@pytest.mark.parametrize("value,expected", [
    (0.5, 2),
    (0.1, 10),
    (1 / 6, 6),
    (1 / 9, 3),
    (1 / 12, 6),
    (5 / 7, 7),
    (3.0, None),
    (1 / 17, None),
])
def test_find_best_finite_base(value, expected):
    assert RationalEngine.find_best_finite_base(value) == expected


def test_one_third_terminates_only_in_multiples_of_three():
    base = RationalEngine.find_best_finite_base(1 / 3)
    assert base % 3 == 0
    assert base not in (2, 4, 5, 8, 10, 16)
