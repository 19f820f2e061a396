# RationalEngine.py
"""""
Rational view of a float result.

A double is approximated by the best fraction n/d with a bounded denominator;
the prime factors of d decide whether the value terminates in base 10, and
which base 2..16 it does terminate in:

    1/3   ->  repeating in base 10, terminates in base 3   (0.1)
    1/6   ->  repeating in base 10, terminates in base 6   (0.1)
    1/4   ->  terminates in base 10
"""""
import logging
import math

from .NumeralCodec import MIN_BASE, MAX_BASE

logger = logging.getLogger(__name__)

MAX_DENOMINATOR = 10000


def is_integral(value):
    return math.isfinite(value) and value == math.floor(value)


def approximate_rational(value, max_denominator=MAX_DENOMINATOR):
    """Best fraction n/d for value with 1 <= d <= max_denominator.

    Brute force over every denominator; on equal error the smaller denominator wins,
    so the returned pair is already in lowest terms.
    """
    best_numerator = round(value)
    best_denominator = 1
    best_error = abs(value - best_numerator)

    denominator = 2
    while denominator <= max_denominator and best_error > 0:
        numerator = round(value * denominator)
        error = abs(value - numerator / denominator)
        if error < best_error:
            best_numerator = numerator
            best_denominator = denominator
            best_error = error
        denominator += 1

    return (best_numerator, best_denominator)


def prime_factors(n):
    """Prime factors of n in non-decreasing order, with multiplicity (trial division)."""
    factors = []
    n = abs(int(n))
    divisor = 2
    while divisor * divisor <= n:
        while n % divisor == 0:
            factors.append(divisor)
            n //= divisor
        divisor += 1
    if n > 1:
        factors.append(n)
    return factors


def has_repeating_decimal(value, max_denominator=MAX_DENOMINATOR):
    """True if value's decimal expansion does not terminate.

    A fraction terminates in base 10 iff its denominator has no prime factor but 2 and 5.
    """
    if not math.isfinite(value) or is_integral(value):
        return False
    numerator, denominator = approximate_rational(value, max_denominator)
    return any(factor not in (2, 5) for factor in prime_factors(denominator))


def find_best_finite_base(value, max_denominator=MAX_DENOMINATOR):
    """Smallest base in 2..16 in which value has a terminating expansion, or None.

    A base works iff every prime factor of the denominator also divides the base.
    """
    if not math.isfinite(value) or is_integral(value):
        return None
    numerator, denominator = approximate_rational(value, max_denominator)
    factors = set(prime_factors(denominator))
    logger.debug("%r ~ %d/%d, denominator factors %s", value, numerator, denominator, sorted(factors))
    for base in range(MIN_BASE, MAX_BASE + 1):
        if all(base % factor == 0 for factor in factors):
            return base
    return None
