# NumeralCodec.py
"""""
Numeral literals in bases 2..16 and repeating decimals.

Two directions
--------------
1) Expansion: rewrite the special literal forms inside an expression into plain
   decimal literals, so the arithmetic parser only ever sees ordinary numbers.
      0.1(6)   ->  0.16666666666666666
      1A_16    ->  26.0
2) Rendering: write a float as a digit string in any base 2..16 (to_base).
"""""

import fractions
import logging
import math
import re

from . import error as E

logger = logging.getLogger(__name__)

DIGITS = "0123456789ABCDEF"
MIN_BASE = 2
MAX_BASE = 16


# -----------------------------
# Literal patterns
# -----------------------------

# int.nonrepeating(repeating), e.g. 0.(3), 1.2(45)
REPEATING_DECIMAL_RE = re.compile(
    r"(?<![0-9.])(?P<int>\d+)\.(?P<nonrep>\d*)\((?P<rep>\d+)\)")

# digits[.digits]_base, e.g. 1A_16, -0.1_2
# The only letters left in an expression when this runs are hex digits, exponent
# markers and the unary minus marker, so a hex digit is what must not precede it.
BASED_LITERAL_RE = re.compile(
    r"(?<![0-9A-Fa-f_.])(?P<sign>[-+]?)"
    r"(?P<int>[0-9A-Fa-f]+)(?:\.(?P<frac>[0-9A-Fa-f]+))?_(?P<base>\d+)(?![0-9A-Za-z_])")

# Same literal as it appears in a raw instruction line (identifiers still present).
RAW_BASED_LITERAL_RE = re.compile(
    r"(?<![0-9A-Za-z_.])"
    r"(?P<int>[0-9A-Fa-f]+)(?:\.(?P<frac>[0-9A-Fa-f]+))?_(?P<base>\d+)(?![0-9A-Za-z_])")

BASED_LITERAL_FULL_RE = re.compile(r"[0-9A-Fa-f]+(?:\.[0-9A-Fa-f]+)?_\d+")


def format_literal(value):
    """Expression text that parses back to exactly value.

    Finite values use full precision decimal text; inf and nan have no literal and
    are written as the divisions that produce them.
    """
    if math.isnan(value):
        return "(0/0)"
    if math.isinf(value):
        return "(1/0)" if value > 0 else "(-1/0)"
    return repr(float(value))


# -----------------------------
# Digits and bases
# -----------------------------

def check_base(base):
    """Return base as int, or raise InvalidBase unless 2 <= base <= 16."""
    try:
        numeric_base = int(base)
    except (TypeError, ValueError):
        raise E.InvalidBase(f"Base must be between {MIN_BASE} and {MAX_BASE}: {base}", code="3200")
    if numeric_base < MIN_BASE or numeric_base > MAX_BASE:
        raise E.InvalidBase(f"Base must be between {MIN_BASE} and {MAX_BASE}: {numeric_base}", code="3200")
    return numeric_base


def digit_value(char, base):
    """Value of one digit character; raises InvalidDigitForBase if it is not < base."""
    digit = DIGITS.find(char.upper())
    if digit == -1 or digit >= base:
        raise E.InvalidDigitForBase(f"Digit not valid for base: '{char}' in base {base}", code="3201")
    return digit


def from_base(int_digits, frac_digits, base):
    """Value of int_digits.frac_digits read in base (Horner's rule for the integer part)."""
    base = check_base(base)

    result = 0.0
    for char in int_digits:
        result = result * base + digit_value(char, base)

    fraction = 0.0
    base_power = float(base)
    for char in frac_digits or "":
        fraction += digit_value(char, base) / base_power
        base_power *= base

    return result + fraction


def repeating_decimal_value(int_digits, nonrepeating, repeating):
    """I + 0.N + R / (10^d - 1) / 10^k, computed exactly and rounded once to a float."""
    k = len(nonrepeating)
    d = len(repeating)
    value = fractions.Fraction(int(int_digits))
    if nonrepeating:
        value += fractions.Fraction(int(nonrepeating), 10 ** k)
    value += fractions.Fraction(int(repeating), (10 ** d - 1) * 10 ** k)
    return float(value)


# -----------------------------
# Expansion of special notations
# -----------------------------

def expand_repeating_decimals(expression):
    def replace(match):
        value = repeating_decimal_value(match.group("int"), match.group("nonrep"), match.group("rep"))
        return format_literal(value)

    return REPEATING_DECIMAL_RE.sub(replace, expression)


def expand_based_literals(expression):
    def replace(match):
        value = from_base(match.group("int"), match.group("frac"), match.group("base"))
        # the sign stays text so "3+1A_16" stays a sum and "3-FF..._16" stays 3-(1/0)
        return match.group("sign") + format_literal(value)

    return BASED_LITERAL_RE.sub(replace, expression)


def expand_special_notations(expression):
    """Rewrite repeating-decimal literals, then based literals, into plain decimals.

    Repeating decimals go first: they only use decimal digits and parentheses,
    while a based literal's alphabet overlaps with them.
    """
    expanded = expand_based_literals(expand_repeating_decimals(expression))
    if expanded != expression:
        logger.debug("expanded %r -> %r", expression, expanded)
    return expanded


# -----------------------------
# Rendering in a base
# -----------------------------

def to_base(value, base, max_fraction_digits=10):
    """Render value as a digit string in base (2..16), digits 0-9A-F.

    The fractional part stops after max_fraction_digits digits, or as soon as an
    intermediate fraction repeats (the expansion would cycle from there on).
    """
    base = check_base(base)
    if math.isnan(value) or math.isinf(value):
        raise E.CalculationError(f"Cannot convert a non finite value: {value} to base {base}", code="3300")

    is_negative = value < 0
    value = abs(value)

    int_part = int(math.floor(value))
    frac_part = value - int_part

    if int_part == 0:
        int_str = "0"
    else:
        int_digits = []
        while int_part > 0:
            int_digits.append(DIGITS[int_part % base])
            int_part //= base
        int_str = "".join(reversed(int_digits))

    frac_str = ""
    seen = set()
    while frac_part > 0 and len(frac_str) < max_fraction_digits and frac_part not in seen:
        seen.add(frac_part)
        frac_part *= base
        digit = int(math.floor(frac_part))
        frac_str += DIGITS[digit]
        frac_part -= digit

    result = f"{int_str}.{frac_str}" if frac_str else int_str
    return "-" + result if is_negative else result
