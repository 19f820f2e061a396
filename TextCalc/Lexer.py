# Lexer.py
"""""
Whole-line checks and classification of instruction lines.

Every line is validated (allowed characters, no leading zeros) before it is
classified into one of:

    ASSIGNMENT       A = 3+4;
    QUERY            ? A
    EXPRESSION       3+4=
    BASE_CONVERSION  A+1 => _2
"""""

import re

from . import error as E
from .NumeralCodec import REPEATING_DECIMAL_RE, RAW_BASED_LITERAL_RE, check_base


ASSIGNMENT = "assignment"
QUERY = "query"
EXPRESSION = "expression"
BASE_CONVERSION = "base_conversion"

IDENTIFIER_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")

DISALLOWED_RE = re.compile(r"[^A-Za-z0-9\s+\-*/^().=?_<>;]")
DECIMAL_INT_RE = re.compile(r"(?<![0-9A-Za-z_.])\d+")

BASE_CONVERSION_RE = re.compile(r"^(?P<expr>.*?)=>\s*(?:_(?P<base>\d+))?\s*;?\s*$", re.DOTALL)
QUERY_RE = re.compile(r"^\s*\?\s*(?P<name>[^\s;]*)\s*;?\s*$")
ASSIGNMENT_RE = re.compile(r"^\s*(?P<name>[^=]*?)\s*=\s*(?P<expr>.*?)\s*;?\s*$", re.DOTALL)


class Instruction:
    """One classified line: kind plus the parts the evaluator needs."""
    def __init__(self, kind, line, expression=None, name=None, base=None):
        self.kind = kind
        self.line = line
        self.expression = expression
        self.name = name
        self.base = base

    def __repr__(self):
        return f"Instruction({self.kind!r}, name={self.name!r}, expression={self.expression!r}, base={self.base!r})"


def validate_characters(line):
    bad = DISALLOWED_RE.findall(line)
    if bad:
        symbols = "".join(sorted(set(bad)))
        raise E.SyntaxError(f"Symbols that are not allowed: {symbols}", code="3000", equation=line)


def detect_invalid_leading_zeros(line):
    """Reject literals like 01, 007.5 or 0F_16 (integer part longer than one digit starting with 0)."""
    # only the integer part of a repeating decimal counts; its digit groups may start with 0
    line = REPEATING_DECIMAL_RE.sub(lambda match: match.group("int"), line)

    for match in RAW_BASED_LITERAL_RE.finditer(line):
        int_digits = match.group("int")
        if len(int_digits) > 1 and int_digits.startswith("0"):
            raise E.LeadingZeroError(f"Leading zero in based number: {match.group(0)}", code="3202", equation=line)

    for match in DECIMAL_INT_RE.finditer(line):
        int_digits = match.group(0)
        if len(int_digits) > 1 and int_digits.startswith("0"):
            raise E.LeadingZeroError(f"Leading zero in number: {int_digits}", code="3006", equation=line)


def is_identifier(name):
    return IDENTIFIER_RE.fullmatch(name) is not None


def check_identifier(name, line=None):
    if not is_identifier(name):
        raise E.InvalidVariableName(f"Invalid variable name: '{name}'", code="3100", equation=line)
    return name


def strip_terminator(expression):
    """Drop surrounding whitespace and one trailing ';'."""
    expression = expression.strip()
    if expression.endswith(";"):
        expression = expression[:-1].rstrip()
    return expression


def classify(line):
    """Return the Instruction for an already validated line."""
    text = line.strip()

    if "=>" in text:
        match = BASE_CONVERSION_RE.match(text)
        if match is None or match.group("base") is None:
            raise E.SyntaxError("Expected '_<base>' after '=>'", code="3001", equation=line)
        base = check_base(match.group("base"))
        expression = match.group("expr").strip()
        if not expression:
            raise E.SyntaxError("Empty expression before '=>'", code="3007", equation=line)
        return Instruction(BASE_CONVERSION, line, expression=expression, base=base)

    if text.startswith("?"):
        match = QUERY_RE.match(text)
        if match is None or not match.group("name"):
            raise E.SyntaxError("Request has invalid format", code="3001", equation=line)
        name = check_identifier(match.group("name"), line)
        return Instruction(QUERY, line, name=name)

    body = strip_terminator(text)
    if body.endswith("="):
        expression = body[:-1].strip()
        if not expression:
            raise E.SyntaxError("Empty expression before '='", code="3007", equation=line)
        return Instruction(EXPRESSION, line, expression=expression)

    match = ASSIGNMENT_RE.match(text)
    if match is not None:
        name = check_identifier(match.group("name"), line)
        expression = match.group("expr")
        if not expression:
            raise E.SyntaxError(f"Missing expression after '{name} ='", code="3007", equation=line)
        return Instruction(ASSIGNMENT, line, name=name, expression=expression)

    raise E.SyntaxError("Unknown instruction format", code="3001", equation=line)
