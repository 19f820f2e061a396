"""
Line validation and classification.

Allowed characters: letters, digits, whitespace and + - * / ^ ( ) . = ? _ < > ;
Line kinds: assignment (A = 1), query (? A), bare expression (1+2=), base conversion (A => _2).
"""

import pytest

from TextCalc import Lexer
from TextCalc import error as E


@pytest.mark.parametrize("line", [
    "A = 3 + 4;",
    "? A",
    "(1+2)^3 =",
    "A => _16",
    "x_1 = 0.(3) * 1A_16",
])
def test_allowed_characters(line):
    Lexer.validate_characters(line)


@pytest.mark.parametrize("line", ["3 $ 4", "3,5 =", "A = 2 % 3", "a = b!", "π ="])
def test_disallowed_characters(line):
    with pytest.raises(E.SyntaxError) as e:
        Lexer.validate_characters(line)
    assert e.value.code == "3000"
    assert e.value.equation == line


@pytest.mark.parametrize("line", ["01", "01_16", "A = 007", "1 + 00.5 =", "0F_16 =", "x = -01_2"])
def test_leading_zeros_rejected(line):
    with pytest.raises(E.LeadingZeroError):
        Lexer.detect_invalid_leading_zeros(line)


@pytest.mark.parametrize("line", [
    "0", "0.5", "10", "1.05", "0.(03)", "1.0(05)", "A01 = 3", "1e05", "0_2", "10_16", "X = 1_016",
])
def test_leading_zeros_accepted(line):
    Lexer.detect_invalid_leading_zeros(line)


def test_classify_assignment():
    instruction = Lexer.classify("A = 3+4;")
    assert instruction.kind == Lexer.ASSIGNMENT
    assert instruction.name == "A"
    assert instruction.expression == "3+4"


def test_classify_assignment_keeps_long_names():
    instruction = Lexer.classify("  total_2 =  A * B  ")
    assert instruction.kind == Lexer.ASSIGNMENT
    assert instruction.name == "total_2"
    assert instruction.expression == "A * B"


@pytest.mark.parametrize("line", ["1A = 3", "2 = 3", "_x = 1", "A+B = 3", "A B = 1"])
def test_classify_rejects_invalid_names(line):
    with pytest.raises(E.InvalidVariableName):
        Lexer.classify(line)


@pytest.mark.parametrize("line", ["? A", "?A", "  ?  Value_1 ;"])
def test_classify_query(line):
    instruction = Lexer.classify(line)
    assert instruction.kind == Lexer.QUERY
    assert instruction.name == line.strip(" ?;")


def test_classify_query_rejects_invalid_name():
    with pytest.raises(E.InvalidVariableName):
        Lexer.classify("? 9x")


@pytest.mark.parametrize("line,expression", [
    ("3+4=", "3+4"),
    ("A * 2 =", "A * 2"),
    ("(1+2) = ;", "(1+2)"),
])
def test_classify_bare_expression(line, expression):
    instruction = Lexer.classify(line)
    assert instruction.kind == Lexer.EXPRESSION
    assert instruction.expression == expression


@pytest.mark.parametrize("line,expression,base", [
    ("A+1 => _2", "A+1", 2),
    ("B =>_2", "B", 2),
    ("255 => _16;", "255", 16),
    ("1/3=>_3", "1/3", 3),
])
def test_classify_base_conversion(line, expression, base):
    instruction = Lexer.classify(line)
    assert instruction.kind == Lexer.BASE_CONVERSION
    assert instruction.expression == expression
    assert instruction.base == base


def test_base_conversion_is_never_an_assignment():
    assert Lexer.classify("A => _8").kind == Lexer.BASE_CONVERSION


@pytest.mark.parametrize("line", ["A => _1", "A => _17"])
def test_classify_base_out_of_range(line):
    with pytest.raises(E.InvalidBase):
        Lexer.classify(line)


@pytest.mark.parametrize("line", ["3+4", "A => 2", "=> _2", "?", "="])
def test_classify_malformed(line):
    with pytest.raises(E.SyntaxError):
        Lexer.classify(line)
