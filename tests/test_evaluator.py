"""Tests for operator precedence and block evaluation."""

import math

import pytest

from exprsolver_pkg.evaluator import Evaluator
from exprsolver_pkg.parser import preprocess
from exprsolver_pkg.symbols import SymbolTable
from exprsolver_pkg.tokenizer import group_expression
from exprsolver_pkg.types import EvaluationError


def run(expression, symbols=None, max_depth=None):
    symbols = symbols or SymbolTable()
    normalized = preprocess(expression)
    blocks = group_expression(normalized, symbols)
    if max_depth is None:
        return Evaluator(normalized, blocks, symbols).evaluate()
    return Evaluator(normalized, blocks, symbols, max_depth=max_depth).evaluate()


def number(expression, symbols=None):
    value = run(expression, symbols)
    assert value.is_calculable, value.error_message
    return value.to_float()


class TestBasicOperations:
    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("1+1", 2),
            ("1-1", 0),
            ("-1", -1),
            ("-1-1", -2),
            ("-(1+1)", -2),
            ("-(1+1)**2", -4),
            ("-(7)//2", -3),
            ("-(2)**2+1", -3),
            ("(-(3))**2", 9),
            ("2*(-(1+2)**2)", -18),
            ("--(1)", 1),
            ("-2**2", 4),
            ("1*3", 3),
            ("4%3", 1),
            ("7//3", 2),
            ("2**3", 8),
            ("1&2", 0),
            ("1|2", 3),
            ("1^2", 3),
            ("~1", -2),
            ("1<<1", 2),
            ("1>>1", 0),
            ("ceil(3.14)", 4),
            ("floor(3.14)", 3),
            ("round(3.14)", 3),
            ("ln(e)", 1),
            ("sqrt(9)", 3),
            ("log(100)", 2),
            ("abs(-2)", 2),
        ],
    )
    def test_exact_results(self, expression, expected):
        assert number(expression) == expected

    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("1/3", 1 / 3),
            ("3**(-1)", 1 / 3),
            ("1**-0.1", 1.0),
            ("exp(2)", math.exp(2)),
            ("2+0.02", 2.02),
            ("2+0.0200", 2.02),
            ("2+0.00002", 2.00002),
            ("5.66666+9.333333", 14.999993),
            ("9999.9999*9999.9999", 99999998.00000001),
            ("9999.9999*7777.7777", 77777776.22222223),
            ("99999.9999*77777.7777", 7777777762.222222),
        ],
    )
    def test_approximate_results(self, expression, expected):
        assert number(expression) == pytest.approx(expected)

    def test_sin_of_two_pi_is_near_zero(self):
        assert abs(number("sin(2*pi)")) < 1e-12

    def test_decimal_literal_products_stay_exact(self):
        value = run("9999.9999*9999.9999")
        assert not value.is_decimal


class TestPrecedence:
    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("2+3*4", 14),
            ("~2**3", -9),
            ("-2**3", -8),
            ("3*-2", -6),
            ("-2*3", -6),
            ("3*~2", -9),
            ("3/-2", -1.5),
            ("3//-2", -2),
            ("3%-2", 1),
            ("3-2*4", -5),
            ("3-2*4-1/8+9%2+1", -3.125),
            ("3<<2+4", 192),
            ("15>>1+1", 3),
            ("1&1<<1", 0),
            ("5^2&3", 7),
            ("5|2^3", 5),
            ("5|2^3<<2+2*2**2", 3079),
            ("8-2-1", 5),
            ("64/4/2", 8),
            ("--1", 1),
            ("1---1", 0),
        ],
    )
    def test_priorities(self, expression, expected):
        assert number(expression) == expected

    def test_power_chains_left_to_right(self):
        assert number("2**3**2") == number("(2**3)**2") == 64

    def test_unary_minus_binds_to_base(self):
        # The rewritten minus wraps only the literal it precedes
        assert number("-2**2") == 4

    def test_complex_expressions(self):
        assert number("1+((2-3*4)/5)**6%4") == 1
        assert number("floor(ln(exp(e))+cos(2*pi))") == 3
        assert number("f l o o r ( l n ( e x p ( e ) ) + c o s (  2*  pi  ) )") == 3


class TestBindings:
    def test_constants(self):
        symbols = SymbolTable()
        symbols.define_constant("x", 1)
        symbols.define_constant("y", 2)
        assert number("x+y*x/y", symbols) == 2
        symbols.define_constant("x", 3)
        symbols.define_constant("y", 4)
        assert number("(x+y)*x+y", symbols) == 25

    def test_identifier_with_digits(self):
        symbols = SymbolTable()
        symbols.define_constant("a1", 6)
        assert number("a1 + 1", symbols) == 7

    def test_unset_variable(self):
        with pytest.raises(EvaluationError) as exc_info:
            run("ans+1")
        assert exc_info.value.code == "UNDEFINED_REFERENCE"


class TestStructuralErrors:
    @pytest.mark.parametrize(
        "expression, code",
        [
            ("exp", "MISSING_PARENTHESES"),
            ("2*sqrt", "MISSING_PARENTHESES"),
            ("exp()", "MALFORMED_EXPRESSION"),
            ("()", "MALFORMED_EXPRESSION"),
            ("1+", "MALFORMED_EXPRESSION"),
            ("+1", "MALFORMED_EXPRESSION"),
            ("2(1)", "MALFORMED_EXPRESSION"),
            ("3~2", "MALFORMED_EXPRESSION"),
            ("1$1", "UNEXPECTED_TOKEN"),
            ("-1=1", "UNEXPECTED_TOKEN"),
            ("sqrt(-1)", "NEGATIVE_SQUARE_ROOT"),
            ("ln(0)", "DOMAIN_ERROR"),
            ("exp(1000)", "NUMBER_TOO_LARGE"),
            ("(1/0)+1", "DIVISION_BY_ZERO"),
            ("sqrt(1/0)", "DIVISION_BY_ZERO"),
        ],
    )
    def test_raises(self, expression, code):
        with pytest.raises(EvaluationError) as exc_info:
            run(expression)
        assert exc_info.value.code == code

    @pytest.mark.parametrize(
        "expression, code",
        [
            ("1/0", "DIVISION_BY_ZERO"),
            ("1++1", "INVALID_OPERATOR"),
            ("1<>1", "INVALID_OPERATOR"),
            ("1///1", "INVALID_OPERATOR"),
            ("1.5&1", "NON_INTEGER_OPERAND"),
            ("1.5<<1", "NON_INTEGER_OPERAND"),
            ("~1.5", "NON_INTEGER_OPERAND"),
            ("1>>-1", "NEGATIVE_SHIFT"),
            ("(-1)**0.5", "NEGATIVE_BASE_FRACTIONAL_EXPONENT"),
            ("-1**-0.1", "NEGATIVE_BASE_FRACTIONAL_EXPONENT"),
        ],
    )
    def test_arithmetic_failures(self, expression, code):
        try:
            value = run(expression)
        except EvaluationError as exc:
            assert exc.code == code
        else:
            assert not value.is_calculable
            assert value.error_code == code

    def test_nesting_limit(self):
        expression = "(" * 20 + "1" + ")" * 20
        assert number(expression) == 1
        with pytest.raises(EvaluationError) as exc_info:
            run(expression, max_depth=10)
        assert exc_info.value.code == "NESTING_TOO_DEEP"
