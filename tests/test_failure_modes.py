"""Tests for failure modes and invalid input handling."""

import pytest

from exprsolver_pkg.config import MAX_INPUT_LENGTH
from exprsolver_pkg.parser import preprocess
from exprsolver_pkg.solver import ExpressionSolver
from exprsolver_pkg.types import ValidationError


class TestInputValidationFailures:
    """Test input validation failure modes."""

    def test_empty_input(self):
        """Test empty input."""
        with pytest.raises(ValidationError):
            preprocess("")

    def test_whitespace_only(self):
        """Test whitespace-only input."""
        with pytest.raises(ValidationError):
            preprocess(" \t\n ")

    def test_too_long_input(self):
        """Test input exceeding maximum length."""
        with pytest.raises(ValidationError):
            preprocess("1" * (MAX_INPUT_LENGTH + 1))

    def test_length_limit_counts_raw_input(self):
        with pytest.raises(ValidationError):
            preprocess(" " * MAX_INPUT_LENGTH + "1")

    def test_too_deep_expression(self):
        """Test deeply nested brackets."""
        solver = ExpressionSolver()
        result = solver.solve("(" * 500 + "1" + ")" * 500)
        assert result.error_code == "NESTING_TOO_DEEP"

    def test_too_many_unary_minus_signs(self):
        solver = ExpressionSolver()
        result = solver.solve("-" * 500 + "1")
        assert result.error_code == "NESTING_TOO_DEEP"

    def test_within_limits(self):
        solver = ExpressionSolver()
        assert str(solver.solve("(" * 50 + "2" + ")" * 50)) == "2"
        assert str(solver.solve("-" * 51 + "1")) == "-1"


class TestRecovery:
    """A solver stays usable after any failure."""

    BAD_INPUTS = [
        "",
        "(((",
        ")))",
        "1+",
        "*",
        "~",
        "-",
        "--",
        "()",
        "sin",
        "sin()",
        "sin(1,2)",
        "1..2",
        "....",
        "1e5",
        "2^^3",
        "x=1",
        "#",
        "é",
        "1/(1-1)",
        "sqrt(-0.5)",
        "10**400.5",
        "1<<999",
        "9" * 40,
        "9" * 16 + ".5",
    ]

    @pytest.mark.parametrize("expression", BAD_INPUTS)
    def test_failure_then_success(self, expression):
        solver = ExpressionSolver()
        result = solver.solve(expression)
        assert not result.is_calculable
        assert result.error_code
        assert solver.error_message
        assert str(solver.solve("6*7")) == "42"
        assert solver.error_message == ""

    def test_failures_never_raise_through_resolve(self):
        solver = ExpressionSolver()
        solver.define_constant("d", 2)
        solver.solve("1/(d-2)+1")
        for _ in range(3):
            assert solver.resolve().error_code == "NO_EXPRESSION_SET"

    def test_zero_expression(self):
        assert str(ExpressionSolver().solve("0")) == "0"

    def test_negative_numbers(self):
        assert str(ExpressionSolver().solve("-5+3")) == "-2"

    def test_very_small_numbers(self):
        result = ExpressionSolver().solve("0.000000000000000000001*2")
        assert result.is_calculable
        assert result.to_float() == pytest.approx(2e-21)

    def test_very_large_numbers(self):
        result = ExpressionSolver().solve("9223372036854775807*10")
        assert result.is_calculable
        assert result.is_decimal
        assert result.to_float() == pytest.approx(9.223372036854775807e19)
