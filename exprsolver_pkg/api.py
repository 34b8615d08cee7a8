"""Public API for exprsolver - returns structured objects without side effects."""

from __future__ import annotations

from typing import Any, Mapping

from . import config as _config
from .logging_config import get_logger
from .parser import format_number, preprocess
from .solver import ExpressionSolver
from .symbols import SymbolTable
from .tokenizer import group_expression
from .types import CalculationError, EvalResult
from .value import Value

logger = get_logger("api")


def result_from_value(value: Value, precision: int | None = None) -> EvalResult:
    """Convert a ``Value`` into an ``EvalResult``.

    Args:
        value: Result of a solve or resolve
        precision: Significant digits for ``approx`` (default: OUTPUT_PRECISION)

    Returns:
        EvalResult with the display string, an approximation and, for exact
        values, the SymPy rendering of the fraction
    """
    if not value.is_calculable:
        return EvalResult(ok=False, error=value.error_message, error_code=value.error_code)
    if precision is None:
        precision = _config.OUTPUT_PRECISION
    return EvalResult(
        ok=True,
        result=value.to_display_string(),
        approx=format_number(value.to_float(), precision),
        exact=None if value.is_decimal else str(value.to_sympy()),
    )


def evaluate(
    expression: str,
    constants: Mapping[str, Any] | None = None,
    precision: int | None = None,
) -> EvalResult:
    """Evaluate a mathematical expression.

    Args:
        expression: Expression string (e.g., "2+2", "sin(pi/2)", "x*y")
        constants: Optional bindings made before evaluating (e.g., {"x": 5})
        precision: Significant digits for the approximate result

    Returns:
        EvalResult with result, approximation and exact fraction

    Example:
        >>> from exprsolver_pkg.api import evaluate
        >>> evaluate("1/3").exact
        '1/3'
        >>> evaluate("(x+y)*x+y", {"x": 5, "y": 6}).result
        '61'
        >>> evaluate("1/0").error_code
        'DIVISION_BY_ZERO'
    """
    solver = ExpressionSolver()
    for name, value in (constants or {}).items():
        try:
            solver.symbols.define_constant(name, value)
        except CalculationError as exc:
            return EvalResult(ok=False, error=exc.message, error_code=exc.code)
    return result_from_value(solver.solve(expression), precision)


def validate_expression(
    expression: str, names: Mapping[str, Any] | None = None
) -> tuple[bool, str | None]:
    """Validate an expression without evaluating it.

    Only preprocessing and tokenizing run, so arithmetic errors such as a
    division by zero are not reported.

    Args:
        expression: Expression string to validate
        names: Optional extra constant names the expression may use

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> from exprsolver_pkg.api import validate_expression
        >>> validate_expression("2 + 2")
        (True, None)
        >>> validate_expression("(1+1")
        (False, 'Invalid expression! Unbalanced brackets.')
    """
    symbols = SymbolTable()
    try:
        for name, value in (names or {}).items():
            symbols.define_constant(name, value)
        group_expression(preprocess(expression), symbols)
    except CalculationError as exc:
        logger.debug("validation of %r failed: %s", expression, exc.message)
        return False, exc.message
    return True, None
