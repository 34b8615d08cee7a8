"""Expression solving façade.

``ExpressionSolver`` owns a symbol table and ties the pipeline together:

- ``solve`` preprocesses, tokenizes and evaluates a new expression
- ``resolve`` re-evaluates the last accepted expression with current bindings
- ``calculate`` evaluates an expression without remembering it
- ``define_constant`` binds a name for later expressions

Failures never raise out of the façade; they come back as non-calculable
values and the text is kept in ``error_message``.
"""

from __future__ import annotations

from typing import Any

from .evaluator import Evaluator
from .logging_config import get_logger
from .parser import preprocess
from .symbols import LAST_RESULT, SymbolTable
from .tokenizer import group_expression
from .types import (
    MALFORMED_EXPRESSION,
    NO_EXPRESSION_SET,
    Block,
    CalculationError,
    EvaluationError,
)
from .value import Value

logger = get_logger("solver")


class ExpressionSolver:
    """Evaluate algebraic expressions against a private set of bindings.

    Instances are not thread-safe: use one solver per thread or guard shared
    instances with a lock.

    Example:
        >>> solver = ExpressionSolver()
        >>> str(solver.solve("1/3 + 1/6"))
        '0.5'
        >>> solver.define_constant("x", 2)
        True
        >>> str(solver.solve("(x+1)*2"))
        '6'
    """

    def __init__(self) -> None:
        self._symbols = SymbolTable()
        self._expression: str | None = None
        self._blocks: list[Block] = []
        self._error_message = ""

    @property
    def symbols(self) -> SymbolTable:
        return self._symbols

    @property
    def expression(self) -> str | None:
        """Normalized text of the last successfully solved expression."""
        return self._expression

    @property
    def has_expression(self) -> bool:
        return self._expression is not None

    @property
    def error_message(self) -> str:
        return self._error_message

    def solve(self, expression: str) -> Value:
        """Evaluate ``expression`` and remember it for :meth:`resolve`.

        Args:
            expression: Raw expression text, whitespace is ignored

        Returns:
            The result, or a non-calculable value describing the failure
        """
        self._error_message = ""
        self._expression = None
        self._blocks = []

        try:
            normalized, blocks = self._compile(expression)
        except CalculationError as exc:
            return self._fail(f"{exc.message} Calculation aborted.", exc.code)

        result = self._run(normalized, blocks)
        if result.is_calculable:
            self._expression = normalized
            self._blocks = blocks
            self._symbols.set_variable(LAST_RESULT, result)
        return result

    def resolve(self) -> Value:
        """Re-evaluate the stored expression with the current bindings."""
        self._error_message = ""
        if self._expression is None:
            return self._fail(
                "No expression to resolve. Calculation aborted.", NO_EXPRESSION_SET
            )
        return self._run(self._expression, self._blocks)

    def calculate(self, expression: str) -> Value:
        """Evaluate ``expression`` without storing it or updating ``ans``."""
        self._error_message = ""
        try:
            normalized, blocks = self._compile(expression)
        except CalculationError as exc:
            return self._fail(f"{exc.message} Calculation aborted.", exc.code)
        return self._run(normalized, blocks)

    def define_constant(self, name: str, value: Any) -> bool:
        """Bind ``name`` to ``value``, replacing any existing constant.

        Returns:
            ``True`` on success; ``False`` with ``error_message`` set otherwise
        """
        self._error_message = ""
        try:
            self._symbols.define_constant(name, value)
        except CalculationError as exc:
            self._error_message = exc.message
            logger.info("define %s failed: %s", name, exc.message)
            return False
        return True

    def _compile(self, expression: str) -> tuple[str, list[Block]]:
        normalized = preprocess(expression)
        return normalized, group_expression(normalized, self._symbols)

    def _run(self, expression: str, blocks: list[Block]) -> Value:
        try:
            result = Evaluator(expression, blocks, self._symbols).evaluate()
        except EvaluationError as exc:
            return self._fail(f"Calculation aborted, cuz: {exc.message}", exc.code)
        if not result.is_calculable:
            return self._fail(
                f"Calculation aborted, cuz: {result.error_message}",
                result.error_code or MALFORMED_EXPRESSION,
            )
        logger.debug("%s = %r", expression, result)
        return result

    def _fail(self, message: str, code: str) -> Value:
        self._error_message = message
        logger.info("calculation failed [%s]: %s", code, message)
        return Value.failure(code, message)
