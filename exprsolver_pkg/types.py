"""Type definitions: error codes, exceptions, lexical blocks and result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# Error codes carried by exceptions and by non-calculable values
EMPTY_EXPRESSION = "EMPTY_EXPRESSION"
TOO_LONG = "TOO_LONG"
UNBALANCED_BRACKETS = "UNBALANCED_BRACKETS"
UNKNOWN_IDENTIFIER = "UNKNOWN_IDENTIFIER"
MISSING_PARENTHESES = "MISSING_PARENTHESES"
UNDEFINED_REFERENCE = "UNDEFINED_REFERENCE"
NEGATIVE_SQUARE_ROOT = "NEGATIVE_SQUARE_ROOT"
NEGATIVE_BASE_FRACTIONAL_EXPONENT = "NEGATIVE_BASE_FRACTIONAL_EXPONENT"
NON_INTEGER_OPERAND = "NON_INTEGER_OPERAND"
NEGATIVE_SHIFT = "NEGATIVE_SHIFT"
DIVISION_BY_ZERO = "DIVISION_BY_ZERO"
NUMBER_TOO_LARGE = "NUMBER_TOO_LARGE"
PARSE_ERROR = "PARSE_ERROR"
INVALID_OPERATOR = "INVALID_OPERATOR"
UNEXPECTED_TOKEN = "UNEXPECTED_TOKEN"
MALFORMED_EXPRESSION = "MALFORMED_EXPRESSION"
NESTING_TOO_DEEP = "NESTING_TOO_DEEP"
NO_EXPRESSION_SET = "NO_EXPRESSION_SET"
DOMAIN_ERROR = "DOMAIN_ERROR"
INVALID_NAME = "INVALID_NAME"


class CalculationError(Exception):
    """Base class for every failure detected by the engine."""

    def __init__(self, message: str, code: str = MALFORMED_EXPRESSION):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ValidationError(CalculationError):
    """Raised when input validation or a binding fails."""


class ParseError(CalculationError):
    """Raised when the expression cannot be split into blocks."""


class EvaluationError(CalculationError):
    """Raised when a block sequence cannot be evaluated."""


class BlockType(Enum):
    NUMBER = "number"
    SYMBOL = "symbol"
    FUNCTION_NAME = "function"
    CONSTANT = "constant"
    VARIABLE = "variable"
    BRACKET_OPEN = "bracket_open"
    BRACKET_CLOSE = "bracket_close"
    INVALID = "invalid"


@dataclass(frozen=True)
class Block:
    """A lexical block: ``expression[start:end]`` at bracket depth ``level``.

    ``priority`` is only set for symbol blocks; lower binds tighter.
    """

    start: int
    end: int
    level: int
    kind: BlockType
    priority: int | None = None

    def text(self, expression: str) -> str:
        return expression[self.start : self.end]


@dataclass
class EvalResult:
    """Result of evaluating a mathematical expression."""

    ok: bool
    result: str | None = None
    approx: str | None = None
    exact: str | None = None
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.result is not None:
            result_dict["result"] = self.result
        if self.approx is not None:
            result_dict["approx"] = self.approx
        if self.exact is not None:
            result_dict["exact"] = self.exact
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.ok:
            return f"EvalResult(ok=False, error={self.error!r}, error_code={self.error_code!r})"
        parts = [f"ok={self.ok}"]
        if self.result is not None:
            parts.append(f"result={self.result!r}")
        if self.approx is not None:
            parts.append(f"approx={self.approx!r}")
        if self.exact is not None:
            parts.append(f"exact={self.exact!r}")
        return f"EvalResult({', '.join(parts)})"
