"""Numeric value type used by the evaluator.

A ``Value`` is one of:

- an exact fraction ``numerator/denominator`` (reduced, positive denominator,
  both inside the signed 64-bit range),
- an approximate, always finite, ``float``,
- a failure that carries an error code and message instead of a number.

Arithmetic keeps results exact while both operands are exact and the result
fits, and falls back to floating point otherwise. Operators never raise for
arithmetic problems: they return a failure value, and a failure operand is
passed through unchanged so the first error reaches the caller.
"""

from __future__ import annotations

import functools
import math
from fractions import Fraction
from typing import Any, Callable

import sympy as sp

from .config import (
    INT64_MAX,
    INT64_MIN,
    MAX_LITERAL_INTEGER_DIGITS,
    NUMBER_LITERAL_RE,
)
from .logging_config import get_logger
from .types import (
    DIVISION_BY_ZERO,
    DOMAIN_ERROR,
    INVALID_OPERATOR,
    NEGATIVE_BASE_FRACTIONAL_EXPONENT,
    NEGATIVE_SHIFT,
    NON_INTEGER_OPERAND,
    NUMBER_TOO_LARGE,
    PARSE_ERROR,
    EvaluationError,
)

logger = get_logger("value")

# Exact powers are only attempted while the result stays within this many bits
_EXACT_POWER_BITS = 4096

_BINARY_OPERATIONS = {
    "**": "__pow__",
    "*": "__mul__",
    "/": "__truediv__",
    "//": "__floordiv__",
    "%": "__mod__",
    "+": "__add__",
    "-": "__sub__",
    "<<": "__lshift__",
    ">>": "__rshift__",
    "&": "__and__",
    "^": "__xor__",
    "|": "__or__",
}

_TOO_LARGE_MESSAGE = "Arithmetic error: Number too large!"


def _in_int64(number: int) -> bool:
    return INT64_MIN <= number <= INT64_MAX


def _operator(method: Callable[..., Value]) -> Callable[..., Value]:
    """Wrap an operator so failures come back as non-calculable values.

    Operands are coerced to ``Value`` first; the first non-calculable operand
    is returned as is.
    """

    @functools.wraps(method)
    def wrapper(self: Value, *others: Any) -> Value:
        try:
            operands = [Value.coerce(other) for other in others]
        except TypeError:
            return NotImplemented
        for operand in (self, *operands):
            if not operand.is_calculable:
                return operand
        try:
            return method(self, *operands)
        except EvaluationError as exc:
            return Value.failure(exc.code, exc.message)
        except OverflowError:
            return Value.failure(NUMBER_TOO_LARGE, _TOO_LARGE_MESSAGE)
        except ZeroDivisionError:
            return Value.failure(DIVISION_BY_ZERO, "Arithmetic error: Division by zero!")

    return wrapper


class Value:
    """Hybrid exact-rational / floating point number."""

    __slots__ = (
        "_numerator",
        "_denominator",
        "_decimal",
        "_is_decimal",
        "_calculable",
        "_error_code",
        "_error_message",
    )

    def __init__(
        self,
        numerator: int = 0,
        denominator: int = 1,
        decimal: float = 0.0,
        *,
        is_decimal: bool = False,
        calculable: bool = False,
        error_code: str | None = None,
        error_message: str = "",
    ):
        self._numerator = numerator
        self._denominator = denominator
        self._decimal = decimal
        self._is_decimal = is_decimal
        self._calculable = calculable
        self._error_code = error_code
        self._error_message = error_message

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def failure(cls, code: str, message: str) -> Value:
        """Return a non-calculable value carrying ``code`` and ``message``."""
        return cls(error_code=code, error_message=message)

    @classmethod
    def from_fraction(cls, numerator: int, denominator: int) -> Value:
        """Build a reduced fraction.

        A zero denominator is a ``DIVISION_BY_ZERO`` failure. A reduced
        fraction that does not fit in 64 bits is converted to a float.
        """
        if denominator == 0:
            return cls.failure(DIVISION_BY_ZERO, "Arithmetic error: Denominator is zero!")
        divisor = math.gcd(numerator, denominator)
        numerator //= divisor
        denominator //= divisor
        if denominator < 0:
            numerator, denominator = -numerator, -denominator
        if _in_int64(numerator) and _in_int64(denominator):
            return cls(numerator, denominator, numerator / denominator, calculable=True)
        try:
            return cls.from_double(numerator / denominator)
        except OverflowError:
            return cls.failure(NUMBER_TOO_LARGE, _TOO_LARGE_MESSAGE)

    @classmethod
    def from_integer(cls, number: int) -> Value:
        return cls.from_fraction(number, 1)

    @classmethod
    def from_double(cls, number: float) -> Value:
        """Build a value from a float, storing whole numbers exactly."""
        number = float(number)
        if math.isnan(number):
            return cls.failure(DOMAIN_ERROR, "Arithmetic error: Result is not a number!")
        if math.isinf(number):
            return cls.failure(NUMBER_TOO_LARGE, _TOO_LARGE_MESSAGE)
        if number.is_integer():
            whole = int(number)
            if _in_int64(whole):
                return cls(whole, 1, number, calculable=True)
        return cls(0, 1, number, is_decimal=True, calculable=True)

    @classmethod
    def from_literal(cls, text: str) -> Value:
        """Parse an unsigned decimal literal such as ``42``, ``3.14`` or ``.5``.

        Literals with a fractional part stay exact while
        ``integer_part * 10**k + fractional_part`` fits in 64 bits, where ``k``
        is the number of significant fractional digits. Longer literals are
        parsed as floats.
        """
        if text.count(".") > 1:
            return cls.failure(PARSE_ERROR, "Arithmetic error: More than one '.' in a number!")
        if not NUMBER_LITERAL_RE.fullmatch(text):
            return cls.failure(PARSE_ERROR, f"Arithmetic error: Malformed number '{text}'!")

        if "." not in text:
            digits = text.lstrip("0")
            if len(digits) > len(str(INT64_MAX)) or int(digits or "0") > INT64_MAX:
                return cls.failure(NUMBER_TOO_LARGE, _TOO_LARGE_MESSAGE)
            return cls.from_integer(int(digits or "0"))

        whole, _, fractional = text.partition(".")
        whole = whole.lstrip("0")
        if len(whole) >= MAX_LITERAL_INTEGER_DIGITS:
            return cls.failure(NUMBER_TOO_LARGE, _TOO_LARGE_MESSAGE)
        whole_number = int(whole or "0")

        fractional = fractional.rstrip("0")
        if not fractional:
            return cls.from_integer(whole_number)

        if len(fractional) < len(str(INT64_MAX)):
            scale = 10 ** len(fractional)
            numerator = whole_number * scale + int(fractional)
            if numerator <= INT64_MAX:
                return cls.from_fraction(numerator, scale)
        return cls.from_double(float(text))

    @classmethod
    def coerce(cls, obj: Any) -> Value:
        """Convert ints, floats, fractions and numeric strings to a ``Value``."""
        if isinstance(obj, Value):
            return obj
        if isinstance(obj, bool):
            raise TypeError("cannot convert bool to Value")
        if isinstance(obj, int):
            return cls.from_integer(obj)
        if isinstance(obj, Fraction):
            return cls.from_fraction(obj.numerator, obj.denominator)
        if isinstance(obj, float):
            return cls.from_double(obj)
        if isinstance(obj, str):
            text = obj.strip()
            if text.startswith("-"):
                return -cls.from_literal(text[1:].strip())
            return cls.from_literal(text)
        raise TypeError(f"cannot convert {type(obj).__name__} to Value")

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_decimal(self) -> bool:
        return self._is_decimal

    @property
    def is_calculable(self) -> bool:
        return self._calculable

    @property
    def is_integer(self) -> bool:
        if not self._calculable:
            return False
        if self._is_decimal:
            return self._decimal.is_integer()
        return self._denominator == 1

    @property
    def error_code(self) -> str | None:
        return self._error_code

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def fraction(self) -> Fraction:
        """Exact ``Fraction`` of this value (the binary value for decimals)."""
        self._require_calculable()
        if self._is_decimal:
            return Fraction(self._decimal)
        return Fraction(self._numerator, self._denominator)

    @property
    def numerator(self) -> int:
        return self.fraction.numerator

    @property
    def denominator(self) -> int:
        return self.fraction.denominator

    def to_float(self) -> float:
        self._require_calculable()
        return self._decimal

    def __float__(self) -> float:
        return self.to_float()

    def to_sympy(self) -> sp.Number:
        """Return the SymPy number for this value (``Rational`` when exact)."""
        self._require_calculable()
        if self._is_decimal:
            return sp.Float(self._decimal)
        return sp.Rational(self._numerator, self._denominator)

    def _require_calculable(self) -> None:
        if not self._calculable:
            raise ValueError(f"value is not calculable: {self._error_message}")

    def _is_zero(self) -> bool:
        return self._decimal == 0.0

    def _to_int64(self, verb: str) -> int:
        if not self.is_integer:
            raise EvaluationError(
                f"Arithmetic error: Can't {verb} with float number!", NON_INTEGER_OPERAND
            )
        whole = int(self._decimal) if self._is_decimal else self._numerator
        if not _in_int64(whole):
            raise EvaluationError(_TOO_LARGE_MESSAGE, NUMBER_TOO_LARGE)
        return whole

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def operate(self, symbol: str, other: Value) -> Value:
        """Apply the binary operator spelled ``symbol`` to ``self`` and ``other``."""
        method_name = _BINARY_OPERATIONS.get(symbol)
        if method_name is None:
            for operand in (self, other):
                if not operand.is_calculable:
                    return operand
            return Value.failure(INVALID_OPERATOR, f"Invalid operator: {symbol}")
        result = getattr(self, method_name)(other)
        logger.debug("%r %s %r -> %r", self, symbol, other, result)
        return result

    @_operator
    def __add__(self, other: Value) -> Value:
        if self._is_decimal or other._is_decimal:
            return Value.from_double(self._decimal + other._decimal)
        return Value.from_fraction(
            self._numerator * other._denominator + other._numerator * self._denominator,
            self._denominator * other._denominator,
        )

    @_operator
    def __sub__(self, other: Value) -> Value:
        if self._is_decimal or other._is_decimal:
            return Value.from_double(self._decimal - other._decimal)
        return Value.from_fraction(
            self._numerator * other._denominator - other._numerator * self._denominator,
            self._denominator * other._denominator,
        )

    @_operator
    def __mul__(self, other: Value) -> Value:
        if self._is_decimal or other._is_decimal:
            return Value.from_double(self._decimal * other._decimal)
        return Value.from_fraction(
            self._numerator * other._numerator, self._denominator * other._denominator
        )

    @_operator
    def __truediv__(self, other: Value) -> Value:
        if other._is_zero():
            raise EvaluationError("Arithmetic error: Division by zero!", DIVISION_BY_ZERO)
        if self._is_decimal or other._is_decimal:
            return Value.from_double(self._decimal / other._decimal)
        return Value.from_fraction(
            self._numerator * other._denominator, self._denominator * other._numerator
        )

    @_operator
    def __floordiv__(self, other: Value) -> Value:
        if other._is_zero():
            raise EvaluationError("Arithmetic error: Division by zero!", DIVISION_BY_ZERO)
        quotient = self._decimal / other._decimal
        if not math.isfinite(quotient):
            return Value.from_double(quotient)
        return Value.from_double(float(math.floor(quotient)))

    @_operator
    def __mod__(self, other: Value) -> Value:
        left = self._to_int64("mod")
        right = other._to_int64("mod")
        if right == 0:
            raise EvaluationError("Arithmetic error: Modulo by zero!", DIVISION_BY_ZERO)
        # Remainder takes the sign of the dividend
        remainder = abs(left) % abs(right)
        return Value.from_integer(-remainder if left < 0 else remainder)

    @_operator
    def __lshift__(self, other: Value) -> Value:
        left = self._to_int64("left shift")
        count = other._to_int64("left shift")
        if count < 0:
            raise EvaluationError(
                "Arithmetic error: Can't left shift by a negative number!", NEGATIVE_SHIFT
            )
        if left == 0:
            return Value.from_integer(0)
        if count >= 64:
            raise EvaluationError(_TOO_LARGE_MESSAGE, NUMBER_TOO_LARGE)
        return Value.from_integer(left << count)

    @_operator
    def __rshift__(self, other: Value) -> Value:
        left = self._to_int64("right shift")
        count = other._to_int64("right shift")
        if count < 0:
            raise EvaluationError(
                "Arithmetic error: Can't right shift by a negative number!", NEGATIVE_SHIFT
            )
        return Value.from_integer(left >> min(count, 64))

    @_operator
    def __and__(self, other: Value) -> Value:
        return Value.from_integer(self._to_int64("and") & other._to_int64("and"))

    @_operator
    def __or__(self, other: Value) -> Value:
        return Value.from_integer(self._to_int64("or") | other._to_int64("or"))

    @_operator
    def __xor__(self, other: Value) -> Value:
        return Value.from_integer(self._to_int64("xor") ^ other._to_int64("xor"))

    @_operator
    def __invert__(self) -> Value:
        return Value.from_integer(~self._to_int64("negate"))

    @_operator
    def __neg__(self) -> Value:
        return self * Value.from_integer(-1)

    @_operator
    def __pow__(self, other: Value) -> Value:
        if self._decimal < 0 and not other.is_integer:
            raise EvaluationError(
                "Arithmetic error: Can't power a negative number by a non-integer!",
                NEGATIVE_BASE_FRACTIONAL_EXPONENT,
            )
        if not self._is_decimal and other.is_integer:
            exponent = int(other._decimal) if other._is_decimal else other._numerator
            size = max(abs(self._numerator).bit_length(), self._denominator.bit_length())
            if size * abs(exponent) <= _EXACT_POWER_BITS:
                numerator = self._numerator ** abs(exponent)
                denominator = self._denominator ** abs(exponent)
                if exponent < 0:
                    numerator, denominator = denominator, numerator
                return Value.from_fraction(numerator, denominator)
        try:
            result = math.pow(self._decimal, other._decimal)
        except ValueError:
            code = DIVISION_BY_ZERO if self._is_zero() else DOMAIN_ERROR
            raise EvaluationError("Arithmetic error: Power is undefined for these operands!", code)
        return Value.from_double(result)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        """Compare by numeric value; failures are equal when code and message match."""
        if isinstance(other, (int, float, Fraction)) and not isinstance(other, bool):
            other = Value.coerce(other)
        if not isinstance(other, Value):
            return NotImplemented
        if not (self._calculable and other._calculable):
            return (
                self._calculable == other._calculable
                and self._error_code == other._error_code
                and self._error_message == other._error_message
            )
        return self.fraction == other.fraction

    def __hash__(self) -> int:
        if not self._calculable:
            return hash((self._error_code, self._error_message))
        return hash(self.fraction)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_display_string(self) -> str:
        """Render whole exact values as integers, everything else as the shortest round-trip float."""
        if not self._calculable:
            return ""
        if not self._is_decimal and self._denominator == 1:
            return str(self._numerator)
        text = repr(self._decimal)
        return text[:-2] if text.endswith(".0") else text

    def __str__(self) -> str:
        return self.to_display_string()

    def __repr__(self) -> str:
        if not self._calculable:
            return f"Value(error={self._error_code!r}, message={self._error_message!r})"
        if self._is_decimal:
            return f"Value({self._decimal!r})"
        return f"Value({self._numerator}/{self._denominator})"
