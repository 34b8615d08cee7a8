"""Per-solver symbol tables: functions, constants and engine-maintained variables."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable

from .config import VAR_NAME_RE
from .logging_config import get_logger
from .types import (
    DOMAIN_ERROR,
    INVALID_NAME,
    NEGATIVE_SQUARE_ROOT,
    NUMBER_TOO_LARGE,
    UNDEFINED_REFERENCE,
    BlockType,
    EvaluationError,
    ValidationError,
)
from .value import Value

logger = get_logger("symbols")

# Name of the variable that holds the last solved result
LAST_RESULT = "ans"


def _round_half_away(number: float) -> float:
    whole = math.floor(abs(number))
    if abs(number) - whole >= 0.5:
        whole += 1
    return math.copysign(whole, number)


@dataclass(frozen=True)
class Function:
    """A named single-argument function backed by a float -> float callable."""

    name: str
    native: Callable[[float], float]

    def __call__(self, argument: Value) -> Value:
        if not argument.is_calculable:
            raise EvaluationError(
                argument.error_message, argument.error_code or UNDEFINED_REFERENCE
            )
        number = argument.to_float()
        if self.name == "sqrt" and number < 0:
            raise EvaluationError(
                "Arithmetic error: Cannot square root a negative number!",
                NEGATIVE_SQUARE_ROOT,
            )
        try:
            result = self.native(number)
        except ValueError:
            raise EvaluationError(
                f"Arithmetic error: {self.name}({argument}) is undefined!", DOMAIN_ERROR
            )
        except OverflowError:
            raise EvaluationError(
                f"Arithmetic error: {self.name}({argument}) is too large!", NUMBER_TOO_LARGE
            )
        return Value.from_double(result)


PREDEFINED_FUNCTIONS: tuple[Function, ...] = (
    Function("sin", math.sin),
    Function("cos", math.cos),
    Function("tan", math.tan),
    Function("exp", math.exp),
    Function("sqrt", math.sqrt),
    Function("floor", lambda number: float(math.floor(number))),
    Function("ceil", lambda number: float(math.ceil(number))),
    Function("round", _round_half_away),
    Function("ln", math.log),
    Function("log", math.log10),
    Function("abs", math.fabs),
)

PREDEFINED_CONSTANTS: dict[str, float] = {
    "e": math.e,
    "pi": math.pi,
}


class SymbolTable:
    """Names an expression may refer to.

    Lookup order is functions, then constants, then variables. Constants are
    user-settable; variables are written by the engine itself (``ans``).
    """

    def __init__(self) -> None:
        self.functions: dict[str, Function] = {}
        self.constants: dict[str, Value] = {}
        self.variables: dict[str, Value] = {}
        self._add_predefined()

    def _add_predefined(self) -> None:
        for function in PREDEFINED_FUNCTIONS:
            self.functions[function.name] = function
        for name, number in PREDEFINED_CONSTANTS.items():
            self.constants[name] = Value.from_double(number)
        self.variables[LAST_RESULT] = Value.failure(
            UNDEFINED_REFERENCE, "No expression has been solved yet."
        )

    def classify(self, name: str) -> BlockType | None:
        """Return the block type for identifier ``name`` or ``None`` if unknown."""
        if name in self.functions:
            return BlockType.FUNCTION_NAME
        if name in self.constants:
            return BlockType.CONSTANT
        if name in self.variables:
            return BlockType.VARIABLE
        return None

    def function(self, name: str) -> Function | None:
        return self.functions.get(name)

    def binding(self, name: str) -> Value | None:
        """Return the value bound to a constant or variable."""
        if name in self.constants:
            return self.constants[name]
        return self.variables.get(name)

    def define_constant(self, name: str, value: Any) -> None:
        """Add a constant or overwrite an existing one.

        Raises:
            ValidationError: if the name is not an identifier, belongs to a
                function or a solver variable, or the value is not calculable.
        """
        if not VAR_NAME_RE.fullmatch(name):
            raise ValidationError(f"Invalid constant name: {name!r}", INVALID_NAME)
        if name in self.functions:
            raise ValidationError(
                f"Cannot bind {name!r}: it is a function name", INVALID_NAME
            )
        if name in self.variables:
            raise ValidationError(
                f"Cannot bind {name!r}: it is maintained by the solver", INVALID_NAME
            )
        try:
            value = Value.coerce(value)
        except TypeError as exc:
            raise ValidationError(f"Cannot bind {name!r}: {exc}", INVALID_NAME)
        if not value.is_calculable:
            raise ValidationError(
                f"Cannot bind {name!r}: {value.error_message}",
                value.error_code or UNDEFINED_REFERENCE,
            )
        logger.debug("constant %s = %r", name, value)
        self.constants[name] = value

    def set_variable(self, name: str, value: Value) -> None:
        self.variables[name] = value
