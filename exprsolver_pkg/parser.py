"""Input preprocessing module.

This module handles:
- Input sanitization and validation (whitespace, length, emptiness)
- Rewriting unary minus signs as subtraction from zero
- Result formatting (approximate numbers)
"""

from __future__ import annotations

from typing import Any

from .config import (
    MAX_INPUT_LENGTH,
    MAX_NESTING_DEPTH,
    NAME_CHARS,
    NUMBER_CHARS,
    OUTPUT_PRECISION,
    SYMBOL_CHARS,
    UNARY_PREFIX_CHARS,
)
from .logging_config import get_logger
from .types import EMPTY_EXPRESSION, NESTING_TOO_DEEP, TOO_LONG, ValidationError

logger = get_logger("parser")


def format_number(val: Any, precision: int = OUTPUT_PRECISION) -> str:
    """Format a numeric value with specified precision.

    Args:
        val: Numeric value to format
        precision: Number of significant digits (default: OUTPUT_PRECISION)

    Returns:
        Formatted string representation of the number
    """
    try:
        fmt = "{:." + str(int(precision)) + "g}"
        return fmt.format(float(val))
    except (ValueError, TypeError, OverflowError):
        # Fallback for non-numeric or invalid values
        return str(val)


def _group_end(expression: str, start: int) -> int:
    """Return the index just past the bracket that closes the one at ``start``.

    Unclosed groups run to the end of the string; the tokenizer reports them.
    """
    depth = 0
    for index in range(start, len(expression)):
        char = expression[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index + 1
    return len(expression)


def _operand_end(expression: str, start: int) -> int:
    """Return the end of the operand of a unary minus, or ``start`` if there is none.

    An operand is any run of ``-``/``~`` prefixes followed by a number, an
    identifier (with its call brackets, if any) or a bracket group.
    """
    length = len(expression)
    index = start
    while index < length and expression[index] in UNARY_PREFIX_CHARS:
        index += 1
    if index >= length:
        return start

    char = expression[index]
    if char == "(":
        return _group_end(expression, index)
    if char in NUMBER_CHARS:
        while index < length and expression[index] in NUMBER_CHARS:
            index += 1
        return index
    if char in NAME_CHARS:
        while index < length and (
            expression[index] in NAME_CHARS or expression[index] in NUMBER_CHARS
        ):
            index += 1
        if index < length and expression[index] == "(":
            return _group_end(expression, index)
        return index
    return start


def _is_unary_position(previous: str) -> bool:
    return previous == "" or previous == "(" or previous in SYMBOL_CHARS


def _opens_group(previous: str, depth: int) -> bool:
    """Return whether a unary minus here starts a bracket or the whole expression."""
    return previous == "(" or (previous == "" and depth == 0)


def normalize_signs(expression: str, depth: int = 0) -> str:
    """Rewrite every unary minus as a subtraction from zero.

    ``-2*3`` becomes ``(0-2)*3``, ``3*-2`` becomes ``3*(0-2)`` and ``--1``
    becomes ``(0-(0-1))``. A minus that opens the expression or a bracket and
    is followed by a bracket group only gets a ``0`` in front, so ``-(1+1)**2``
    becomes ``0-(1+1)**2``. Binary minus signs are left alone.

    Args:
        expression: Expression without whitespace
        depth: Current unary-minus nesting (used for the recursion limit)

    Returns:
        Expression in which ``-`` only ever appears as a binary operator

    Raises:
        ValidationError: if unary minus signs nest deeper than MAX_NESTING_DEPTH
    """
    if depth > MAX_NESTING_DEPTH:
        raise ValidationError(
            f"Expression nests deeper than {MAX_NESTING_DEPTH} levels", NESTING_TOO_DEEP
        )
    pieces: list[str] = []
    previous = ""
    index = 0
    while index < len(expression):
        char = expression[index]
        if char == "-" and _is_unary_position(previous):
            end = _operand_end(expression, index + 1)
            if end > index + 1:
                operand = normalize_signs(expression[index + 1 : end], depth + 1)
                if expression[index + 1] == "(" and _opens_group(previous, depth):
                    pieces.append(f"0-{operand}")
                else:
                    pieces.append(f"(0-{operand})")
                previous = ")"
                index = end
                continue
        pieces.append(char)
        previous = char
        index += 1
    return "".join(pieces)


def preprocess(input_str: str) -> str:
    """Validate raw input and return the normalized expression.

    Args:
        input_str: Raw expression text

    Returns:
        Whitespace-free expression with unary minus signs rewritten

    Raises:
        ValidationError: for empty, overly long or too deeply nested input
    """
    if len(input_str) > MAX_INPUT_LENGTH:
        raise ValidationError(
            f"Input too long (max {MAX_INPUT_LENGTH} characters)", TOO_LONG
        )
    expression = "".join(input_str.split())
    if not expression:
        raise ValidationError("Invalid expression! Expression is empty.", EMPTY_EXPRESSION)
    normalized = normalize_signs(expression)
    if normalized != expression:
        logger.debug("normalized %r to %r", expression, normalized)
    return normalized
