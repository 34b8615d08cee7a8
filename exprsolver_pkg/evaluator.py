"""Stack-based evaluation of a block sequence.

Blocks are read right to left. Numbers, bindings and bracket results go on a
value stack; operators go on an operator stack and an incoming operator first
applies every pending one that binds strictly tighter. Recursion is only used
for the contents of brackets and function calls.
"""

from __future__ import annotations

from .config import MAX_NESTING_DEPTH
from .logging_config import get_logger
from .symbols import SymbolTable
from .types import (
    MALFORMED_EXPRESSION,
    MISSING_PARENTHESES,
    NESTING_TOO_DEEP,
    UNDEFINED_REFERENCE,
    UNEXPECTED_TOKEN,
    Block,
    BlockType,
    EvaluationError,
)
from .value import Value

logger = get_logger("evaluator")

_MALFORMED_MESSAGE = "Invalid expression! Malformed expression."


class Evaluator:
    """Evaluate the blocks of one normalized expression against a symbol table."""

    def __init__(
        self,
        expression: str,
        blocks: list[Block],
        symbols: SymbolTable,
        max_depth: int = MAX_NESTING_DEPTH,
    ):
        self.expression = expression
        self.blocks = blocks
        self.symbols = symbols
        self.max_depth = max_depth

    def evaluate(self) -> Value:
        """Evaluate every block.

        Returns:
            The resulting value; arithmetic failures come back as a
            non-calculable value

        Raises:
            EvaluationError: for structural errors and failed sub-expressions
        """
        return self._calculate(0, len(self.blocks), 0)

    def _text(self, block: Block) -> str:
        return block.text(self.expression)

    def _calculate(self, start: int, end: int, depth: int) -> Value:
        if depth > self.max_depth:
            raise EvaluationError(
                f"Expression nests deeper than {self.max_depth} levels", NESTING_TOO_DEEP
            )

        values: list[Value] = []
        operators: list[Block] = []
        index = end - 1
        while index >= start:
            block = self.blocks[index]
            kind = block.kind
            if kind is BlockType.NUMBER:
                values.append(Value.from_literal(self._text(block)))
            elif kind is BlockType.FUNCTION_NAME:
                raise EvaluationError(
                    f"Invalid expression! '{self._text(block)}' needs parentheses.",
                    MISSING_PARENTHESES,
                )
            elif kind in (BlockType.CONSTANT, BlockType.VARIABLE):
                values.append(self._lookup(self._text(block)))
            elif kind is BlockType.BRACKET_CLOSE:
                opening = self._find_opening(start, index)
                inner = self._calculate(opening + 1, index, depth + 1)
                if opening > start and self.blocks[opening - 1].kind is BlockType.FUNCTION_NAME:
                    values.append(self._call(self._text(self.blocks[opening - 1]), inner))
                    index = opening - 1
                else:
                    if not inner.is_calculable:
                        raise EvaluationError(
                            inner.error_message, inner.error_code or MALFORMED_EXPRESSION
                        )
                    values.append(inner)
                    index = opening
            elif kind is BlockType.SYMBOL:
                while operators and operators[-1].priority < block.priority:
                    self._apply(operators.pop(), values, draining=False)
                operators.append(block)
            else:
                raise EvaluationError(
                    f"Invalid expression! Unexpected token '{self._text(block)}'.",
                    UNEXPECTED_TOKEN,
                )
            index -= 1

        while operators:
            self._apply(operators.pop(), values, draining=True)

        if len(values) != 1:
            raise EvaluationError(_MALFORMED_MESSAGE, MALFORMED_EXPRESSION)
        return values[0]

    def _find_opening(self, start: int, closing: int) -> int:
        """Return the index of the bracket that opens the one at ``closing``."""
        level = self.blocks[closing].level - 1
        opening = start
        for index in range(closing - 1, start - 1, -1):
            if self.blocks[index].level == level:
                opening = index + 1
                break
        if self.blocks[opening].kind is not BlockType.BRACKET_OPEN:
            raise EvaluationError(_MALFORMED_MESSAGE, MALFORMED_EXPRESSION)
        return opening

    def _apply(self, operator: Block, values: list[Value], draining: bool) -> None:
        symbol = self._text(operator)
        arity = 1 if symbol == "~" else 2
        if len(values) < arity:
            raise EvaluationError(_MALFORMED_MESSAGE, MALFORMED_EXPRESSION)
        operands = [values.pop() for _ in range(arity)]
        if draining:
            for operand in operands:
                if not operand.is_calculable:
                    raise EvaluationError(
                        operand.error_message, operand.error_code or MALFORMED_EXPRESSION
                    )
        if arity == 1:
            values.append(~operands[0])
        else:
            values.append(operands[0].operate(symbol, operands[1]))

    def _lookup(self, name: str) -> Value:
        value = self.symbols.binding(name)
        if value is None:
            raise EvaluationError(f"Undefined reference: '{name}'", UNDEFINED_REFERENCE)
        if not value.is_calculable:
            raise EvaluationError(
                f"Undefined reference: '{name}'. {value.error_message}",
                value.error_code or UNDEFINED_REFERENCE,
            )
        return value

    def _call(self, name: str, argument: Value) -> Value:
        function = self.symbols.function(name)
        if function is None:
            raise EvaluationError(f"Undefined reference: '{name}'", UNDEFINED_REFERENCE)
        result = function(argument)
        logger.debug("%s(%r) -> %r", name, argument, result)
        return result
