"""Split a normalized expression into lexical blocks."""

from __future__ import annotations

import logging

from .config import NAME_CHARS, NUMBER_CHARS, PRIORITY_TABLE, SYMBOL_CHARS
from .logging_config import get_logger
from .symbols import SymbolTable
from .types import (
    UNBALANCED_BRACKETS,
    UNKNOWN_IDENTIFIER,
    Block,
    BlockType,
    ParseError,
)

logger = get_logger("tokenizer")

OPERATOR_PRIORITY: dict[str, int] = {
    symbol: rank for rank, symbols in enumerate(PRIORITY_TABLE) for symbol in symbols
}

# Rank for symbol runs that are not operators; looser than every real operator
UNKNOWN_PRIORITY = len(PRIORITY_TABLE)


def char_type(char: str) -> BlockType:
    """Return the character class of ``char``.

    Identifier characters report ``FUNCTION_NAME``; the tokenizer decides later
    whether the whole run is a function, a constant or a variable.
    """
    if char in NAME_CHARS:
        return BlockType.FUNCTION_NAME
    if char in NUMBER_CHARS:
        return BlockType.NUMBER
    if char == "(":
        return BlockType.BRACKET_OPEN
    if char == ")":
        return BlockType.BRACKET_CLOSE
    if char in SYMBOL_CHARS:
        return BlockType.SYMBOL
    return BlockType.INVALID


def _make_block(
    expression: str, start: int, end: int, level: int, kind: BlockType, symbols: SymbolTable
) -> Block:
    text = expression[start:end]
    if kind is BlockType.FUNCTION_NAME:
        resolved = symbols.classify(text)
        if resolved is None:
            raise ParseError(f"Unknown identifier: '{text}'", UNKNOWN_IDENTIFIER)
        return Block(start, end, level, resolved)
    if kind is BlockType.SYMBOL:
        return Block(start, end, level, kind, OPERATOR_PRIORITY.get(text, UNKNOWN_PRIORITY))
    return Block(start, end, level, kind)


def group_expression(expression: str, symbols: SymbolTable) -> list[Block]:
    """Group the characters of ``expression`` into blocks.

    A run of same-class characters forms one block, except that brackets and
    ``~`` always stand alone and digits continue an identifier (``a1``).
    Bracket blocks and their contents share the level of the bracket pair.

    Raises:
        ParseError: for unknown identifiers or unbalanced brackets
    """
    blocks: list[Block] = []
    level = 0
    start = 0
    last: BlockType | None = None
    length = len(expression)

    for index in range(length + 1):
        at_end = index == length
        char = "" if at_end else expression[index]
        kind = None if at_end else char_type(char)
        if kind is BlockType.NUMBER and last is BlockType.FUNCTION_NAME:
            kind = BlockType.FUNCTION_NAME

        boundary = (
            at_end
            or kind is not last
            or last in (BlockType.BRACKET_OPEN, BlockType.BRACKET_CLOSE)
            or char == "~"
        )
        if boundary:
            if index != 0:
                blocks.append(_make_block(expression, start, index, level, last, symbols))
                if last is BlockType.BRACKET_CLOSE:
                    level -= 1
                    if level < 0:
                        raise ParseError(
                            "Invalid expression! Unbalanced brackets.", UNBALANCED_BRACKETS
                        )
            last = kind
            start = index

        if kind is BlockType.BRACKET_OPEN:
            level += 1

    if level != 0:
        raise ParseError("Invalid expression! Unbalanced brackets.", UNBALANCED_BRACKETS)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "blocks: %s",
            " ".join(f"{block.text(expression)}@{block.level}" for block in blocks),
        )
    return blocks
