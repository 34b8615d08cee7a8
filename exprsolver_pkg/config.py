"""Centralized configuration for exprsolver.

This module defines:
- Input validation limits (length, bracket / unary-minus nesting depth)
- Numeric limits of the exact representation (signed 64-bit)
- Output precision for approximate results
- Character classes and regex patterns used by the tokenizer

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with EXPRSOLVER_)
"""

import os
import re
import string

# Version is defined in pyproject.toml [project] section
try:
    import importlib.metadata

    VERSION = importlib.metadata.version("exprsolver")
except importlib.metadata.PackageNotFoundError:
    # Running from a source checkout
    VERSION = "1.0.0"

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("EXPRSOLVER_MAX_INPUT_LENGTH", "10000"))  # characters
MAX_NESTING_DEPTH = int(
    os.getenv("EXPRSOLVER_MAX_NESTING_DEPTH", "100")
)  # brackets and chained unary minus signs

# Literals with a '.' whose integer part has this many digits are rejected
MAX_LITERAL_INTEGER_DIGITS = int(
    os.getenv("EXPRSOLVER_MAX_LITERAL_INTEGER_DIGITS", "15")
)

# Significant digits for the approximate rendering of results
OUTPUT_PRECISION = int(os.getenv("EXPRSOLVER_OUTPUT_PRECISION", "6"))

LOG_LEVEL = os.getenv("EXPRSOLVER_LOG_LEVEL", "WARNING")

# Exact values are kept as fractions of signed 64-bit integers
INT64_MAX = 2**63 - 1
INT64_MIN = -(2**63)

# Character classes
NAME_CHARS = frozenset(string.ascii_letters + "_")
NUMBER_CHARS = frozenset(string.digits + ".")
SYMBOL_CHARS = frozenset("+-*/^%&|<>~")
UNARY_PREFIX_CHARS = frozenset("-~")

# Operator precedence, tightest first
PRIORITY_TABLE = (
    ("**",),
    ("~",),
    ("*", "/", "//", "%"),
    ("+", "-"),
    ("<<", ">>"),
    ("&",),
    ("^",),
    ("|",),
)

# Inputs that end the REPL
QUIT_COMMANDS = {"quit", "q", "exit"}
REPL_COMMANDS = {"help", "resolve"} | QUIT_COMMANDS

VAR_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
NUMBER_LITERAL_RE = re.compile(r"^(?:[0-9]+\.?[0-9]*|\.[0-9]+)$")
DEFINE_ARG_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.+)$")
