"""Command line front end: one-shot evaluation, health check and the REPL.

Run ``exprsolver -e "2+2"`` for a single result, ``exprsolver -D x=5 -e "x*2"``
to bind constants first, or ``exprsolver`` alone for the interactive prompt.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from . import config as _config
from .api import result_from_value
from .config import DEFINE_ARG_RE, QUIT_COMMANDS, REPL_COMMANDS, VERSION
from .logging_config import get_logger, setup_logging
from .solver import ExpressionSolver

logger = get_logger("cli")


def _define_arg(text: str) -> tuple[str, str]:
    """argparse type for ``NAME=EXPR``."""
    match = DEFINE_ARG_RE.match(text)
    if not match:
        raise argparse.ArgumentTypeError(f"expected NAME=EXPR, got {text!r}")
    return match.group(1), match.group(2).strip()


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running exprsolver health check...")
    print("-" * 50)

    # Check SymPy import
    try:
        import sympy as sp

        print(f"[OK] SymPy {sp.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] SymPy import failed: {e}")
        checks_failed += 1

    # Check basic evaluation
    solver = ExpressionSolver()
    result = solver.solve("2 + 3 * 4")
    if result.is_calculable and str(result) == "14":
        print("[OK] Basic evaluation works")
        checks_passed += 1
    else:
        print(f"[FAIL] Basic evaluation failed: expected 14, got {result!r}")
        checks_failed += 1

    # Check exact rational results
    res = result_from_value(solver.solve("1/3"))
    if res.ok and res.exact == "1/3":
        print("[OK] Exact fractions work")
        checks_passed += 1
    else:
        print(f"[FAIL] Exact fraction check failed: {res!r}")
        checks_failed += 1

    # Check bindings and resolve
    solver.define_constant("x_check", 1)
    solver.solve("(x_check + 1) * 2")
    solver.define_constant("x_check", 4)
    result = solver.resolve()
    if result.is_calculable and str(result) == "10":
        print("[OK] Constant bindings and resolve work")
        checks_passed += 1
    else:
        print(f"[FAIL] Resolve check failed: {result!r}")
        checks_failed += 1

    # Check error reporting
    result = solver.solve("1/0")
    if not result.is_calculable and result.error_code == "DIVISION_BY_ZERO":
        print("[OK] Error reporting works")
        checks_passed += 1
    else:
        print(f"[FAIL] Error reporting check failed: {result!r}")
        checks_failed += 1

    print("-" * 50)
    print(f"Results: {checks_passed} passed, {checks_failed} failed")

    if checks_failed > 0:
        print("\n[WARN] Some health checks failed. Core functionality may be impaired.")
        return 1

    print("\n[OK] All health checks passed!")
    return 0


def print_result_pretty(res: dict[str, Any], output_format: str = "human") -> None:
    """Print result in specified format.

    Args:
        res: Result dictionary (see ``EvalResult.to_dict``)
        output_format: "json" for JSON output, "human" for human-readable
    """
    if output_format == "json":
        print(json.dumps(res, indent=2, ensure_ascii=False))
        return
    if not res.get("ok"):
        print("Error:", res.get("error"))
        return
    print(res.get("result"))
    exact = res.get("exact")
    if exact and exact != res.get("result"):
        print("Exact:", exact)


def print_help_text() -> None:
    """Print help text for REPL commands."""
    print(
        f"""exprsolver version {VERSION}

Expressions:
  2+3*4, (1+2)/3, 2**10, 7//2, 7%3, 1<<4, 6&3, 6^3, 6|3, ~5, -(1+1)
  Functions: sin cos tan exp sqrt floor ceil round ln log abs
  Constants: e, pi, and 'ans' for the last result

Bindings:
  x = 2*pi          bind a constant (any expression)

Commands:
  resolve           re-evaluate the last expression with current bindings
  help              show this text
  quit, q, exit     leave
"""
    )


def _levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein distance between two strings."""
    if len(s1) < len(s2):
        return _levenshtein_distance(s2, s1)
    if len(s2) == 0:
        return len(s1)
    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row
    return previous_row[-1]


def _suggest_command(raw: str, solver: ExpressionSolver) -> str | None:
    """Return a REPL command that ``raw`` is probably a typo of."""
    word = raw.lower()
    if len(word) < 3 or not word.isalpha() or solver.symbols.classify(raw) is not None:
        return None
    best_match = None
    best_distance = 3
    for cmd in sorted(REPL_COMMANDS):
        distance = _levenshtein_distance(word, cmd)
        if 0 < distance < best_distance and distance <= max(2, len(cmd) // 3):
            best_distance = distance
            best_match = cmd
    return best_match


def _bind(solver: ExpressionSolver, name: str, expression: str) -> tuple[bool, str]:
    """Evaluate ``expression`` and bind the result to ``name``."""
    value = solver.calculate(expression)
    if not value.is_calculable:
        return False, solver.error_message
    if not solver.define_constant(name, value):
        return False, solver.error_message
    return True, f"{name} = {value}"


def repl_loop(solver: ExpressionSolver | None = None, output_format: str = "human") -> None:
    """Interactive REPL loop with graceful interrupt handling."""
    try:
        import readline  # noqa: F401
    except ImportError:
        # readline not available on Windows - that's fine
        pass

    solver = solver or ExpressionSolver()
    print("exprsolver - type 'help' for commands, 'quit' to exit.")

    while True:
        try:
            raw = input(">>> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye.")
            break
        if not raw:
            continue

        command = raw.lower()
        if command in QUIT_COMMANDS:
            break
        if command == "help":
            print_help_text()
            continue
        if command == "resolve":
            print_result_pretty(result_from_value(solver.resolve()).to_dict(), output_format)
            continue

        match = DEFINE_ARG_RE.match(raw)
        if match and raw.count("=") == 1:
            ok, message = _bind(solver, match.group(1), match.group(2))
            print(message if ok else f"Error: {message}")
            continue

        suggestion = _suggest_command(raw, solver)
        if suggestion:
            print(f'Did you mean "{suggestion}"?')
            continue

        print_result_pretty(result_from_value(solver.solve(raw)).to_dict(), output_format)


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for the exprsolver CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(prog="exprsolver")
    parser.add_argument(
        "-e",
        "--eval",
        type=str,
        help="Evaluate one expression and exit (non-interactive)",
        dest="eval_expr",
    )
    parser.add_argument(
        "-D",
        "--define",
        type=_define_arg,
        action="append",
        default=[],
        metavar="NAME=EXPR",
        help="Bind a constant before evaluating (repeatable)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-p", "--precision", type=int, help="Set output precision (significant digits)"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=_config.LOG_LEVEL.upper(),
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file)

    # Apply CLI configuration overrides
    if args.precision and args.precision > 0:
        _config.OUTPUT_PRECISION = int(args.precision)

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()

    solver = ExpressionSolver()
    for name, expression in args.define:
        ok, message = _bind(solver, name, expression)
        if not ok:
            print_result_pretty({"ok": False, "error": message}, args.format)
            return 1
        logger.debug("bound %s", message)

    if args.eval_expr is not None:
        expr = args.eval_expr.strip()
        # Remove ">>>" prompt if present
        if expr.startswith(">>>"):
            expr = expr[3:].strip()
        res = result_from_value(solver.solve(expr))
        print_result_pretty(res.to_dict(), args.format)
        return 0 if res.ok else 1

    repl_loop(solver, output_format=args.format)
    return 0


if __name__ == "__main__":
    # python -m exprsolver_pkg.cli
    sys.exit(main_entry())
