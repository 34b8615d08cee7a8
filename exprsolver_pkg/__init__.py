"""exprsolver package: tokenizer, evaluator, solver façade, API and CLI."""

__all__ = [
    "config",
    "logging_config",
    "types",
    "value",
    "symbols",
    "parser",
    "tokenizer",
    "evaluator",
    "solver",
    "api",
    "cli",
]

# Public API exports

__api_exports__ = [
    "evaluate",
    "validate_expression",
    "result_from_value",
    "ExpressionSolver",
    "Value",
]
