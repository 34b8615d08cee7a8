"""Performance tests and benchmarks for exprsolver.

These tests are marked as 'slow' and can be skipped with: pytest -m "not slow"
"""

import time

import pytest

from exprsolver_pkg.config import MAX_INPUT_LENGTH
from exprsolver_pkg.parser import preprocess
from exprsolver_pkg.solver import ExpressionSolver
from exprsolver_pkg.symbols import SymbolTable
from exprsolver_pkg.tokenizer import group_expression


@pytest.mark.slow
class TestTokenizingPerformance:
    """Test preprocessing and tokenizing performance."""

    def test_simple_expression_tokenizing_time(self):
        """Benchmark simple expression tokenizing."""
        expr = "x**2 + 2*x + 1"
        symbols = SymbolTable()
        symbols.define_constant("x", 3)
        start = time.time()
        for _ in range(1000):
            group_expression(preprocess(expr), symbols)
        elapsed = time.time() - start
        assert elapsed < 2.0, f"Tokenizing too slow: {elapsed}s"

    def test_longest_input(self):
        expr = ("1+" * MAX_INPUT_LENGTH)[: MAX_INPUT_LENGTH - 1] + "1"
        start = time.time()
        blocks = group_expression(preprocess(expr), SymbolTable())
        elapsed = time.time() - start
        assert len(blocks) == MAX_INPUT_LENGTH - 1
        assert elapsed < 2.0, f"Long input too slow: {elapsed}s"


@pytest.mark.slow
class TestEvaluationPerformance:
    """Test evaluation performance."""

    def test_repeated_solves(self):
        solver = ExpressionSolver()
        start = time.time()
        for i in range(500):
            result = solver.solve(f"sin({i})**2 + cos({i})**2 + {i}/7")
            assert result.is_calculable
        elapsed = time.time() - start
        assert elapsed < 5.0, f"Solving too slow: {elapsed}s"

    def test_resolve_is_cheaper_than_solve(self):
        solver = ExpressionSolver()
        solver.define_constant("x", 1)
        expr = "+".join(f"(x*{i}-{i})" for i in range(200))
        assert str(solver.solve(expr)) == "0"
        start = time.time()
        for i in range(100):
            solver.define_constant("x", i)
            assert solver.resolve().is_calculable
        elapsed = time.time() - start
        assert elapsed < 5.0, f"Resolve too slow: {elapsed}s"

    def test_long_sum(self):
        expr = "+".join(["1"] * 4000)
        start = time.time()
        result = ExpressionSolver().solve(expr)
        elapsed = time.time() - start
        assert str(result) == "4000"
        assert elapsed < 2.0, f"Long sum too slow: {elapsed}s"

    def test_deep_nesting_within_limit(self):
        expr = "(" * 90 + "1" + "+1)" * 90
        start = time.time()
        result = ExpressionSolver().solve(expr)
        elapsed = time.time() - start
        assert str(result) == "91"
        assert elapsed < 2.0, f"Nested expression too slow: {elapsed}s"
