"""Tests for the linear expression algebra."""

from __future__ import annotations

import pytest

from dietlp.optimizer.expression import LinearExpression, Variable, scale, sum_expressions


@pytest.fixture
def x():
    return Variable(index=0, name="x")


@pytest.fixture
def y():
    return Variable(index=1, name="y")


class TestScale:
    """Tests for variable scaling."""

    def test_scale_variable(self, x):
        expr = scale(x, 2.5)
        assert expr.coefficient(x) == 2.5
        assert expr.constant == 0.0

    def test_multiplication_operators(self, x):
        assert (x * 3).coefficient(x) == 3.0
        assert (3 * x).coefficient(x) == 3.0

    def test_zero_coefficient_is_kept(self, x):
        expr = x * 0.0
        assert len(expr) == 1
        assert x in expr.coefficients

    def test_non_numeric_coefficient_rejected(self, x, y):
        with pytest.raises(TypeError):
            scale(x, "2")
        with pytest.raises(TypeError):
            x * y


class TestAddition:
    """Tests for adding and summing expressions."""

    def test_shared_variables_sum(self, x, y):
        expr = (2 * x + y) + (3 * x)
        assert expr.coefficient(x) == 5.0
        assert expr.coefficient(y) == 1.0

    def test_operands_unchanged(self, x, y):
        a = 2 * x
        b = 3 * y
        _ = a + b
        assert a.variables == (x,)
        assert b.variables == (y,)

    def test_builtin_sum(self, x, y):
        expr = sum([x * 1.0, y * 2.0, x * 4.0])
        assert expr.coefficient(x) == 5.0
        assert expr.coefficient(y) == 2.0

    def test_sum_is_exactly_rounded(self, x):
        forward = sum_expressions([x * 1e16, x * 1.0, x * -1e16])
        backward = sum_expressions([x * -1e16, x * 1.0, x * 1e16])
        assert forward.coefficient(x) == 1.0
        assert backward.coefficient(x) == 1.0

    def test_sum_commutes(self, x, y):
        terms = [x * 0.1, y * 0.2, x * 0.3, y * 0.7, x * 1e-9]
        assert sum_expressions(terms) == sum_expressions(reversed(terms))

    def test_constants_and_subtraction(self, x, y):
        expr = 2 * x - y + 5 - 1
        assert expr.coefficient(y) == -1.0
        assert expr.constant == 4.0

    def test_variable_plus_variable(self, x, y):
        expr = x + y
        assert isinstance(expr, LinearExpression)
        assert expr.coefficient(x) == 1.0
        assert expr.coefficient(y) == 1.0

    def test_empty_sum(self):
        expr = sum_expressions([])
        assert len(expr) == 0
        assert expr.constant == 0.0


class TestEvaluate:
    """Tests for evaluating expressions at a point."""

    def test_evaluate(self, x, y):
        expr = 2 * x + 3 * y + 1
        assert expr.evaluate({x: 1.5, y: 2.0}) == pytest.approx(10.0)

    def test_missing_value(self, x, y):
        with pytest.raises(KeyError):
            (x + y).evaluate({x: 1.0})

    def test_coefficients_read_only(self, x):
        expr = 2 * x
        with pytest.raises(TypeError):
            expr.coefficients[x] = 3.0
