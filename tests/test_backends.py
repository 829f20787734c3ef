"""Tests for the solver backends."""

from __future__ import annotations

from types import SimpleNamespace

import numpy as np
import pytest
from scipy.optimize import OptimizeResult

from dietlp.optimizer.models import (
    BackendError,
    Constraint,
    InfeasibleError,
    Objective,
    Relation,
    Sense,
    UnboundedError,
)
from dietlp.solvers import BACKENDS, ClarabelBackend, HighsBackend, get_backend


@pytest.fixture(params=sorted(BACKENDS))
def any_backend(request):
    """Each available backend in turn."""
    return get_backend(request.param)


class TestBuildModel:
    """Tests for matrix assembly shared by the backends."""

    def test_rows_and_rhs(self, backend):
        x = backend.add_variable(name="x")
        y = backend.add_variable(name="y")
        backend.add_constraint(Constraint(2 * x + y + 1, Relation.GE, 5))
        backend.add_constraint(Constraint(x - y, Relation.LE, 3))
        backend.add_constraint(Constraint(x + y, Relation.EQ, 4))
        backend.set_objective(Objective(x + 2 * y + 10, Sense.MAXIMIZE))

        model = backend.build_model()

        # >= rows are negated, constants move to the right-hand side
        np.testing.assert_allclose(model.A_ub, [[-2, -1], [1, -1]])
        np.testing.assert_allclose(model.b_ub, [-4, 3])
        np.testing.assert_allclose(model.A_eq, [[1, 1]])
        np.testing.assert_allclose(model.b_eq, [4])
        np.testing.assert_allclose(model.costs, [-1, -2])
        np.testing.assert_allclose(model.lower_bounds, [0, 0])
        assert model.sign == -1.0

    def test_no_objective(self, backend):
        backend.add_variable()
        with pytest.raises(BackendError):
            backend.solve()

    def test_foreign_variable(self, backend):
        other = HighsBackend()
        foreign = other.add_variable(name="z")
        backend.add_variable(name="x")
        with pytest.raises(ValueError):
            backend.add_constraint(Constraint(foreign * 1.0, Relation.LE, 1))

    def test_no_variables(self, backend):
        from dietlp.optimizer.expression import LinearExpression

        backend.set_objective(Objective(LinearExpression(constant=2.5)))
        solution = backend.solve()
        assert solution.values == {}
        assert solution.objective_value == 2.5


class TestSolve:
    """Tests that run against every backend."""

    def test_maximize(self, any_backend):
        x = any_backend.add_variable(name="x")
        y = any_backend.add_variable(name="y")
        any_backend.add_constraint(Constraint(x + 2 * y, Relation.LE, 4))
        any_backend.add_constraint(Constraint(3 * x + y, Relation.LE, 6))
        any_backend.set_objective(Objective(x + y, Sense.MAXIMIZE))

        solution = any_backend.solve()

        assert solution.value(x) == pytest.approx(1.6, abs=1e-6)
        assert solution.value(y) == pytest.approx(1.2, abs=1e-6)
        assert solution.objective_value == pytest.approx(2.8, abs=1e-6)

    def test_values_respect_lower_bound(self, any_backend):
        x = any_backend.add_variable(name="x")
        any_backend.set_objective(Objective(3 * x))

        solution = any_backend.solve()
        assert solution.value(x) >= 0.0
        assert solution.objective_value == pytest.approx(0.0, abs=1e-6)

    def test_infeasible(self, backend):
        x = backend.add_variable(name="x")
        backend.add_constraint(Constraint(x * 1.0, Relation.GE, 10))
        backend.add_constraint(Constraint(x * 1.0, Relation.LE, 5))
        backend.set_objective(Objective(x * 1.0))

        with pytest.raises(InfeasibleError):
            backend.solve()


class TestHighsStatusMapping:
    """Tests for mapping linprog status codes to failures."""

    @pytest.fixture
    def model_backend(self, backend):
        x = backend.add_variable(name="x")
        backend.set_objective(Objective(x * 1.0))
        return backend

    def _fake_linprog(self, status, message):
        def fake(**kwargs):
            return OptimizeResult(status=status, success=False, message=message, x=None)
        return fake

    def test_unbounded(self, model_backend, monkeypatch):
        monkeypatch.setattr(
            "dietlp.solvers.highs.linprog", self._fake_linprog(3, "unbounded")
        )
        with pytest.raises(UnboundedError):
            model_backend.solve()

    def test_other_failure(self, model_backend, monkeypatch):
        monkeypatch.setattr(
            "dietlp.solvers.highs.linprog", self._fake_linprog(4, "numerical trouble")
        )
        with pytest.raises(BackendError) as exc_info:
            model_backend.solve()
        assert exc_info.value.backend_status == 4
        assert "numerical trouble" in str(exc_info.value)

    def test_options_passed(self, monkeypatch):
        captured = {}

        def fake(**kwargs):
            captured.update(kwargs)
            return OptimizeResult(status=0, success=True, message="ok", x=np.array([0.0]), nit=1)

        monkeypatch.setattr("dietlp.solvers.highs.linprog", fake)
        backend = HighsBackend(presolve=False, time_limit=2.0)
        x = backend.add_variable(name="x")
        backend.set_objective(Objective(x * 1.0))
        solution = backend.solve()

        assert captured["method"] == "highs"
        assert captured["options"] == {"presolve": False, "time_limit": 2.0}
        assert captured["bounds"] == [(0.0, None)]
        assert solution.iterations == 1


class TestClarabelStatusMapping:
    """Tests for mapping Clarabel statuses to failures."""

    @pytest.fixture
    def model_backend(self):
        backend = ClarabelBackend()
        x = backend.add_variable(name="x")
        backend.set_objective(Objective(x * 1.0))
        return backend

    @pytest.mark.parametrize(
        "status,error",
        [
            ("PrimalInfeasible", InfeasibleError),
            ("AlmostPrimalInfeasible", InfeasibleError),
            ("DualInfeasible", UnboundedError),
            ("MaxIterations", BackendError),
        ],
    )
    def test_status(self, model_backend, monkeypatch, status, error):
        monkeypatch.setattr(
            "dietlp.solvers.clarabel.solve_problem",
            lambda problem, solver: SimpleNamespace(
                found=False, x=None, extras={"status": status}
            ),
        )
        with pytest.raises(error):
            model_backend.solve()


class TestGetBackend:
    """Tests for the backend factory."""

    def test_known_names(self):
        assert isinstance(get_backend("highs"), HighsBackend)
        assert isinstance(get_backend("Clarabel"), ClarabelBackend)

    def test_fresh_instances(self):
        assert get_backend("highs") is not get_backend("highs")

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown solver backend"):
            get_backend("cplex")
