"""Solver backend interface and shared matrix assembly."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from dietlp.optimizer.expression import Variable
from dietlp.optimizer.models import (
    BackendError,
    Constraint,
    Objective,
    Relation,
    Sense,
    Solution,
)

logger = logging.getLogger(__name__)


class SolverBackend(ABC):
    """Capability set the formulation engine needs from a solver.

    Implementations collect variables, constraints and an objective, then
    solve the resulting linear program. `solve` raises InfeasibleError,
    UnboundedError or BackendError when no optimal solution is found.
    """

    name: str = "backend"

    @abstractmethod
    def add_variable(self, lower_bound: float = 0.0, name: str = "") -> Variable:
        """Create a continuous variable with the given lower bound."""

    @abstractmethod
    def add_constraint(self, constraint: Constraint) -> None:
        """Add a linear constraint to the model."""

    @abstractmethod
    def set_objective(self, objective: Objective) -> None:
        """Set (or replace) the objective."""

    @abstractmethod
    def solve(self) -> Solution:
        """Solve the model and return the optimal solution."""


@dataclass
class LinearModel:
    """Matrix form of a model: min costs'x s.t. A_ub x <= b_ub, A_eq x = b_eq.

    For maximization `costs` is already negated (sign = -1).
    """

    costs: np.ndarray
    A_ub: Optional[np.ndarray]
    b_ub: Optional[np.ndarray]
    A_eq: Optional[np.ndarray]
    b_eq: Optional[np.ndarray]
    lower_bounds: np.ndarray
    sign: float = 1.0

    @property
    def n_variables(self) -> int:
        return len(self.costs)


class MatrixBackend(SolverBackend):
    """Backend base that assembles numpy matrices for a matrix solver.

    Subclasses implement `_solve_model`, returning the solution vector and
    an iteration count (or None), and raising SolveFailure subclasses.
    """

    def __init__(self) -> None:
        self._variables: list[Variable] = []
        self._constraints: list[Constraint] = []
        self._objective: Optional[Objective] = None

    @property
    def variables(self) -> tuple[Variable, ...]:
        return tuple(self._variables)

    @property
    def constraints(self) -> tuple[Constraint, ...]:
        return tuple(self._constraints)

    def add_variable(self, lower_bound: float = 0.0, name: str = "") -> Variable:
        variable = Variable(
            index=len(self._variables),
            name=name,
            lower_bound=float(lower_bound),
        )
        self._variables.append(variable)
        return variable

    def add_constraint(self, constraint: Constraint) -> None:
        for variable in constraint.expression.variables:
            self._check_variable(variable)
        self._constraints.append(constraint)

    def set_objective(self, objective: Objective) -> None:
        for variable in objective.expression.variables:
            self._check_variable(variable)
        self._objective = objective

    def _check_variable(self, variable: Variable) -> None:
        index = variable.index
        if index >= len(self._variables) or self._variables[index] != variable:
            raise ValueError(f"Variable {variable!r} does not belong to this model")

    def build_model(self) -> LinearModel:
        """Assemble the constraint matrices.

        Expression constants are moved to the right-hand side and
        `>=` rows are negated into `<=` rows.
        """
        if self._objective is None:
            raise BackendError("No objective has been set")

        n = len(self._variables)
        sign = -1.0 if self._objective.sense is Sense.MAXIMIZE else 1.0

        costs = np.zeros(n)
        for var, coef in self._objective.expression.coefficients.items():
            costs[var.index] += coef
        costs *= sign

        ub_rows, ub_rhs, eq_rows, eq_rhs = [], [], [], []
        for constraint in self._constraints:
            row = np.zeros(n)
            for var, coef in constraint.expression.coefficients.items():
                row[var.index] += coef
            rhs = constraint.bound - constraint.expression.constant

            if constraint.relation is Relation.GE:
                ub_rows.append(-row)
                ub_rhs.append(-rhs)
            elif constraint.relation is Relation.LE:
                ub_rows.append(row)
                ub_rhs.append(rhs)
            else:
                eq_rows.append(row)
                eq_rhs.append(rhs)

        return LinearModel(
            costs=costs,
            A_ub=np.array(ub_rows) if ub_rows else None,
            b_ub=np.array(ub_rhs) if ub_rhs else None,
            A_eq=np.array(eq_rows) if eq_rows else None,
            b_eq=np.array(eq_rhs) if eq_rhs else None,
            lower_bounds=np.array([v.lower_bound for v in self._variables]),
            sign=sign,
        )

    def solve(self) -> Solution:
        model = self.build_model()
        objective = self._objective

        if model.n_variables == 0:
            return Solution(values={}, objective_value=objective.expression.constant)

        logger.debug(
            "Solving with %s: %d variables, %d constraints",
            self.name, model.n_variables, len(self._constraints),
        )
        start_time = time.time()
        x, iterations = self._solve_model(model)
        elapsed = time.time() - start_time

        values = {var: float(x[var.index]) for var in self._variables}
        return Solution(
            values=values,
            objective_value=objective.expression.evaluate(values),
            iterations=iterations,
            elapsed_seconds=elapsed,
        )

    @abstractmethod
    def _solve_model(self, model: LinearModel) -> tuple[np.ndarray, Optional[int]]:
        """Solve the matrix model."""
