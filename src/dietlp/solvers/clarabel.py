"""Clarabel interior-point backend via qpsolvers."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from qpsolvers import Problem, solve_problem
from scipy.sparse import csc_matrix

from dietlp.optimizer.models import BackendError, InfeasibleError, UnboundedError
from dietlp.solvers.base import LinearModel, MatrixBackend

logger = logging.getLogger(__name__)


class ClarabelBackend(MatrixBackend):
    """Solve the LP as a QP with a zero quadratic term using Clarabel.

    Interior-point iterates can land a hair below a variable's lower bound,
    so returned values are clipped to the bounds.
    """

    name = "clarabel"

    def _solve_model(self, model: LinearModel) -> tuple[np.ndarray, Optional[int]]:
        n = model.n_variables

        # Clarabel expects sparse CSC matrices
        problem = Problem(
            P=csc_matrix((n, n)),
            q=model.costs,
            G=csc_matrix(model.A_ub) if model.A_ub is not None else None,
            h=model.b_ub,
            A=csc_matrix(model.A_eq) if model.A_eq is not None else None,
            b=model.b_eq,
            lb=model.lower_bounds,
        )
        solution = solve_problem(problem, solver="clarabel")

        if solution is None or not solution.found:
            status = _clarabel_status(solution)
            logger.debug("Clarabel terminated with status %s", status)
            # Almost* statuses contain the same substrings
            if "PrimalInfeasible" in status:
                raise InfeasibleError(f"Problem is infeasible: {status}")
            if "DualInfeasible" in status:
                raise UnboundedError(f"Problem is unbounded: {status}")
            raise BackendError(f"Clarabel did not find a solution: {status}")

        return np.maximum(solution.x, model.lower_bounds), None


def _clarabel_status(solution) -> str:
    extras = getattr(solution, "extras", None) or {}
    status = extras.get("status")
    return str(status) if status is not None else "unknown status"
