"""HiGHS backend via scipy.optimize.linprog."""

from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.optimize import linprog

from dietlp.optimizer.models import BackendError, InfeasibleError, UnboundedError
from dietlp.solvers.base import LinearModel, MatrixBackend

# scipy.optimize.linprog status codes
_STATUS_INFEASIBLE = 2
_STATUS_UNBOUNDED = 3


class HighsBackend(MatrixBackend):
    """Solve with the HiGHS simplex/IPM solvers bundled with scipy."""

    name = "highs"

    def __init__(self, presolve: bool = True, time_limit: Optional[float] = None):
        """Initialize the backend.

        Args:
            presolve: Run HiGHS presolve before solving
            time_limit: Optional wall-clock limit in seconds
        """
        super().__init__()
        self.presolve = presolve
        self.time_limit = time_limit

    def _solve_model(self, model: LinearModel) -> tuple[np.ndarray, Optional[int]]:
        options: dict = {"presolve": self.presolve}
        if self.time_limit is not None:
            options["time_limit"] = self.time_limit

        result = linprog(
            c=model.costs,
            A_ub=model.A_ub,
            b_ub=model.b_ub,
            A_eq=model.A_eq,
            b_eq=model.b_eq,
            bounds=[(lb, None) for lb in model.lower_bounds],
            method="highs",
            options=options,
        )

        if result.status == _STATUS_INFEASIBLE:
            raise InfeasibleError(f"Problem is infeasible: {result.message}")
        if result.status == _STATUS_UNBOUNDED:
            raise UnboundedError(f"Problem is unbounded: {result.message}")
        if not result.success:
            raise BackendError(f"HiGHS failed: {result.message}", result.status)

        return result.x, getattr(result, "nit", None)
