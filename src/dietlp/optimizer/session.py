"""Formulation session: the lifecycle of one allocation LP.

A session moves through SETUP -> FORMULATING -> SOLVING and ends in either
SOLVED (results may be read) or FAILED. Terminal states are final.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from dietlp.optimizer.constraints import (
    GuidelineTranslator,
    aggregate_categories,
    build_cost_objective,
)
from dietlp.optimizer.expression import LinearExpression, Variable
from dietlp.optimizer.models import (
    BackendError,
    Constraint,
    Guideline,
    Item,
    NotSolvedError,
    Objective,
    SessionStateError,
    Solution,
    SolveFailure,
    UnknownCategoryError,
)
from dietlp.optimizer.registry import ItemRef, VariableRegistry

if TYPE_CHECKING:
    from dietlp.solvers.base import SolverBackend

logger = logging.getLogger(__name__)


class SessionState(Enum):
    SETUP = "setup"
    FORMULATING = "formulating"
    SOLVING = "solving"
    SOLVED = "solved"
    FAILED = "failed"


class FormulationSession:
    """Builds, solves and reads back one allocation problem.

    Typical use::

        session = FormulationSession(get_backend("highs"))
        session.register_items(items)
        session.formulate(guidelines)
        session.solve()
        session.value_of("milk")
    """

    def __init__(
        self,
        backend: SolverBackend,
        translator: Optional[GuidelineTranslator] = None,
    ):
        """Initialize the session.

        Args:
            backend: Fresh solver backend owned by this session
            translator: Guideline translator (default tolerances if None)
        """
        self.backend = backend
        self.translator = translator or GuidelineTranslator()
        self.registry = VariableRegistry(backend)
        self.state = SessionState.SETUP

        self._items: list[Item] = []
        self._aggregates: dict[str, LinearExpression] = {}
        self._constraints: list[Constraint] = []
        self._objective: Optional[Objective] = None
        self._solution: Optional[Solution] = None
        self.failure: Optional[SolveFailure] = None

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def register(self, item: Item) -> Variable:
        """Register one item and return its variable."""
        self._require(SessionState.SETUP, "register items")
        variable = self.registry.register(item)
        self._items.append(item)
        return variable

    def register_items(self, items: Iterable[Item]) -> None:
        for item in items:
            self.register(item)

    # ------------------------------------------------------------------
    # Formulation
    # ------------------------------------------------------------------

    def formulate(
        self,
        guidelines: Iterable[Guideline],
        categories: Optional[Sequence[str]] = None,
    ) -> list[Constraint]:
        """Aggregate categories, translate guidelines and set the objective.

        Args:
            guidelines: Guidelines to translate into constraints
            categories: Optional declared category order

        Returns:
            The constraints added to the backend, in guideline order

        Raises:
            UnknownItemError: If a property references an unregistered item
            UnknownCategoryError: If a guideline's category has no contributors
        """
        self._require(SessionState.SETUP, "formulate")
        guidelines = list(guidelines)

        # Nothing reaches the backend unless the whole formulation builds;
        # on error the session stays in SETUP.
        properties = (prop for item in self._items for prop in item.properties())
        aggregates = aggregate_categories(self.registry, properties, categories)
        constraints = self.translator.translate_all(guidelines, aggregates)
        objective = build_cost_objective(self.registry, self._items)

        self.state = SessionState.FORMULATING
        self._aggregates = aggregates
        self._constraints = constraints
        self._objective = objective
        for constraint in self._constraints:
            self.backend.add_constraint(constraint)
        self.backend.set_objective(self._objective)

        logger.debug(
            "Formulated %d items, %d categories, %d constraints",
            len(self._items), len(self._aggregates), len(self._constraints),
        )
        return list(self._constraints)

    def add_constraint(self, constraint: Constraint) -> None:
        """Add an extra caller-built constraint after formulate()."""
        self._require(SessionState.FORMULATING, "add constraints")
        self.backend.add_constraint(constraint)
        self._constraints.append(constraint)

    @property
    def constraints(self) -> tuple[Constraint, ...]:
        return tuple(self._constraints)

    @property
    def objective(self) -> Optional[Objective]:
        return self._objective

    @property
    def categories(self) -> list[str]:
        """Aggregated categories in their deterministic order."""
        return list(self._aggregates)

    def category_expression(self, category: str) -> LinearExpression:
        try:
            return self._aggregates[category]
        except KeyError:
            raise UnknownCategoryError(category) from None

    # ------------------------------------------------------------------
    # Solving
    # ------------------------------------------------------------------

    def solve(self) -> Solution:
        """Hand the formulation to the backend.

        Raises:
            InfeasibleError, UnboundedError, BackendError: On solve failure.
                The session ends in FAILED and keeps the error in `failure`.
        """
        self._require(SessionState.FORMULATING, "solve")
        self.state = SessionState.SOLVING
        try:
            solution = self.backend.solve()
        except SolveFailure as exc:
            self.state = SessionState.FAILED
            self.failure = exc
            logger.info("Solve failed (%s): %s", exc.status, exc)
            raise
        except Exception as exc:
            # Anything else the backend throws is surfaced as a BackendError
            self.state = SessionState.FAILED
            self.failure = BackendError(f"{self.backend.name} raised: {exc}")
            logger.info("Backend error: %s", exc)
            raise self.failure from exc

        self._solution = solution
        self.state = SessionState.SOLVED
        logger.info("Solved with objective %.6f", solution.objective_value)
        return solution

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def value_of(self, item: ItemRef) -> float:
        """Solved quantity of an item.

        Raises:
            NotSolvedError: If the session has not been solved
            UnknownItemError: If the item is not registered
        """
        solution = self._require_solution()
        return solution.value(self.registry.lookup(item))

    def objective_value(self) -> float:
        return self._require_solution().objective_value

    def category_value(self, category: str) -> float:
        """Solved total of a category."""
        solution = self._require_solution()
        return self.category_expression(category).evaluate(solution.values)

    def values(self) -> dict[str, float]:
        """Item name -> solved quantity, in registration order."""
        solution = self._require_solution()
        return {name: solution.value(var) for name, var in self.registry.items()}

    @property
    def solution(self) -> Solution:
        return self._require_solution()

    def _require_solution(self) -> Solution:
        if self.state is not SessionState.SOLVED or self._solution is None:
            raise NotSolvedError(
                f"No solution available (session state: {self.state.value})"
            )
        return self._solution

    def _require(self, state: SessionState, action: str) -> None:
        if self.state is not state:
            raise SessionStateError(
                f"Cannot {action} in state '{self.state.value}' "
                f"(expected '{state.value}')"
            )
