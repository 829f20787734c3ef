"""LP formulation engine for cost-minimizing allocations."""

from dietlp.optimizer.constraints import (
    GuidelineTranslator,
    aggregate_categories,
    build_cost_objective,
)
from dietlp.optimizer.expression import (
    LinearExpression,
    Variable,
    scale,
    sum_expressions,
)
from dietlp.optimizer.models import (
    AllocationProblem,
    AllocationResult,
    BackendError,
    CategoryResult,
    Constraint,
    DietLPError,
    DuplicateItemError,
    FormulationError,
    Guideline,
    InfeasibleError,
    InvalidProblemError,
    Item,
    ItemProperty,
    ItemResult,
    NotSolvedError,
    Objective,
    QuantityKind,
    Relation,
    Sense,
    SessionStateError,
    Solution,
    SolveFailure,
    UnboundedError,
    UnknownCategoryError,
    UnknownItemError,
)
from dietlp.optimizer.registry import VariableRegistry
from dietlp.optimizer.session import FormulationSession, SessionState
from dietlp.optimizer.solver import solve_allocation

__all__ = [
    "AllocationProblem",
    "AllocationResult",
    "BackendError",
    "CategoryResult",
    "Constraint",
    "DietLPError",
    "DuplicateItemError",
    "FormulationError",
    "FormulationSession",
    "Guideline",
    "GuidelineTranslator",
    "InfeasibleError",
    "InvalidProblemError",
    "Item",
    "ItemProperty",
    "ItemResult",
    "LinearExpression",
    "NotSolvedError",
    "Objective",
    "QuantityKind",
    "Relation",
    "Sense",
    "SessionState",
    "SessionStateError",
    "Solution",
    "SolveFailure",
    "UnboundedError",
    "UnknownCategoryError",
    "UnknownItemError",
    "Variable",
    "VariableRegistry",
    "aggregate_categories",
    "build_cost_objective",
    "scale",
    "solve_allocation",
    "sum_expressions",
]
