"""Data models for allocation problems, formulations and results."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from dietlp.optimizer.expression import LinearExpression, Variable


class QuantityKind(Enum):
    """How a guideline bound is applied to its category total."""

    MINIMUM = "min"
    MAXIMUM = "max"
    INFORMATIONAL = "info"

    @classmethod
    def parse(cls, value: "str | QuantityKind") -> "QuantityKind":
        """Parse a kind from its name or one of the accepted aliases.

        Raises:
            InvalidProblemError: If the value is not a known kind
        """
        if isinstance(value, QuantityKind):
            return value
        key = str(value).strip().lower()
        if key not in _KIND_ALIASES:
            raise InvalidProblemError(
                f"Unknown guideline kind '{value}'. "
                f"Use one of: {', '.join(sorted(_KIND_ALIASES))}"
            )
        return _KIND_ALIASES[key]


_KIND_ALIASES = {
    "min": QuantityKind.MINIMUM,
    "minimum": QuantityKind.MINIMUM,
    "max": QuantityKind.MAXIMUM,
    "maximum": QuantityKind.MAXIMUM,
    "info": QuantityKind.INFORMATIONAL,
    "informational": QuantityKind.INFORMATIONAL,
    "value": QuantityKind.INFORMATIONAL,
}


class Relation(Enum):
    """Relation between a constraint expression and its bound."""

    GE = ">="
    LE = "<="
    EQ = "=="


class Sense(Enum):
    """Optimization direction."""

    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"


@dataclass(frozen=True)
class ItemProperty:
    """How much of a category one unit of an item provides."""

    item: str
    category: str
    value: float


@dataclass
class Item:
    """A selectable choice with a cost and per-category contributions."""

    name: str
    cost: float
    contributions: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidProblemError("Item name must not be empty")
        if not math.isfinite(self.cost) or self.cost <= 0:
            raise InvalidProblemError(
                f"Item '{self.name}' must have a positive cost, got {self.cost}"
            )
        for category, value in self.contributions.items():
            if not math.isfinite(value):
                raise InvalidProblemError(
                    f"Item '{self.name}' has a non-finite value for '{category}': {value}"
                )

    def properties(self) -> Iterator[ItemProperty]:
        """Yield one ItemProperty per contribution, in declaration order."""
        for category, value in self.contributions.items():
            yield ItemProperty(item=self.name, category=category, value=value)


@dataclass(frozen=True)
class Guideline:
    """A bound on the aggregate total of one category."""

    category: str
    bound: float
    kind: QuantityKind

    def __post_init__(self) -> None:
        if not math.isfinite(self.bound):
            raise InvalidProblemError(
                f"Guideline on '{self.category}' has a non-finite bound: {self.bound}"
            )


@dataclass(frozen=True)
class Constraint:
    """A linear constraint: expression <relation> bound."""

    expression: LinearExpression
    relation: Relation
    bound: float
    name: str = ""

    def is_satisfied(self, values: dict, tolerance: float = 1e-6) -> bool:
        """Check the constraint against variable values."""
        lhs = self.expression.evaluate(values)
        if self.relation is Relation.GE:
            return lhs >= self.bound - tolerance
        if self.relation is Relation.LE:
            return lhs <= self.bound + tolerance
        return abs(lhs - self.bound) <= tolerance


@dataclass(frozen=True)
class Objective:
    """An expression to optimize and its direction."""

    expression: LinearExpression
    sense: Sense = Sense.MINIMIZE


@dataclass(frozen=True)
class Solution:
    """Variable values and objective value returned by a backend."""

    values: Mapping[Variable, float]
    objective_value: float
    iterations: Optional[int] = None
    elapsed_seconds: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def value(self, variable: Variable) -> float:
        return self.values[variable]


@dataclass
class AllocationProblem:
    """Items, guidelines and category order for one allocation problem.

    `categories` optionally declares the reporting order of categories;
    categories not listed there are appended in first-seen order.
    """

    items: list[Item] = field(default_factory=list)
    guidelines: list[Guideline] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)

    def properties(self) -> Iterator[ItemProperty]:
        """Yield every ItemProperty of every item."""
        for item in self.items:
            yield from item.properties()


@dataclass
class ItemResult:
    """A single item in the allocation result."""

    name: str
    quantity: float
    cost: float


@dataclass
class CategoryResult:
    """Summary of a category total in the result."""

    category: str
    amount: float
    min_constraint: Optional[float]
    max_constraint: Optional[float]
    satisfied: bool
    slack: Optional[float] = None  # distance to the tightest bound
    is_binding: bool = False


@dataclass
class AllocationResult:
    """Complete output from solve_allocation."""

    success: bool
    status: str  # 'optimal', 'infeasible', 'unbounded', 'error'
    message: str
    items: list[ItemResult]
    total_cost: Optional[float]
    categories: list[CategoryResult]
    solver_info: dict  # backend, elapsed_seconds, iterations


# Custom exceptions


class DietLPError(Exception):
    """Base exception for dietlp errors."""

    pass


class FormulationError(DietLPError):
    """Raised when a problem cannot be formulated."""

    pass


class DuplicateItemError(FormulationError):
    """Raised when the same item is registered twice."""

    def __init__(self, item: str):
        super().__init__(f"Item '{item}' is already registered")
        self.item = item


class UnknownItemError(FormulationError, KeyError):
    """Raised when an item has no registered variable."""

    def __init__(self, item: str):
        super().__init__(f"Item '{item}' is not registered")
        self.item = item

    def __str__(self) -> str:
        return self.args[0]


class UnknownCategoryError(FormulationError, KeyError):
    """Raised when no item contributes to a referenced category."""

    def __init__(self, category: str):
        super().__init__(f"No item contributes to category '{category}'")
        self.category = category

    def __str__(self) -> str:
        return self.args[0]


class InvalidProblemError(FormulationError, ValueError):
    """Raised when problem input data is malformed."""

    pass


class SolveFailure(DietLPError):
    """Base class for terminal solve outcomes other than success."""

    status = "error"


class InfeasibleError(SolveFailure):
    """Raised when the constraints admit no non-negative assignment."""

    status = "infeasible"


class UnboundedError(SolveFailure):
    """Raised when the objective has no finite optimum."""

    status = "unbounded"


class BackendError(SolveFailure):
    """Raised for any other failure reported by a solver backend."""

    def __init__(self, message: str, backend_status: Optional[int] = None):
        super().__init__(message)
        self.backend_status = backend_status


class NotSolvedError(DietLPError):
    """Raised when a solution is read before a successful solve."""

    pass


class SessionStateError(DietLPError):
    """Raised when a session operation is called in the wrong state."""

    pass
