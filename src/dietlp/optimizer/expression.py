"""Linear expression algebra over decision variables.

Expressions are immutable: every operation returns a new expression and
never modifies its operands. Coefficients for the same variable are
accumulated with math.fsum, so the result of a sum does not depend on the
order of its terms. Zero coefficients are kept as given.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from types import MappingProxyType
from typing import Iterable, Mapping, Union


@dataclass(frozen=True)
class Variable:
    """Handle for a single continuous decision variable.

    Variables are created by a solver backend (through the registry) and
    identified by their column index in that backend's model.
    """

    index: int
    name: str = ""
    lower_bound: float = 0.0

    def to_expression(self) -> "LinearExpression":
        return LinearExpression({self: 1.0})

    def __mul__(self, coefficient: float) -> "LinearExpression":
        return scale(self, coefficient)

    __rmul__ = __mul__

    def __add__(self, other: "Operand") -> "LinearExpression":
        return self.to_expression() + other

    __radd__ = __add__

    def __sub__(self, other: "Operand") -> "LinearExpression":
        return self.to_expression() - other

    def __rsub__(self, other: "Operand") -> "LinearExpression":
        return -self.to_expression() + other

    def __neg__(self) -> "LinearExpression":
        return scale(self, -1.0)

    def __repr__(self) -> str:
        return self.name or f"x{self.index}"


class LinearExpression:
    """A linear combination of variables plus a constant term."""

    __slots__ = ("_coefficients", "_constant")

    def __init__(
        self,
        coefficients: Mapping[Variable, float] | None = None,
        constant: float = 0.0,
    ):
        self._coefficients = {
            var: float(coef) for var, coef in (coefficients or {}).items()
        }
        self._constant = float(constant)

    @property
    def coefficients(self) -> Mapping[Variable, float]:
        """Read-only view of variable -> coefficient."""
        return MappingProxyType(self._coefficients)

    @property
    def constant(self) -> float:
        return self._constant

    @property
    def variables(self) -> tuple[Variable, ...]:
        return tuple(self._coefficients)

    def coefficient(self, variable: Variable) -> float:
        """Coefficient of a variable (0.0 if it does not appear)."""
        return self._coefficients.get(variable, 0.0)

    def evaluate(self, values: Mapping[Variable, float]) -> float:
        """Value of the expression for the given variable values.

        Raises:
            KeyError: If a variable of the expression has no value
        """
        return math.fsum(
            [coef * values[var] for var, coef in self._coefficients.items()]
            + [self._constant]
        )

    def scaled(self, factor: float) -> "LinearExpression":
        return LinearExpression(
            {var: coef * factor for var, coef in self._coefficients.items()},
            self._constant * factor,
        )

    def __add__(self, other: "Operand") -> "LinearExpression":
        if isinstance(other, Real):
            return LinearExpression(self._coefficients, self._constant + other)
        return sum_expressions([self, _as_expression(other)])

    __radd__ = __add__

    def __sub__(self, other: "Operand") -> "LinearExpression":
        if isinstance(other, Real):
            return self + (-other)
        return self + (-_as_expression(other))

    def __rsub__(self, other: "Operand") -> "LinearExpression":
        return (-self) + other

    def __neg__(self) -> "LinearExpression":
        return self.scaled(-1.0)

    def __mul__(self, factor: float) -> "LinearExpression":
        if not isinstance(factor, Real):
            return NotImplemented  # products of expressions are not linear
        return self.scaled(float(factor))

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinearExpression):
            return NotImplemented
        return (
            self._coefficients == other._coefficients
            and self._constant == other._constant
        )

    def __hash__(self) -> int:
        return hash((frozenset(self._coefficients.items()), self._constant))

    def __len__(self) -> int:
        return len(self._coefficients)

    def __repr__(self) -> str:
        terms = [f"{coef:g}*{var!r}" for var, coef in self._coefficients.items()]
        if self._constant or not terms:
            terms.append(f"{self._constant:g}")
        return " + ".join(terms)


Operand = Union[LinearExpression, Variable, float, int]


def _as_expression(value: Operand) -> LinearExpression:
    if isinstance(value, LinearExpression):
        return value
    if isinstance(value, Variable):
        return value.to_expression()
    if isinstance(value, Real):
        return LinearExpression(constant=float(value))
    raise TypeError(f"Cannot use {type(value).__name__} in a linear expression")


def scale(variable: Variable, coefficient: float) -> LinearExpression:
    """Build the expression `coefficient * variable`."""
    if not isinstance(coefficient, Real):
        raise TypeError(
            f"Coefficient must be a real number, got {type(coefficient).__name__}"
        )
    return LinearExpression({variable: float(coefficient)})


def sum_expressions(expressions: Iterable[Operand]) -> LinearExpression:
    """Sum a sequence of expressions into one.

    Coefficients of shared variables are summed; variables keep the order
    in which they first appear.
    """
    terms: dict[Variable, list[float]] = {}
    constants: list[float] = []
    for expr in expressions:
        expr = _as_expression(expr)
        for var, coef in expr.coefficients.items():
            terms.setdefault(var, []).append(coef)
        constants.append(expr.constant)

    return LinearExpression(
        {var: math.fsum(coefs) for var, coefs in terms.items()},
        math.fsum(constants),
    )
