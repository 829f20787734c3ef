"""Translate items and guidelines into linear constraints and an objective."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from dietlp.optimizer.expression import LinearExpression, scale, sum_expressions
from dietlp.optimizer.models import (
    Constraint,
    Guideline,
    Item,
    ItemProperty,
    Objective,
    QuantityKind,
    Relation,
    Sense,
    UnknownCategoryError,
)
from dietlp.optimizer.registry import VariableRegistry

logger = logging.getLogger(__name__)

DEFAULT_MIN_TOLERANCE = 0.0001
DEFAULT_MAX_TOLERANCE = 0.0


def aggregate_categories(
    registry: VariableRegistry,
    properties: Iterable[ItemProperty],
    categories: Optional[Sequence[str]] = None,
) -> dict[str, LinearExpression]:
    """Build the total expression of every category.

    Each category's expression is the sum of value * variable over all
    items contributing to it.

    Args:
        registry: Registry holding a variable for every item
        properties: Item contributions to aggregate
        categories: Optional declared category order. Categories that are
            not declared follow in the order they are first seen.

    Returns:
        Ordered dict of category -> aggregated expression. Declared
        categories without contributors are omitted.

    Raises:
        UnknownItemError: If a property references an unregistered item
    """
    terms: dict[str, list[LinearExpression]] = {
        category: [] for category in categories or ()
    }
    for prop in properties:
        variable = registry.lookup(prop.item)
        terms.setdefault(prop.category, []).append(scale(variable, prop.value))

    aggregates = {
        category: sum_expressions(exprs)
        for category, exprs in terms.items()
        if exprs
    }
    logger.debug("Aggregated %d categories", len(aggregates))
    return aggregates


class GuidelineTranslator:
    """Turns guidelines into constraints on aggregated category totals.

    Minimum guidelines become `total >= bound + min_tolerance` and maximum
    guidelines `total <= bound - max_tolerance`. Informational guidelines
    produce nothing.
    """

    def __init__(
        self,
        min_tolerance: float = DEFAULT_MIN_TOLERANCE,
        max_tolerance: float = DEFAULT_MAX_TOLERANCE,
    ):
        """Initialize the translator.

        Args:
            min_tolerance: Offset added to minimum bounds
            max_tolerance: Offset subtracted from maximum bounds
        """
        if min_tolerance < 0 or max_tolerance < 0:
            raise ValueError("Guideline tolerances must be non-negative")
        self.min_tolerance = min_tolerance
        self.max_tolerance = max_tolerance

    def translate(
        self,
        guideline: Guideline,
        aggregates: dict[str, LinearExpression],
    ) -> Optional[Constraint]:
        """Translate a single guideline.

        Returns:
            The constraint, or None for informational guidelines

        Raises:
            UnknownCategoryError: If no item contributes to the category
        """
        if guideline.kind is QuantityKind.INFORMATIONAL:
            return None

        expression = aggregates.get(guideline.category)
        if expression is None:
            raise UnknownCategoryError(guideline.category)

        if guideline.kind is QuantityKind.MINIMUM:
            return Constraint(
                expression=expression,
                relation=Relation.GE,
                bound=guideline.bound + self.min_tolerance,
                name=f"{guideline.category} (min)",
            )
        return Constraint(
            expression=expression,
            relation=Relation.LE,
            bound=guideline.bound - self.max_tolerance,
            name=f"{guideline.category} (max)",
        )

    def translate_all(
        self,
        guidelines: Iterable[Guideline],
        aggregates: dict[str, LinearExpression],
    ) -> list[Constraint]:
        """Translate guidelines in order, skipping informational ones."""
        constraints = []
        for guideline in guidelines:
            constraint = self.translate(guideline, aggregates)
            if constraint is None:
                logger.debug("Skipping informational guideline on %s", guideline.category)
                continue
            logger.debug("Constraint %s %s %g", constraint.name,
                         constraint.relation.value, constraint.bound)
            constraints.append(constraint)
        return constraints


def build_cost_objective(
    registry: VariableRegistry,
    items: Iterable[Item],
) -> Objective:
    """Build the objective `minimize sum(cost * quantity)`.

    Raises:
        UnknownItemError: If an item has no registered variable
    """
    return Objective(
        expression=sum_expressions(
            scale(registry.lookup(item), item.cost) for item in items
        ),
        sense=Sense.MINIMIZE,
    )
