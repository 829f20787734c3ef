"""Reference fast-food diet table.

Nutrition guidelines based on the USDA Dietary Guidelines for Americans,
2005. Values are per serving; costs are in dollars per serving.
"""

from __future__ import annotations

from dietlp.optimizer.models import AllocationProblem, Guideline, Item, QuantityKind

NUTRIENTS = ["calories", "protein", "sodium", "fat"]

# dish: (cost, calories, protein g, sodium mg, fat g)
DISHES: dict[str, tuple[float, float, float, float, float]] = {
    "hamburger": (2.49, 410, 24, 730, 26),
    "chicken": (2.89, 420, 32, 1190, 10),
    "hot_dog": (1.50, 560, 20, 1800, 32),
    "fries": (1.89, 380, 4, 270, 19),
    "macaroni": (2.09, 320, 12, 930, 10),
    "pizza": (1.99, 320, 15, 820, 12),
    "salad": (2.49, 320, 31, 1230, 12),
    "milk": (0.89, 100, 8, 125, 2.5),
    "ice_cream": (1.59, 330, 8, 180, 10),
}

# (nutrient, bound, kind)
GUIDELINES: list[tuple[str, float, QuantityKind]] = [
    ("calories", 1800, QuantityKind.MINIMUM),
    ("calories", 2200, QuantityKind.MAXIMUM),
    ("protein", 91, QuantityKind.MINIMUM),
    ("fat", 0, QuantityKind.MINIMUM),
    ("fat", 65, QuantityKind.MAXIMUM),
    ("sodium", 0, QuantityKind.MINIMUM),
    ("sodium", 1779, QuantityKind.MAXIMUM),
]


def reference_items() -> list[Item]:
    """Build fresh Item objects for every dish."""
    return [
        Item(
            name=dish,
            cost=cost,
            contributions=dict(zip(NUTRIENTS, nutrients)),
        )
        for dish, (cost, *nutrients) in DISHES.items()
    ]


def reference_guidelines() -> list[Guideline]:
    return [
        Guideline(category=nutrient, bound=float(bound), kind=kind)
        for nutrient, bound, kind in GUIDELINES
    ]


def reference_problem() -> AllocationProblem:
    """The complete reference diet problem."""
    return AllocationProblem(
        items=reference_items(),
        guidelines=reference_guidelines(),
        categories=list(NUTRIENTS),
    )
