"""Serialization utilities for AllocationProblem round-trip.

These functions convert an AllocationProblem to a plain dict (the same
layout as a YAML problem file) and back, preserving item order, category
order and guideline order.
"""

from __future__ import annotations

from typing import Any

from dietlp.optimizer.models import (
    AllocationProblem,
    Guideline,
    InvalidProblemError,
    Item,
    QuantityKind,
)


def serialize_problem(problem: AllocationProblem) -> dict[str, Any]:
    """Convert AllocationProblem to a JSON/YAML-serializable dict.

    Args:
        problem: The problem to serialize

    Returns:
        Dictionary accepted by deserialize_problem()
    """
    data: dict[str, Any] = {}

    if problem.categories:
        data["categories"] = list(problem.categories)

    data["items"] = {
        item.name: {
            "cost": item.cost,
            "contributions": dict(item.contributions),
        }
        for item in problem.items
    }

    data["guidelines"] = [
        {
            "category": g.category,
            "kind": g.kind.value,
            "bound": g.bound,
        }
        for g in problem.guidelines
    ]

    return data


def deserialize_problem(data: dict[str, Any]) -> AllocationProblem:
    """Convert a dict back into an AllocationProblem.

    Items may be given either as a mapping of name -> fields or as a list
    of dicts with a "name" key.

    Raises:
        InvalidProblemError: If the data is malformed
    """
    if not isinstance(data, dict):
        raise InvalidProblemError("Problem data must be a mapping")

    problem = AllocationProblem()
    problem.categories = [str(c) for c in data.get("categories") or []]

    items_data = data.get("items") or {}
    if isinstance(items_data, dict):
        entries = []
        for name, fields in items_data.items():
            if not isinstance(fields or {}, dict):
                raise InvalidProblemError(f"Item '{name}' must be a mapping, got {fields!r}")
            entries.append(dict(fields or {}, name=name))
    elif isinstance(items_data, list):
        entries = items_data
    else:
        raise InvalidProblemError("'items' must be a mapping or a list")

    for entry in entries:
        problem.items.append(_parse_item(entry))

    for entry in data.get("guidelines") or []:
        problem.guidelines.append(_parse_guideline(entry))

    return problem


def _parse_item(entry: dict[str, Any]) -> Item:
    if not isinstance(entry, dict):
        raise InvalidProblemError(f"Item entry must be a mapping, got {entry!r}")
    try:
        name = str(entry["name"])
        cost = float(entry["cost"])
        contributions = {
            str(category): float(value)
            for category, value in (entry.get("contributions") or {}).items()
        }
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise InvalidProblemError(f"Invalid item entry {entry!r}: {exc}") from exc

    return Item(name=name, cost=cost, contributions=contributions)


def _parse_guideline(entry: dict[str, Any]) -> Guideline:
    if not isinstance(entry, dict):
        raise InvalidProblemError(f"Guideline entry must be a mapping, got {entry!r}")
    try:
        category = str(entry["category"])
        bound = float(entry["bound"])
        kind = entry["kind"]
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidProblemError(f"Invalid guideline entry {entry!r}: {exc}") from exc

    return Guideline(category=category, bound=bound, kind=QuantityKind.parse(kind))
