"""Main entry point: solve an allocation problem end to end."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Union

from dietlp.config.settings import Settings, get_settings
from dietlp.optimizer.constraints import GuidelineTranslator
from dietlp.optimizer.models import (
    AllocationProblem,
    AllocationResult,
    CategoryResult,
    FormulationError,
    ItemResult,
    QuantityKind,
    SolveFailure,
)
from dietlp.optimizer.session import FormulationSession

if TYPE_CHECKING:
    from dietlp.solvers import SolverBackend

logger = logging.getLogger(__name__)

# Relative tolerance when checking totals against guideline bounds
CHECK_TOLERANCE = 1e-6


def _within(value: float, bound: float) -> float:
    return CHECK_TOLERANCE * max(1.0, abs(bound), abs(value))


def solve_allocation(
    problem: AllocationProblem,
    backend: Union["SolverBackend", str, None] = None,
    settings: Optional[Settings] = None,
    translator: Optional[GuidelineTranslator] = None,
) -> AllocationResult:
    """Formulate and solve an allocation problem.

    Predictable failures (bad references, infeasible or unbounded
    problems, backend errors) are reported in the result rather than
    raised.

    Args:
        problem: Items, guidelines and optional category order
        backend: Backend instance or name. If None, uses the configured one.
        settings: Settings to use. If None, uses the global settings.
        translator: Guideline translator. If None, built from settings.

    Returns:
        AllocationResult with solution or error info
    """
    from dietlp.solvers import backend_from_config, get_backend

    settings = settings or get_settings()
    if backend is None:
        backend = backend_from_config(settings.solver)
    elif isinstance(backend, str):
        backend = get_backend(backend)
    if translator is None:
        translator = GuidelineTranslator(
            min_tolerance=settings.formulation.min_tolerance,
            max_tolerance=settings.formulation.max_tolerance,
        )

    solver_info: dict = {"backend": backend.name}
    session = FormulationSession(backend, translator)

    try:
        session.register_items(problem.items)
        session.formulate(problem.guidelines, problem.categories)
    except FormulationError as exc:
        return _failed("error", f"Formulation failed: {exc}", solver_info)

    try:
        solution = session.solve()
    except SolveFailure as exc:
        return _failed(exc.status, f"Optimization failed: {exc}", solver_info)

    solver_info["elapsed_seconds"] = solution.elapsed_seconds
    solver_info["iterations"] = solution.iterations

    items = [
        ItemResult(name=item.name, quantity=quantity, cost=item.cost * quantity)
        for item, quantity in zip(problem.items, session.values().values())
    ]

    categories = [
        _category_result(problem, session, translator, category)
        for category in session.categories
    ]

    return AllocationResult(
        success=True,
        status="optimal",
        message="Optimization successful",
        items=items,
        total_cost=session.objective_value(),
        categories=categories,
        solver_info=solver_info,
    )


def _category_result(
    problem: AllocationProblem,
    session: FormulationSession,
    translator: GuidelineTranslator,
    category: str,
) -> CategoryResult:
    amount = session.category_value(category)

    mins = [
        g.bound for g in problem.guidelines
        if g.category == category and g.kind is QuantityKind.MINIMUM
    ]
    maxs = [
        g.bound for g in problem.guidelines
        if g.category == category and g.kind is QuantityKind.MAXIMUM
    ]
    min_c = max(mins) if mins else None
    max_c = min(maxs) if maxs else None

    satisfied = True
    if min_c is not None and amount < min_c - _within(amount, min_c):
        satisfied = False
    if max_c is not None and amount > max_c + _within(amount, max_c):
        satisfied = False

    # Slack is measured against the bounds actually handed to the solver
    slacks = []
    if min_c is not None:
        slacks.append(amount - (min_c + translator.min_tolerance))
    if max_c is not None:
        slacks.append((max_c - translator.max_tolerance) - amount)
    slack = min(slacks) if slacks else None
    is_binding = slack is not None and abs(slack) <= _within(amount, 0.0)

    return CategoryResult(
        category=category,
        amount=amount,
        min_constraint=min_c,
        max_constraint=max_c,
        satisfied=satisfied,
        slack=slack,
        is_binding=is_binding,
    )


def _failed(status: str, message: str, solver_info: dict) -> AllocationResult:
    logger.info(message)
    return AllocationResult(
        success=False,
        status=status,
        message=message,
        items=[],
        total_cost=None,
        categories=[],
        solver_info=solver_info,
    )
