"""Pluggable LP solver backends."""

from __future__ import annotations

from typing import Callable

from dietlp.solvers.base import LinearModel, MatrixBackend, SolverBackend
from dietlp.solvers.clarabel import ClarabelBackend
from dietlp.solvers.highs import HighsBackend

BACKENDS: dict[str, Callable[..., SolverBackend]] = {
    "highs": HighsBackend,
    "clarabel": ClarabelBackend,
}


def get_backend(name: str, **options) -> SolverBackend:
    """Create a fresh backend by name.

    Args:
        name: Backend name ("highs" or "clarabel")
        **options: Keyword arguments for the backend constructor

    Raises:
        ValueError: If the backend name is unknown
    """
    key = name.strip().lower()
    if key not in BACKENDS:
        raise ValueError(
            f"Unknown solver backend '{name}'. Available: {', '.join(sorted(BACKENDS))}"
        )
    return BACKENDS[key](**options)


def backend_from_config(config) -> SolverBackend:
    """Create the backend described by a SolverConfig."""
    if config.backend.strip().lower() == "highs":
        return get_backend(
            "highs", presolve=config.presolve, time_limit=config.time_limit
        )
    return get_backend(config.backend)


__all__ = [
    "BACKENDS",
    "ClarabelBackend",
    "HighsBackend",
    "LinearModel",
    "MatrixBackend",
    "SolverBackend",
    "backend_from_config",
    "get_backend",
]
