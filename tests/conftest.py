"""Pytest fixtures for dietlp tests."""

from __future__ import annotations

import pytest

from dietlp.config.settings import Settings
from dietlp.data.diet_table import reference_guidelines, reference_items, reference_problem
from dietlp.optimizer.models import Item
from dietlp.solvers.highs import HighsBackend

# Optimum of the reference diet (fat <= 65, 1e-4 offset on minimums)
REFERENCE_COST = 11.828871
REFERENCE_QUANTITIES = {
    "milk": 6.970166,
    "ice_cream": 2.591316,
    "hamburger": 0.604510,
}


@pytest.fixture
def settings():
    """Default settings, independent of any config file on disk."""
    return Settings()


@pytest.fixture
def backend():
    """A fresh HiGHS backend."""
    return HighsBackend()


@pytest.fixture
def diet_items():
    return reference_items()


@pytest.fixture
def diet_guidelines():
    return reference_guidelines()


@pytest.fixture
def diet_problem():
    """The reference fast-food diet problem."""
    return reference_problem()


@pytest.fixture
def small_items():
    """Two items contributing to calories and protein."""
    return [
        Item(name="milk", cost=0.89, contributions={"calories": 100, "protein": 8}),
        Item(name="ice_cream", cost=1.59, contributions={"calories": 330, "protein": 8}),
    ]


@pytest.fixture
def reference_optimum():
    """(total cost, nonzero quantities) of the reference diet optimum."""
    return REFERENCE_COST, dict(REFERENCE_QUANTITIES)
