"""Problem loading and reference data."""

from dietlp.data.diet_table import reference_problem
from dietlp.data.loader import load_items_from_csv, load_problem_from_yaml

__all__ = ["load_items_from_csv", "load_problem_from_yaml", "reference_problem"]
