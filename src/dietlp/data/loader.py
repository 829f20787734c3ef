"""Load allocation problems from YAML problem files and CSV catalogs."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
import yaml

from dietlp.optimizer.models import AllocationProblem, InvalidProblemError, Item
from dietlp.optimizer.serialization import deserialize_problem

logger = logging.getLogger(__name__)

ITEM_COLUMN = "item"
COST_COLUMN = "cost"


def load_items_from_csv(csv_path: Path) -> list[Item]:
    """Read an item catalog from CSV.

    The file needs an `item` column and a `cost` column; every other
    column is a category. Empty cells mean the item does not contribute
    to that category.

    Args:
        csv_path: Path to the CSV file

    Returns:
        Items in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidProblemError: If required columns are missing or a value is not numeric
    """
    try:
        df = pd.read_csv(csv_path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise InvalidProblemError(f"Cannot read {csv_path}: {exc}") from exc
    df.columns = [str(c).strip() for c in df.columns]

    missing = [c for c in (ITEM_COLUMN, COST_COLUMN) if c not in df.columns]
    if missing:
        raise InvalidProblemError(
            f"{csv_path} is missing required column(s): {', '.join(missing)}"
        )

    categories = [c for c in df.columns if c not in (ITEM_COLUMN, COST_COLUMN)]
    items = []
    for line, row in df.iterrows():
        try:
            contributions = {
                category: float(row[category])
                for category in categories
                if pd.notna(row[category])
            }
            cost = float(row[COST_COLUMN])
        except (TypeError, ValueError) as exc:
            # header is line 1
            raise InvalidProblemError(
                f"{csv_path} line {line + 2}: non-numeric value ({exc})"
            ) from exc
        items.append(
            Item(
                name=str(row[ITEM_COLUMN]).strip(),
                cost=cost,
                contributions=contributions,
            )
        )

    logger.debug("Loaded %d items from %s", len(items), csv_path)
    return items


def load_problem_from_yaml(yaml_path: Path) -> AllocationProblem:
    """Parse a YAML problem file into an AllocationProblem.

    An optional `items_csv` key names a CSV catalog (relative to the YAML
    file) whose items are appended after the inline items.

    Args:
        yaml_path: Path to the YAML problem file

    Returns:
        AllocationProblem configured from the YAML

    Raises:
        FileNotFoundError: If a file doesn't exist
        InvalidProblemError: If the problem is malformed
    """
    with open(yaml_path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise InvalidProblemError(f"Invalid YAML in {yaml_path}: {exc}") from exc

    problem = deserialize_problem(data)

    if data.get("items_csv"):
        csv_path = Path(yaml_path).parent / data["items_csv"]
        problem.items.extend(load_items_from_csv(csv_path))

    logger.debug(
        "Loaded problem from %s: %d items, %d guidelines",
        yaml_path, len(problem.items), len(problem.guidelines),
    )
    return problem
