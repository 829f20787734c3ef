"""Item to decision-variable registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, Union

from dietlp.optimizer.expression import Variable
from dietlp.optimizer.models import DuplicateItemError, Item, UnknownItemError

if TYPE_CHECKING:
    from dietlp.solvers.base import SolverBackend

logger = logging.getLogger(__name__)

ItemRef = Union[Item, str]


def item_name(item: ItemRef) -> str:
    """Return the identifier of an item or item name."""
    return item.name if isinstance(item, Item) else item


class VariableRegistry:
    """Owns the one-to-one mapping from items to decision variables.

    Variables are created through the backend with a lower bound of 0 and
    no upper bound. Nothing else in a formulation creates variables.
    """

    def __init__(self, backend: "SolverBackend"):
        """Initialize the registry.

        Args:
            backend: Solver backend that allocates the variables
        """
        self._backend = backend
        self._variables: dict[str, Variable] = {}

    def register(self, item: ItemRef) -> Variable:
        """Create the decision variable for an item.

        Raises:
            DuplicateItemError: If the item was already registered
        """
        name = item_name(item)
        if name in self._variables:
            raise DuplicateItemError(name)

        variable = self._backend.add_variable(lower_bound=0.0, name=name)
        self._variables[name] = variable
        logger.debug("Registered item %r as variable %d", name, variable.index)
        return variable

    def lookup(self, item: ItemRef) -> Variable:
        """Return the variable of a registered item.

        Raises:
            UnknownItemError: If no variable exists for the item
        """
        name = item_name(item)
        try:
            return self._variables[name]
        except KeyError:
            raise UnknownItemError(name) from None

    def items(self) -> Iterator[tuple[str, Variable]]:
        """Iterate (item name, variable) pairs in registration order."""
        return iter(list(self._variables.items()))

    def __contains__(self, item: object) -> bool:
        if isinstance(item, (Item, str)):
            return item_name(item) in self._variables
        return False

    def __len__(self) -> int:
        return len(self._variables)
