"""
Origins: the named outputs of nodes
"""

from abc import ABC, abstractmethod
from typing import Optional

from synsim.model.node import Node, SimulationError
from synsim.model.outputs import InstantaneousOutput

__all__ = ["Origin", "BasicOrigin"]


class Origin(ABC):
    """
    Abstract interface for an output of a :py:class:`.Node`
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """(str) Name of this origin, unique within its node"""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """(int) Number of output channels"""

    @abstractmethod
    def get_values(self) -> InstantaneousOutput:
        """Return the most recent output of this origin"""

    def reset(self) -> None:
        """Return this origin to its initial output"""

    @property
    def node(self) -> Optional[Node]:
        """(Optional[Node]) The node that owns this origin"""
        return None


class BasicOrigin(Origin):
    """
    An origin that holds the value most recently set by its node
    """

    def __init__(
        self,
        node: Optional[Node],
        name: str,
        initial: InstantaneousOutput,
    ):
        """
        :param Optional[Node] node:             The node that owns this origin
        :param str name:                        Name of this origin
        :param InstantaneousOutput initial:     Output before the first step, and after a reset. Fixes the dimension and output class of this origin.
        """
        self._node = node
        self._name = str(name)
        self._initial = initial
        self._values = initial

    def __repr__(self) -> str:
        return f"{type(self).__name__} `{self._name}`: {self._values}"

    def set_values(self, values: InstantaneousOutput) -> None:
        """
        Set the output of this origin

        :raises SimulationError: If the dimension or output class of ``values`` does not match this origin
        """
        if values.dimension != self.dimension:
            raise SimulationError(
                f"Origin `{self._name}`: Output must have dimension {self.dimension} (got {values.dimension})."
            )
        if not isinstance(values, type(self._initial)):
            raise SimulationError(
                f"Origin `{self._name}`: Output must be a {type(self._initial).__name__} (got {type(values).__name__})."
            )
        self._values = values

    def get_values(self) -> InstantaneousOutput:
        return self._values

    def reset(self) -> None:
        self._values = self._initial

    @property
    def name(self) -> str:
        return self._name

    @property
    def node(self) -> Optional[Node]:
        return self._node

    @property
    def dimension(self) -> int:
        return self._initial.dimension
