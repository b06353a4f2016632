"""
Node and Probeable interfaces, the registry-backed node base class and composite ensembles
"""

from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from synsim.parameters import ParameterBase

# - Configure exports
__all__ = [
    "Node",
    "Probeable",
    "NodeBase",
    "Ensemble",
    "SimulationError",
    "StructuralError",
]


### --- Interfaces


class Node(ABC):
    """
    Abstract interface for a simulable unit with internal state

    A :py:class:`Node` is advanced over a time interval by a :py:class:`.Simulator`, and can be reset. Nodes expose named origins (outputs) and terminations (inputs) that projections connect.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """(str) Name of this node, unique within a network"""

    @abstractmethod
    def advance(self, t_start: float, t_stop: float) -> None:
        """
        Advance the state of this node over the interval ``[t_start, t_stop)``

        :param float t_start:   Start of the interval, in seconds
        :param float t_stop:    End of the interval, in seconds

        :raises SimulationError: If the node fails internally
        """

    @abstractmethod
    def reset(self, randomize: bool = False) -> None:
        """
        Return this node to its initial state

        :param bool randomize:  If ``True``, node types that support it initialise their state randomly
        """

    @property
    def origins(self) -> Dict[str, Any]:
        """(Dict[str, Origin]) Outputs of this node, by name"""
        return {}

    @property
    def terminations(self) -> Dict[str, Any]:
        """(Dict[str, Termination]) Inputs of this node, by name"""
        return {}

    def get_origin(self, name: str):
        """
        Return a named origin of this node

        :raises StructuralError: If the node has no origin with this name
        """
        try:
            return self.origins[name]
        except KeyError:
            raise StructuralError(f"Node `{self.name}`: Unknown origin `{name}`.")

    def get_termination(self, name: str):
        """
        Return a named termination of this node

        :raises StructuralError: If the node has no termination with this name
        """
        try:
            return self.terminations[name]
        except KeyError:
            raise StructuralError(
                f"Node `{self.name}`: Unknown termination `{name}`."
            )


class Probeable(ABC):
    """
    Abstract interface for an object with named observable states that a :py:class:`.Probe` can record
    """

    @abstractmethod
    def get_state(self, state_name: str) -> np.ndarray:
        """
        Return the current value of an observable state

        :param str state_name:  Name of the state, as reported by :py:meth:`.list_states`

        :return np.ndarray:     1D float array with the current value

        :raises SimulationError: If ``state_name`` is not an observable of this object
        """

    @abstractmethod
    def list_states(self) -> Dict[str, str]:
        """
        List the observable states of this object

        :return Dict[str, str]: Mapping of state names to descriptions
        """

    def state_units(self, state_name: str) -> Optional[str]:
        """(Optional[str]) Units of a state, if known"""
        return None


### --- Registry-backed node base class


class NodeBase(Node, Probeable):
    """
    Base class for concrete nodes

    Attributes assigned as :py:class:`.Parameter`, :py:class:`.State` or :py:class:`.SimulationParameter` objects are recorded in an attribute registry. Registered states are the observables of the node, and are restored from their initialisation functions by :py:meth:`.reset_state`.

    Subclasses implement :py:meth:`.advance`, and usually extend :py:meth:`.reset`.
    """

    def __init__(self, name: str, *args, **kwargs):
        """
        Initialise this node

        :param str name:    Name of this node
        """
        super().__init__(*args, **kwargs)

        if not name:
            raise StructuralError("A node must have a non-empty name.")

        self._name: str = str(name)
        self._origins: Dict[str, Any] = OrderedDict()
        self._terminations: Dict[str, Any] = OrderedDict()

    def __repr__(self) -> str:
        return f"{type(self).__name__} `{self.name}`"

    ### --- Attribute registry

    def _get_attribute_registry(self) -> Dict[str, list]:
        """
        Return or initialise the attribute registry for this node

        Returns:
            dict: name -> [data, type name, family, init_func, shape, description, units]
        """
        if "_NodeBase__registered_attributes" not in self.__dict__:
            super().__setattr__("_NodeBase__registered_attributes", OrderedDict())

        return self.__dict__["_NodeBase__registered_attributes"]

    def __setattr__(self, name: str, val: Any):
        # - Get attribute registry
        __registered_attributes = self._get_attribute_registry()

        # - Register a new attribute
        if isinstance(val, ParameterBase):
            if name in __registered_attributes:
                raise ValueError(
                    f'Cannot assign a new Parameter or State to an existing attribute "{name}".'
                )

            __registered_attributes[name] = [
                val.data,
                type(val).__name__,
                val.family,
                val.init_func,
                val.shape,
                val.description,
                val.units,
            ]
            val = val.data

        # - Check the shape of an already registered attribute
        elif name in __registered_attributes and val is not None:
            shape = __registered_attributes[name][4]
            if np.shape(val) != shape:
                raise ValueError(
                    f"The new value assigned to {name} must be of shape {shape} (got {np.shape(val)})."
                )
            __registered_attributes[name][0] = val

        super().__setattr__(name, val)

    def _get_attribute_family(
        self, type_name: str, family: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Return the registered attributes of one class, optionally restricted to one family
        """
        return OrderedDict(
            (k, getattr(self, k))
            for (k, v) in self._get_attribute_registry().items()
            if v[1] == type_name and (family is None or v[2] == family)
        )

    def parameters(self, family: Optional[str] = None) -> Dict[str, Any]:
        """Return the registered :py:class:`.Parameter` attributes of this node"""
        return self._get_attribute_family("Parameter", family)

    def simulation_parameters(self, family: Optional[str] = None) -> Dict[str, Any]:
        """Return the registered :py:class:`.SimulationParameter` attributes of this node"""
        return self._get_attribute_family("SimulationParameter", family)

    def state(self, family: Optional[str] = None) -> Dict[str, Any]:
        """Return the registered :py:class:`.State` attributes of this node"""
        return self._get_attribute_family("State", family)

    def reset_state(self) -> None:
        """Reset all registered states to their initialisation values"""
        for (name, (_, type_name, _, init_func, shape, _, _)) in list(
            self._get_attribute_registry().items()
        ):
            if type_name == "State" and init_func is not None:
                setattr(self, name, init_func(shape))

    ### --- Probeable

    def get_state(self, state_name: str) -> np.ndarray:
        if state_name not in self.list_states():
            raise SimulationError(
                f"Node `{self.name}`: `{state_name}` is not an observable state."
            )
        return np.array(getattr(self, state_name), dtype=float).flatten()

    def list_states(self) -> Dict[str, str]:
        return OrderedDict(
            (k, v[5])
            for (k, v) in self._get_attribute_registry().items()
            if v[1] == "State"
        )

    def state_units(self, state_name: str) -> Optional[str]:
        entry = self._get_attribute_registry().get(state_name)
        return None if entry is None else entry[6]

    ### --- Node

    @property
    def name(self) -> str:
        return self._name

    @property
    def origins(self) -> Dict[str, Any]:
        return self._origins

    @property
    def terminations(self) -> Dict[str, Any]:
        return self._terminations

    def add_origin(self, origin):
        """
        Attach an origin to this node

        :raises StructuralError: If an origin with the same name exists
        """
        if origin.name in self._origins:
            raise StructuralError(
                f"Node `{self.name}`: An origin named `{origin.name}` already exists."
            )
        self._origins[origin.name] = origin
        return origin

    def add_termination(self, termination):
        """
        Attach a termination to this node

        :raises StructuralError: If a termination with the same name exists
        """
        if termination.name in self._terminations:
            raise StructuralError(
                f"Node `{self.name}`: A termination named `{termination.name}` already exists."
            )
        self._terminations[termination.name] = termination
        return termination

    def reset(self, randomize: bool = False) -> None:
        self.reset_state()
        for term in self._terminations.values():
            term.reset(randomize)
        for origin in self._origins.values():
            origin.reset()


### --- Composite node


class Ensemble(NodeBase):
    """
    A composite node, made of an ordered list of child nodes

    Children are advanced and reset in order. A state that every child exposes is exposed by the ensemble as the concatenation of the child values. Individual children can be probed through :py:meth:`.Simulator.add_ensemble_probe`.
    """

    def __init__(self, name: str, nodes: Iterable[Node] = ()):
        """
        :param str name:                Name of this ensemble
        :param Iterable[Node] nodes:    Child nodes, in index order
        """
        super().__init__(name)
        self._nodes: List[Node] = list(nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, index: int) -> Node:
        return self._nodes[index]

    @property
    def nodes(self) -> Tuple[Node, ...]:
        """(Tuple[Node]) Child nodes of this ensemble"""
        return tuple(self._nodes)

    def add_node(self, node: Node) -> Node:
        """Append a child node"""
        self._nodes.append(node)
        return node

    def advance(self, t_start: float, t_stop: float) -> None:
        for node in self._nodes:
            node.advance(t_start, t_stop)

    def reset(self, randomize: bool = False) -> None:
        super().reset(randomize)
        for node in self._nodes:
            node.reset(randomize)

    def list_states(self) -> Dict[str, str]:
        states = super().list_states()

        # - States shared by all probeable children
        children = [n for n in self._nodes if isinstance(n, Probeable)]
        if children and len(children) == len(self._nodes):
            shared = children[0].list_states()
            for child in children[1:]:
                child_states = child.list_states()
                shared = OrderedDict(
                    (k, v) for (k, v) in shared.items() if k in child_states
                )
            for k, v in shared.items():
                states.setdefault(k, v)

        return states

    def get_state(self, state_name: str) -> np.ndarray:
        if state_name in super().list_states():
            return super().get_state(state_name)

        if state_name not in self.list_states():
            raise SimulationError(
                f"Ensemble `{self.name}`: `{state_name}` is not an observable state."
            )

        return np.concatenate([n.get_state(state_name) for n in self._nodes])

    def state_units(self, state_name: str) -> Optional[str]:
        units = super().state_units(state_name)
        if units is None and self._nodes and isinstance(self._nodes[0], Probeable):
            units = self._nodes[0].state_units(state_name)
        return units


### --- Exception classes


class SimulationError(Exception):
    """
    Raised when a simulation cannot proceed: invalid inputs to a termination, unknown nodes or states, invalid probe operations, or a failure inside a node
    """

    pass


class StructuralError(Exception):
    """
    Raised for invalid edits to the structure of a network or its components
    """

    pass
