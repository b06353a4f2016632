"""
This module encapsulates networks -- collections of `.Node` objects, connected by `.Projection` objects from origins to terminations.
"""

###
# network.py - Code for encapsulating networks
###


### --- Imports
import logging
from collections import OrderedDict
from typing import Dict, Iterator, Optional, Tuple, Union
from warnings import warn

from synsim.config import SimulationConfig
from synsim.model.node import Ensemble, Node, StructuralError
from synsim.model.origin import Origin
from synsim.model.termination import Termination
from synsim.sim.simulator import Simulator

# - Configure exports
__all__ = ["Projection", "Network"]


### --- Projection class


class Projection:
    """
    A directed connection from an `.Origin` of one node to a `.Termination` of another

    On each simulation step the current output of the origin is delivered to the termination.
    """

    def __init__(self, origin: Origin, termination: Termination):
        """
        :param Origin origin:               The source of the projection
        :param Termination termination:     The destination of the projection

        :raises StructuralError: If the origin and termination dimensions do not match
        """
        if origin.dimension != termination.dimension:
            raise StructuralError(
                "Projection: Dimensions of origin `{}` ({}) and termination `{}` ({}) do not match.".format(
                    origin.name, origin.dimension, termination.name, termination.dimension
                )
            )

        self._origin = origin
        self._termination = termination

    def __repr__(self) -> str:
        return "{} from `{}` to `{}`".format(
            type(self).__name__,
            _endpoint_name(self._origin),
            _endpoint_name(self._termination),
        )

    def propagate(self) -> None:
        """
        Deliver the current output of the origin to the termination

        :raises SimulationError: If the termination rejects the output
        """
        self._termination.set_values(self._origin.get_values())

    @property
    def origin(self) -> Origin:
        """(Origin) The source of this projection"""
        return self._origin

    @property
    def termination(self) -> Termination:
        """(Termination) The destination of this projection"""
        return self._termination


def _endpoint_name(endpoint: Union[Origin, Termination]) -> str:
    node = endpoint.node
    return endpoint.name if node is None else f"{node.name}.{endpoint.name}"


def _members(node: Node) -> Iterator[Node]:
    """
    Yield a node, followed by the members of any ensembles nested within it
    """
    yield node
    if isinstance(node, Ensemble):
        for member in node.nodes:
            yield from _members(member)


### --- Network class


class Network:
    """
    Base class to manage networks (collections of `.Node` objects)

    A `.Network` holds an ordered set of uniquely-named nodes, and the projections between their origins and terminations. It owns a `.Simulator`, which is initialised from the network each time :py:meth:`.run` is called.

    :Example of building a network:

    >>> net = Network("example")
    >>> source = net.add_node(SpikeGenerator("source", TSEvent([0.01], t_stop=1.0)))
    >>> target = net.add_node(SynapticIntegrator("target"))
    >>> target.add_linear_termination("input", [1.0], tau=5e-3)
    >>> net.connect("source", "spikes", "target", "input")
    >>> net.run(0.0, 0.1, 1e-3)
    """

    def __init__(
        self,
        name: str = "network",
        config: Optional[SimulationConfig] = None,
        simulator: Optional[Simulator] = None,
    ):
        """
        :param str name:                            Name of this network
        :param Optional[SimulationConfig] config:   Default run configuration. Default: ``SimulationConfig()``
        :param Optional[Simulator] simulator:       Simulator to run this network with. Default: a new `.Simulator`
        """
        self.name = name
        self.config = SimulationConfig() if config is None else config
        self._simulator = (
            Simulator(log_interval=self.config.log_interval)
            if simulator is None
            else simulator
        )

        self._nodes: Dict[str, Node] = OrderedDict()
        self._projections = []

    def __repr__(self):
        return (
            "{} `{}` with {} nodes and {} projections\n".format(
                self.__class__.__name__,
                self.name,
                len(self._nodes),
                len(self._projections),
            )
            + "    "
            + "\n    ".join([str(node) for node in self._nodes.values()])
        )

    ### --- Nodes

    def add_node(self, node: Node) -> Node:
        """
        Add a new node to the network

        :param Node node:   Node to be added

        :return Node:       ``node``

        :raises StructuralError: If the network already contains a node with the same name, or the node is a member of an ensemble in the network
        """
        if node.name not in self._nodes and self.contains(node):
            raise StructuralError(
                f"Network `{self.name}`: Node `{node.name}` is already a member of an ensemble in the network."
            )

        if node.name in self._nodes:
            if self._nodes[node.name] is node:
                logging.info(
                    f"Network `{self.name}`: Node `{node.name}` is already part of the network"
                )
                return node

            raise StructuralError(
                f"Network `{self.name}`: A node named `{node.name}` already exists."
            )

        self._nodes[node.name] = node
        logging.debug(f"Network `{self.name}`: Added node `{node.name}`")

        return node

    def remove_node(self, node: Union[Node, str]):
        """
        Remove a node from the network, together with all projections from or to it

        :param Union[Node, str] node:   The node, or its name

        :raises StructuralError: If the node is not part of this network
        """
        if isinstance(node, str):
            node = self.get_node(node)
        elif self._nodes.get(node.name) is not node:
            raise StructuralError(
                f"Network `{self.name}`: Node `{node.name}` is not part of the network."
            )

        # - Remove projections from and to the node, or any of its ensemble members
        removed = [id(n) for n in _members(node)]
        attached = [
            proj
            for proj in self._projections
            if id(proj.origin.node) in removed or id(proj.termination.node) in removed
        ]
        for proj in attached:
            self._projections.remove(proj)

        if attached:
            warn(
                f"Network `{self.name}`: Removing node `{node.name}` also removed the projections:\n"
                + "\n".join(repr(proj) for proj in attached)
            )

        del self._nodes[node.name]

    def get_node(self, name: str) -> Node:
        """
        Return the node with a given name

        :raises StructuralError: If there is no node with this name
        """
        try:
            return self._nodes[name]
        except KeyError:
            raise StructuralError(f"Network `{self.name}`: No node named `{name}`.")

    def contains(self, node: Node) -> bool:
        """
        Test whether a node is part of this network, either directly or as a member of an `.Ensemble`

        :param Node node:   The node to look for

        :return bool:       ``True`` if ``node`` is part of this network
        """
        return any(
            member is node
            for top_level in self._nodes.values()
            for member in _members(top_level)
        )

    @property
    def nodes(self) -> Tuple[Node, ...]:
        """(Tuple[Node]) The nodes of this network, in the order they were added"""
        return tuple(self._nodes.values())

    ### --- Projections

    def add_projection(self, origin: Origin, termination: Termination) -> Projection:
        """
        Connect an origin to a termination

        :param Origin origin:               The source of the projection
        :param Termination termination:     The destination of the projection

        :return Projection:                 The new projection

        Either end may belong to a node of this network, or to a member of an `.Ensemble` of this network.

        :raises StructuralError: If the dimensions do not match, or either end belongs to a node outside this network
        """
        for endpoint in (origin, termination):
            node = endpoint.node
            if node is not None and not self.contains(node):
                raise StructuralError(
                    f"Network `{self.name}`: `{_endpoint_name(endpoint)}` belongs to a node outside this network."
                )

        projection = Projection(origin, termination)
        self._projections.append(projection)
        logging.debug(f"Network `{self.name}`: Added {projection}")

        return projection

    def connect(
        self,
        pre_node: Union[Node, str],
        origin_name: str,
        post_node: Union[Node, str],
        termination_name: str,
    ) -> Projection:
        """
        Connect two nodes of this network by the names of an origin and a termination

        :param Union[Node, str] pre_node:   The source node, or its name
        :param str origin_name:             Name of the origin of ``pre_node``
        :param Union[Node, str] post_node:  The target node, or its name
        :param str termination_name:        Name of the termination of ``post_node``

        :return Projection:                 The new projection
        """
        if isinstance(pre_node, str):
            pre_node = self.get_node(pre_node)
        if isinstance(post_node, str):
            post_node = self.get_node(post_node)

        return self.add_projection(
            pre_node.get_origin(origin_name), post_node.get_termination(termination_name)
        )

    def remove_projection(self, projection: Projection):
        """
        Remove a projection from the network

        :raises StructuralError: If the projection is not part of this network
        """
        try:
            self._projections.remove(projection)
        except ValueError:
            raise StructuralError(
                f"Network `{self.name}`: {projection} is not part of the network."
            )

    @property
    def projections(self) -> Tuple[Projection, ...]:
        """(Tuple[Projection]) The projections of this network, in the order they were added"""
        return tuple(self._projections)

    ### --- Simulation

    @property
    def simulator(self) -> Simulator:
        """(Simulator) The simulator that runs this network"""
        return self._simulator

    def run(
        self,
        t_start: Optional[float] = None,
        t_stop: Optional[float] = None,
        dt: Optional[float] = None,
    ):
        """
        Initialise the simulator from the current network structure, and run it

        :param Optional[float] t_start: Start time. Default: ``config.t_start``
        :param Optional[float] t_stop:  End time. Default: ``config.t_stop``
        :param Optional[float] dt:      Nominal step size. Default: ``config.dt``
        """
        self._simulator.initialize(self)
        self._simulator.run(
            self.config.t_start if t_start is None else t_start,
            self.config.t_stop if t_stop is None else t_stop,
            self.config.dt if dt is None else dt,
        )

    def reset(self, randomize: bool = False):
        """
        Reset the state of every node in the network

        :param bool randomize:  Passed on to each node
        """
        for node in self._nodes.values():
            node.reset(randomize)
