"""
The time-stepped simulation engine
"""

### --- Imports
import logging
import threading
from typing import Dict, List, Optional, Tuple, Union
from warnings import warn

from synsim.config import SimulationConfig
from synsim.model.node import Ensemble, Node, Probeable, SimulationError
from synsim.sim.events import EventType, SimulatorEvent
from synsim.sim.probe import Probe
from synsim.typehints import Listener

# - Configure exports
__all__ = ["Simulator"]


class Simulator:
    """
    Runs a network of nodes in fixed time steps

    The simulator works on a snapshot of the nodes and projections of a network, taken by :py:meth:`.initialize`. Each step of :py:meth:`.run` delivers the output of every projection origin to its termination, advances every node over the step, and finally samples every probe at the end time of the step.

    Progress is broadcast as :py:class:`.SimulatorEvent` objects to simulator listeners, and changes to the set of probes are notified to change listeners. Listeners are called synchronously, in the order in which they were registered.

    :Examples:

    >>> sim = Simulator()
    >>> sim.initialize(net)
    >>> probe = sim.add_probe("integrator", "current")
    >>> sim.run(0.0, 1.0, 1e-3)
    """

    def __init__(self, log_interval: int = 100):
        """
        :param int log_interval:    Number of steps between DEBUG log messages during a run. Default: ``100``
        """
        if int(log_interval) < 1:
            raise ValueError(
                f"Simulator: `log_interval` must be at least 1 (got {log_interval})."
            )
        self.log_interval: int = int(log_interval)

        self._lock = threading.RLock()

        self._nodes: List[Node] = []
        self._node_map: Dict[str, Node] = {}
        self._projections: list = []
        self._probes: List[Probe] = []

        self._listeners: List[Listener] = []
        self._change_listeners: List[Listener] = []

    def __repr__(self) -> str:
        return "{} with {} nodes, {} projections and {} probes".format(
            type(self).__name__,
            len(self._nodes),
            len(self._projections),
            len(self._probes),
        )

    ### --- Network snapshot

    def initialize(self, network) -> None:
        """
        Take a snapshot of the nodes and projections of a network

        Can be called repeatedly; each call replaces the previous snapshot. Probes are kept.

        :param Network network: Object with ``nodes`` and ``projections`` sequences

        :raises ValueError: If ``network`` is ``None``
        """
        if network is None:
            raise ValueError("Simulator: Cannot initialise from `None`.")

        with self._lock:
            self._nodes = list(network.nodes)
            self._node_map = {node.name: node for node in self._nodes}
            self._projections = list(network.projections)

            logging.debug(
                f"Simulator: Initialised with {len(self._nodes)} nodes and {len(self._projections)} projections"
            )

    def get_node(self, name: str) -> Node:
        """
        Return a node of the snapshot by name

        :raises SimulationError: If there is no node with this name
        """
        try:
            return self._node_map[name]
        except KeyError:
            raise SimulationError(f"Simulator: No node named `{name}`.")

    @property
    def nodes(self) -> Tuple[Node, ...]:
        """(Tuple[Node]) Nodes of the current snapshot"""
        return tuple(self._nodes)

    @property
    def projections(self) -> tuple:
        """(Tuple[Projection]) Projections of the current snapshot"""
        return tuple(self._projections)

    ### --- Running

    def run(self, t_start: float, t_stop: float, dt: float) -> None:
        """
        Run the network from ``t_start`` to ``t_stop``

        Steps have nominal length ``dt``. If less than ``1.5 * dt`` remains, the remaining time is simulated as one final step, so that the run ends exactly on ``t_stop``. All probes are reset before the first step.

        :param float t_start:   Start time, in seconds
        :param float t_stop:    End time, in seconds
        :param float dt:        Nominal step size, in seconds

        :raises ValueError:         If ``dt`` is not positive, or ``t_stop < t_start``
        :raises SimulationError:    If a node or termination fails. The run stops, and samples collected so far are kept.
        """
        config = SimulationConfig(t_start, t_stop, dt, self.log_interval)

        with self._lock:
            if not self._nodes:
                warn("Simulator: Running an empty network.")

            for probe in self._probes:
                probe.reset()

            self._fire_simulator_event(SimulatorEvent(0.0, EventType.STARTED))

            duration = config.duration
            for step, (time, t_next) in enumerate(config.steps()):
                self._step(time, t_next)

                self._fire_simulator_event(
                    SimulatorEvent(
                        (time - config.t_start) / duration, EventType.STEP_TAKEN
                    )
                )

                if (step + 1) % self.log_interval == 0:
                    logging.debug(f"Simulator: Step {step + 1}, t = {t_next}")

            self._fire_simulator_event(SimulatorEvent(1.0, EventType.FINISHED))

    def _step(self, t_start: float, t_stop: float) -> None:
        """
        Propagate projections, advance nodes and collect probes for one step
        """
        for projection in self._projections:
            projection.termination.set_values(projection.origin.get_values())

        for node in self._nodes:
            node.advance(t_start, t_stop)

        for probe in self._probes:
            probe.collect(t_stop)

    def reset_network(self, randomize: bool = False) -> None:
        """
        Reset every node of the snapshot. Probes and projections are not affected.

        :param bool randomize:  Passed on to each node
        """
        with self._lock:
            for node in self._nodes:
                node.reset(randomize)

    ### --- Probes

    def add_probe(
        self, target: Union[Probeable, str], state_name: str, record: bool = True
    ) -> Probe:
        """
        Record an observable of a node

        :param Union[Probeable, str] target:    The object to probe, or the name of a node of the snapshot
        :param str state_name:                  Name of the observable to record
        :param bool record:                     Start recording immediately. Default: ``True``

        :return Probe:                          The new probe

        :raises SimulationError: If the target is unknown or not probeable, if it has no such observable, or if it already has a probe on ``state_name``
        """
        with self._lock:
            if isinstance(target, str):
                target = self.get_node(target)

            return self._attach_probe(None, target, state_name, record)

    def add_ensemble_probe(
        self, ensemble_name: str, index: int, state_name: str, record: bool = True
    ) -> Probe:
        """
        Record an observable of one member of an ensemble

        :param str ensemble_name:   Name of an :py:class:`.Ensemble` of the snapshot
        :param int index:           Index of the member node within the ensemble
        :param str state_name:      Name of the observable to record
        :param bool record:         Start recording immediately. Default: ``True``

        :return Probe:              The new probe

        :raises SimulationError: If the ensemble is unknown, the index is out of range, or the probe cannot be attached
        """
        with self._lock:
            ensemble = self.get_node(ensemble_name)

            if not isinstance(ensemble, Ensemble):
                raise SimulationError(
                    f"Simulator: Node `{ensemble_name}` is not an ensemble."
                )

            if not 0 <= index < len(ensemble):
                raise SimulationError(
                    f"Simulator: Index {index} is out of range for ensemble `{ensemble_name}` of size {len(ensemble)}."
                )

            return self._attach_probe(ensemble_name, ensemble[index], state_name, record)

    def _attach_probe(
        self,
        ensemble_name: Optional[str],
        target: Probeable,
        state_name: str,
        record: bool,
    ) -> Probe:
        if not isinstance(target, Probeable):
            raise SimulationError(f"Simulator: `{target}` is not probeable.")

        for probe in self._probes:
            if probe.target is target and probe.state_name == state_name:
                raise SimulationError(
                    f"Simulator: `{getattr(target, 'name', target)}` already has a probe on `{state_name}`."
                )

        probe = Probe()
        probe.connect(ensemble_name, target, state_name, record)
        self._probes.append(probe)

        self._fire_change()
        return probe

    def remove_probe(self, probe: Probe) -> None:
        """
        Detach a probe from this simulator

        :raises SimulationError: If the probe is not attached to this simulator
        """
        with self._lock:
            for i, attached in enumerate(self._probes):
                if attached is probe:
                    del self._probes[i]
                    break
            else:
                raise SimulationError("Simulator: The probe is not attached.")

            self._fire_change()

    @property
    def probes(self) -> Tuple[Probe, ...]:
        """(Tuple[Probe]) Attached probes, in the order they were added"""
        return tuple(self._probes)

    ### --- Listeners

    def add_simulator_listener(self, listener: Listener) -> None:
        """
        Register a callable that receives a :py:class:`.SimulatorEvent` on each run event

        Registering a listener twice has no effect.
        """
        if listener in self._listeners:
            logging.warning(
                f"Simulator: Listener {listener} is already registered; ignoring."
            )
            return

        self._listeners.append(listener)

    def remove_simulator_listener(self, listener: Listener) -> None:
        """Deregister a simulator listener, if it is registered"""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def add_change_listener(self, listener: Listener) -> None:
        """Register a callable that receives this simulator whenever its probes change"""
        self._change_listeners.append(listener)

    def remove_change_listener(self, listener: Listener) -> None:
        """Deregister a change listener, if it is registered"""
        if listener in self._change_listeners:
            self._change_listeners.remove(listener)

    def _fire_simulator_event(self, event: SimulatorEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def _fire_change(self) -> None:
        for listener in list(self._change_listeners):
            listener(self)

    ### --- Copying

    def copy(self) -> "Simulator":
        """
        Return a new, uninitialised simulator with the same configuration

        Snapshots, probes and listeners are not copied.
        """
        return type(self)(log_interval=self.log_interval)
