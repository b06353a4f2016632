"""
Terminations: the receiving ends of projections, which integrate weighted inputs into post-synaptic currents
"""

from abc import ABC, abstractmethod
from copy import deepcopy
from typing import Optional

import numpy as np

from synsim.model.node import Node, SimulationError, StructuralError
from synsim.model.outputs import (
    InstantaneousOutput,
    PreciseSpikeOutput,
    RealOutput,
    SpikeOutput,
)
from synsim.typehints import ArrayLike

__all__ = ["Termination", "LinearExponentialTermination"]

# - Tolerance for precise spikes that fall on the end of an integration window
_SPIKE_TIME_EPSILON = 1e-7


class Termination(ABC):
    """
    Abstract interface for an input of a :py:class:`.Node`
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """(str) Name of this termination, unique within its node"""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """(int) Number of input channels"""

    @abstractmethod
    def set_values(self, values: InstantaneousOutput) -> None:
        """
        Deliver a new input to this termination

        :raises SimulationError: If the dimension of ``values`` does not match this termination
        """

    @abstractmethod
    def reset(self, randomize: bool = False) -> None:
        """Return this termination to its initial state"""

    @property
    def node(self) -> Optional[Node]:
        """(Optional[Node]) The node that owns this termination"""
        return None


class LinearExponentialTermination(Termination):
    """
    A termination at which inputs induce exponentially decaying post-synaptic currents that combine linearly

    Each input channel is weighted such that the time integral of the current arising from one spike equals the channel weight. The time integral of the current arising from a real-valued input of 1 over 1 s also equals the weight, so spike input and spike-rate input have approximately the same effect over time.

    The current is advanced by :py:meth:`.update_current`, which separates spike application, input integration and decay so that an owning node can sub-step one network time step. Over one network step, spikes must be applied exactly once, and the total integration and decay times must each equal the step length. For ``n`` sub-steps of length ``h``:

    1. ``update_current(True, h, 0)`` applies spikes and integrates real input, without decay;
    2. ``update_current(False, h, h)`` for each of the ``n - 1`` intermediate points;
    3. ``update_current(False, 0, h)`` decays to the end of the step. Real input is not integrated here, because it is integrated at the start of the next step.

    Decay uses a first-order (Euler) approximation, ``I -= I * dt / tau``, rather than ``I *= exp(-dt / tau)``. The approximation is accurate for ``dt << tau``; with ``dt == tau`` the current decays to zero in one update.
    """

    def __init__(
        self,
        node: Optional[Node],
        name: str,
        weights: ArrayLike,
        tau: float,
        modulatory: bool = False,
    ):
        """
        :param Optional[Node] node:     The node that owns this termination
        :param str name:                Name of this termination, unique within ``node``
        :param ArrayLike weights:       Synaptic weight of each input channel
        :param float tau:               Time constant of post-synaptic current decay, in seconds
        :param bool modulatory:         If ``True``, this termination modulates its node rather than driving it. Default: ``False``
        """
        self._node = node
        self._name = str(name)
        self._weights: np.ndarray = np.array(weights, dtype=float).flatten()
        self.tau = tau
        self.modulatory: bool = modulatory

        self._current: float = 0.0
        self._net_spike_input: float = 0.0
        self._net_real_input: float = 0.0
        self._precise_spike_times: Optional[np.ndarray] = None
        self._integration_cursor: float = 0.0
        self._raw_input: Optional[InstantaneousOutput] = None

    def __repr__(self) -> str:
        return "{} `{}` (dimension {}, tau={}, current={})".format(
            type(self).__name__, self._name, self.dimension, self._tau, self._current
        )

    def reset(self, randomize: bool = False) -> None:
        """
        Reset the current to zero and discard any cached input

        :param bool randomize:  Ignored
        """
        self._current = 0.0
        self._raw_input = None
        self._net_real_input = 0.0
        self._net_spike_input = 0.0
        self._precise_spike_times = None
        self._integration_cursor = 0.0

    def set_values(self, values: InstantaneousOutput) -> None:
        """
        Deliver a new input to this termination

        :param InstantaneousOutput values:  A :py:class:`.SpikeOutput`, :py:class:`.RealOutput` or :py:class:`.PreciseSpikeOutput`

        :raises SimulationError: If the dimension of ``values`` does not match this termination
        """
        if values.dimension != self.dimension:
            raise SimulationError(
                f"Termination `{self._name}`: Input must have dimension {self.dimension} (got {values.dimension})."
            )

        self._raw_input = values

        # - Spike offsets are relative to the start of the coming integration window
        self._precise_spike_times = (
            values.spike_times if isinstance(values, PreciseSpikeOutput) else None
        )
        self._integration_cursor = 0.0

        self._combine_input(values)

    def _combine_input(self, values: InstantaneousOutput) -> None:
        """
        Cache the weighted sums of an input
        """
        if isinstance(values, SpikeOutput) and self._precise_spike_times is None:
            self._net_spike_input = self._combine_spikes(values.values, self._weights)
        else:
            self._net_spike_input = 0.0

        # - Precise spikes at the very start of the window are applied with the step spikes
        if self._precise_spike_times is not None:
            self._net_spike_input += float(
                np.sum(self._weights[self._precise_spike_times == 0.0])
            )

        if isinstance(values, RealOutput):
            self._net_real_input = self._combine_reals(values.values, self._weights)
        else:
            self._net_real_input = 0.0

    def update_current(
        self, apply_spikes: bool, integration_time: float, decay_time: float
    ) -> float:
        """
        Update the post-synaptic current from new inputs and the decay of previous inputs

        :param bool apply_spikes:       If ``True``, apply the spike inputs of this step
        :param float integration_time:  Time over which real-valued and precisely-timed inputs are integrated
        :param float decay_time:        Time over which the current decays

        :return float:                  The post-synaptic current after input and decay
        """
        if decay_time > 0:
            self._current = self._current - self._current * (1.0 / self._tau) * decay_time

        if self._precise_spike_times is not None:
            self._update_precise_spike_current(integration_time)

        if apply_spikes:
            # - Normalised so that the integral of an unweighted PSC is 1
            self._current = self._current + self._net_spike_input / self._tau

        if integration_time > 0:
            # - Normalised so that real input x has the same current integral as x spikes / s
            self._current = (
                self._current + self._net_real_input * integration_time / self._tau
            )

        return self._current

    def _update_precise_spike_current(self, integration_time: float) -> None:
        """
        Apply the precisely-timed spikes that fall within the next ``integration_time`` of the window

        Each spike is decayed for the time between its offset and the end of the sub-interval.
        """
        window_end = self._integration_cursor + integration_time
        spike_times = self._precise_spike_times

        in_window = (spike_times > self._integration_cursor) & (
            spike_times <= window_end + _SPIKE_TIME_EPSILON
        )
        if np.any(in_window):
            self._current += float(
                np.sum(
                    self._weights[in_window]
                    * (
                        1.0 / self._tau
                        - (window_end - spike_times[in_window]) / (self._tau * self._tau)
                    )
                )
            )

        self._integration_cursor = window_end

    @staticmethod
    def _combine_spikes(spikes: np.ndarray, weights: np.ndarray) -> float:
        return float(np.sum(weights[spikes]))

    @staticmethod
    def _combine_reals(reals: np.ndarray, weights: np.ndarray) -> float:
        return float(np.dot(weights, reals))

    def copy(self) -> "LinearExponentialTermination":
        """
        Return a copy of this termination, including its current and cached input

        The copy shares the parent node of this termination.
        """
        node, self._node = self._node, None
        try:
            result = deepcopy(self)
        finally:
            self._node = node
        result._node = node
        return result

    ### --- Properties

    @property
    def name(self) -> str:
        return self._name

    @property
    def node(self) -> Optional[Node]:
        return self._node

    @node.setter
    def node(self, node: Optional[Node]):
        self._node = node

    @property
    def dimension(self) -> int:
        return self._weights.size

    @property
    def weights(self) -> np.ndarray:
        """(np.ndarray) Synaptic weight of each input channel"""
        return self._weights.copy()

    @weights.setter
    def weights(self, new_weights: ArrayLike):
        new_weights = np.array(new_weights, dtype=float).flatten()
        if new_weights.size != self._weights.size:
            raise StructuralError(
                f"Termination `{self._name}`: Weights must have {self._weights.size} elements (got {new_weights.size})."
            )
        self._weights = new_weights

        # - Re-weight the cached input, keeping the integration cursor
        if self._raw_input is not None:
            self._combine_input(self._raw_input)

    @property
    def tau(self) -> float:
        """(float) Time constant of post-synaptic current decay, in seconds"""
        return self._tau

    @tau.setter
    def tau(self, new_tau: float):
        new_tau = float(new_tau)
        if not new_tau > 0:
            raise StructuralError(
                f"Termination `{self._name}`: `tau` must be positive (got {new_tau})."
            )
        self._tau = new_tau

    @property
    def current(self) -> float:
        """(float) The present post-synaptic current"""
        return self._current

    @property
    def output(self) -> float:
        """(float) The present post-synaptic current"""
        return self._current

    @property
    def input(self) -> Optional[InstantaneousOutput]:
        """(Optional[InstantaneousOutput]) The most recent input to this termination"""
        return self._raw_input

    @property
    def net_spike_input(self) -> float:
        """(float) Weighted sum of the spikes in the most recent input"""
        return self._net_spike_input

    @property
    def net_real_input(self) -> float:
        """(float) Weighted sum of the real values in the most recent input"""
        return self._net_real_input
