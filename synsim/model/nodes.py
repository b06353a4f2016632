"""
Reference node kinds: spike and signal sources, and a synaptic current integrator
"""

###
# nodes.py - Concrete node classes
###

### --- Imports
from typing import Callable, Optional, Union

import numpy as np

from synsim.model.node import Ensemble, NodeBase, SimulationError, StructuralError
from synsim.model.origin import BasicOrigin
from synsim.model.outputs import PreciseSpikeOutput, RealOutput, SpikeOutput
from synsim.model.registry import register_node_class
from synsim.model.termination import LinearExponentialTermination
from synsim.parameters import SimulationParameter, State
from synsim.timeseries import TSContinuous, TSEvent
from synsim.typehints import ArrayLike

# - Configure exports
__all__ = ["SpikeGenerator", "TimeSeriesInput", "SynapticIntegrator"]

register_node_class(Ensemble)


### --- Sources


@register_node_class
class SpikeGenerator(NodeBase):
    """
    Emit spikes from a fixed schedule

    On each step ``[t_start, t_stop)`` the generator emits the events of its schedule that fall in the step, on its origin ``"spikes"``. With ``precise=True`` the output is a :py:class:`.PreciseSpikeOutput` holding the offset of each spike from ``t_start``; otherwise it is a plain :py:class:`.SpikeOutput`. If a channel has several events within one step, only the earliest is emitted.

    The output of a step is delivered to terminations at the start of the next step, so spike offsets are relative to the start of the integration window in which they are applied.
    """

    def __init__(self, name: str, events: TSEvent, precise: bool = True):
        """
        :param str name:        Name of this node
        :param TSEvent events:  Spike schedule. One output channel per channel of ``events``
        :param bool precise:    Emit precisely-timed spikes. Default: ``True``
        """
        super().__init__(name)

        self.events: TSEvent = events
        self.precise: bool = precise

        self.spikes = State(
            shape=(events.num_channels,),
            init_func=np.zeros,
            description="Spikes emitted in the last step, per channel",
            units="spikes",
        )

        initial = (
            PreciseSpikeOutput(np.full(events.num_channels, np.nan))
            if precise
            else SpikeOutput(np.zeros(events.num_channels, bool))
        )
        self.add_origin(BasicOrigin(self, "spikes", initial))

    def advance(self, t_start: float, t_stop: float) -> None:
        times, channels = self.events(t_start, t_stop)

        offsets = np.full(self.dimension, np.inf)
        np.minimum.at(offsets, channels, times - t_start)
        offsets[np.isinf(offsets)] = np.nan

        spiked = ~np.isnan(offsets)
        self.spikes = spiked.astype(float)

        output = PreciseSpikeOutput(offsets) if self.precise else SpikeOutput(spiked)
        self._origins["spikes"].set_values(output)

    @property
    def dimension(self) -> int:
        """(int) Number of spike channels"""
        return self.events.num_channels


@register_node_class
class TimeSeriesInput(NodeBase):
    """
    Emit a real-valued signal, sampled at the end of each step

    The signal is a :py:class:`.TSContinuous`, or a callable of time returning one value per channel. Before the first step, the output is zero.
    """

    def __init__(
        self,
        name: str,
        signal: Union[TSContinuous, Callable[[float], ArrayLike]],
        dimension: Optional[int] = None,
    ):
        """
        :param str name:                    Name of this node
        :param Union[TSContinuous, Callable] signal:    The signal to emit
        :param Optional[int] dimension:     Number of channels. Default: the number of channels of ``signal``, or the size of ``signal(0.0)`` for a callable
        """
        super().__init__(name)

        if isinstance(signal, TSContinuous):
            units = signal.units
            if dimension is None:
                dimension = signal.num_channels
        elif callable(signal):
            units = None
            if dimension is None:
                dimension = np.size(signal(0.0))
        else:
            raise TypeError(
                f"TimeSeriesInput `{name}`: `signal` must be a TSContinuous or a callable."
            )

        if dimension < 1:
            raise StructuralError(
                f"TimeSeriesInput `{name}`: The signal must have at least one channel."
            )

        self.signal = signal

        self.output = State(
            shape=(dimension,),
            init_func=np.zeros,
            description="Signal value at the end of the last step",
            units=units,
        )

        self.add_origin(
            BasicOrigin(self, "output", RealOutput(np.zeros(dimension), units=units))
        )

    def advance(self, t_start: float, t_stop: float) -> None:
        try:
            values = np.array(self.signal(t_stop), dtype=float).flatten()
        except ValueError as err:
            raise SimulationError(
                f"TimeSeriesInput `{self.name}`: Cannot sample the signal at t = {t_stop}."
            ) from err

        if values.size != self.dimension:
            raise SimulationError(
                f"TimeSeriesInput `{self.name}`: The signal returned {values.size} values (expected {self.dimension})."
            )

        self.output = values
        self._origins["output"].set_values(RealOutput(values, units=self.state_units("output")))

    @property
    def dimension(self) -> int:
        """(int) Number of signal channels"""
        return self._origins["output"].dimension


### --- Integrator


@register_node_class
class SynapticIntegrator(NodeBase):
    """
    Sum the post-synaptic currents of linear exponential terminations

    Each network step is divided into ``num_substeps`` sub-steps of equal length. The currents of all terminations are advanced over the sub-steps, and the summed current of all non-modulatory terminations at the end of the step is the output of the node, on the origin ``"current"``.

    :Example:

    >>> node = SynapticIntegrator("integrator", num_substeps=4)
    >>> node.add_linear_termination("input", weights=[1.0, 0.5], tau=5e-3)
    """

    def __init__(self, name: str, num_substeps: int = 1):
        """
        :param str name:            Name of this node
        :param int num_substeps:    Number of sub-steps per network step. Default: ``1``
        """
        super().__init__(name)

        if int(num_substeps) < 1:
            raise StructuralError(
                f"SynapticIntegrator `{name}`: `num_substeps` must be at least 1 (got {num_substeps})."
            )

        self.num_substeps = SimulationParameter(
            int(num_substeps), description="Sub-steps per network step"
        )

        self.current = State(
            shape=(1,),
            init_func=np.zeros,
            description="Summed post-synaptic current of driving terminations",
        )

        self.add_origin(BasicOrigin(self, "current", RealOutput(np.zeros(1))))

    def add_linear_termination(
        self,
        name: str,
        weights: ArrayLike,
        tau: float,
        modulatory: bool = False,
    ) -> LinearExponentialTermination:
        """
        Add a new input to this node

        :param str name:            Name of the termination
        :param ArrayLike weights:   Synaptic weight of each input channel
        :param float tau:           Time constant of post-synaptic current decay, in seconds
        :param bool modulatory:     If ``True``, the current of this termination is not added to the output. Default: ``False``

        :return LinearExponentialTermination:   The new termination

        :raises StructuralError: If a termination with the same name exists, or ``tau`` is not positive
        """
        return self.add_termination(
            LinearExponentialTermination(self, name, weights, tau, modulatory)
        )

    def advance(self, t_start: float, t_stop: float) -> None:
        num_substeps = self.num_substeps
        h = (t_stop - t_start) / num_substeps

        total = 0.0
        for term in self._terminations.values():
            # - Apply spikes once, then integrate and decay over each sub-step
            term.update_current(True, h, 0.0)
            for _ in range(num_substeps - 1):
                term.update_current(False, h, h)
            current = term.update_current(False, 0.0, h)

            if not term.modulatory:
                total += current

        self.current = np.array([total])
        self._origins["current"].set_values(RealOutput(self.current))
