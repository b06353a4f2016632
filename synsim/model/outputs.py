"""
Instantaneous outputs of nodes: spike sets, real-valued vectors and precisely-timed spikes
"""

from abc import ABC
from typing import Optional

import numpy as np

from synsim.typehints import ArrayLike

__all__ = ["InstantaneousOutput", "SpikeOutput", "RealOutput", "PreciseSpikeOutput"]


class InstantaneousOutput(ABC):
    """
    Base class for the value of an origin at one instant

    The values are stored as a read-only 1D array; one element per channel.
    """

    def __init__(self, values: ArrayLike, units: Optional[str] = None):
        values = np.array(values).flatten()
        values.setflags(write=False)
        self._values: np.ndarray = values
        self.units: Optional[str] = units

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values.tolist()})"

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and np.array_equal(
            self._values, other._values, equal_nan=self._values.dtype.kind == "f"
        )

    @property
    def values(self) -> np.ndarray:
        """(np.ndarray) Output values, one per channel"""
        return self._values

    @property
    def dimension(self) -> int:
        """(int) Number of channels"""
        return self._values.size


class SpikeOutput(InstantaneousOutput):
    """
    A set of spike flags, valid at time-step resolution
    """

    def __init__(self, spikes: ArrayLike):
        """
        :param ArrayLike[bool] spikes:  ``True`` for each channel that spiked in the last step
        """
        super().__init__(np.asarray(spikes, dtype=bool), units="spikes")


class RealOutput(InstantaneousOutput):
    """
    A real-valued output vector
    """

    def __init__(self, values: ArrayLike, units: Optional[str] = None):
        """
        :param ArrayLike[float] values: Output value of each channel
        :param Optional[str] units:     Units of the values
        """
        super().__init__(np.asarray(values, dtype=float), units=units)


class PreciseSpikeOutput(SpikeOutput):
    """
    Spikes with sub-step timing

    Each channel holds the offset of its spike from the start of the step in which it is applied, in the range ``[0, dt)``. Channels that did not spike hold ``NaN``.
    """

    def __init__(self, spike_times: ArrayLike):
        """
        :param ArrayLike[float] spike_times:    Spike offset of each channel, or ``NaN`` for no spike
        """
        spike_times = np.array(spike_times, dtype=float).flatten()
        super().__init__(~np.isnan(spike_times))

        spike_times.setflags(write=False)
        self._spike_times: np.ndarray = spike_times

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._spike_times.tolist()})"

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and np.array_equal(
            self._spike_times, other._spike_times, equal_nan=True
        )

    @property
    def spike_times(self) -> np.ndarray:
        """(np.ndarray) Spike offset of each channel within the step, ``NaN`` where there is no spike"""
        return self._spike_times
