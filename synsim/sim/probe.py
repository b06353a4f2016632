"""
Probes record the observable states of nodes over a simulation run
"""

from typing import List, Optional

import numpy as np

from synsim.model.node import Probeable, SimulationError
from synsim.timeseries import TSContinuous

__all__ = ["Probe"]


class Probe:
    """
    Records one named observable of a :py:class:`.Probeable` target as a time series

    A probe is created unbound, and bound to its target with :py:meth:`.connect`. While :py:attr:`.record` is ``True``, every call to :py:meth:`.collect` appends the present value of the observable to the recorded series.

    :Examples:

    >>> probe = simulator.add_probe("integrator", "current")
    >>> simulator.run(0.0, 0.1, 1e-3)
    >>> ts = probe.get_data()
    """

    def __init__(self):
        self._target: Optional[Probeable] = None
        self._state_name: Optional[str] = None
        self._ensemble_name: Optional[str] = None
        self._record: bool = False

        self._times: List[float] = []
        self._samples: List[np.ndarray] = []

    def __repr__(self) -> str:
        if self._target is None:
            return f"Unconnected {type(self).__name__}"

        target_name = getattr(self._target, "name", repr(self._target))
        if self._ensemble_name is not None:
            target_name = f"{self._ensemble_name}/{target_name}"

        return "{} of `{}` on `{}` ({} samples, recording: {})".format(
            type(self).__name__,
            self._state_name,
            target_name,
            len(self._times),
            self._record,
        )

    def connect(
        self,
        ensemble_name: Optional[str],
        target: Probeable,
        state_name: str,
        record: bool = True,
    ) -> None:
        """
        Bind this probe to an observable of a target

        :param Optional[str] ensemble_name: Name of the ensemble that contains ``target``, or ``None``
        :param Probeable target:            The object to record from
        :param str state_name:              Name of the observable to record
        :param bool record:                 Start recording immediately. Default: ``True``

        :raises SimulationError: If ``target`` does not expose ``state_name``
        """
        if not isinstance(target, Probeable):
            raise SimulationError(
                f"Probe: `{target}` is not probeable."
            )

        if state_name not in target.list_states():
            raise SimulationError(
                f"Probe: `{state_name}` is not an observable state of `{getattr(target, 'name', target)}`. Available states: {list(target.list_states())}."
            )

        self._ensemble_name = ensemble_name
        self._target = target
        self._state_name = state_name
        self._record = bool(record)
        self.reset()

    def collect(self, time: float) -> None:
        """
        Record the present value of the observable, if recording is enabled

        :param float time:  Simulation time of the sample
        """
        if self._record and self._target is not None:
            self._times.append(float(time))
            self._samples.append(self._target.get_state(self._state_name))

    def reset(self) -> None:
        """Discard all recorded samples. The probe stays connected."""
        self._times = []
        self._samples = []

    def get_data(self) -> TSContinuous:
        """
        Return the recorded samples as a time series

        :return TSContinuous:   Series with one row per sample and one column per channel of the observable, named after the observable
        """
        if self._samples:
            samples = np.stack(self._samples)
        else:
            num_channels = 0
            if self._target is not None:
                num_channels = np.size(self._target.get_state(self._state_name))
            samples = np.zeros((0, num_channels))

        return TSContinuous(
            self._times,
            samples,
            name=self._state_name or "unnamed",
            units=self.units,
        )

    ### --- Properties

    @property
    def record(self) -> bool:
        """(bool) If ``True``, :py:meth:`.collect` records samples"""
        return self._record

    @record.setter
    def record(self, new_record: bool):
        self._record = bool(new_record)

    @property
    def target(self) -> Optional[Probeable]:
        """(Optional[Probeable]) The object this probe records from"""
        return self._target

    @property
    def state_name(self) -> Optional[str]:
        """(Optional[str]) The name of the recorded observable"""
        return self._state_name

    @property
    def ensemble_name(self) -> Optional[str]:
        """(Optional[str]) Name of the ensemble containing the target, or ``None``"""
        return self._ensemble_name

    @property
    def is_in_ensemble(self) -> bool:
        """(bool) ``True`` if the target was addressed as a member of an ensemble"""
        return self._ensemble_name is not None

    @property
    def units(self) -> Optional[str]:
        """(Optional[str]) Units of the recorded observable, if the target declares them"""
        if self._target is None:
            return None
        return self._target.state_units(self._state_name)

    @property
    def times(self) -> np.ndarray:
        """(np.ndarray) Times of the recorded samples"""
        return np.array(self._times, dtype=float)

    @property
    def samples(self) -> np.ndarray:
        """(np.ndarray) Recorded samples, ``T x N``"""
        if not self._samples:
            return np.zeros((0, 0))
        return np.stack(self._samples)
