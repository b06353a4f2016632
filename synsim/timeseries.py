"""
Time series containers

Probes return their recordings as :py:class:`TSContinuous` objects, and spike sources are driven by :py:class:`TSEvent` schedules.
"""

## -- Import statements

# - Built-ins
from typing import Optional, Tuple, Union
from warnings import warn

# - Third party libraries
import numpy as np
import scipy.interpolate as spint

from synsim.typehints import ArrayLike

# - Define exports
__all__ = ["TimeSeries", "TSEvent", "TSContinuous"]

# - Tolerances for sampling slightly outside a series
_TOLERANCE_ABSOLUTE = 1e-9
_TOLERANCE_RELATIVE = 1e-6


### --- TimeSeries base class


class TimeSeries:
    """
    Base class for time series. Use `.TSContinuous` for sampled signals and `.TSEvent` for event trains.
    """

    def __init__(
        self,
        times: Optional[ArrayLike] = None,
        periodic: bool = False,
        t_start: Optional[float] = None,
        t_stop: Optional[float] = None,
        name: str = "unnamed",
    ):
        """
        :param Optional[ArrayLike] times:   Sample or event times
        :param bool periodic:               Repeat the series beyond its end. Default: ``False``
        :param Optional[float] t_start:     Start time of the series. Default: the first entry of ``times``, or 0
        :param Optional[float] t_stop:      Stop time of the series. Default: the last entry of ``times``, or ``t_start``
        :param str name:                    Name of this series. Default: ``"unnamed"``
        """
        times = np.atleast_1d([] if times is None else times).flatten().astype(float)

        if np.any(np.diff(times) < 0):
            raise ValueError(f"TimeSeries `{name}`: Times must not decrease.")

        self._times = times
        self.periodic = periodic
        self.name = name

        if t_start is None:
            t_start = times[0] if times.size > 0 else 0.0
        self._t_start = float(t_start)

        if t_stop is None:
            t_stop = times[-1] if times.size > 0 else self._t_start
        self.t_stop = float(t_stop)

    def isempty(self) -> bool:
        """(bool) ``True`` if this series holds no samples or events"""
        return self._times.size == 0

    def __len__(self):
        return self._times.size

    @property
    def times(self) -> np.ndarray:
        """(np.ndarray) Sample or event times"""
        return self._times

    @property
    def t_start(self) -> float:
        """(float) Start time of this series"""
        return self._t_start

    @property
    def t_stop(self) -> float:
        """(float) Stop time of this series"""
        return self._t_stop

    @t_stop.setter
    def t_stop(self, new_stop: float):
        earliest = self._times[-1] if self._times.size > 0 else self._t_start
        if new_stop >= earliest:
            self._t_stop = new_stop
        elif earliest - new_stop < _TOLERANCE_ABSOLUTE:
            self._t_stop = earliest
        else:
            raise ValueError(
                f"TimeSeries `{self.name}`: `t_stop` must be at least {earliest} (got {new_stop})."
            )

    @property
    def duration(self) -> float:
        """(float) Duration of this series"""
        return self._t_stop - self._t_start

    @property
    def name(self) -> str:
        """(str) Name of this series"""
        return self._name

    @name.setter
    def name(self, new_name: Optional[str]):
        self._name = "unnamed" if new_name is None else new_name


### --- Continuous-valued time series


class TSContinuous(TimeSeries):
    """
    A sampled, multi-channel signal. All channels share one time base.

    Calling the series samples it at arbitrary times, by interpolating between the stored samples.

    :Examples:

    >>> ts = TSContinuous([0.0, 0.5, 1.0], [[0.0], [1.0], [2.0]], interp_kind="linear")
    >>> ts(0.25)
    array([[0.5]])
    """

    def __init__(
        self,
        times: Optional[ArrayLike] = None,
        samples: Optional[ArrayLike] = None,
        num_channels: Optional[int] = None,
        periodic: bool = False,
        t_start: Optional[float] = None,
        t_stop: Optional[float] = None,
        name: str = "unnamed",
        units: Optional[str] = None,
        interp_kind: str = "previous",
    ):
        """
        :param Optional[ArrayLike] times:   ``T`` sample times
        :param Optional[ArrayLike] samples: ``T x N`` samples. A vector is taken as one channel
        :param Optional[int] num_channels:  Number of channels of an empty series. Ignored if ``samples`` is given
        :param bool periodic:               Repeat the series beyond its end. Default: ``False``
        :param Optional[float] t_start:     Start time. Default: the first sample time
        :param Optional[float] t_stop:      Stop time. Default: the last sample time
        :param str name:                    Name of this series. Default: ``"unnamed"``
        :param Optional[str] units:         Units of the samples. Default: ``None``
        :param str interp_kind:             Interpolation, as accepted by :py:func:`scipy.interpolate.interp1d`. Default: ``"previous"``
        """
        if samples is None:
            samples = np.zeros((0, 0 if num_channels is None else num_channels))

        super().__init__(
            times=times, periodic=periodic, t_start=t_start, t_stop=t_stop, name=name
        )

        self.interp = None
        self._interp_kind = interp_kind
        self.samples = samples
        self.units = units

        # - Raise an exception when sampling outside the series, otherwise warn and return `NaN`
        self.beyond_range_exception = True

    def _create_interpolator(self):
        """
        Build the interpolator for the present samples
        """
        if self.isempty():
            self.interp = None

        elif len(self) == 1:
            # - `interp1d` needs at least two samples
            def single_sample(t):
                return np.tile(self._samples[0], (np.size(t), 1))

            self.interp = single_sample

        else:
            self.interp = spint.interp1d(
                self._times,
                self._samples,
                kind=self._interp_kind,
                axis=0,
                assume_sorted=True,
                bounds_error=False,
                copy=False,
                fill_value="extrapolate",
            )

    def __call__(self, times: Union[float, ArrayLike]) -> np.ndarray:
        """
        Sample this series

        :param Union[float, ArrayLike] times:   ``T`` times to sample at

        :return np.ndarray:     ``T x N`` sampled values

        :raises ValueError: If a time lies outside the series and ``beyond_range_exception`` is ``True``
        """
        times = np.atleast_1d(np.asarray(times, dtype=float)).flatten()

        if self.isempty():
            return np.zeros((times.size, self.num_channels))

        if self.periodic and self.duration > 0:
            times = (times - self._t_start) % self.duration + self._t_start

        # - Snap times that lie just outside the series onto its limits
        tol = min(_TOLERANCE_ABSOLUTE, _TOLERANCE_RELATIVE * max(self.duration, 0.0))
        times[(times < self.t_start) & (times >= self.t_start - tol)] = self.t_start
        times[(times > self.t_stop) & (times <= self.t_stop + tol)] = self.t_stop

        outside = (times < self.t_start) | (times > self.t_stop)
        if np.any(outside):
            message = f"TSContinuous `{self.name}`: Cannot sample outside [{self.t_start}, {self.t_stop}]."
            if self.beyond_range_exception:
                raise ValueError(message)
            warn(message + " Returning `NaN` for these times.")

        values = np.reshape(self.interp(times), (-1, self.num_channels)).astype(float)
        values[outside, :] = np.nan
        return values

    def __repr__(self) -> str:
        return "{}{}periodic TSContinuous `{}` from t={} to {}. Samples: {}. Channels: {}".format(
            "Empty " if self.isempty() else "",
            "" if self.periodic else "non-",
            self.name,
            self.t_start,
            self.t_stop,
            len(self),
            self.num_channels,
        )

    @property
    def samples(self) -> np.ndarray:
        """(np.ndarray) ``T x N`` samples"""
        return self._samples

    @samples.setter
    def samples(self, new_samples: ArrayLike):
        new_samples = np.asarray(new_samples, dtype=float)

        # - A vector is one channel
        if new_samples.ndim < 2:
            new_samples = np.reshape(new_samples, (len(self), -1) if len(self) else (0, 0))

        if new_samples.shape[0] != len(self):
            raise ValueError(
                f"TSContinuous `{self.name}`: There must be one row of samples per sample time."
            )

        self._samples = new_samples
        self._create_interpolator()

    @property
    def num_channels(self) -> int:
        """(int) Number of channels"""
        return self._samples.shape[1]


### --- Event time series


class TSEvent(TimeSeries):
    """
    A train of events, each on one channel. Used here to schedule the spikes of spike sources.

    :Examples:

    >>> ts = TSEvent([0.1, 0.25], channels=[0, 2], t_stop=1.0)
    >>> ts(0.0, 0.2)
    (array([0.1]), array([0]))
    """

    def __init__(
        self,
        times: Optional[ArrayLike] = None,
        channels: Optional[Union[int, ArrayLike]] = None,
        periodic: bool = False,
        t_start: Optional[float] = None,
        t_stop: Optional[float] = None,
        name: Optional[str] = None,
        num_channels: Optional[int] = None,
    ):
        """
        :param Optional[ArrayLike] times:               Event times
        :param Optional[Union[int, ArrayLike]] channels:    Channel of each event, or one channel for all events. Default: channel 0
        :param bool periodic:                           Repeat the series beyond its end. Default: ``False``
        :param Optional[float] t_start:                 Start time. Default: the first event time
        :param Optional[float] t_stop:                  Stop time. Required if there are events, and must be later than all of them
        :param Optional[str] name:                      Name of this series. Default: ``"unnamed"``
        :param Optional[int] num_channels:              Number of channels. Default: one more than the highest channel
        """
        times = np.atleast_1d([] if times is None else times).flatten().astype(float)
        name = "unnamed" if name is None else name

        if times.size > 0:
            if t_stop is None:
                raise TypeError(
                    f"TSEvent `{name}`: `t_stop` must be given for a series with events."
                )
            if np.max(times) >= t_stop:
                raise ValueError(
                    f"TSEvent `{name}`: `t_stop` ({t_stop}) must be later than the last event ({np.max(times)})."
                )

        if channels is None or np.size(channels) == 0:
            channels = np.zeros(times.size)
        elif np.ndim(channels) == 0:
            channels = np.full(times.size, int(channels))
        elif np.size(channels) != times.size:
            raise ValueError(
                f"TSEvent `{name}`: `channels` must be an integer, or have one entry per event."
            )
        channels = np.asarray(channels, dtype=int).flatten()

        min_channels = int(np.max(channels)) + 1 if channels.size > 0 else 0
        if num_channels is None:
            num_channels = min_channels
        elif num_channels < min_channels:
            raise ValueError(
                f"TSEvent `{name}`: `num_channels` must exceed the highest channel ({min_channels - 1})."
            )

        super().__init__(
            times=times, periodic=periodic, t_start=t_start, t_stop=t_stop, name=name
        )

        self._channels = channels
        self._num_channels = int(num_channels)

    def __call__(
        self, t_start: Optional[float] = None, t_stop: Optional[float] = None
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Return the events within ``[t_start, t_stop)``

        :param Optional[float] t_start: Start of the interval. Default: `.t_start`
        :param Optional[float] t_stop:  End of the interval, exclusive. Default: `.t_stop`

        :return Tuple[np.ndarray, np.ndarray]:  Times and channels of the events
        """
        t_start = self.t_start if t_start is None else t_start
        t_stop = self.t_stop if t_stop is None else t_stop

        times, channels = self._times, self._channels

        # - Unroll repetitions of a periodic series that overlap the interval
        if self.periodic and self.duration > 0:
            first = int(np.floor((t_start - self.t_start) / self.duration))
            last = int(np.ceil((t_stop - self.t_start) / self.duration))
            offsets = np.arange(first, last + 1) * self.duration
            times = (times[np.newaxis, :] + offsets[:, np.newaxis]).flatten()
            channels = np.tile(channels, offsets.size)

        select = (times >= t_start) & (times < t_stop)
        return times[select], channels[select]

    def __repr__(self) -> str:
        return "{}{}periodic TSEvent `{}` from t={} to {}. Channels: {}. Events: {}".format(
            "Empty " if self.isempty() else "",
            "" if self.periodic else "non-",
            self.name,
            self.t_start,
            self.t_stop,
            self.num_channels,
            len(self),
        )

    @property
    def channels(self) -> np.ndarray:
        """(np.ndarray) Channel of each event"""
        return self._channels

    @property
    def num_channels(self) -> int:
        """(int) Number of channels"""
        return self._num_channels
