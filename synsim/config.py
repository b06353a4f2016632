"""
Simulation run configuration
"""

from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Iterator, Tuple

__all__ = ["SimulationConfig"]

# - Fraction of a nominal step beyond which the remaining time is merged into the final step
STEP_MERGE_FACTOR = 1.5


@dataclass
class SimulationConfig:
    """
    Time limits and step size of a simulation run

    The run covers ``[t_start, t_stop]`` in steps of ``dt``. If less than ``1.5 * dt`` remains before ``t_stop``, the remaining time is taken as a single final step, so the run ends exactly on ``t_stop`` without a trailing micro-step.

    :Example:

    >>> [t for t, _ in SimulationConfig(0.0, 1.0, 0.3).steps()]
    [0.0, 0.3, 0.6]
    """

    t_start: float = 0.0
    """ (float) Start time of the run, in seconds """

    t_stop: float = 1.0
    """ (float) End time of the run, in seconds """

    dt: float = 1e-3
    """ (float) Nominal step size, in seconds """

    log_interval: int = 100
    """ (int) Number of steps between progress log messages """

    def __post_init__(self):
        self.t_start = float(self.t_start)
        self.t_stop = float(self.t_stop)
        self.dt = float(self.dt)

        if not self.dt > 0:
            raise ValueError(f"SimulationConfig: `dt` must be positive (got {self.dt}).")

        if self.t_stop < self.t_start:
            raise ValueError(
                f"SimulationConfig: `t_stop` ({self.t_stop}) must not be earlier than `t_start` ({self.t_start})."
            )

        if int(self.log_interval) < 1:
            raise ValueError(
                f"SimulationConfig: `log_interval` must be at least 1 (got {self.log_interval})."
            )
        self.log_interval = int(self.log_interval)

    def steps(self) -> Iterator[Tuple[float, float]]:
        """
        Yield the ``(start, end)`` times of each step of the run

        The step start times are strictly increasing, the first step starts at :py:attr:`.t_start` and the final step ends exactly at :py:attr:`.t_stop`.
        """
        time = self.t_start
        while time < self.t_stop:
            if time + STEP_MERGE_FACTOR * self.dt > self.t_stop:
                t_next = self.t_stop
            else:
                t_next = time + self.dt

            if t_next <= time:
                raise ValueError(
                    f"SimulationConfig: `dt` ({self.dt}) is too small to advance from t = {time}."
                )

            yield time, t_next
            time = t_next

    @property
    def duration(self) -> float:
        """(float) Duration of the run, in seconds"""
        return self.t_stop - self.t_start

    @property
    def num_steps(self) -> int:
        """(int) Number of steps taken by the run"""
        return sum(1 for _ in self.steps())

    def to_dict(self) -> Dict[str, Any]:
        """Return this configuration as a dictionary"""
        return asdict(self)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "SimulationConfig":
        """
        Build a configuration from a dictionary

        :raises KeyError: If the dictionary contains unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = set(config) - known
        if unknown:
            raise KeyError(
                f"SimulationConfig: Unknown configuration keys {sorted(unknown)}."
            )
        return cls(**config)
