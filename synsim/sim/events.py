"""
Progress events broadcast by a :py:class:`.Simulator` during a run
"""

from dataclasses import dataclass
from enum import Enum

__all__ = ["EventType", "SimulatorEvent"]


class EventType(Enum):
    """Kinds of :py:class:`SimulatorEvent`"""

    STARTED = "started"
    STEP_TAKEN = "step_taken"
    FINISHED = "finished"


@dataclass(frozen=True)
class SimulatorEvent:
    """
    Progress of a simulation run
    """

    progress: float
    """ (float) Fraction of the run completed, in ``[0, 1]`` """

    type: EventType
    """ (EventType) The kind of event """
