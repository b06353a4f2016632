"""
Simulator listeners that report the progress of a run
"""

import logging
from typing import Optional

from synsim.sim.events import EventType, SimulatorEvent
from synsim.utilities.backend_management import (
    backend_available,
    missing_backend_shim,
)

__all__ = ["LoggingProgressListener", "TqdmProgressListener"]


class LoggingProgressListener:
    """
    Log the progress of a run

    The start and end of a run are logged at INFO level. Steps are logged at DEBUG level, once every ``step_interval`` steps.
    """

    def __init__(self, name: str = "Simulator", step_interval: int = 1):
        self.name = name
        self.step_interval = max(int(step_interval), 1)
        self._steps = 0

    def __call__(self, event: SimulatorEvent):
        if event.type is EventType.STARTED:
            self._steps = 0
            logging.info(f"{self.name}: Run started")

        elif event.type is EventType.STEP_TAKEN:
            self._steps += 1
            if self._steps % self.step_interval == 0:
                logging.debug(
                    f"{self.name}: Step {self._steps} ({100 * event.progress:.1f}%)"
                )

        elif event.type is EventType.FINISHED:
            logging.info(f"{self.name}: Run finished after {self._steps} steps")


if backend_available("tqdm"):
    from tqdm.autonotebook import tqdm

    class TqdmProgressListener:
        """
        Show the progress of a run as a ``tqdm`` progress bar

        Requires the optional ``tqdm`` package (``pip install synsim[extras]``).
        """

        def __init__(self, desc: str = "Simulation", total: int = 100):
            """
            :param str desc:    Description shown next to the bar
            :param int total:   Resolution of the bar. Default: ``100``, in percent
            """
            self.desc = desc
            self.total = int(total)
            self._bar: Optional[tqdm] = None

        def __call__(self, event: SimulatorEvent):
            if event.type is EventType.STARTED:
                self.close()
                self._bar = tqdm(total=self.total, desc=self.desc)
                return

            if self._bar is None:
                return

            if event.type is EventType.FINISHED:
                position = self.total
            else:
                position = int(event.progress * self.total)

            if position > self._bar.n:
                self._bar.update(position - self._bar.n)

            if event.type is EventType.FINISHED:
                self.close()

        def close(self):
            """Close the progress bar, if one is open"""
            if self._bar is not None:
                self._bar.close()
                self._bar = None

else:
    TqdmProgressListener = missing_backend_shim("TqdmProgressListener", "tqdm")
