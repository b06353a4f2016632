"""
Simulation engine: the :py:class:`.Simulator`, its probes, events and progress listeners
"""

from synsim.sim.events import *
from synsim.sim.probe import *
from synsim.sim.simulator import *
from synsim.sim.listeners import *
