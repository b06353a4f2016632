"""
Network model: nodes, their origins and terminations, and the projections that connect them
"""

from synsim.model.node import *
from synsim.model.outputs import *
from synsim.model.origin import *
from synsim.model.termination import *
from synsim.model.registry import *
from synsim.model.nodes import *
from synsim.model.network import *
