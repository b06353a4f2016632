"""
A time-stepped simulator for networks of spiking and dynamical nodes
"""

from .version import __version__
from .timeseries import *
from .parameters import *
from .config import *

from .model import *
from .sim import *

from .utilities.backend_management import list_backends
