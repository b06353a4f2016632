"""
Module to provide useful types for synsim
"""

from typing import Any, Callable, List, Tuple, Union

import numpy as np

__all__ = ["ArrayLike", "Listener"]

ArrayLike = Union[np.ndarray, List, Tuple]
""" A numpy array, list or tuple """

Listener = Callable[[Any], None]
""" A callable that receives a simulator event or a changed object """
