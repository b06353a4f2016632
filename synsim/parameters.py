"""
Classes to manage registered node attributes in synsim

Nodes declare their configuration with :py:class:`.Parameter`, their observable transient values with :py:class:`.State` and solver settings with :py:class:`.SimulationParameter`. Registered :py:class:`.State` attributes are what a :py:class:`.Probe` can record.
"""

from typing import Callable, Any, Union, List, Tuple, Optional
from copy import deepcopy
from itertools import compress

import numpy as np

__all__ = ["ParameterBase", "Parameter", "State", "SimulationParameter"]


# -- Parameter classes
class ParameterBase:
    """
    Base class for synsim registered attributes

    See Also:
        See :py:class:`.Parameter` for representing the configuration of a node, :py:class:`.State` for representing the transient internal state of a node, and :py:class:`.SimulationParameter` for representing solver-specific settings.
    """

    def __init__(
        self,
        data: Any = None,
        family: Optional[str] = None,
        init_func: Optional[Callable[[Any], Any]] = None,
        shape: Optional[Union[List[Tuple], Tuple, int]] = None,
        permit_reshape: bool = True,
        cast_fn: Optional[Callable[[Any], Any]] = None,
        description: str = "",
        units: Optional[str] = None,
    ):
        """
        Instantiate a registered attribute

        Args:
            data (Optional[Any]): Concrete initialisation data for this attribute. The shape of ``data`` will specify the allowable shape of the attribute data, unless the ``shape`` argument is provided.
            family (Optional[str]): An arbitrary string to specify the "family" of this attribute, e.g. ``'weights'``, ``'taus'``, ``'currents'``.
            init_func (Optional[Callable]): A function that initialises this attribute, with signature ``f(shape: tuple) -> np.ndarray``. Called on reset.
            shape (Optional[Union[List[Tuple], Tuple, int]]): A list of permissible shapes, a tuple specifying the permitted shape, or an integer number of elements. If not provided, the shape of ``data`` is used.
            permit_reshape (bool): If ``True``, ``data`` will be reshaped to a matching permitted shape. Otherwise an error is raised if the shapes do not match exactly.
            cast_fn (Optional[Callable]): A function to cast the data for this attribute. Called once on initialisation.
            description (str): A human-readable description, reported by :py:meth:`.Probeable.list_states`.
            units (Optional[str]): Units of this attribute, attached to probe recordings.
        """
        if data is None and shape is None:
            raise ValueError("One of `data` or `shape` must be provided.")

        # - Check type and configuration of `shape` argument
        if shape is not None:
            if not isinstance(shape, (list, tuple, int)):
                raise TypeError(
                    f"`shape` must be a list, a tuple or an integer. Instead `shape` was a {type(shape).__name__}."
                )

            # - Convert a single tuple to a list
            if isinstance(shape, (tuple, int)):
                shape = [shape]

            # - Convert non-tuples to tuples, check elements
            shape = [st if isinstance(st, tuple) else (st,) for st in shape]
            for st in shape:
                for elem in st:
                    if not isinstance(elem, int):
                        raise TypeError(
                            f"All elements in a shape tuple must be integers. Instead I found an element of type {type(elem).__name__}."
                        )

        # - Assign attributes
        self.family: Optional[str] = family
        self.data: Any = data
        self.init_func: Optional[Callable] = init_func
        self.shape: Optional[Union[List, Tuple]] = shape
        self.cast_fn: Optional[Callable] = cast_fn
        self.description: str = description
        self.units: Optional[str] = units

        class_name = type(self).__name__

        # - Check that the initialisation function is callable
        if self.init_func is not None and not callable(self.init_func):
            raise ValueError(
                f"The `init_func` for a {class_name} must be a callable that accepts a shape tuple."
            )

        # - Get the shape from the data, if not provided explicitly
        if self.data is not None:
            if self.shape is not None:
                # - Check that the concrete data matches the shape
                if not any([np.shape(self.data) == st for st in self.shape]):
                    matching_sizes = [
                        np.size(self.data) == int(np.prod(st)) for st in self.shape
                    ]

                    # - Can we reshape the concrete data to match a shape?
                    if not any(matching_sizes) or not permit_reshape:
                        raise ValueError(
                            f"The shape provided for this {class_name} does not match the provided initialisation data.\n"
                            + f"    self.shape = {self.shape}; data.shape = {np.shape(self.data)}"
                        )

                    target_shape = list(compress(self.shape, matching_sizes))[0]
                    self.data = np.array(self.data).reshape(target_shape)

            # - Record the shape of the data as the concrete shape
            self.shape = np.shape(self.data)

            # - Concrete initialisation data overrides the `init_func`
            data_copy = deepcopy(self.data)
            self.init_func = lambda _: deepcopy(data_copy)

        else:
            # - Use the first permitted shape as the concrete shape
            self.shape = self.shape[0]

            if self.init_func is None:
                raise ValueError(
                    f"If concrete initialisation `data` is not provided for a {class_name} then `init_func` must be provided."
                )

            self.data = self.init_func(self.shape)

        # - Cast the data using the cast function
        if self.cast_fn is not None:
            self.data = self.cast_fn(self.data)

    def __repr__(self):
        return f"{type(self).__name__}(data={self.data}, family={self.family}, shape={self.shape})"


class Parameter(ParameterBase):
    """
    Represent a node parameter

    A :py:class:`.Parameter` is a configuration value that defines a node, for example synaptic weights or time constants.
    """

    pass


class State(ParameterBase):
    """
    Represent a node state

    A :py:class:`.State` is a transient value required to maintain the dynamics of a node, for example a post-synaptic current. Registered states are the observables that probes can record.
    """

    pass


class SimulationParameter(ParameterBase):
    """
    Represent a node simulation parameter

    A :py:class:`.SimulationParameter` is a solver-specific setting, for example the number of sub-steps a node takes per network time step.
    """

    pass
