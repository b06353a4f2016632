"""
Utility functionality for managing optional dependencies

To check whether an optional package is usable, use :py:func:`.backend_available`. To build a shim class that raises an error on instantiation, for when a required package is not available, use :py:func:`.missing_backend_shim`.
"""

import importlib
from importlib import util
from typing import Dict, List, Optional, Tuple, Union

# - Configure exports
__all__ = ["backend_available", "missing_backend_shim", "list_backends"]

# - Maintain a cache of checked backends
__checked_backends: Dict[str, bool] = {}

# - Specifications for known backends
__backend_specs: Dict[str, tuple] = {
    "numpy": (),
    "scipy": (),
    "tqdm": (["tqdm", "tqdm.autonotebook"],),
}


def check_backend(
    backend_name: str,
    required_modules: Optional[Union[Tuple[str], List[str]]] = None,
    check_flag: bool = True,
) -> bool:
    """
    Check if a backend is available, and register it in a list of available backends

    Args:
        backend_name (str): The name of this backend to check for and register
        required_modules (Optional[List[str]]): A list of required modules to search for. If ``None`` (default), check the backend name
        check_flag (bool): A manual check that can be performed externally, to see if the backend is available

    Returns:
        bool: The backend is available
    """
    # - See if the backend check is already cached
    if backend_name in __checked_backends:
        return __checked_backends[backend_name]

    # - If no list of required modules, just check the backend name
    if required_modules is None:
        required_modules = [backend_name]

    requirements_met = check_flag
    for spec in required_modules:
        try:
            # - Check the required module is installed, and can be imported
            requirements_met = requirements_met and (util.find_spec(spec) is not None)
            importlib.import_module(spec)
        except ImportError:
            requirements_met = False

        if not requirements_met:
            break

    __checked_backends[backend_name] = requirements_met
    return requirements_met


def backend_available(*backend_names) -> bool:
    """
    Report if one or more backends are available for use

    Results are cached, so repeated checks return immediately.

    Args:
        backend_name0, backend_name1, ... (str): A backend to check

    Returns:
        bool: ``True`` iff all named backends are available
    """

    def check_single_backend(backend_name):
        if backend_name in __backend_specs:
            return check_backend(backend_name, *__backend_specs[backend_name])
        else:
            return check_backend(backend_name)

    return all([check_single_backend(be) for be in backend_names])


def missing_backend_shim(class_name: str, backend_name: str):
    """
    Make a class that raises an error about a missing backend when it is instantiated

    Examples:

        >>> TqdmProgressListener = missing_backend_shim("TqdmProgressListener", "tqdm")
        >>> TqdmProgressListener()
        ModuleNotFoundError: Missing the `tqdm` backend. `TqdmProgressListener` objects, and others relying on `tqdm` are not available.

    Args:
        class_name (str): The intended class name
        backend_name (str): The required backend that is missing

    Returns:
        Class: A class that raises an error on construction
    """

    class MissingBackendShim:
        """
        BACKEND MISSING FOR THIS CLASS
        """

        def __init__(self, *args, **kwargs):
            raise ModuleNotFoundError(
                f"Missing the `{backend_name}` backend. `{class_name}` objects, and others relying on `{backend_name}` are not available."
            )

    MissingBackendShim.__name__ = class_name
    return MissingBackendShim


def list_backends():
    """
    Print a list of optional backends available in this session
    """
    print("Backends available to synsim:")

    for backend in __backend_specs.keys():
        print(f"{backend:>15}: {backend_available(backend)}")
