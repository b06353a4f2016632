"""
Test library integrity
"""


def test_import():
    """
    Test the import of top level package
    """
    import synsim


def test_submodule_import():
    """
    Test the import of submodules
    """
    import synsim.model
    import synsim.sim
    import synsim.utilities.backend_management
    import synsim.parameters
    import synsim.config


def test_base_attributes():
    import synsim

    assert isinstance(synsim.__version__, str)
    assert issubclass(synsim.SimulationError, Exception)
    assert issubclass(synsim.StructuralError, Exception)
