"""
Test progress listeners and optional backend checks
"""


def test_logging_listener(caplog):
    import logging
    from synsim import LoggingProgressListener, Network, Simulator, SynapticIntegrator

    net = Network()
    net.add_node(SynapticIntegrator("int"))

    sim = Simulator()
    sim.add_simulator_listener(LoggingProgressListener("test", step_interval=2))
    sim.initialize(net)

    with caplog.at_level(logging.DEBUG):
        sim.run(0.0, 0.5, 0.1)

    messages = [r.getMessage() for r in caplog.records if r.getMessage().startswith("test:")]
    assert messages[0] == "test: Run started"
    assert messages[-1] == "test: Run finished after 5 steps"
    assert len(messages) == 4


def test_tqdm_listener():
    import pytest

    pytest.importorskip("tqdm")
    from synsim import Network, Simulator, SynapticIntegrator, TqdmProgressListener

    net = Network()
    net.add_node(SynapticIntegrator("int"))

    listener = TqdmProgressListener(desc="test", total=10)
    sim = Simulator()
    sim.add_simulator_listener(listener)
    sim.initialize(net)
    sim.run(0.0, 0.5, 0.1)

    # - The bar is closed at the end of the run
    assert listener._bar is None


def test_backends():
    import pytest
    from synsim.utilities.backend_management import (
        backend_available,
        check_backend,
        missing_backend_shim,
    )

    assert backend_available("numpy", "scipy")
    assert not check_backend("synsim_missing_backend")
    assert not backend_available("numpy", "synsim_missing_backend")

    Shim = missing_backend_shim("Shim", "synsim_missing_backend")
    assert Shim.__name__ == "Shim"

    with pytest.raises(ModuleNotFoundError):
        Shim()


def test_list_backends(capsys):
    from synsim import list_backends

    list_backends()
    assert "numpy" in capsys.readouterr().out
