"""
Test the node base class, ensembles, origins and the reference node kinds
"""


def test_nodebase():
    import pytest
    from synsim import NodeBase, SimulationError, State, StructuralError
    import numpy as np

    class Leaky(NodeBase):
        def __init__(self, name):
            super().__init__(name)
            self.v = State(
                np.ones(3), description="Membrane potential", units="V"
            )

        def advance(self, t_start, t_stop):
            self.v = self.v * 0.5

    with pytest.raises(StructuralError):
        Leaky("")

    node = Leaky("leaky")
    assert node.name == "leaky"
    assert node.list_states() == {"v": "Membrane potential"}
    assert node.state_units("v") == "V"

    node.advance(0.0, 0.1)
    assert np.allclose(node.get_state("v"), 0.5)

    with pytest.raises(SimulationError):
        node.get_state("missing")

    with pytest.raises(ValueError):
        node.v = np.ones(4)

    node.reset()
    assert np.allclose(node.get_state("v"), 1.0)

    with pytest.raises(StructuralError):
        node.get_origin("missing")

    with pytest.raises(StructuralError):
        node.get_termination("missing")


def test_duplicate_origins_and_terminations():
    import pytest
    from synsim import BasicOrigin, RealOutput, StructuralError, SynapticIntegrator

    node = SynapticIntegrator("int")
    node.add_linear_termination("input", [1.0], tau=0.1)

    with pytest.raises(StructuralError):
        node.add_linear_termination("input", [1.0], tau=0.1)

    with pytest.raises(StructuralError):
        node.add_origin(BasicOrigin(node, "current", RealOutput([0.0])))


def test_basic_origin():
    import pytest
    from synsim import (
        BasicOrigin,
        PreciseSpikeOutput,
        RealOutput,
        SimulationError,
        SpikeOutput,
    )
    import numpy as np

    origin = BasicOrigin(None, "out", RealOutput([0.0, 0.0]))
    assert origin.dimension == 2
    assert origin.node is None

    origin.set_values(RealOutput([1.0, 2.0]))
    assert np.allclose(origin.get_values().values, [1.0, 2.0])

    with pytest.raises(SimulationError):
        origin.set_values(RealOutput([1.0]))

    with pytest.raises(SimulationError):
        origin.set_values(SpikeOutput([True, False]))

    origin.reset()
    assert origin.get_values() == RealOutput([0.0, 0.0])

    # - Precise spikes are spikes
    spikes = BasicOrigin(None, "spikes", SpikeOutput([False]))
    spikes.set_values(PreciseSpikeOutput([0.1]))


def test_outputs():
    from synsim import PreciseSpikeOutput, RealOutput, SpikeOutput
    import numpy as np

    spikes = SpikeOutput([1, 0, 1])
    assert spikes.values.dtype == bool
    assert spikes.dimension == 3
    assert spikes.units == "spikes"

    precise = PreciseSpikeOutput([0.1, np.nan])
    assert np.array_equal(precise.values, [True, False])
    assert precise == PreciseSpikeOutput([0.1, np.nan])
    assert precise != PreciseSpikeOutput([0.2, np.nan])

    reals = RealOutput([[1.0, 2.0]], units="A")
    assert reals.dimension == 2
    assert reals.units == "A"

    # - Values are read-only
    import pytest

    with pytest.raises(ValueError):
        reals.values[0] = 5.0


def test_spike_generator():
    from synsim import PreciseSpikeOutput, SpikeGenerator, SpikeOutput, TSEvent
    import numpy as np

    events = TSEvent([0.01, 0.012, 0.015, 0.03], [1, 1, 0, 2], t_stop=1.0)
    gen = SpikeGenerator("gen", events)
    assert gen.dimension == 3
    assert "spikes" in gen.list_states()

    # - Initial output is no spikes
    assert np.all(np.isnan(gen.get_origin("spikes").get_values().spike_times))

    gen.advance(0.01, 0.02)
    output = gen.get_origin("spikes").get_values()
    assert isinstance(output, PreciseSpikeOutput)

    # - Earliest spike per channel, relative to the step start
    assert np.allclose(output.spike_times[:2], [0.005, 0.0])
    assert np.isnan(output.spike_times[2])
    assert np.allclose(gen.get_state("spikes"), [1.0, 1.0, 0.0])

    gen.reset()
    assert np.allclose(gen.get_state("spikes"), 0.0)

    coarse = SpikeGenerator("coarse", events, precise=False)
    coarse.advance(0.02, 0.04)
    output = coarse.get_origin("spikes").get_values()
    assert type(output) is SpikeOutput
    assert np.array_equal(output.values, [False, False, True])


def test_time_series_input():
    import pytest
    from synsim import SimulationError, TimeSeriesInput, TSContinuous
    import numpy as np

    signal = TSContinuous([0.0, 0.5, 1.0], [[0.0, 1.0], [1.0, 2.0], [2.0, 3.0]], units="mV")
    node = TimeSeriesInput("in", signal)
    assert node.dimension == 2
    assert node.state_units("output") == "mV"

    node.advance(0.5, 0.6)
    assert np.allclose(node.get_state("output"), [1.0, 2.0])
    assert np.allclose(node.get_origin("output").get_values().values, [1.0, 2.0])

    # - Sampling beyond the signal fails
    with pytest.raises(SimulationError):
        node.advance(1.0, 1.5)

    # - Callable signals
    node = TimeSeriesInput("fn", lambda t: np.sin(t) * np.ones(3))
    assert node.dimension == 3

    wrong = TimeSeriesInput("wrong", lambda t: [1.0, 2.0], dimension=3)
    with pytest.raises(SimulationError):
        wrong.advance(0.0, 0.1)

    with pytest.raises(TypeError):
        TimeSeriesInput("bad", 3.0)


def test_synaptic_integrator():
    import pytest
    from synsim import RealOutput, SpikeOutput, StructuralError, SynapticIntegrator
    import numpy as np

    with pytest.raises(StructuralError):
        SynapticIntegrator("int", num_substeps=0)

    node = SynapticIntegrator("int")
    driving = node.add_linear_termination("driving", [1.0], tau=0.1)
    modulatory = node.add_linear_termination("mod", [1.0], tau=0.1, modulatory=True)
    assert node.simulation_parameters() == {"num_substeps": 1}

    driving.set_values(SpikeOutput([True]))
    modulatory.set_values(SpikeOutput([True]))
    node.advance(0.0, 0.01)

    # - Only the driving termination contributes to the output
    assert np.isclose(driving.current, 9.0)
    assert np.isclose(modulatory.current, 9.0)
    assert np.allclose(node.get_state("current"), [9.0])
    assert node.get_origin("current").get_values() == RealOutput([9.0])

    node.reset()
    assert driving.current == 0.0
    assert node.get_origin("current").get_values() == RealOutput([0.0])


def test_ensemble():
    from synsim import Ensemble, SynapticIntegrator, SpikeOutput
    import numpy as np

    children = [SynapticIntegrator(f"n{i}") for i in range(3)]
    for child in children:
        child.add_linear_termination("input", [1.0], tau=0.1)

    ensemble = Ensemble("ens", children[:2])
    ensemble.add_node(children[2])
    assert len(ensemble) == 3
    assert ensemble[2] is children[2]
    assert ensemble.nodes == tuple(children)
    assert "current" in ensemble.list_states()

    children[1].get_termination("input").set_values(SpikeOutput([True]))
    ensemble.advance(0.0, 0.01)
    assert np.allclose(ensemble.get_state("current"), [0.0, 9.0, 0.0])

    ensemble.reset()
    assert np.allclose(ensemble.get_state("current"), 0.0)
