"""
Test post-synaptic current integration in LinearExponentialTermination
"""


def test_imports():
    from synsim import LinearExponentialTermination, Termination
    from synsim.model.termination import LinearExponentialTermination


def test_spike_and_decay():
    """
    A unit spike raises the current by 1/tau, which then decays linearly in dt
    """
    from synsim import LinearExponentialTermination, SpikeOutput
    import numpy as np

    for tau in [1.0, 2.0, 0.5]:
        term = LinearExponentialTermination(None, "input", [1.0], tau)
        term.set_values(SpikeOutput([True]))

        assert np.isclose(term.update_current(True, 0.0, 0.0), 1.0 / tau)

        t = 0.1
        assert np.isclose(
            term.update_current(False, 0.0, t), (1.0 / tau) * (1.0 - t / tau)
        )


def test_no_spike_without_apply():
    from synsim import LinearExponentialTermination, SpikeOutput

    term = LinearExponentialTermination(None, "input", [1.0, 2.0], 1.0)
    term.set_values(SpikeOutput([True, True]))

    assert term.net_spike_input == 3.0
    assert term.update_current(False, 0.0, 0.0) == 0.0


def test_weighted_spikes():
    from synsim import LinearExponentialTermination, SpikeOutput
    import numpy as np

    term = LinearExponentialTermination(None, "input", [1.0, 2.0, 4.0], 0.5)
    term.set_values(SpikeOutput([True, False, True]))

    assert np.isclose(term.net_spike_input, 5.0)
    assert np.isclose(term.update_current(True, 0.0, 0.0), 10.0)


def test_precise_spike():
    """
    A spike half way through a window is decayed for the rest of the window
    """
    from synsim import LinearExponentialTermination, PreciseSpikeOutput
    import numpy as np

    for weight in [1.0, 3.0, -2.0]:
        term = LinearExponentialTermination(None, "input", [weight], 2.0)
        term.set_values(PreciseSpikeOutput([0.5]))

        # - Not an instantaneous spike
        assert term.net_spike_input == 0.0

        assert np.isclose(term.update_current(True, 1.0, 0.0), 0.375 * weight)


def test_precise_spike_at_window_start():
    """
    A precise spike at offset 0 is applied together with instantaneous spikes
    """
    from synsim import LinearExponentialTermination, PreciseSpikeOutput
    import numpy as np

    term = LinearExponentialTermination(None, "input", [1.5, 1.0], 2.0)
    term.set_values(PreciseSpikeOutput([0.0, np.nan]))

    assert np.isclose(term.net_spike_input, 1.5)
    assert np.isclose(term.update_current(True, 1.0, 0.0), 0.75)


def test_precise_spikes_over_substeps():
    """
    Precise spikes are consumed once, in the sub-interval that contains them
    """
    from synsim import LinearExponentialTermination, PreciseSpikeOutput
    import numpy as np

    term = LinearExponentialTermination(None, "input", [1.0, 2.0], 1.0)
    term.set_values(PreciseSpikeOutput([np.nan, 0.25]))

    # - First half of the window contains the spike
    assert np.isclose(term.update_current(False, 0.5, 0.0), 2.0 * (1.0 - 0.25))

    # - Second half of the window has no spikes
    assert np.isclose(term.update_current(False, 0.5, 0.0), 1.5)

    # - A spike on the end of the window, within tolerance, is included
    term.reset()
    term.set_values(PreciseSpikeOutput([0.5 + 1e-8, np.nan]))
    assert np.isclose(term.update_current(False, 0.5, 0.0), 1.0, atol=1e-6)


def test_new_input_resets_cursor():
    from synsim import LinearExponentialTermination, PreciseSpikeOutput
    import numpy as np

    term = LinearExponentialTermination(None, "input", [1.0], 1.0)
    term.set_values(PreciseSpikeOutput([0.75]))
    term.update_current(False, 0.5, 0.0)
    assert term.current == 0.0

    # - Re-delivering the spike starts a new window
    term.set_values(PreciseSpikeOutput([0.25]))
    assert np.isclose(term.update_current(False, 0.5, 0.0), 0.75)


def test_real_input():
    from synsim import LinearExponentialTermination, RealOutput
    import numpy as np

    term = LinearExponentialTermination(None, "input", [0.5, 1.0], 0.5)
    term.set_values(RealOutput([2.0, 0.0]))

    assert np.isclose(term.net_real_input, 1.0)
    assert term.net_spike_input == 0.0

    # - Real input is integrated over time, and is not applied as a spike
    assert term.update_current(True, 0.0, 0.0) == 0.0
    assert np.isclose(term.update_current(False, 0.1, 0.0), 0.2)


def test_substep_pattern_totals():
    """
    The documented sub-step pattern integrates and decays over one full step
    """
    from synsim import LinearExponentialTermination, RealOutput
    import numpy as np

    dt = 0.01
    one_step = LinearExponentialTermination(None, "input", [1.0], 0.1)
    one_step.set_values(RealOutput([1.0]))
    one_step.update_current(True, dt, 0.0)
    one_step.update_current(False, 0.0, dt)

    # - Integrate: 1 * 0.01 / 0.1 = 0.1; decay: 0.1 * (1 - 0.01 / 0.1)
    assert np.isclose(one_step.current, 0.09)

    n = 4
    h = dt / n
    substeps = LinearExponentialTermination(None, "input", [1.0], 0.1)
    substeps.set_values(RealOutput([1.0]))
    substeps.update_current(True, h, 0.0)
    for _ in range(n - 1):
        substeps.update_current(False, h, h)
    substeps.update_current(False, 0.0, h)

    # - Total input is the same, decay differs only at second order
    assert np.isclose(substeps.current, 0.09, rtol=0.05)
    assert substeps.current > one_step.current


def test_dimension_mismatch():
    import pytest
    from synsim import (
        LinearExponentialTermination,
        RealOutput,
        SimulationError,
        SpikeOutput,
    )

    term = LinearExponentialTermination(None, "input", [1.0, 1.0], 1.0)

    with pytest.raises(SimulationError):
        term.set_values(SpikeOutput([True]))

    with pytest.raises(SimulationError):
        term.set_values(RealOutput([1.0, 2.0, 3.0]))

    assert term.input is None


def test_reset():
    from synsim import LinearExponentialTermination, PreciseSpikeOutput

    term = LinearExponentialTermination(None, "input", [1.0], 1.0)
    term.set_values(PreciseSpikeOutput([0.0]))
    term.update_current(True, 1.0, 0.0)
    assert term.current != 0.0

    term.reset(randomize=True)
    assert term.current == 0.0
    assert term.input is None
    assert term.net_spike_input == 0.0
    assert term.net_real_input == 0.0

    # - No input: no current
    assert term.update_current(True, 1.0, 1.0) == 0.0


def test_weights_and_tau():
    import pytest
    import numpy as np
    from synsim import LinearExponentialTermination, SpikeOutput, StructuralError

    term = LinearExponentialTermination(None, "input", [1.0, 2.0], 1.0)
    assert term.dimension == 2

    term.set_values(SpikeOutput([True, False]))
    assert term.net_spike_input == 1.0

    # - New weights re-weight the cached input
    term.weights = [3.0, 4.0]
    assert np.allclose(term.weights, [3.0, 4.0])
    assert term.net_spike_input == 3.0

    with pytest.raises(StructuralError):
        term.weights = [1.0, 2.0, 3.0]

    term.tau = 0.5
    assert term.tau == 0.5

    with pytest.raises(StructuralError):
        term.tau = 0.0

    with pytest.raises(StructuralError):
        LinearExponentialTermination(None, "bad", [1.0], -1.0)

    # - The weights getter returns a copy
    w = term.weights
    w[0] = 100.0
    assert term.weights[0] == 3.0


def test_copy():
    from synsim import LinearExponentialTermination, SpikeOutput, SynapticIntegrator

    node = SynapticIntegrator("node")
    term = node.add_linear_termination("input", [1.0], 1.0, modulatory=True)
    term.set_values(SpikeOutput([True]))
    term.update_current(True, 0.0, 0.0)

    term_copy = term.copy()
    assert isinstance(term_copy, LinearExponentialTermination)
    assert term_copy.node is node
    assert term_copy.current == term.current
    assert term_copy.input == term.input
    assert term_copy.modulatory

    term_copy.update_current(False, 0.0, 0.5)
    assert term_copy.current != term.current
    assert term.output == 1.0
