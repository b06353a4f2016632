"""
Test TimeSeries methods
"""


def test_imports():
    from synsim import TimeSeries, TSContinuous, TSEvent
    from synsim.timeseries import TimeSeries, TSContinuous, TSEvent


def test_continuous():
    import pytest
    from synsim import TSContinuous
    import numpy as np

    # - Creation
    ts = TSContinuous([0], [0])
    assert np.allclose(ts(0), [[0]])

    ts = TSContinuous([0, 1, 2, 3], [1, 2, 3, 4])
    ts2 = TSContinuous([0, 1, 2, 3], [[2, 3], [4, 5], [6, 7], [8, 9]], name="two")

    assert ts.num_channels == 1
    assert ts2.num_channels == 2
    assert ts.duration == 3
    assert len(ts2) == 4
    assert "two" in repr(ts2)

    # - Samples don't match time
    with pytest.raises(ValueError):
        TSContinuous([0, 1, 2], [0])

    with pytest.raises(ValueError):
        TSContinuous([0, 1, 2], [[0, 1], [2, 3]])

    # - Times must not decrease
    with pytest.raises(ValueError):
        TSContinuous([1, 0], [0, 1])

    # - Previous-sample interpolation
    assert np.allclose(ts(1.5), [[2]])
    assert np.allclose(ts2([0.5, 3.0]), [[2, 3], [8, 9]])

    # - Sampling beyond the series
    with pytest.raises(ValueError):
        ts(3.5)

    ts.beyond_range_exception = False
    with pytest.warns(UserWarning):
        assert np.all(np.isnan(ts(3.5)))

    # - Sampling just beyond the series is tolerated
    assert np.allclose(ts(3.0 + 1e-12), [[4]])

    # - Linear interpolation
    ts_lin = TSContinuous([0, 1], [0, 2], interp_kind="linear")
    assert np.allclose(ts_lin(0.25), [[0.5]])


def test_continuous_empty():
    from synsim import TSContinuous

    ts = TSContinuous(num_channels=3)
    assert ts.isempty()
    assert ts.num_channels == 3
    assert ts([0.0, 1.0]).shape == (2, 3)
    assert "Empty" in repr(ts)


def test_continuous_periodic():
    from synsim import TSContinuous
    import numpy as np

    ts = TSContinuous([0, 1, 2], [0, 1, 2], periodic=True, t_stop=3)
    assert np.allclose(ts([3.5, 4.5]), [[0], [1]])


def test_event():
    import pytest
    from synsim import TSEvent
    import numpy as np

    # - `t_stop` is required, and must follow all events
    with pytest.raises(TypeError):
        TSEvent([0.1, 0.2])

    with pytest.raises(ValueError):
        TSEvent([0.1, 0.2], t_stop=0.2)

    ts = TSEvent([0.1, 0.2, 0.3], [0, 2, 1], t_stop=1.0, name="events")
    assert ts.num_channels == 3
    assert ts.t_start == 0.1
    assert "events" in repr(ts)

    # - Events in a half-open interval
    times, channels = ts(0.1, 0.3)
    assert np.allclose(times, [0.1, 0.2])
    assert np.array_equal(channels, [0, 2])

    # - One channel for all events
    ts = TSEvent([0.1, 0.2], 4, t_stop=1.0)
    assert ts.num_channels == 5
    assert np.array_equal(ts.channels, [4, 4])

    with pytest.raises(ValueError):
        TSEvent([0.1], [3], t_stop=1.0, num_channels=2)

    with pytest.raises(ValueError):
        TSEvent([0.1, 0.2], [0], t_stop=1.0)

    empty = TSEvent()
    assert empty.isempty()
    assert empty.num_channels == 0
    assert empty(0.0, 1.0)[0].size == 0


def test_event_periodic():
    from synsim import TSEvent
    import numpy as np

    ts = TSEvent([0.25], t_start=0.0, t_stop=1.0, periodic=True)
    times, channels = ts(0.0, 3.0)

    assert np.allclose(times, [0.25, 1.25, 2.25])
    assert np.array_equal(channels, [0, 0, 0])
