'''
Tests for the bubble data generating processes.
'''

import numpy as np
import pytest

import explosive
from explosive.core.exceptions import InputError
from explosive.models.simulation import INITIAL_LEVEL, sim_dgp1, sim_dgp2, simulate_bubbles


def test_sim_dgp1_shape_and_seed():
    first = sim_dgp1(120, seed=4)
    second = sim_dgp1(120, seed=4)

    assert first.shape == (120,)
    assert first[0] == INITIAL_LEVEL
    np.testing.assert_array_equal(first, second)
    assert not np.array_equal(first, sim_dgp1(120, seed=5))


def test_noise_free_bubble_grows_and_collapses():
    """Without noise the bubble grows geometrically and collapses to its start level."""
    n = 100
    y = sim_dgp1(n, sigma=0.0)
    delta = 1.0 + n ** -0.6
    drift = n ** -0.6

    np.testing.assert_allclose(np.diff(y[:40]), drift)
    np.testing.assert_allclose(y[41:56] / y[40:55], delta)
    assert y[56] == y[40]
    np.testing.assert_allclose(np.diff(y[56:]), drift)


def test_sim_dgp2_has_two_episodes():
    n = 100
    y = sim_dgp2(n, sigma=0.0)
    delta = 1.0 + n ** -0.6

    np.testing.assert_allclose(y[21:41] / y[20:40], delta)
    assert y[41] == y[20]
    np.testing.assert_allclose(y[61:71] / y[60:70], delta)
    assert y[71] == y[60]


def test_custom_episode_dates():
    y = sim_dgp1(80, te=10, tf=30, c1=2.0, sigma=0.0)
    np.testing.assert_allclose(y[11:31] / y[10:30], 1.0 + 2.0 * 80 ** -0.6)


def test_simulated_bubble_is_detected():
    y = sim_dgp1(100, seed=8, sigma=1.0)
    result = explosive.radf(y)
    cv = explosive.mc_cv(100, nrep=200, seed=8)
    assert result.gsadf.iloc[0] > cv.gsadf_cv[-1]


@pytest.mark.parametrize("episodes", [
    [(50, 40)],
    [(0, 10)],
    [(20, 99)],
    [(20, 40), (35, 60)],
])
def test_invalid_episodes(episodes):
    with pytest.raises(InputError):
        simulate_bubbles(100, episodes)


def test_invalid_length():
    with pytest.raises(InputError):
        sim_dgp1(0)
