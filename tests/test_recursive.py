'''
Tests for the recursive least squares state and its rank-one modifications.
'''

import numpy as np
import pytest
import statsmodels.api as sm

from explosive.core.exceptions import ComputationError, InputError, InsufficientLength
from explosive.models.unit_root.recursive import RecursiveLeastSquares


@pytest.fixture
def regression(rng):
    """Regressors with a constant and two covariates, and a noisy response."""
    x = np.column_stack([np.ones(40), rng.standard_normal((40, 2))])
    y = x @ np.array([0.5, -1.0, 2.0]) + rng.standard_normal(40)
    return x, y


def test_initial_fit_matches_ols(regression):
    x, y = regression
    rls = RecursiveLeastSquares(x[:15], y[:15])
    ols = sm.OLS(y[:15], x[:15]).fit()

    np.testing.assert_allclose(rls.params, ols.params, rtol=1e-10)
    np.testing.assert_allclose(rls.ssr, ols.ssr, rtol=1e-10)
    np.testing.assert_allclose(rls.inverse, np.linalg.inv(x[:15].T @ x[:15]), rtol=1e-9)
    assert rls.nobs == 15
    assert rls.nparams == 3


def test_updates_match_full_sample_ols(regression):
    x, y = regression
    rls = RecursiveLeastSquares(x[:10], y[:10])
    for row, value in zip(x[10:], y[10:]):
        rls.update(row, value)
    ols = sm.OLS(y, x).fit()

    assert rls.nobs == 40
    np.testing.assert_allclose(rls.params, ols.params, rtol=1e-9)
    np.testing.assert_allclose(rls.ssr, ols.ssr, rtol=1e-9)
    for index in range(3):
        np.testing.assert_allclose(rls.tstat(index), ols.tvalues[index], rtol=1e-8)


def test_downdate_reverses_update(regression):
    x, y = regression
    rls = RecursiveLeastSquares(x[:20], y[:20])
    params, inverse, ssr = rls.params, rls.inverse, rls.ssr

    rls.update(x[20], y[20])
    rls.downdate(x[20], y[20])

    assert rls.nobs == 20
    np.testing.assert_allclose(rls.params, params, rtol=1e-9)
    np.testing.assert_allclose(rls.inverse, inverse, rtol=1e-9)
    np.testing.assert_allclose(rls.ssr, ssr, rtol=1e-9)


def test_downdate_matches_rolling_window(regression):
    """Removing the oldest rows gives the fit of the later window."""
    x, y = regression
    rls = RecursiveLeastSquares(x[:30], y[:30])
    for row, value in zip(x[:5], y[:5]):
        rls.downdate(row, value)
    ols = sm.OLS(y[5:30], x[5:30]).fit()

    np.testing.assert_allclose(rls.params, ols.params, rtol=1e-8)
    np.testing.assert_allclose(rls.tstat(), ols.tvalues[1], rtol=1e-8)


def test_state_is_not_exposed(regression):
    x, y = regression
    rls = RecursiveLeastSquares(x[:10], y[:10])
    rls.params[0] = 1e6
    rls.inverse[0, 0] = 1e6
    assert rls.params[0] != 1e6
    assert rls.inverse[0, 0] != 1e6


def test_downdate_keeps_degrees_of_freedom(regression):
    x, y = regression
    rls = RecursiveLeastSquares(x[:4], y[:4])
    with pytest.raises(InsufficientLength):
        rls.downdate(x[0], y[0])


def test_initial_block_needs_more_rows_than_regressors(regression):
    x, y = regression
    with pytest.raises(InsufficientLength):
        RecursiveLeastSquares(x[:3], y[:3])


def test_singular_initial_block():
    x = np.column_stack([np.ones(10), np.full(10, 2.0)])
    y = np.arange(10.0)
    with pytest.raises(ComputationError) as info:
        RecursiveLeastSquares(x, y)
    assert info.value.operation == "initial_fit"


def test_row_length_is_checked(regression):
    x, y = regression
    rls = RecursiveLeastSquares(x[:10], y[:10])
    with pytest.raises(InputError):
        rls.update(np.ones(2), 1.0)
    with pytest.raises(InputError):
        rls.tstat(5)


def test_mismatched_arrays(regression):
    x, y = regression
    with pytest.raises(InputError):
        RecursiveLeastSquares(x[:10], y[:9])


def test_fit_does_not_depend_on_regressor_units(regression):
    x, y = regression
    units = np.array([1.0, 1e-9, 1e9])
    rls = RecursiveLeastSquares(x[:15] * units, y[:15])
    reference = RecursiveLeastSquares(x[:15], y[:15])
    for row, value in zip(x[15:25], y[15:25]):
        rls.update(row * units, value)
        reference.update(row, value)

    np.testing.assert_allclose(rls.params * units, reference.params, rtol=1e-7)
    for index in range(3):
        np.testing.assert_allclose(rls.tstat(index), reference.tstat(index), rtol=1e-7)
