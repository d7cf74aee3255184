'''
Tests for the ADF design matrix and the default minimum window rule.
'''

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from explosive.core.exceptions import InputError, InsufficientLength
from explosive.models.unit_root.design import DesignMatrix, build_design_matrix, default_minw


# ---- Default Minimum Window ----

@pytest.mark.parametrize("nobs, expected", [(100, 19), (80, 16), (60, 14), (200, 27)])
def test_default_minw(nobs, expected):
    """The default window is floor((0.01 + 1.8 / sqrt(n)) * n)."""
    assert default_minw(nobs) == expected


def test_default_minw_rejects_empty_sample():
    with pytest.raises(InputError):
        default_minw(0)


# ---- Design Matrix ----

def test_design_rows_without_lags():
    """Without lags each row regresses dy[t] on a constant and y[t]."""
    y = np.array([1.0, 3.0, 2.0, 6.0, 5.0])
    design = build_design_matrix(y)

    assert isinstance(design, DesignMatrix)
    assert design.nrows == 4
    assert design.nparams == 2
    np.testing.assert_array_equal(design.x[:, 0], np.ones(4))
    np.testing.assert_array_equal(design.x[:, design.level_column], y[:-1])
    np.testing.assert_array_equal(design.y, np.diff(y))


def test_design_rows_with_lags():
    """Lagged differences follow the level column, most recent lag first."""
    y = np.arange(8.0) ** 2
    design = build_design_matrix(y, lag=2)

    assert design.x.shape == (5, 4)
    np.testing.assert_array_equal(design.x[0], [1.0, 4.0, 3.0, 1.0])
    np.testing.assert_array_equal(design.x[-1], [1.0, 36.0, 11.0, 9.0])
    np.testing.assert_array_equal(design.y, [5.0, 7.0, 9.0, 11.0, 13.0])
    assert design.lag == 2
    assert design.nobs == 8


def test_design_is_read_only(random_walk):
    design = build_design_matrix(random_walk, lag=1)
    with pytest.raises(ValueError):
        design.x[0, 0] = 2.0
    with pytest.raises(ValueError):
        design.y[0] = 2.0


@given(nobs=st.integers(min_value=4, max_value=60), lag=st.integers(min_value=0, max_value=5))
@settings(max_examples=40, deadline=None)
def test_design_shape(nobs, lag):
    """Any series longer than lag + 2 gives nobs - lag - 1 rows of 2 + lag regressors."""
    y = np.cumsum(np.random.default_rng(nobs).standard_normal(nobs))
    if nobs <= lag + 2:
        with pytest.raises(InsufficientLength):
            build_design_matrix(y, lag=lag)
        return
    design = build_design_matrix(y, lag=lag)
    assert design.x.shape == (nobs - lag - 1, lag + 2)
    assert design.y.shape == (nobs - lag - 1,)


# ---- Input Validation ----

def test_design_rejects_missing_values():
    y = np.array([1.0, 2.0, np.nan, 4.0, 5.0])
    with pytest.raises(InputError):
        build_design_matrix(y)


def test_design_rejects_panel():
    with pytest.raises(InputError):
        build_design_matrix(np.ones((10, 2)))


def test_design_rejects_negative_lag():
    with pytest.raises(InputError):
        build_design_matrix(np.arange(10.0), lag=-1)
