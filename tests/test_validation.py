'''
Tests for argument validation, data preparation and the exception hierarchy.
'''

import numpy as np
import pandas as pd
import pytest

from explosive.core.exceptions import (
    ArgumentMismatchError, ComputationError, ConfigError, ExplosiveError,
    ExplosiveWarning, InputError, InsufficientLength, InvalidWindow
)
from explosive.core.validation import (
    default_ncores, validate_minw, validate_numeric_array, validate_parallel,
    validate_probs, validate_seed
)
from explosive.utils.data import find_date_column, prepare_data


# ---- Exception Hierarchy ----

def test_exception_hierarchy():
    assert issubclass(InsufficientLength, InputError)
    assert issubclass(InvalidWindow, InputError)
    assert issubclass(ArgumentMismatchError, InputError)
    assert issubclass(InputError, ExplosiveError)
    assert issubclass(ConfigError, ExplosiveError)
    assert issubclass(ComputationError, ExplosiveError)
    assert issubclass(ExplosiveWarning, UserWarning)


def test_exception_context_names_the_precondition():
    error = InsufficientLength("Series is too short", nobs=10, required=25,
                               argument="minw", value=19, constraint="nobs >= minw + lag + 1")
    text = str(error)

    assert error.context["Observations"] == 10
    assert error.context["Required"] == 25
    assert "nobs >= minw + lag + 1" in text
    assert "Series is too short" in text


def test_computation_error_coordinates():
    error = ComputationError("singular", operation="recursive_badf", window_end=18,
                             replication=4, series="equity")
    assert error.context["Window end"] == 18
    assert error.context["Replication"] == 4
    assert error.context["Series"] == "equity"


# ---- Window Validation ----

def test_validate_minw_accepts_admissible_window():
    assert validate_minw(19, 100, 0) == 19
    assert validate_minw(np.int64(10), 60, 2) == 10


@pytest.mark.parametrize("minw, nobs, lag", [(1, 100, 0), (2, 100, 0), (4, 100, 2), (2.5, 100, 0)])
def test_validate_minw_rejects_small_windows(minw, nobs, lag):
    with pytest.raises(InvalidWindow):
        validate_minw(minw, nobs, lag)


def test_validate_minw_rejects_short_series():
    with pytest.raises(InsufficientLength) as info:
        validate_minw(30, 32, 2)
    assert info.value.required == 33


def test_validate_minw_floor():
    with pytest.raises(InvalidWindow):
        validate_minw(3, 100, 0, greater_than=3)


# ---- Simulation Settings ----

def test_validate_probs():
    assert validate_probs([0.9, 0.95]) == (0.9, 0.95)
    with pytest.raises(ConfigError):
        validate_probs(["a"])
    with pytest.raises(ConfigError):
        validate_probs([0.9, 0.9])


def test_validate_seed():
    assert validate_seed(None) is None
    assert validate_seed(np.int32(4)) == 4
    with pytest.raises(ConfigError):
        validate_seed(True)
    with pytest.raises(ConfigError):
        validate_seed("42")


def test_validate_parallel():
    assert validate_parallel(False, None) == (False, default_ncores())
    assert validate_parallel(True, 3) == (True, 3)
    with pytest.raises(ConfigError):
        validate_parallel("yes", None)
    with pytest.raises(ConfigError):
        validate_parallel(True, 0)
    with pytest.warns(ExplosiveWarning):
        validate_parallel(False, 2)


def test_default_ncores_is_positive():
    assert default_ncores() >= 1


# ---- Numeric Arrays ----

def test_validate_numeric_array():
    values = validate_numeric_array(np.array([1, 2, 3]))
    assert values.dtype == np.float64

    with pytest.raises(InputError):
        validate_numeric_array(np.array(["a", "b"]))
    with pytest.raises(InputError):
        validate_numeric_array(np.array([]))
    with pytest.raises(InputError):
        validate_numeric_array(np.array([1.0, np.inf]))
    with pytest.raises(InputError) as info:
        validate_numeric_array(np.array([1.0, np.nan, 3.0]))
    assert info.value.value == [[1]]


# ---- Data Preparation ----

def test_prepare_array():
    prepared = prepare_data(np.ones((5, 2)))
    assert prepared.names == ["series1", "series2"]
    assert prepared.nobs == 5
    assert prepared.nseries == 2
    assert isinstance(prepared.index, pd.RangeIndex)


def test_prepare_list_is_a_single_series():
    prepared = prepare_data([1.0, 2.0, 3.0])
    assert prepared.values.shape == (3, 1)


def test_prepare_dataframe_with_date_column(dated_panel):
    prepared = prepare_data(dated_panel)

    assert find_date_column(dated_panel) == "date"
    assert prepared.names == ["housing", "equity", "credit"]
    assert isinstance(prepared.index, pd.DatetimeIndex)
    assert prepared.values.shape == (80, 3)


def test_prepare_keeps_dataframe_index():
    index = pd.date_range("2010-01-01", periods=4, freq="D")
    frame = pd.DataFrame({"a": [1.0, 2.0, 3.0, 4.0]}, index=index)
    prepared = prepare_data(frame)
    assert prepared.index.equals(index)
    assert find_date_column(frame) is None


def test_prepare_named_series():
    prepared = prepare_data(pd.Series([1.0, 2.0, 3.0], name="nasdaq"))
    assert prepared.names == ["nasdaq"]


def test_prepared_values_are_read_only():
    source = np.ones((5, 2))
    prepared = prepare_data(source)
    with pytest.raises(ValueError):
        prepared.values[0, 0] = 2.0
    source[0, 0] = 3.0
    assert prepared.values[0, 0] == 1.0


def test_prepare_rejects_bad_input():
    with pytest.raises(InputError):
        prepare_data(np.ones((3, 2, 2)))
    with pytest.raises(InputError):
        prepare_data(pd.DataFrame({"date": pd.date_range("2020-01-01", periods=3)}))
    with pytest.raises(InputError):
        prepare_data(pd.DataFrame([[1.0, 2.0]], columns=["x", "x"]))
    with pytest.raises(InputError):
        prepare_data(pd.DataFrame({"x": ["a", "b"]}))
