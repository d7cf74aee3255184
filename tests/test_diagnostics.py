'''
Tests for summary tables, diagnostics and date stamping.
'''

import numpy as np
import pandas as pd
import pytest

from explosive.core.config import get_config, set_config
from explosive.core.exceptions import ArgumentMismatchError, ConfigError, InputError
from explosive.core.types import CriticalValueMethod
from explosive.models.critical_values import mc_cv, sb_cv, wb_cv
from explosive.models.diagnostics import (
    NO_REJECTION, PANEL_NAME, Datestamp, DiagnosticsResult, datestamp, default_cv,
    diagnostics, find_episodes, summary
)
from explosive.models.unit_root import radf


@pytest.fixture
def bubble_result(bubble_series):
    return radf(bubble_series)


@pytest.fixture
def mc_100():
    return mc_cv(100, nrep=300, seed=5)


# ---- Explosive Episode Detection ----

def test_injected_bubble_is_significant(bubble_result, mc_100):
    gsadf = bubble_result.gsadf["series1"]
    assert gsadf > mc_100.gsadf_cv[mc_100.level_index(0.95)]

    diag = diagnostics(bubble_result, mc_100)
    assert isinstance(diag, DiagnosticsResult)
    assert diag.accepted == ["series1"]
    assert diag.rejected == []
    assert diag.any_explosive
    assert diag.sig["series1"] == "99%"
    assert diag.dummy["series1"] == 1
    assert diag.method is CriticalValueMethod.MONTE_CARLO


def test_injected_bubble_is_dated(bubble_result, mc_100):
    stamp = datestamp(bubble_result, mc_100)

    assert isinstance(stamp, Datestamp)
    assert list(stamp) == ["series1"]
    episodes = stamp["series1"]
    assert list(episodes.columns) == ["Start", "End", "Duration"]
    overlaps = (episodes["End"] >= 50) & (episodes["Start"] <= 99)
    assert overlaps.any()
    np.testing.assert_array_equal(episodes["Duration"], episodes["End"] - episodes["Start"] + 1)

    dummy = stamp.dummy["series1"]
    assert dummy.index.equals(bubble_result.index)
    assert dummy.iloc[:bubble_result.offset].sum() == 0
    assert dummy.iloc[50:].sum() > 0
    assert dummy.sum() == episodes["Duration"].sum()


def test_sadf_dating(bubble_result, mc_100):
    stamp = datestamp(bubble_result, mc_100, option="sadf")
    assert stamp.option == "sadf"
    assert (stamp["series1"]["End"] >= 50).any()


def test_minimum_duration_drops_short_episodes(bubble_result, mc_100):
    full = datestamp(bubble_result, mc_100)
    longest = int(full["series1"]["Duration"].max())

    kept = datestamp(bubble_result, mc_100, min_duration=longest)
    assert (kept["series1"]["Duration"] >= longest).all()

    none = datestamp(bubble_result, mc_100, min_duration=longest + 1)
    assert len(none) == 0
    assert none.dummy["series1"].sum() == 0


def test_dates_in_episode_tables(bubble_series):
    index = pd.date_range("1990-01-01", periods=100, freq="MS")
    frame = pd.DataFrame({"date": index, "price": bubble_series})
    result = radf(frame)
    stamp = datestamp(result, mc_cv(100, nrep=200, seed=5))

    episodes = stamp["price"]
    assert isinstance(episodes["Start"].iloc[0], pd.Timestamp)
    assert episodes["End"].max() >= index[50]


def test_find_episodes():
    runs = find_episodes(np.array([3, 4, 5, 9, 10, 20]))
    assert [list(run) for run in runs] == [[3, 4, 5], [9, 10], [20]]
    assert find_episodes(np.array([], dtype=int)) == []


# ---- Summary ----

def test_monte_carlo_summary(short_panel):
    result = radf(short_panel)
    cv = mc_cv(80, nrep=50, seed=1)
    tables = summary(result, cv)

    assert list(tables) == result.names
    table = tables["series2"]
    assert list(table.index) == ["ADF", "SADF", "GSADF"]
    assert list(table.columns) == ["tstat", "90%", "95%", "99%"]
    assert table.loc["GSADF", "tstat"] == result.gsadf["series2"]
    np.testing.assert_array_equal(table.loc["GSADF", ["90%", "95%", "99%"]], cv.gsadf_cv)


def test_wild_bootstrap_summary(short_panel):
    result = radf(short_panel)
    cv = wb_cv(short_panel, nboot=30, seed=1)
    tables = summary(result, cv)

    for j, name in enumerate(result.names):
        np.testing.assert_array_equal(tables[name].loc["ADF", ["90%", "95%", "99%"]], cv.adf_cv[j])


def test_sieve_bootstrap_summary(short_panel):
    result = radf(short_panel)
    cv = sb_cv(short_panel, nboot=30, seed=1)
    tables = summary(result, cv)

    assert list(tables) == [PANEL_NAME]
    assert list(tables[PANEL_NAME].index) == ["GSADF"]
    assert tables[PANEL_NAME].loc["GSADF", "tstat"] == result.gsadf_panel


def test_summary_simulates_critical_values_by_default(random_walk):
    set_config("simulation", "mc_iterations", 50)
    set_config("core", "random_seed", 3)
    result = radf(random_walk)
    tables = summary(result)

    expected = mc_cv(100, nrep=50, seed=3)
    np.testing.assert_array_equal(tables["series1"].loc["GSADF", ["90%", "95%", "99%"]],
                                  expected.gsadf_cv)


def test_default_critical_values_are_reproducible(random_walk):
    set_config("simulation", "mc_iterations", 40)
    result = radf(random_walk)

    first = summary(result)["series1"]
    second = summary(result)["series1"]
    pd.testing.assert_frame_equal(first, second)

    default_cv.cache_clear()
    third = summary(result)["series1"]
    pd.testing.assert_frame_equal(first, third)

    expected = mc_cv(100, nrep=40, seed=get_config("simulation", "default_cv_seed"))
    np.testing.assert_array_equal(first.loc["GSADF", ["90%", "95%", "99%"]],
                                  expected.gsadf_cv)


def test_default_critical_values_are_shared(random_walk):
    set_config("simulation", "mc_iterations", 40)
    result = radf(random_walk)

    table = summary(result)["series1"]
    diag = diagnostics(result)
    stamp = datestamp(result)

    assert default_cv.cache_info().misses == 1
    assert default_cv.cache_info().hits == 2
    rejects = table.loc["GSADF", "tstat"] >= table.loc["GSADF", "95%"]
    assert diag.dummy["series1"] == int(rejects)
    assert isinstance(stamp, Datestamp)


def test_default_critical_values_follow_configured_seed(random_walk):
    set_config("simulation", "mc_iterations", 40)
    result = radf(random_walk)
    first = summary(result)["series1"]

    set_config("simulation", "default_cv_seed", 9)
    reseeded = summary(result)["series1"]

    assert default_cv.cache_info().misses == 2
    expected = mc_cv(100, nrep=40, seed=9)
    np.testing.assert_array_equal(reseeded.loc["GSADF", ["90%", "95%", "99%"]],
                                  expected.gsadf_cv)
    assert not first.equals(reseeded)


# ---- Diagnostics Across Methods ----

def test_panel_diagnostics(short_panel):
    result = radf(short_panel)
    cv = sb_cv(short_panel, nboot=30, seed=2)
    diag = diagnostics(result, cv)

    assert diag.panel
    assert diag.accepted + diag.rejected == [PANEL_NAME]
    assert list(diag.sig.index) == [PANEL_NAME]


def test_wild_bootstrap_diagnostics(short_panel):
    result = radf(short_panel)
    cv = wb_cv(short_panel, nboot=30, seed=2)
    diag = diagnostics(result, cv)

    assert not diag.panel
    assert sorted(diag.accepted + diag.rejected) == sorted(result.names)
    assert set(diag.sig) <= {NO_REJECTION, "90%", "95%", "99%"}


def test_datestamp_panel(short_panel):
    result = radf(short_panel)
    cv = sb_cv(short_panel, nboot=30, seed=2)
    stamp = datestamp(result, cv)

    assert stamp.panel
    assert set(stamp) <= {PANEL_NAME}


# ---- Mismatched Inputs ----

def test_window_mismatch(bubble_result):
    cv = mc_cv(100, minw=20, nrep=20, seed=1)
    with pytest.raises(ArgumentMismatchError) as info:
        diagnostics(bubble_result, cv)
    assert info.value.field == "minw"


def test_lag_mismatch(bubble_series):
    result = radf(bubble_series, lag=1)
    cv = mc_cv(100, nrep=20, seed=1)
    with pytest.raises(ArgumentMismatchError) as info:
        summary(result, cv)
    assert info.value.field == "lag"


def test_length_mismatch(bubble_result):
    cv = mc_cv(90, minw=19, nrep=20, seed=1)
    with pytest.raises(ArgumentMismatchError):
        datestamp(bubble_result, cv)


def test_series_count_mismatch(short_panel):
    result = radf(short_panel)
    cv = wb_cv(short_panel[:, :2], nboot=20, seed=1)
    with pytest.raises(ArgumentMismatchError) as info:
        summary(result, cv)
    assert info.value.field == "n_series"


def test_sadf_requires_monte_carlo(short_panel):
    result = radf(short_panel)
    cv = wb_cv(short_panel, nboot=20, seed=1)
    with pytest.raises(InputError):
        diagnostics(result, cv, option="sadf")


def test_unknown_option(bubble_result, mc_100):
    with pytest.raises(InputError):
        datestamp(bubble_result, mc_100, option="badf")


def test_missing_dating_level(bubble_result):
    cv = mc_cv(100, nrep=20, probs=(0.9, 0.99), seed=1)
    with pytest.raises(ConfigError):
        diagnostics(bubble_result, cv)


def test_not_a_critical_value_set(bubble_result):
    with pytest.raises(InputError):
        summary(bubble_result, cv={"gsadf": 1.0})


def test_negative_min_duration(bubble_result, mc_100):
    with pytest.raises(InputError):
        datestamp(bubble_result, mc_100, min_duration=-1)
