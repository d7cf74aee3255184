# explosive/models/diagnostics.py

"""
Inference on recursive ADF statistics.

This module compares observed statistics with critical values and reports the
outcome in three ways:

Functions:
    summary: Statistics next to their critical values, one table per series
        (or one table for the panel)
    diagnostics: Which series reject the unit root null in favour of
        explosive behaviour, and at which significance level
    datestamp: Origination, termination and duration of every explosive
        episode of the series that reject the null

All three accept critical values from any of the engines and dispatch on
``CriticalValueSet.method``. Without critical values they fall back to Monte
Carlo critical values simulated for the length, minimum window and lag of the
observed statistics with a fixed seed (``core.random_seed``, else
``simulation.default_cv_seed``). The fallback is memoized, so repeated calls
in a session compare against the same critical values. Observed statistics
and critical values that disagree on the minimum window, the lag, the sample
length or the number of series are rejected before any comparison.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from explosive.core.config import get_config, get_simulation_config
from explosive.core.exceptions import ArgumentMismatchError, InputError
from explosive.core.types import CriticalValueMethod, DiagnosticOption
from explosive.core.validation import validate_positive_int
from explosive.models.critical_values.base import CriticalValueSet
from explosive.models.critical_values.monte_carlo import mc_cv
from explosive.models.unit_root.radf import RADFResult

# Set up module-level logger
logger = logging.getLogger("explosive.models.diagnostics")

# Significance level used for rejection dummies and date stamping
DATING_LEVEL = 0.95

PANEL_NAME = "panel"
NO_REJECTION = "Reject"


@lru_cache(maxsize=32)
def default_cv(nobs: int,
               minw: int,
               lag: int,
               nrep: int,
               probs: Tuple[float, ...],
               seed: int) -> CriticalValueSet:
    """
    Monte Carlo critical values used when none are supplied.

    Results are memoized on all arguments; the returned arrays are read-only,
    so the cached set is shared between calls.
    """
    logger.info(f"No critical values supplied; simulating Monte Carlo critical values "
                f"for nobs={nobs}, minw={minw}, lag={lag} (nrep={nrep}, seed={seed})")
    return mc_cv(nobs, minw=minw, nrep=nrep, lag=lag, probs=probs, seed=seed)


def _resolve_cv(result: RADFResult, cv: Optional[CriticalValueSet]) -> CriticalValueSet:
    """Return ``cv`` after checking it against ``result``, simulating it when None."""
    if cv is None:
        sim_config = get_simulation_config()
        seed = get_config("core", "random_seed")
        if seed is None:
            seed = sim_config.default_cv_seed
        cv = default_cv(result.nobs, result.minw, result.lag,
                        sim_config.mc_iterations, tuple(sim_config.probs), seed)

    if not isinstance(cv, CriticalValueSet):
        raise InputError("Argument 'cv' should be a CriticalValueSet",
                         argument="cv", value=type(cv).__name__)

    for name, observed, critical in (
        ("minw", result.minw, cv.minw),
        ("lag", result.lag, cv.lag),
        ("nobs", result.nobs, cv.nobs),
    ):
        if observed != critical:
            raise ArgumentMismatchError(
                f"Observed statistics and critical values differ in '{name}'",
                field=name, observed=observed, critical=critical
            )

    if cv.method is not CriticalValueMethod.MONTE_CARLO and cv.n_series != result.n_series:
        raise ArgumentMismatchError(
            "Observed statistics and critical values differ in the number of series",
            field="n_series", observed=result.n_series, critical=cv.n_series
        )
    return cv


def _check_option(option: str, cv: CriticalValueSet) -> None:
    if option not in ("gsadf", "sadf"):
        raise InputError("Argument 'option' should be 'gsadf' or 'sadf'",
                         argument="option", value=option)
    if option == "sadf" and cv.method is not CriticalValueMethod.MONTE_CARLO:
        raise InputError(
            "Option 'sadf' applies only to Monte Carlo critical values",
            argument="option", value=option,
            context={"Method": cv.method.value}
        )


def summary(result: RADFResult,
            cv: Optional[CriticalValueSet] = None) -> Dict[str, pd.DataFrame]:
    """
    Tabulate statistics next to their critical values.

    Args:
        result: Observed statistics from ``radf``
        cv: Critical values; Monte Carlo critical values are simulated when None

    Returns:
        Dict[str, pd.DataFrame]: For Monte Carlo and Wild Bootstrap critical
        values one table per series with rows ``ADF``, ``SADF``, ``GSADF``;
        for Sieve Bootstrap critical values a single ``'panel'`` table with
        the ``GSADF`` row. Columns are ``tstat`` followed by one column per
        probability level.

    Raises:
        ArgumentMismatchError: If ``result`` and ``cv`` disagree
    """
    cv = _resolve_cv(result, cv)
    columns = ["tstat"] + cv.level_labels()
    tables: Dict[str, pd.DataFrame] = {}

    if cv.method is CriticalValueMethod.SIEVE_BOOTSTRAP:
        row = np.concatenate([[result.gsadf_panel], cv.gsadf_panel_cv])
        tables[PANEL_NAME] = pd.DataFrame([row], index=["GSADF"], columns=columns)
        return tables

    for i, name in enumerate(result.names):
        if cv.method is CriticalValueMethod.WILD_BOOTSTRAP:
            adf_cv, sadf_cv, gsadf_cv = cv.adf_cv[i], cv.sadf_cv[i], cv.gsadf_cv[i]
        else:
            adf_cv, sadf_cv, gsadf_cv = cv.adf_cv, cv.sadf_cv, cv.gsadf_cv
        tables[name] = pd.DataFrame(
            [
                np.concatenate([[result.adf[name]], adf_cv]),
                np.concatenate([[result.sadf[name]], sadf_cv]),
                np.concatenate([[result.gsadf[name]], gsadf_cv]),
            ],
            index=["ADF", "SADF", "GSADF"],
            columns=columns,
        )
    return tables


@dataclass(frozen=True)
class DiagnosticsResult:
    """
    Outcome of the right-tailed test for every series or for the panel.

    Attributes:
        accepted: Series for which explosive behaviour is significant at 95%
        rejected: Series for which it is not
        sig: Highest level at which the null is rejected (e.g. ``'95%'``),
            or ``'Reject'`` when the statistic is below every critical value
        dummy: 1 where the statistic is at or above the 95% critical value
        panel: Whether the panel statistic was tested
        option: ``'gsadf'`` or ``'sadf'``
        method: Method of the critical values used
    """
    accepted: List[str]
    rejected: List[str]
    sig: pd.Series
    dummy: pd.Series
    panel: bool
    option: str
    method: CriticalValueMethod

    @property
    def any_explosive(self) -> bool:
        return len(self.accepted) > 0


def _significance(stat: float, levels: np.ndarray, labels: List[str]) -> str:
    label = NO_REJECTION
    for level, name in zip(levels, labels):
        if stat >= level:
            label = name
    return label


def diagnostics(result: RADFResult,
                cv: Optional[CriticalValueSet] = None,
                option: DiagnosticOption = "gsadf") -> DiagnosticsResult:
    """
    Find the series that reject the unit root null at the 95% level.

    Args:
        result: Observed statistics from ``radf``
        cv: Critical values; Monte Carlo critical values are simulated when None
        option: ``'gsadf'`` (default) or ``'sadf'`` (Monte Carlo critical values only)

    Returns:
        DiagnosticsResult: Accepted and rejected series with significance labels

    Raises:
        InputError: If ``option`` is unknown or not available for the method
        ArgumentMismatchError: If ``result`` and cv disagree
        ConfigError: If the 95% level was not computed
    """
    cv = _resolve_cv(result, cv)
    _check_option(option, cv)
    dating = cv.level_index(DATING_LEVEL)
    labels = cv.level_labels()
    panel = cv.method.is_panel

    if cv.method is CriticalValueMethod.SIEVE_BOOTSTRAP:
        names = [PANEL_NAME]
        stats = np.array([result.gsadf_panel])
        levels = cv.gsadf_panel_cv[np.newaxis, :]
    elif cv.method is CriticalValueMethod.WILD_BOOTSTRAP:
        names = list(result.names)
        stats = result.gsadf.to_numpy()
        levels = cv.gsadf_cv
    else:
        names = list(result.names)
        source, table = (result.sadf, cv.sadf_cv) if option == "sadf" else (result.gsadf, cv.gsadf_cv)
        stats = source.to_numpy()
        levels = np.tile(table, (len(names), 1))

    sig = pd.Series([_significance(s, lv, labels) for s, lv in zip(stats, levels)],
                    index=names, name="sig")
    dummy = pd.Series((stats >= levels[:, dating]).astype(int), index=names, name="dummy")
    accepted = [n for n in names if dummy[n] == 1]
    rejected = [n for n in names if dummy[n] == 0]

    if not accepted:
        logger.info("Cannot reject the unit root null at the 95% level for any series")

    return DiagnosticsResult(
        accepted=accepted,
        rejected=rejected,
        sig=sig,
        dummy=dummy,
        panel=panel,
        option=option,
        method=cv.method,
    )


@dataclass(frozen=True)
class Datestamp:
    """
    Explosive episodes of the series that reject the null.

    Attributes:
        episodes: One table per series with columns ``Start``, ``End`` and
            ``Duration`` (number of periods); series without episodes of at
            least ``min_duration`` periods are omitted
        dummy: 0/1 indicator of explosive periods over the full time index,
            one column per accepted series
        panel: Whether the panel statistic was dated
        min_duration: Shortest reported episode
        option: ``'gsadf'`` or ``'sadf'``
        method: Method of the critical values used
    """
    episodes: Dict[str, pd.DataFrame]
    dummy: pd.DataFrame
    panel: bool
    min_duration: int
    option: str
    method: CriticalValueMethod

    def __getitem__(self, name: str) -> pd.DataFrame:
        return self.episodes[name]

    def __len__(self) -> int:
        return len(self.episodes)

    def __iter__(self):
        return iter(self.episodes)


def find_episodes(positions: np.ndarray) -> List[np.ndarray]:
    """
    Split sorted integer positions into runs of consecutive values.

    Examples:
        >>> [list(run) for run in find_episodes(np.array([3, 4, 5, 9, 10]))]
        [[3, 4, 5], [9, 10]]
    """
    if positions.size == 0:
        return []
    breaks = np.flatnonzero(np.diff(positions) != 1) + 1
    return np.split(positions, breaks)


def datestamp(result: RADFResult,
              cv: Optional[CriticalValueSet] = None,
              option: DiagnosticOption = "gsadf",
              min_duration: int = 0) -> Datestamp:
    """
    Date the episodes of explosive behaviour.

    A period is explosive when the BSADF statistic (BADF for ``option='sadf'``)
    exceeds its 95% critical value. Consecutive explosive periods form an
    episode. Only series accepted by ``diagnostics`` are dated.

    Args:
        result: Observed statistics from ``radf``
        cv: Critical values; Monte Carlo critical values are simulated when None
        option: ``'gsadf'`` (default) or ``'sadf'`` (Monte Carlo critical values only)
        min_duration: Episodes shorter than this many periods are dropped;
            ``log(T)`` is a common rule of thumb

    Returns:
        Datestamp: Episodes per series and a 0/1 dummy over the full index

    Raises:
        InputError: If ``option`` or ``min_duration`` is invalid
        ArgumentMismatchError: If ``result`` and ``cv`` disagree
        ConfigError: If the 95% level was not computed
    """
    min_duration = validate_positive_int(min_duration, "min_duration", strictly=False)
    cv = _resolve_cv(result, cv)
    diag = diagnostics(result, cv=cv, option=option)
    dating = cv.level_index(DATING_LEVEL)
    offset = result.offset

    stamped: Dict[str, np.ndarray] = {}
    if cv.method is CriticalValueMethod.SIEVE_BOOTSTRAP:
        if diag.accepted:
            stat = result.bsadf_panel.to_numpy()
            stamped[PANEL_NAME] = np.flatnonzero(stat > cv.bsadf_panel_cv[:, dating]) + offset
    else:
        for name in diag.accepted:
            j = result.names.index(name)
            if cv.method is CriticalValueMethod.WILD_BOOTSTRAP:
                stat, crit = result.bsadf[name].to_numpy(), cv.bsadf_cv[:, dating, j]
            elif option == "sadf":
                stat, crit = result.badf[name].to_numpy(), cv.badf_cv[:, dating]
            else:
                stat, crit = result.bsadf[name].to_numpy(), cv.bsadf_cv[:, dating]
            stamped[name] = np.flatnonzero(stat > crit) + offset

    index = result.index
    episodes: Dict[str, pd.DataFrame] = {}
    dummy = pd.DataFrame(0, index=index, columns=list(stamped), dtype=int)
    for name, positions in stamped.items():
        runs = [run for run in find_episodes(positions) if run.size >= min_duration]
        if not runs:
            continue
        column = dummy.columns.get_loc(name)
        for run in runs:
            dummy.iloc[run, column] = 1
        episodes[name] = pd.DataFrame({
            "Start": [index[run[0]] for run in runs],
            "End": [index[run[-1]] for run in runs],
            "Duration": [int(run.size) for run in runs],
        })

    if not episodes:
        logger.warning("No explosive episodes to report"
                       + (f" with min_duration={min_duration}" if min_duration else ""))

    return Datestamp(
        episodes=episodes,
        dummy=dummy,
        panel=cv.method.is_panel,
        min_duration=min_duration,
        option=option,
        method=cv.method,
    )
