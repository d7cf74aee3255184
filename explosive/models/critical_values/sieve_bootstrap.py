# explosive/models/critical_values/sieve_bootstrap.py

"""
Sieve bootstrap critical values for the panel GSADF statistic.

The sieve bootstrap approximates the short-run dynamics of each series by an
autoregression of its first differences, fitted under the unit root null.
Each replication resamples the fitted residuals with one index vector shared
by all series (which keeps the cross-sectional dependence of the panel),
rebuilds every difference path through its own autoregression, integrates the
paths back to levels and averages the resulting BSADF sequences over the
panel.

The autoregression of series ``i`` has order ``lag + 1`` and an intercept::

    dy[t] = c_i + a_i1 * dy[t-1] + ... + a_ip * dy[t-p] + e[t],   p = lag + 1

so every series contributes ``n - 2 - lag`` residuals to the residual table.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import statsmodels.api as sm

from explosive.core.config import get_simulation_config
from explosive.core.types import CriticalValueMethod, PanelLike, ProgressCallback
from explosive.core.validation import validate_lag, validate_minw
from explosive.models.critical_values.base import (
    CriticalValueEngine, CriticalValueSet, column_quantiles, running_max, scalar_quantiles
)
from explosive.models.unit_root._numba_core import ar_filter
from explosive.models.unit_root.design import default_minw
from explosive.models.unit_root.radf import recursive_badf
from explosive.utils.data import prepare_data

# Set up module-level logger
logger = logging.getLogger("explosive.models.critical_values.sieve_bootstrap")

# minw must be strictly greater than this value
SIEVE_MINW_FLOOR = 2


@dataclass(frozen=True)
class SieveFit:
    """
    Autoregressions of the first differences of every series in a panel.

    Attributes:
        constants: Intercepts, one per series
        coefs: AR coefficients of shape (n_series, lag + 1), first lag first
        history: First ``lag + 1`` differences of every series, shape (lag + 1, n_series)
        residuals: Residual table of shape (n - 2 - lag, n_series)
        anchors: First observation of every series
    """
    constants: np.ndarray
    coefs: np.ndarray
    history: np.ndarray
    residuals: np.ndarray
    anchors: np.ndarray

    @property
    def order(self) -> int:
        return self.coefs.shape[1]


def fit_sieve(values: np.ndarray, lag: int) -> SieveFit:
    """
    Fit the sieve autoregressions of a panel by OLS.

    Args:
        values: Level panel of shape (n, n_series)
        lag: Lag order of the ADF regression; the autoregression has order ``lag + 1``

    Returns:
        SieveFit: Fitted coefficients, initial history and residual table
    """
    order = lag + 1
    diffs = np.diff(values, axis=0)
    constants = []
    coefs = []
    residuals = []
    for j in range(values.shape[1]):
        dy = diffs[:, j]
        lags = np.column_stack([dy[order - i - 1:len(dy) - i - 1] for i in range(order)])
        response = dy[order:]
        fit = sm.OLS(response, sm.add_constant(lags, has_constant="add")).fit()
        constants.append(fit.params[0])
        coefs.append(fit.params[1:])
        residuals.append(fit.resid)
        logger.debug(f"Sieve autoregression of series {j}: "
                     f"constant={fit.params[0]:.4g}, coefs={np.round(fit.params[1:], 4)}")

    return SieveFit(
        constants=np.asarray(constants),
        coefs=np.vstack(coefs),
        history=np.ascontiguousarray(diffs[:order]),
        residuals=np.column_stack(residuals),
        anchors=values[0].copy(),
    )


class SieveBootstrap(CriticalValueEngine):
    """
    Sieve bootstrap critical value engine for the panel statistic.

    Args:
        data: Panel to resample (a datetime column is ignored)
        minw: Minimum window; defaults to ``default_minw(nobs)``, must exceed 2
        lag: Number of lagged differences
        nboot: Number of replications; defaults to ``simulation.nboot``
        probs: Probability levels of the quantiles
        seed: Root seed of the replication streams
        parallel: Run replications on a thread pool
        ncores: Worker count for the thread pool
        progress_callback: Optional ``callback(fraction, message)``

    Raises:
        InputError: If the data or ``lag`` are invalid
        InvalidWindow: If ``minw <= 2``
        ConfigError: If a simulation setting is invalid
    """

    method = CriticalValueMethod.SIEVE_BOOTSTRAP

    def __init__(self,
                 data: PanelLike,
                 minw: Optional[int] = None,
                 lag: int = 0,
                 nboot: Optional[int] = None,
                 probs: Optional[Sequence[float]] = None,
                 seed: Optional[int] = None,
                 parallel: Optional[bool] = None,
                 ncores: Optional[int] = None,
                 progress_callback: Optional[ProgressCallback] = None) -> None:
        prepared = prepare_data(data)
        self.values = prepared.values
        self.names: List[str] = list(prepared.names)
        self.nobs = prepared.nobs
        self.lag = validate_lag(lag)
        if minw is None:
            minw = default_minw(self.nobs)
        self.minw = validate_minw(minw, self.nobs, self.lag, greater_than=SIEVE_MINW_FLOOR)

        if nboot is None:
            nboot = get_simulation_config().nboot
        super().__init__(
            iterations=nboot, probs=probs, seed=seed, parallel=parallel,
            ncores=ncores, progress_callback=progress_callback, name="Sieve Bootstrap"
        )
        self._fit: Optional[SieveFit] = None

    @property
    def n_series(self) -> int:
        return self.values.shape[1]

    @property
    def fit(self) -> SieveFit:
        """Sieve autoregressions of the panel (fitted on first access)."""
        if self._fit is None:
            self._fit = fit_sieve(self.values, self.lag)
        return self._fit

    def _run(self, root: np.random.SeedSequence) -> CriticalValueSet:
        sieve = self.fit
        streams = root.spawn(self.iterations)
        nres = sieve.residuals.shape[0]
        minw, lag, tolerance = self.minw, self.lag, self.pivot_tolerance
        n_series = self.n_series

        def replicate(b: int) -> np.ndarray:
            rng = np.random.default_rng(streams[b])
            index = rng.integers(0, nres, nres)
            panel = None
            for j in range(n_series):
                shocks = sieve.residuals[index, j]
                shocks = shocks - shocks.mean()
                dy = ar_filter(sieve.constants[j], sieve.coefs[j], shocks, sieve.history[:, j].copy())
                path = np.empty(dy.shape[0] + 1)
                path[0] = sieve.anchors[j]
                path[1:] = sieve.anchors[j] + np.cumsum(dy)
                bsadf = np.maximum.accumulate(recursive_badf(path, minw, lag, tolerance))
                panel = bsadf if panel is None else panel + bsadf
            return panel / n_series

        bsadf_panel = np.vstack(self._run_tasks(replicate, self.iterations))
        gsadf_panel = bsadf_panel.max(axis=1)

        return CriticalValueSet(
            method=self.method,
            probs=self.probs,
            minw=minw,
            lag=lag,
            iterations=self.iterations,
            nobs=self.nobs,
            n_series=n_series,
            seed=root.entropy,
            bsadf_panel_cv=running_max(column_quantiles(bsadf_panel, self.probs)),
            gsadf_panel_cv=scalar_quantiles(gsadf_panel, self.probs),
            names=self.names,
        )


def sb_cv(data: PanelLike,
          minw: Optional[int] = None,
          nboot: Optional[int] = None,
          lag: int = 0,
          probs: Optional[Sequence[float]] = None,
          seed: Optional[int] = None,
          parallel: Optional[bool] = None,
          ncores: Optional[int] = None,
          progress_callback: Optional[ProgressCallback] = None) -> CriticalValueSet:
    """
    Sieve bootstrap critical values for the panel BSADF and GSADF statistics.

    Args:
        data: Panel to resample
        minw: Minimum window; defaults to ``default_minw(nobs)``, must exceed 2
        nboot: Number of replications; defaults to ``simulation.nboot`` (1000)
        lag: Number of lagged differences
        probs: Probability levels; defaults to ``simulation.probs``
        seed: Root seed for reproducible results
        parallel: Run replications on a thread pool
        ncores: Worker count for the thread pool
        progress_callback: Optional ``callback(fraction, message)``

    Returns:
        CriticalValueSet: Panel critical values with ``bsadf_panel_cv`` of shape
        (nobs - minw - lag, len(probs)) and ``gsadf_panel_cv`` of shape (len(probs),)

    Raises:
        InputError: If the data or ``lag`` are invalid
        InvalidWindow: If ``minw <= 2``
        ConfigError: If a simulation setting is invalid
        ComputationError: If a replication is numerically degenerate
    """
    engine = SieveBootstrap(data, minw=minw, lag=lag, nboot=nboot, probs=probs, seed=seed,
                            parallel=parallel, ncores=ncores,
                            progress_callback=progress_callback)
    return engine.compute()
