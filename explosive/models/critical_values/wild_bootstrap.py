# explosive/models/critical_values/wild_bootstrap.py

"""
Wild bootstrap critical values.

The wild bootstrap keeps the magnitudes of each series' observed increments
and randomizes only their signs (or scales them by standard normal draws), so
the bootstrap null inherits the heteroskedasticity pattern of the data. Each
series is resampled on its own and keeps its own critical values.

Every (series, replication) cell draws from its own random stream: the root
seed sequence is split per series and each series sequence per replication.
Resampling one series therefore never affects the draws of another.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from explosive.core.config import get_simulation_config
from explosive.core.exceptions import ConfigError
from explosive.core.types import CriticalValueMethod, PanelLike, ProgressCallback, WildDistribution
from explosive.core.validation import validate_lag, validate_minw
from explosive.models.critical_values.base import (
    CriticalValueEngine, CriticalValueSet, reduce_replications
)
from explosive.models.unit_root.design import default_minw
from explosive.models.unit_root.radf import recursive_badf
from explosive.utils.data import prepare_data

# Set up module-level logger
logger = logging.getLogger("explosive.models.critical_values.wild_bootstrap")

WILD_DISTRIBUTIONS = ("rademacher", "normal")


def wild_weights(rng: np.random.Generator, size: int, dist: WildDistribution) -> np.ndarray:
    """
    Draw i.i.d. wild bootstrap weights with mean zero and unit variance.

    Args:
        rng: Random generator
        size: Number of weights
        dist: ``'rademacher'`` for random signs or ``'normal'`` for standard normal draws

    Returns:
        np.ndarray: Weights of length ``size``
    """
    if dist == "rademacher":
        return rng.integers(0, 2, size) * 2.0 - 1.0
    return rng.standard_normal(size)


class WildBootstrap(CriticalValueEngine):
    """
    Wild bootstrap critical value engine.

    Args:
        data: Series or panel to resample (a datetime column is ignored)
        minw: Minimum window; defaults to ``default_minw(nobs)``
        lag: Number of lagged differences
        nboot: Number of replications; defaults to ``simulation.nboot``
        dist: Weight distribution, ``'rademacher'`` or ``'normal'``;
            defaults to ``simulation.wild_distribution``
        probs: Probability levels of the quantiles
        seed: Root seed of the replication streams
        parallel: Run the (series, replication) grid on a thread pool
        ncores: Worker count for the thread pool
        progress_callback: Optional ``callback(fraction, message)``

    Raises:
        InputError: If the data, ``minw`` or ``lag`` are invalid
        ConfigError: If a simulation setting or ``dist`` is invalid
    """

    method = CriticalValueMethod.WILD_BOOTSTRAP

    def __init__(self,
                 data: PanelLike,
                 minw: Optional[int] = None,
                 lag: int = 0,
                 nboot: Optional[int] = None,
                 dist: Optional[WildDistribution] = None,
                 probs: Optional[Sequence[float]] = None,
                 seed: Optional[int] = None,
                 parallel: Optional[bool] = None,
                 ncores: Optional[int] = None,
                 progress_callback: Optional[ProgressCallback] = None) -> None:
        prepared = prepare_data(data)
        self.values = prepared.values
        self.names = list(prepared.names)
        self.nobs = prepared.nobs
        self.lag = validate_lag(lag)
        if minw is None:
            minw = default_minw(self.nobs)
        self.minw = validate_minw(minw, self.nobs, self.lag)

        sim_config = get_simulation_config()
        if dist is None:
            dist = sim_config.wild_distribution
        if dist not in WILD_DISTRIBUTIONS:
            raise ConfigError(
                f"Unknown wild bootstrap distribution '{dist}'",
                setting="dist", value=dist,
                issue=f"expected one of {WILD_DISTRIBUTIONS}"
            )
        self.dist = dist

        if nboot is None:
            nboot = sim_config.nboot
        super().__init__(
            iterations=nboot, probs=probs, seed=seed, parallel=parallel,
            ncores=ncores, progress_callback=progress_callback, name="Wild Bootstrap"
        )

    @property
    def n_series(self) -> int:
        return self.values.shape[1]

    def _run(self, root: np.random.SeedSequence) -> CriticalValueSet:
        nboot = self.iterations
        n_series = self.n_series
        streams = [series_seq.spawn(nboot) for series_seq in root.spawn(n_series)]
        increments = np.diff(self.values, axis=0)
        anchors = self.values[0]
        minw, lag, tolerance, dist = self.minw, self.lag, self.pivot_tolerance, self.dist

        def replicate(i: int) -> np.ndarray:
            j, b = divmod(i, nboot)
            rng = np.random.default_rng(streams[j][b])
            weights = wild_weights(rng, increments.shape[0], dist)
            path = np.empty(increments.shape[0] + 1)
            path[0] = anchors[j]
            path[1:] = anchors[j] + np.cumsum(weights * increments[:, j])
            return recursive_badf(path, minw, lag, tolerance)

        def describe(i: int):
            j, b = divmod(i, nboot)
            return {"replication": b, "series": self.names[j]}

        logger.debug(f"Wild bootstrap with {self.dist} weights on {n_series} series")
        results = self._run_tasks(replicate, nboot * n_series, describe)

        per_series = [
            reduce_replications(np.vstack(results[j * nboot:(j + 1) * nboot]), self.probs)
            for j in range(n_series)
        ]

        return CriticalValueSet(
            method=self.method,
            probs=self.probs,
            minw=minw,
            lag=lag,
            iterations=nboot,
            nobs=self.nobs,
            n_series=n_series,
            seed=root.entropy,
            adf_cv=np.vstack([r["adf_cv"] for r in per_series]),
            sadf_cv=np.vstack([r["sadf_cv"] for r in per_series]),
            gsadf_cv=np.vstack([r["gsadf_cv"] for r in per_series]),
            badf_cv=np.stack([r["badf_cv"] for r in per_series], axis=2),
            bsadf_cv=np.stack([r["bsadf_cv"] for r in per_series], axis=2),
            names=self.names,
        )


def wb_cv(data: PanelLike,
          minw: Optional[int] = None,
          nboot: Optional[int] = None,
          lag: int = 0,
          dist: Optional[WildDistribution] = None,
          probs: Optional[Sequence[float]] = None,
          seed: Optional[int] = None,
          parallel: Optional[bool] = None,
          ncores: Optional[int] = None,
          progress_callback: Optional[ProgressCallback] = None) -> CriticalValueSet:
    """
    Wild bootstrap critical values, kept separately for every series.

    Args:
        data: Series or panel to resample
        minw: Minimum window; defaults to ``default_minw(nobs)``
        nboot: Number of replications; defaults to ``simulation.nboot`` (1000)
        lag: Number of lagged differences
        dist: ``'rademacher'`` (default) or ``'normal'`` weights
        probs: Probability levels; defaults to ``simulation.probs``
        seed: Root seed for reproducible results
        parallel: Run the (series, replication) grid on a thread pool
        ncores: Worker count for the thread pool
        progress_callback: Optional ``callback(fraction, message)``

    Returns:
        CriticalValueSet: Wild bootstrap critical values with ``bsadf_cv`` of
        shape (nobs - minw - lag, len(probs), n_series)

    Raises:
        InputError: If the data, ``minw`` or ``lag`` are invalid
        ConfigError: If a simulation setting is invalid
        ComputationError: If a replication is numerically degenerate

    Examples:
        >>> import numpy as np
        >>> panel = np.cumsum(np.random.default_rng(3).standard_normal((80, 3)), axis=0)
        >>> cv = wb_cv(panel, nboot=100, seed=11)
        >>> cv.bsadf_cv.shape
        (64, 3, 3)
    """
    engine = WildBootstrap(data, minw=minw, lag=lag, nboot=nboot, dist=dist, probs=probs,
                           seed=seed, parallel=parallel, ncores=ncores,
                           progress_callback=progress_callback)
    return engine.compute()
