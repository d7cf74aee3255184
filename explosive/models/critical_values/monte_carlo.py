# explosive/models/critical_values/monte_carlo.py

"""
Monte Carlo critical values under the random walk null.

Each replication simulates a driftless Gaussian random walk of the same length
as the data under test and runs the recursive ADF recursion on it. Because the
simulated paths do not depend on the data, one set of Monte Carlo critical
values serves every series of that length (and minimum window and lag).
"""

import logging
from typing import Optional, Sequence

import numpy as np

from explosive.core.config import get_simulation_config
from explosive.core.types import CriticalValueMethod, ProgressCallback
from explosive.core.validation import validate_lag, validate_minw, validate_positive_int
from explosive.models.critical_values.base import (
    CriticalValueEngine, CriticalValueSet, reduce_replications
)
from explosive.models.unit_root.design import default_minw
from explosive.models.unit_root.radf import recursive_badf

# Set up module-level logger
logger = logging.getLogger("explosive.models.critical_values.monte_carlo")


class MonteCarlo(CriticalValueEngine):
    """
    Monte Carlo critical value engine.

    Args:
        nobs: Length of the simulated random walks
        minw: Minimum window; defaults to ``default_minw(nobs)``
        lag: Number of lagged differences
        nrep: Number of replications; defaults to ``simulation.mc_iterations``
        probs: Probability levels of the quantiles
        seed: Root seed of the replication streams
        parallel: Run replications on a thread pool
        ncores: Worker count for the thread pool
        progress_callback: Optional ``callback(fraction, message)``

    Raises:
        InputError: If ``nobs``, ``minw`` or ``lag`` are invalid
        ConfigError: If a simulation setting is invalid

    Examples:
        >>> engine = MonteCarlo(100, nrep=200, seed=1)
        >>> cv = engine.compute()
        >>> cv.bsadf_cv.shape
        (81, 3)
    """

    method = CriticalValueMethod.MONTE_CARLO

    def __init__(self,
                 nobs: int,
                 minw: Optional[int] = None,
                 lag: int = 0,
                 nrep: Optional[int] = None,
                 probs: Optional[Sequence[float]] = None,
                 seed: Optional[int] = None,
                 parallel: Optional[bool] = None,
                 ncores: Optional[int] = None,
                 progress_callback: Optional[ProgressCallback] = None) -> None:
        self.nobs = validate_positive_int(nobs, "nobs")
        self.lag = validate_lag(lag)
        if minw is None:
            minw = default_minw(self.nobs)
        self.minw = validate_minw(minw, self.nobs, self.lag)

        if nrep is None:
            nrep = get_simulation_config().mc_iterations
        super().__init__(
            iterations=nrep, probs=probs, seed=seed, parallel=parallel,
            ncores=ncores, progress_callback=progress_callback, name="Monte Carlo"
        )

    def _run(self, root: np.random.SeedSequence) -> CriticalValueSet:
        streams = root.spawn(self.iterations)
        nobs, minw, lag, tolerance = self.nobs, self.minw, self.lag, self.pivot_tolerance

        def replicate(b: int) -> np.ndarray:
            rng = np.random.default_rng(streams[b])
            path = np.cumsum(rng.standard_normal(nobs))
            return recursive_badf(path, minw, lag, tolerance)

        badf = np.vstack(self._run_tasks(replicate, self.iterations))
        reduced = reduce_replications(badf, self.probs)

        return CriticalValueSet(
            method=self.method,
            probs=self.probs,
            minw=minw,
            lag=lag,
            iterations=self.iterations,
            nobs=nobs,
            n_series=1,
            seed=root.entropy,
            **reduced,
        )


def mc_cv(n: int,
          minw: Optional[int] = None,
          nrep: Optional[int] = None,
          lag: int = 0,
          probs: Optional[Sequence[float]] = None,
          seed: Optional[int] = None,
          parallel: Optional[bool] = None,
          ncores: Optional[int] = None,
          progress_callback: Optional[ProgressCallback] = None) -> CriticalValueSet:
    """
    Monte Carlo critical values for series of length ``n``.

    Args:
        n: Length of the series under test
        minw: Minimum window; defaults to ``default_minw(n)``
        nrep: Number of replications; defaults to ``simulation.mc_iterations`` (2000)
        lag: Number of lagged differences
        probs: Probability levels; defaults to ``simulation.probs``
        seed: Root seed for reproducible results
        parallel: Run replications on a thread pool
        ncores: Worker count for the thread pool
        progress_callback: Optional ``callback(fraction, message)``

    Returns:
        CriticalValueSet: Monte Carlo critical values

    Raises:
        InputError: If ``n``, ``minw`` or ``lag`` are invalid
        ConfigError: If a simulation setting is invalid
        ComputationError: If a replication is numerically degenerate
    """
    engine = MonteCarlo(n, minw=minw, lag=lag, nrep=nrep, probs=probs, seed=seed,
                        parallel=parallel, ncores=ncores,
                        progress_callback=progress_callback)
    return engine.compute()
