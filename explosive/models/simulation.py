# explosive/models/simulation.py
"""
Simulation of bubble processes.

The data generating processes of Phillips, Wu and Yu (2011) and Phillips, Shi
and Yu (2015) alternate between a random walk with a small drift and mildly
explosive autoregressive episodes

    y[t] = delta * y[t-1] + e[t],   delta = 1 + c1 * n^(-alpha)

After an episode the process collapses back to the level it had when the
episode started and continues as a random walk.

References:
    Phillips, P. C. B., Wu, Y., & Yu, J. (2011). Explosive behavior in the
    1990s Nasdaq: When did exuberance escalate asset values? International
    Economic Review, 52(1), 201-226.

    Phillips, P. C. B., Shi, S., & Yu, J. (2015). Testing for multiple
    bubbles: Historical episodes of exuberance and collapse in the S&P 500.
    International Economic Review, 56(4), 1043-1078.
"""

import logging
import math
from typing import List, Optional, Tuple

import numpy as np

from explosive.core.exceptions import InputError
from explosive.core.validation import validate_positive_int, validate_seed

# Set up module-level logger
logger = logging.getLogger("explosive.models.simulation")

# Starting level of every simulated path
INITIAL_LEVEL = 100.0


def _episode_bounds(nobs: int, episodes: List[Tuple[float, float]]) -> List[Tuple[int, int]]:
    bounds = []
    previous_end = 0
    for start, end in episodes:
        start, end = int(math.floor(start)), int(math.floor(end))
        if not previous_end < start <= end < nobs - 1:
            raise InputError(
                "Bubble episodes must be ordered, non-overlapping and end before the last observation",
                argument="episodes", value=(start, end),
                constraint=f"{previous_end} < start <= end < {nobs - 1}"
            )
        bounds.append((start, end))
        previous_end = end + 1
    return bounds


def simulate_bubbles(n: int,
                     episodes: List[Tuple[float, float]],
                     c: float = 1.0,
                     c1: float = 1.0,
                     eta: float = 0.6,
                     alpha: float = 0.6,
                     sigma: float = 6.79,
                     seed: Optional[int] = None) -> np.ndarray:
    """
    Simulate a random walk with mildly explosive episodes.

    Args:
        n: Number of observations
        episodes: ``(start, end)`` positions of each explosive episode (floored)
        c: Drift scale of the random walk regime, drift = ``c * n^(-eta)``
        c1: Scale of the explosive root, ``delta = 1 + c1 * n^(-alpha)``
        eta: Drift decay exponent
        alpha: Explosive root decay exponent
        sigma: Standard deviation of the innovations
        seed: Seed of the random generator

    Returns:
        np.ndarray: Simulated path of length ``n``

    Raises:
        InputError: If the episodes do not fit the sample
    """
    n = validate_positive_int(n, "n")
    bounds = _episode_bounds(n, episodes)
    rng = np.random.default_rng(validate_seed(seed))

    drift = c * n ** (-eta)
    delta = 1.0 + c1 * n ** (-alpha)
    shocks = sigma * rng.standard_normal(n)

    explosive = np.zeros(n, dtype=bool)
    collapse = {}
    for start, end in bounds:
        explosive[start:end + 1] = True
        collapse[end + 1] = start

    y = np.empty(n)
    y[0] = INITIAL_LEVEL
    for t in range(1, n):
        if explosive[t]:
            y[t] = delta * y[t - 1] + shocks[t]
        elif t in collapse:
            y[t] = y[collapse[t]] + shocks[t]
        else:
            y[t] = drift + y[t - 1] + shocks[t]

    logger.debug(f"Simulated {n} observations with explosive root {delta:.4f} "
                 f"over episodes {bounds}")
    return y


def sim_dgp1(n: int,
             te: Optional[float] = None,
             tf: Optional[float] = None,
             c: float = 1.0,
             c1: float = 1.0,
             eta: float = 0.6,
             alpha: float = 0.6,
             sigma: float = 6.79,
             seed: Optional[int] = None) -> np.ndarray:
    """
    Single bubble process of Phillips, Wu and Yu (2011).

    Args:
        n: Number of observations
        te: Origination of the bubble; defaults to ``0.4 * n``
        tf: Collapse of the bubble; defaults to ``0.15 * n + te``
        c, c1, eta, alpha, sigma: See ``simulate_bubbles``
        seed: Seed of the random generator

    Returns:
        np.ndarray: Simulated path

    Examples:
        >>> y = sim_dgp1(100, seed=1)
        >>> y.shape
        (100,)
    """
    if te is None:
        te = 0.4 * n
    if tf is None:
        tf = 0.15 * n + te
    return simulate_bubbles(n, [(te, tf)], c=c, c1=c1, eta=eta, alpha=alpha,
                            sigma=sigma, seed=seed)


def sim_dgp2(n: int,
             te1: Optional[float] = None,
             tf1: Optional[float] = None,
             te2: Optional[float] = None,
             tf2: Optional[float] = None,
             c: float = 1.0,
             c1: float = 1.0,
             eta: float = 0.6,
             alpha: float = 0.6,
             sigma: float = 6.79,
             seed: Optional[int] = None) -> np.ndarray:
    """
    Two bubble process of Phillips, Shi and Yu (2015).

    Args:
        n: Number of observations
        te1: Origination of the first bubble; defaults to ``0.2 * n``
        tf1: Collapse of the first bubble; defaults to ``0.2 * n + te1``
        te2: Origination of the second bubble; defaults to ``0.6 * n``
        tf2: Collapse of the second bubble; defaults to ``0.1 * n + te2``
        c, c1, eta, alpha, sigma: See ``simulate_bubbles``
        seed: Seed of the random generator

    Returns:
        np.ndarray: Simulated path
    """
    te1 = 0.2 * n if te1 is None else te1
    tf1 = 0.2 * n + te1 if tf1 is None else tf1
    te2 = 0.6 * n if te2 is None else te2
    tf2 = 0.1 * n + te2 if tf2 is None else tf2
    return simulate_bubbles(n, [(te1, tf1), (te2, tf2)], c=c, c1=c1, eta=eta,
                            alpha=alpha, sigma=sigma, seed=seed)
