"""
explosive Critical Values Module

Empirical null distributions of the recursive ADF statistics. Each engine
generates many synthetic samples under the unit root null, runs the recursive
ADF recursion on every one of them and reduces the collected statistics to
quantiles at the requested probability levels:

- Monte Carlo: Gaussian random walks of the length of the data
- Wild Bootstrap: sign-perturbed increments of each observed series,
  critical values kept per series
- Sieve Bootstrap: residual resampling of fitted autoregressions, critical
  values for the panel statistic

Replications draw from independent random streams derived from one seed, so
sequential and thread-pool execution give identical results.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("explosive.models.critical_values")

from .base import CriticalValueEngine, CriticalValueSet
from .monte_carlo import MonteCarlo, mc_cv
from .wild_bootstrap import WildBootstrap, wb_cv
from .sieve_bootstrap import SieveBootstrap, SieveFit, fit_sieve, sb_cv

__all__ = [
    'CriticalValueEngine',
    'CriticalValueSet',
    'MonteCarlo',
    'mc_cv',
    'WildBootstrap',
    'wb_cv',
    'SieveBootstrap',
    'SieveFit',
    'fit_sieve',
    'sb_cv',
]
