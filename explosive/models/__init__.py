# explosive/models/__init__.py
"""
explosive Models Module

The recursive ADF engine, the critical value engines and the inference layer
built on top of them:

- unit_root: design matrix, recursive least squares and the ``radf`` entry point
- critical_values: Monte Carlo, wild bootstrap and sieve bootstrap engines
- diagnostics: ``summary``, ``diagnostics`` and ``datestamp``
- simulation: bubble data generating processes
"""

import logging

# Set up module-level logger
logger = logging.getLogger("explosive.models")

from . import unit_root
from . import critical_values

from .unit_root import (
    DesignMatrix, RADFResult, RecursiveLeastSquares, StatisticSeries,
    build_design_matrix, compute_statistics, default_minw, radf
)
from .critical_values import (
    CriticalValueSet, MonteCarlo, SieveBootstrap, WildBootstrap, mc_cv, sb_cv, wb_cv
)
from .diagnostics import Datestamp, DiagnosticsResult, datestamp, diagnostics, summary
from .simulation import sim_dgp1, sim_dgp2, simulate_bubbles

__all__ = [
    'unit_root',
    'critical_values',
    'DesignMatrix',
    'RADFResult',
    'RecursiveLeastSquares',
    'StatisticSeries',
    'build_design_matrix',
    'compute_statistics',
    'default_minw',
    'radf',
    'CriticalValueSet',
    'MonteCarlo',
    'WildBootstrap',
    'SieveBootstrap',
    'mc_cv',
    'wb_cv',
    'sb_cv',
    'Datestamp',
    'DiagnosticsResult',
    'summary',
    'diagnostics',
    'datestamp',
    'sim_dgp1',
    'sim_dgp2',
    'simulate_bubbles',
]
