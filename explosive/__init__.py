# explosive/__init__.py
"""
explosive - Recursive unit root tests for explosive behaviour

Detects and dates periods of explosive ("bubble") dynamics in one or more time
series with recursive right-tailed ADF tests, and establishes significance
with simulated or bootstrapped critical values.

The package provides:
- ``radf``: BADF, BSADF, ADF, SADF and GSADF statistics of a series or panel,
  computed with recursive least squares
- ``mc_cv``, ``wb_cv``, ``sb_cv``: Monte Carlo, wild bootstrap and sieve
  bootstrap (panel) critical values, reproducible under parallel execution
- ``summary``, ``diagnostics``, ``datestamp``: inference and dating of
  explosive episodes
- ``sim_dgp1``, ``sim_dgp2``: bubble data generating processes

Examples:
    >>> import explosive
    >>> y = explosive.sim_dgp1(100, seed=3)
    >>> result = explosive.radf(y)
    >>> cv = explosive.mc_cv(100, nrep=500, seed=7)
    >>> tables = explosive.summary(result, cv)
"""

import logging
from typing import Union

# Set up package-wide logger
logger = logging.getLogger("explosive")
logger.setLevel(logging.INFO)
_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logger.addHandler(_handler)

from .version import __version__, __author__, __license__

# Import subpackages to make them available in the explosive namespace
from . import core
from . import models
from . import utils

from .core import (
    ExplosiveError, InputError, InsufficientLength, InvalidWindow,
    ArgumentMismatchError, ConfigError, ComputationError, ExplosiveWarning,
    CriticalValueMethod, get_config, set_config, reset_config,
)
from .models import (
    DesignMatrix, RADFResult, RecursiveLeastSquares, StatisticSeries,
    build_design_matrix, compute_statistics, default_minw, radf,
    CriticalValueSet, MonteCarlo, WildBootstrap, SieveBootstrap, mc_cv, wb_cv, sb_cv,
    Datestamp, DiagnosticsResult, summary, diagnostics, datestamp,
    sim_dgp1, sim_dgp2,
)


def get_version() -> str:
    """
    Return the version of the package.

    Returns:
        str: Version string in format MAJOR.MINOR.PATCH
    """
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level of the package logger.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
              or as an integer constant from the logging module
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
    logger.info(f"Log level set to {logging.getLevelName(level)}")


__all__ = [
    # Subpackages
    'core',
    'models',
    'utils',

    # Statistics
    'DesignMatrix',
    'RADFResult',
    'RecursiveLeastSquares',
    'StatisticSeries',
    'build_design_matrix',
    'compute_statistics',
    'default_minw',
    'radf',

    # Critical values
    'CriticalValueMethod',
    'CriticalValueSet',
    'MonteCarlo',
    'WildBootstrap',
    'SieveBootstrap',
    'mc_cv',
    'wb_cv',
    'sb_cv',

    # Inference
    'Datestamp',
    'DiagnosticsResult',
    'summary',
    'diagnostics',
    'datestamp',

    # Simulation
    'sim_dgp1',
    'sim_dgp2',

    # Exceptions
    'ExplosiveError',
    'InputError',
    'InsufficientLength',
    'InvalidWindow',
    'ArgumentMismatchError',
    'ConfigError',
    'ComputationError',
    'ExplosiveWarning',

    # Configuration
    'get_config',
    'set_config',
    'reset_config',

    # Public functions
    'get_version',
    'set_log_level',

    # Version info
    '__version__',
    '__author__',
    '__license__',
]

logger.debug(f"explosive v{__version__} initialized successfully")
