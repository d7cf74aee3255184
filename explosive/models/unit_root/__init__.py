"""
explosive Unit Root Module

Recursive right-tailed ADF testing. The design matrix builder embeds a level
series into the ADF regression; the recursive engine computes the ADF
statistic of every expanding window with rank-one least squares updates and
reduces the sequence to the BADF, BSADF, SADF and GSADF statistics.

The hot loops are compiled with Numba and release the GIL, so the same
routines serve observed data and every replication of the critical value
engines.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("explosive.models.unit_root")

from .design import DesignMatrix, build_design_matrix, default_minw
from .recursive import RecursiveLeastSquares
from .radf import RADFResult, StatisticSeries, compute_statistics, radf

__all__ = [
    'DesignMatrix',
    'build_design_matrix',
    'default_minw',
    'RecursiveLeastSquares',
    'RADFResult',
    'StatisticSeries',
    'compute_statistics',
    'radf',
]
