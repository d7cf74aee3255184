# explosive/models/unit_root/design.py
"""
Design matrix construction for the recursive ADF regression.

The ADF regression of a level series ``y`` with ``lag`` augmentation terms is

    dy[t] = mu + rho * y[t-1] + phi_1 * dy[t-1] + ... + phi_lag * dy[t-lag] + e[t]

This module builds the regressor matrix ``[1, y[t-1], dy[t-1], ..., dy[t-lag]]``
and the response ``dy[t]`` once per series, and provides the default minimum
window rule.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from explosive.core.exceptions import InputError, InsufficientLength
from explosive.core.types import SeriesLike
from explosive.core.validation import validate_lag, validate_numeric_array
from explosive.models.unit_root._numba_core import LEVEL_COLUMN, embed_design

# Set up module-level logger
logger = logging.getLogger("explosive.models.unit_root.design")


def default_minw(nobs: int) -> int:
    """
    Default minimum window: ``floor((0.01 + 1.8 / sqrt(n)) * n)``.

    Args:
        nobs: Number of observations of the series

    Returns:
        int: Minimum window size

    Examples:
        >>> default_minw(100)
        19
    """
    if nobs <= 0:
        raise InputError("Number of observations must be positive",
                         argument="nobs", value=nobs, constraint="> 0")
    return int(math.floor((0.01 + 1.8 / math.sqrt(nobs)) * nobs))


@dataclass(frozen=True)
class DesignMatrix:
    """
    Regressors and response of the ADF regression for one series.

    Attributes:
        x: Read-only regressor matrix of shape (nobs - lag - 1, 2 + lag)
        y: Read-only response vector ``dy`` of length nobs - lag - 1
        lag: Number of lagged differences
        nobs: Length of the level series the design was built from
    """
    x: np.ndarray
    y: np.ndarray
    lag: int
    nobs: int

    @property
    def nrows(self) -> int:
        """Number of usable regression rows."""
        return self.x.shape[0]

    @property
    def nparams(self) -> int:
        """Number of regression parameters (constant, level, lags)."""
        return self.x.shape[1]

    @property
    def level_column(self) -> int:
        """Column of the lagged level, whose t-statistic is the ADF statistic."""
        return LEVEL_COLUMN


def build_design_matrix(series: SeriesLike, lag: int = 0) -> DesignMatrix:
    """
    Build the ADF design of a level series.

    Args:
        series: One-dimensional level series of length n
        lag: Number of lagged differences (>= 0)

    Returns:
        DesignMatrix: Immutable design with n - lag - 1 rows

    Raises:
        InputError: If the series is not one-dimensional, not numeric or
            contains NaN/inf values
        InsufficientLength: If n <= lag + 2

    Examples:
        >>> import numpy as np
        >>> design = build_design_matrix(np.arange(10.0), lag=2)
        >>> design.x.shape
        (7, 4)
    """
    lag = validate_lag(lag)
    values = validate_numeric_array(np.asarray(series), "series")
    if values.ndim != 1:
        raise InputError("Series must be one-dimensional",
                         argument="series", value=values.shape, constraint="ndim == 1")

    nobs = values.shape[0]
    if nobs <= lag + 2:
        raise InsufficientLength(
            "Series is too short to form an ADF regression",
            nobs=nobs, required=lag + 3,
            argument="series", constraint="nobs > lag + 2",
            context={"lag": lag}
        )

    x, y = embed_design(np.ascontiguousarray(values), lag)
    x.setflags(write=False)
    y.setflags(write=False)
    logger.debug(f"Built design matrix with {x.shape[0]} rows and {x.shape[1]} columns")
    return DesignMatrix(x=x, y=y, lag=lag, nobs=nobs)
