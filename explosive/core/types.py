# explosive/core/types.py

"""
Core type annotations and custom types for the explosive package.

This module defines the type aliases shared by the recursive ADF engine, the
critical value engines and their consumers, the progress callback contract,
and the closed set of critical value methods.
"""

from enum import Enum
from typing import Callable, Literal, Sequence, Tuple, Union

import numpy as np
import pandas as pd

# NumPy array type aliases
Vector = np.ndarray  # 1D array
Matrix = np.ndarray  # 2D array

# Input data accepted by the public entry points
SeriesLike = Union[np.ndarray, pd.Series, Sequence[float]]
PanelLike = Union[np.ndarray, pd.Series, pd.DataFrame, Sequence[float]]
TimeIndex = Union[pd.Index, pd.DatetimeIndex, pd.RangeIndex]

# Probability levels at which critical values are extracted
Probabilities = Tuple[float, ...]
DEFAULT_PROBS: Probabilities = (0.90, 0.95, 0.99)

# Progress reporting: fraction complete in [0, 1] and a short message
ProgressCallback = Callable[[float, str], None]

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
WildDistribution = Literal["rademacher", "normal"]
DiagnosticOption = Literal["gsadf", "sadf"]


class CriticalValueMethod(str, Enum):
    """Closed set of methods that produce critical values."""

    MONTE_CARLO = "Monte Carlo"
    """Quantiles of statistics computed on simulated random walks."""

    WILD_BOOTSTRAP = "Wild Bootstrap"
    """Quantiles from sign-perturbed increments of each observed series."""

    SIEVE_BOOTSTRAP = "Sieve Bootstrap"
    """Panel quantiles from residual resampling of fitted autoregressions."""

    @property
    def is_panel(self) -> bool:
        """Whether critical values of this method refer to the panel statistic."""
        return self is CriticalValueMethod.SIEVE_BOOTSTRAP
