# explosive/core/validation.py

"""
Validation utilities for the explosive package.

All checks run eagerly, before any regression or simulation work starts, so a
bad argument never wastes a long replication loop. Each function either
returns the normalized value or raises the exception type that describes the
failed precondition (``InputError`` and subclasses for data and window
arguments, ``ConfigError`` for simulation settings).
"""

import os
from typing import Any, Optional, Sequence, Tuple

import numpy as np

from explosive.core.exceptions import (
    ConfigError, InputError, InsufficientLength, InvalidWindow,
    raise_input_error, warn_redundant
)
from explosive.core.types import Probabilities

# Smallest admissible minimum window
MINW_FLOOR = 2


def validate_numeric_array(array: np.ndarray, array_name: str = "data") -> np.ndarray:
    """Validate that an array contains finite numeric values only.

    Args:
        array: Array to validate
        array_name: Name of the array for error messages

    Returns:
        np.ndarray: The validated array as float64

    Raises:
        InputError: If the array is non-numeric, empty, or contains NaN/inf
    """
    arr = np.asarray(array)
    if arr.dtype == object or not (np.issubdtype(arr.dtype, np.number) or arr.dtype == bool):
        raise InputError(
            f"{array_name} must contain numeric values only",
            argument=array_name,
            value=str(arr.dtype),
            constraint="numeric dtype"
        )
    arr = arr.astype(np.float64)

    if arr.size == 0:
        raise InputError(f"{array_name} cannot be empty", argument=array_name)

    nan_mask = np.isnan(arr)
    if nan_mask.any():
        raise InputError(
            f"{array_name} contains NaN values",
            argument=array_name,
            value=np.argwhere(nan_mask)[:5].tolist(),
            constraint="no missing values",
            details="Positions of the first missing values are listed under Value"
        )

    if np.isinf(arr).any():
        raise InputError(
            f"{array_name} contains infinite values",
            argument=array_name,
            constraint="finite values"
        )

    return arr


def validate_positive_int(value: Any,
                          name: str,
                          strictly: bool = True) -> int:
    """Validate an integer argument.

    Args:
        value: The value to check
        name: Argument name for error messages
        strictly: Require value > 0 (otherwise value >= 0)

    Returns:
        int: The validated value

    Raises:
        InputError: If the value is not an admissible integer
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise_input_error(
            f"Argument '{name}' should be an integer",
            argument=name, value=value, constraint="integer"
        )
    value = int(value)
    if strictly and value <= 0:
        raise_input_error(
            f"Argument '{name}' should be a positive integer",
            argument=name, value=value, constraint="> 0"
        )
    if not strictly and value < 0:
        raise_input_error(
            f"Argument '{name}' should be a non-negative integer",
            argument=name, value=value, constraint=">= 0"
        )
    return value


def validate_lag(lag: Any) -> int:
    """Validate the autoregressive augmentation order."""
    return validate_positive_int(lag, "lag", strictly=False)


def validate_minw(minw: Any,
                  nobs: int,
                  lag: int,
                  greater_than: int = MINW_FLOOR - 1) -> int:
    """Validate the minimum window against the series length and lag.

    The first recursive window holds ``minw`` rows of the design matrix,
    which has ``nobs - lag - 1`` rows in total, and must leave at least one
    residual degree of freedom for ``2 + lag`` regression parameters.

    Args:
        minw: Minimum window size
        nobs: Number of observations in the series
        lag: Lag order
        greater_than: ``minw`` must be strictly greater than this value

    Returns:
        int: The validated minimum window

    Raises:
        InvalidWindow: If ``minw`` is below its floor or leaves no degrees of freedom
        InsufficientLength: If the series is too short for the first window
    """
    if isinstance(minw, bool) or not isinstance(minw, (int, np.integer)):
        raise InvalidWindow(
            "Argument 'minw' should be an integer",
            argument="minw", value=minw, constraint="integer"
        )
    minw = int(minw)

    if minw <= greater_than:
        raise InvalidWindow(
            f"Argument 'minw' should be greater than {greater_than}",
            argument="minw", value=minw, constraint=f"minw > {greater_than}"
        )

    n_params = 2 + lag
    if minw <= n_params:
        raise InvalidWindow(
            "Argument 'minw' leaves no residual degrees of freedom",
            argument="minw", value=minw,
            constraint=f"minw > number of regression parameters (2 + lag = {n_params})",
            context={"lag": lag}
        )

    rows = nobs - lag - 1
    if rows < minw:
        raise InsufficientLength(
            "Series is too short for the requested minimum window and lag",
            nobs=nobs,
            required=minw + lag + 1,
            argument="minw", value=minw,
            constraint="nobs >= minw + lag + 1",
            context={"lag": lag}
        )

    return minw


def validate_replications(value: Any, name: str = "nboot") -> int:
    """Validate a replication count.

    Raises:
        ConfigError: If the value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise ConfigError(
            f"Argument '{name}' should be a positive integer",
            setting=name, value=value, issue="non-positive replication count"
        )
    return int(value)


def validate_probs(probs: Sequence[float]) -> Probabilities:
    """Validate probability levels for quantile extraction.

    Levels must lie strictly between 0 and 1 and be strictly increasing.

    Raises:
        ConfigError: If the levels are invalid
    """
    try:
        values = tuple(float(p) for p in probs)
    except (TypeError, ValueError) as e:
        raise ConfigError(
            "Probability levels must be a sequence of numbers",
            setting="probs", value=probs, issue=str(e)
        ) from e

    if len(values) == 0:
        raise ConfigError("At least one probability level is required",
                          setting="probs", value=probs)
    if any(not 0.0 < p < 1.0 for p in values):
        raise ConfigError(
            "Probability levels must lie strictly between 0 and 1",
            setting="probs", value=values, issue="out of range"
        )
    if any(b <= a for a, b in zip(values, values[1:])):
        raise ConfigError(
            "Probability levels must be strictly increasing",
            setting="probs", value=values, issue="not increasing"
        )
    return values


def validate_seed(seed: Any) -> Optional[int]:
    """Validate a random seed (None or a non-negative integer).

    Raises:
        ConfigError: If the seed is invalid
    """
    if seed is None:
        return None
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or seed < 0:
        raise ConfigError(
            "Argument 'seed' should be None or a non-negative integer",
            setting="seed", value=seed
        )
    return int(seed)


def default_ncores() -> int:
    """Detected hardware concurrency minus one reserved core (at least one)."""
    return max(1, (os.cpu_count() or 1) - 1)


def validate_parallel(parallel: Any, ncores: Optional[Any]) -> Tuple[bool, int]:
    """Validate the parallel execution switch and worker count.

    Supplying ``ncores`` without ``parallel=True`` has no effect and is
    reported with an ``ExplosiveWarning``.

    Returns:
        Tuple[bool, int]: The parallel flag and the worker count

    Raises:
        ConfigError: If ``parallel`` is not boolean or ``ncores`` is invalid
    """
    if not isinstance(parallel, (bool, np.bool_)):
        raise ConfigError(
            "Argument 'parallel' should be a boolean",
            setting="parallel", value=parallel
        )
    parallel = bool(parallel)

    if ncores is None:
        return parallel, default_ncores()

    if not parallel:
        warn_redundant("ncores", "'ncores' only applies when parallel=True")

    if isinstance(ncores, bool) or not isinstance(ncores, (int, np.integer)) or ncores < 1:
        raise ConfigError(
            "Argument 'ncores' should be a positive integer",
            setting="ncores", value=ncores, issue="invalid worker count"
        )
    return parallel, int(ncores)
