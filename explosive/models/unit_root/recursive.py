# explosive/models/unit_root/recursive.py
"""
Recursive least squares state.

``RecursiveLeastSquares`` holds the inverse cross-product matrix, the
coefficient vector and the residual sum of squares of a least squares fit
and lets observations be added or removed one at a time with the matrix
inversion lemma. It runs on the same compiled kernels as the expanding-window
ADF recursion and is the building block for rolling or custom window schemes.
"""

import logging
from typing import Optional

import numpy as np

from explosive.core.config import get_numerical_config
from explosive.core.exceptions import ComputationError, InputError, InsufficientLength
from explosive.core.types import Matrix, Vector
from explosive.core.validation import validate_numeric_array
from explosive.models.unit_root._numba_core import (
    STATUS_OK, coefficient_tstat, initial_fit, rank_one_update
)

# Set up module-level logger
logger = logging.getLogger("explosive.models.unit_root.recursive")


class RecursiveLeastSquares:
    """
    Least squares fit updated one observation at a time.

    The fit is initialized from a block of rows; ``update`` adds a row and
    ``downdate`` removes one, each in O(k^2) for k regressors.

    Args:
        x: Initial regressor block (nrows x k) with nrows > k
        y: Initial responses (nrows,)
        pivot_tolerance: Smallest admissible pivot and update denominator;
            defaults to the ``numerical.pivot_tolerance`` configuration value

    Raises:
        InputError: If the arrays are malformed
        InsufficientLength: If there are not more rows than regressors
        ComputationError: If the initial cross-product matrix is singular

    Examples:
        >>> import numpy as np
        >>> rng = np.random.default_rng(0)
        >>> x = np.column_stack([np.ones(20), rng.standard_normal(20)])
        >>> y = x @ np.array([1.0, 2.0]) + rng.standard_normal(20)
        >>> rls = RecursiveLeastSquares(x[:10], y[:10])
        >>> for row, value in zip(x[10:], y[10:]):
        ...     rls.update(row, value)
        >>> rls.nobs
        20
    """

    def __init__(self,
                 x: Matrix,
                 y: Vector,
                 pivot_tolerance: Optional[float] = None) -> None:
        x = validate_numeric_array(x, "x")
        y = validate_numeric_array(y, "y")
        if x.ndim != 2 or y.ndim != 1 or x.shape[0] != y.shape[0]:
            raise InputError(
                "x must be two-dimensional with one row per element of y",
                argument="x", value=(x.shape, y.shape)
            )
        if x.shape[0] <= x.shape[1]:
            raise InsufficientLength(
                "The initial block needs more rows than regressors",
                nobs=x.shape[0], required=x.shape[1] + 1, argument="x"
            )

        if pivot_tolerance is None:
            pivot_tolerance = get_numerical_config().pivot_tolerance
        self._tolerance = float(pivot_tolerance)

        p, beta, ssr, status = initial_fit(
            np.ascontiguousarray(x), np.ascontiguousarray(y), x.shape[0], self._tolerance
        )
        if status != STATUS_OK:
            raise ComputationError(
                "Initial cross-product matrix is singular",
                operation="initial_fit", window_end=x.shape[0]
            )

        self._p = p
        self._beta = beta
        self._ssr = float(ssr)
        self._nobs = x.shape[0]

    @property
    def nobs(self) -> int:
        """Number of observations currently in the fit."""
        return self._nobs

    @property
    def nparams(self) -> int:
        return self._beta.shape[0]

    @property
    def params(self) -> Vector:
        """Copy of the coefficient vector."""
        return self._beta.copy()

    @property
    def inverse(self) -> Matrix:
        """Copy of the inverse cross-product matrix."""
        return self._p.copy()

    @property
    def ssr(self) -> float:
        """Residual sum of squares."""
        return self._ssr

    def _apply(self, x: Vector, y: float, sign: float, operation: str) -> None:
        row = np.ascontiguousarray(x, dtype=np.float64)
        if row.shape != (self.nparams,):
            raise InputError(
                f"Regressor row must have length {self.nparams}",
                argument="x", value=row.shape
            )
        ssr, status = rank_one_update(
            self._p, self._beta, self._ssr, row, float(y), sign, self._tolerance
        )
        if status != STATUS_OK:
            raise ComputationError(
                "Rank-one modification would make the cross-product matrix singular",
                operation=operation, window_end=self._nobs
            )
        self._ssr = float(ssr)
        self._nobs += int(sign)

    def update(self, x: Vector, y: float) -> None:
        """
        Add one observation to the fit.

        Args:
            x: Regressor row of length k
            y: Response value

        Raises:
            ComputationError: If the update is numerically degenerate
        """
        self._apply(x, y, 1.0, "update")

    def downdate(self, x: Vector, y: float) -> None:
        """
        Remove one observation that is currently part of the fit.

        Args:
            x: Regressor row of length k
            y: Response value

        Raises:
            InsufficientLength: If removing the row would leave no residual
                degrees of freedom
            ComputationError: If the downdate is numerically degenerate
        """
        if self._nobs - 1 <= self.nparams:
            raise InsufficientLength(
                "Removing an observation would leave no residual degrees of freedom",
                nobs=self._nobs - 1, required=self.nparams + 1, argument="x"
            )
        self._apply(x, y, -1.0, "downdate")

    def tstat(self, index: int = 1) -> float:
        """
        t-statistic of one coefficient with the OLS variance estimator.

        Args:
            index: Coefficient position (1 is the lagged level in an ADF design)

        Raises:
            ComputationError: If the residual variance is not positive
        """
        if not 0 <= index < self.nparams:
            raise InputError("Coefficient index out of range",
                             argument="index", value=index,
                             constraint=f"0 <= index < {self.nparams}")
        stat, status = coefficient_tstat(self._p, self._beta, self._ssr, self._nobs, index)
        if status != STATUS_OK:
            raise ComputationError(
                "Residual variance is not positive",
                operation="tstat", window_end=self._nobs
            )
        return float(stat)

    def __repr__(self) -> str:
        return f"RecursiveLeastSquares(nobs={self._nobs}, nparams={self.nparams})"
