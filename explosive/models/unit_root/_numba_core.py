"""
Numba-accelerated core functions for recursive unit root testing.

This module holds the kernels that every observed series and every simulated
or bootstrapped replication passes through, so they carry almost all of the
running time of the package:

- Embedding of a level series into the ADF design (constant, lagged level and
  lagged differences)
- Gauss-Jordan inversion of the small cross-product matrix of the first window,
  scaled to unit diagonal so that singularity is judged independently of units
- Rank-one update and downdate of the inverse cross-product matrix, the
  coefficient vector and the residual sum of squares (matrix inversion lemma)
- The expanding-window ADF statistic recursion
- The autoregressive filter that rebuilds sieve bootstrap difference paths

All kernels are compiled in nopython mode and release the GIL so that the
critical value engines can run replications on a thread pool. The kernels
never raise; failures are reported through integer status codes and turned
into exceptions by the Python wrappers.
"""

import logging
from typing import Tuple

import numpy as np
from numba import jit

# Set up module-level logger
logger = logging.getLogger("explosive.models.unit_root._numba_core")

# Status codes returned by the kernels
STATUS_OK = 0
STATUS_SINGULAR = 1
STATUS_NONPOSITIVE_VARIANCE = 2

# Position of the lagged level coefficient in the regressor vector
LEVEL_COLUMN = 1


# ============================================================================
# Design matrix
# ============================================================================

@jit(nopython=True, cache=True, nogil=True)
def embed_design(y: np.ndarray, lag: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Embed a level series into the ADF regression design.

    Row ``i`` regresses ``dy[i + lag]`` on a constant, the lagged level
    ``y[i + lag]`` and the lagged differences ``dy[i + lag - 1], ...,
    dy[i]``, where ``dy[t] = y[t + 1] - y[t]``.

    Args:
        y: Level series of length n
        lag: Number of lagged differences

    Returns:
        Tuple[np.ndarray, np.ndarray]: Regressors of shape (n - lag - 1, 2 + lag)
        and the response vector of length n - lag - 1
    """
    n = y.shape[0]
    nrows = n - lag - 1
    k = 2 + lag
    x = np.empty((nrows, k))
    response = np.empty(nrows)

    for i in range(nrows):
        t = i + lag
        response[i] = y[t + 1] - y[t]
        x[i, 0] = 1.0
        x[i, 1] = y[t]
        for j in range(1, lag + 1):
            x[i, 1 + j] = y[t - j + 1] - y[t - j]

    return x, response


# ============================================================================
# Small matrix algebra
# ============================================================================

@jit(nopython=True, cache=True, nogil=True)
def invert_small(a: np.ndarray, tolerance: float) -> Tuple[np.ndarray, int]:
    """
    Invert a symmetric positive semi-definite matrix by Gauss-Jordan elimination.

    The matrix is first scaled to unit diagonal, ``D a D`` with
    ``D = diag(a_ii ** -0.5)``, and the scaled matrix is inverted with
    partial pivoting. The pivots of the scaled matrix do not depend on the
    units of the regressors, so ``tolerance`` bounds collinearity rather than
    magnitude. The inverse of ``a`` is ``D inv(D a D) D``.

    Args:
        a: Square matrix (left untouched)
        tolerance: Smallest admissible pivot of the scaled matrix

    Returns:
        Tuple[np.ndarray, int]: The inverse and a status code
        (``STATUS_SINGULAR`` for a zero column or a pivot below the tolerance)
    """
    k = a.shape[0]
    inv = np.eye(k)
    scale = np.empty(k)
    for i in range(k):
        if not a[i, i] > 0.0:
            return inv, STATUS_SINGULAR
        scale[i] = 1.0 / np.sqrt(a[i, i])

    work = np.empty((k, k))
    for i in range(k):
        for j in range(k):
            work[i, j] = a[i, j] * scale[i] * scale[j]

    for col in range(k):
        pivot_row = col
        pivot_abs = abs(work[col, col])
        for r in range(col + 1, k):
            if abs(work[r, col]) > pivot_abs:
                pivot_abs = abs(work[r, col])
                pivot_row = r

        if pivot_abs <= tolerance:
            return inv, STATUS_SINGULAR

        if pivot_row != col:
            for c in range(k):
                tmp = work[col, c]
                work[col, c] = work[pivot_row, c]
                work[pivot_row, c] = tmp
                tmp = inv[col, c]
                inv[col, c] = inv[pivot_row, c]
                inv[pivot_row, c] = tmp

        pivot = work[col, col]
        for c in range(k):
            work[col, c] /= pivot
            inv[col, c] /= pivot

        for r in range(k):
            if r != col:
                factor = work[r, col]
                if factor != 0.0:
                    for c in range(k):
                        work[r, c] -= factor * work[col, c]
                        inv[r, c] -= factor * inv[col, c]

    for i in range(k):
        for j in range(k):
            inv[i, j] *= scale[i] * scale[j]

    return inv, STATUS_OK


@jit(nopython=True, cache=True, nogil=True)
def rank_one_update(p: np.ndarray,
                    beta: np.ndarray,
                    ssr: float,
                    x: np.ndarray,
                    y: float,
                    sign: float,
                    tolerance: float) -> Tuple[float, int]:
    """
    Add (sign = 1) or remove (sign = -1) one observation from a least squares fit.

    ``p`` is the inverse cross-product matrix and ``beta`` the coefficient
    vector; both are modified in place. With ``h = x'Px`` and the a priori
    residual ``e = y - x'beta``::

        K     = P x / (1 + sign * h)
        beta += sign * K e
        P    -= sign * K (P x)'
        SSR  += sign * e^2 / (1 + sign * h)

    Args:
        p: Inverse cross-product matrix (k x k), updated in place
        beta: Coefficient vector (k,), updated in place
        ssr: Current residual sum of squares
        x: Regressor row (k,)
        y: Response value
        sign: 1.0 to add the observation, -1.0 to remove it
        tolerance: Smallest admissible value of ``1 + sign * h``

    Returns:
        Tuple[float, int]: Updated residual sum of squares and a status code
    """
    k = p.shape[0]
    px = np.zeros(k)
    for i in range(k):
        acc = 0.0
        for j in range(k):
            acc += p[i, j] * x[j]
        px[i] = acc

    h = 0.0
    fitted = 0.0
    for i in range(k):
        h += x[i] * px[i]
        fitted += x[i] * beta[i]

    denom = 1.0 + sign * h
    if denom <= tolerance:
        return ssr, STATUS_SINGULAR

    e = y - fitted
    for i in range(k):
        gain = px[i] / denom
        beta[i] += sign * gain * e
        for j in range(k):
            p[i, j] -= sign * gain * px[j]

    return ssr + sign * e * e / denom, STATUS_OK


@jit(nopython=True, cache=True, nogil=True)
def coefficient_tstat(p: np.ndarray,
                      beta: np.ndarray,
                      ssr: float,
                      nrows: int,
                      index: int) -> Tuple[float, int]:
    """
    t-statistic of one coefficient with the OLS variance estimator.

    Returns:
        Tuple[float, int]: The statistic and a status code
        (``STATUS_NONPOSITIVE_VARIANCE`` when the standard error is not positive)
    """
    dof = nrows - p.shape[0]
    if dof <= 0:
        return np.nan, STATUS_NONPOSITIVE_VARIANCE
    variance = ssr / dof * p[index, index]
    if not variance > 0.0:
        return np.nan, STATUS_NONPOSITIVE_VARIANCE
    return beta[index] / np.sqrt(variance), STATUS_OK


@jit(nopython=True, cache=True, nogil=True)
def initial_fit(x: np.ndarray,
                y: np.ndarray,
                nrows: int,
                tolerance: float) -> Tuple[np.ndarray, np.ndarray, float, int]:
    """
    Least squares fit on the first ``nrows`` rows of the design.

    Returns:
        Tuple[np.ndarray, np.ndarray, float, int]: Inverse cross-product
        matrix, coefficients, residual sum of squares and a status code
    """
    k = x.shape[1]
    xtx = np.zeros((k, k))
    xty = np.zeros(k)
    for r in range(nrows):
        for i in range(k):
            xty[i] += x[r, i] * y[r]
            for j in range(k):
                xtx[i, j] += x[r, i] * x[r, j]

    p, status = invert_small(xtx, tolerance)
    beta = np.zeros(k)
    if status != STATUS_OK:
        return p, beta, 0.0, status

    for i in range(k):
        acc = 0.0
        for j in range(k):
            acc += p[i, j] * xty[j]
        beta[i] = acc

    ssr = 0.0
    for r in range(nrows):
        resid = y[r]
        for i in range(k):
            resid -= x[r, i] * beta[i]
        ssr += resid * resid

    return p, beta, ssr, STATUS_OK


# ============================================================================
# Recursive ADF
# ============================================================================

@jit(nopython=True, cache=True, nogil=True)
def rls_badf(x: np.ndarray,
             y: np.ndarray,
             minw: int,
             tolerance: float) -> Tuple[np.ndarray, int, int]:
    """
    ADF statistics of all expanding windows anchored at the first design row.

    The first window holds ``minw`` rows and is fitted directly; every later
    window adds one row through ``rank_one_update``. The lagged level is
    measured from its first value before fitting: only the intercept moves,
    the level coefficient and its standard error do not, and a series with a
    large mean and small variation keeps its precision.

    Args:
        x: Regressors (nrows x k), lagged level in column ``LEVEL_COLUMN``
        y: Response vector (nrows,)
        minw: Rows in the first window
        tolerance: Pivot and denominator tolerance

    Returns:
        Tuple[np.ndarray, int, int]: Statistics of length ``nrows - minw + 1``,
        a status code and the number of rows of the failing window (or -1)
    """
    nrows = x.shape[0]
    out = np.empty(nrows - minw + 1)

    xs = x.copy()
    origin = xs[0, LEVEL_COLUMN]
    for r in range(nrows):
        xs[r, LEVEL_COLUMN] -= origin

    p, beta, ssr, status = initial_fit(xs, y, minw, tolerance)
    if status != STATUS_OK:
        return out, status, minw

    stat, status = coefficient_tstat(p, beta, ssr, minw, LEVEL_COLUMN)
    if status != STATUS_OK:
        return out, status, minw
    out[0] = stat

    for r in range(minw, nrows):
        ssr, status = rank_one_update(p, beta, ssr, xs[r], y[r], 1.0, tolerance)
        if status != STATUS_OK:
            return out, status, r + 1
        stat, status = coefficient_tstat(p, beta, ssr, r + 1, LEVEL_COLUMN)
        if status != STATUS_OK:
            return out, status, r + 1
        out[r - minw + 1] = stat

    return out, STATUS_OK, -1


@jit(nopython=True, cache=True, nogil=True)
def series_badf(series: np.ndarray,
                minw: int,
                lag: int,
                tolerance: float) -> Tuple[np.ndarray, int, int]:
    """Embed a level series and run ``rls_badf`` on it."""
    x, y = embed_design(series, lag)
    return rls_badf(x, y, minw, tolerance)


# ============================================================================
# Sieve bootstrap reconstruction
# ============================================================================

@jit(nopython=True, cache=True, nogil=True)
def ar_filter(constant: float,
              coefs: np.ndarray,
              innovations: np.ndarray,
              history: np.ndarray) -> np.ndarray:
    """
    Rebuild a difference path from an autoregression and its innovations.

    The first ``p = len(coefs)`` values are copied from ``history``; after
    that ``d[t] = constant + innovations[t - p] + sum_i coefs[i] * d[t - 1 - i]``.

    Args:
        constant: Intercept of the autoregression
        coefs: AR coefficients, first lag first
        innovations: Resampled residuals
        history: Initial values in chronological order (length p)

    Returns:
        np.ndarray: Path of length ``p + len(innovations)``
    """
    p = coefs.shape[0]
    total = p + innovations.shape[0]
    out = np.empty(total)
    for t in range(p):
        out[t] = history[t]
    for t in range(p, total):
        value = constant + innovations[t - p]
        for i in range(p):
            value += coefs[i] * out[t - 1 - i]
        out[t] = value
    return out
