# explosive/models/unit_root/radf.py
"""
Recursive ADF statistics.

For every expanding sub-sample that starts at the first usable observation and
ends at each point from the minimum window to the end of the sample, the ADF
t-statistic on the lagged level is computed by recursive least squares. The
resulting backward ADF sequence (BADF) and its running supremum (BSADF) are
reduced to the scalar ADF, SADF and GSADF statistics.

Alignment: with ``n`` observations, minimum window ``minw`` and ``lag``
augmentation terms the vectors have ``n - minw - lag`` entries and entry
``k`` (zero-based) belongs to position ``minw + lag + k`` of the original
time index. The first ``minw + lag`` positions are never testable and are not
part of the output.

Classes:
    StatisticSeries: Statistics of one series (or one replication)
    RADFResult: Labelled statistics of a series or panel

Functions:
    compute_statistics: Statistics of a single level series
    radf: Statistics of a series or panel with labels and panel averages
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from explosive.core.config import get_numerical_config
from explosive.core.exceptions import ComputationError, InputError
from explosive.core.types import PanelLike, SeriesLike, TimeIndex
from explosive.core.validation import validate_lag, validate_minw, validate_numeric_array
from explosive.models.unit_root._numba_core import (
    STATUS_OK, STATUS_SINGULAR, rls_badf, series_badf
)
from explosive.models.unit_root.design import DesignMatrix, build_design_matrix, default_minw
from explosive.utils.data import prepare_data

# Set up module-level logger
logger = logging.getLogger("explosive.models.unit_root.radf")


@dataclass(frozen=True)
class StatisticSeries:
    """
    Recursive ADF statistics of one series.

    Attributes:
        badf: Backward ADF statistics, one per window end (read-only)
        bsadf: Running supremum of ``badf`` (read-only)
        adf: Full-sample ADF statistic (last element of ``badf``)
        sadf: Supremum of ``badf``
        gsadf: Supremum of ``bsadf`` (last element of ``bsadf``)
        minw: Minimum window used
        lag: Lag order used
    """
    badf: np.ndarray
    bsadf: np.ndarray
    adf: float
    sadf: float
    gsadf: float
    minw: int
    lag: int

    @property
    def offset(self) -> int:
        """Zero-based position in the original series of the first statistic."""
        return self.minw + self.lag

    def __len__(self) -> int:
        return self.badf.shape[0]


def statistics_from_badf(badf: np.ndarray, minw: int, lag: int) -> StatisticSeries:
    """Reduce a BADF vector to the full set of statistics."""
    bsadf = np.maximum.accumulate(badf)
    badf.setflags(write=False)
    bsadf.setflags(write=False)
    return StatisticSeries(
        badf=badf,
        bsadf=bsadf,
        adf=float(badf[-1]),
        sadf=float(badf.max()),
        gsadf=float(bsadf[-1]),
        minw=minw,
        lag=lag,
    )


def _check_status(status: int, window_rows: int, minw: int, lag: int,
                  operation: str) -> None:
    """Raise ComputationError for a failed kernel status."""
    if status == STATUS_OK:
        return
    if status == STATUS_SINGULAR:
        message = "Cross-product matrix of the recursive regression is singular"
    else:
        message = "Residual variance of the recursive regression is not positive"
    raise ComputationError(
        message,
        operation=operation,
        window_end=window_rows - 1,
        details="The window ends at this zero-based row of the design matrix; "
                "constant or perfectly collinear data produce this error",
        context={"minw": minw, "lag": lag}
    )


def design_badf(design: DesignMatrix,
                minw: int,
                pivot_tolerance: float) -> np.ndarray:
    """
    BADF vector of the expanding windows of an ADF design.

    Args:
        design: Design built by ``build_design_matrix``
        minw: Rows in the first window (validated)
        pivot_tolerance: Pivot and update denominator tolerance

    Returns:
        np.ndarray: BADF statistics of length ``design.nrows - minw + 1``

    Raises:
        ComputationError: If a window is numerically degenerate
    """
    badf, status, window_rows = rls_badf(design.x, design.y, minw, pivot_tolerance)
    _check_status(status, window_rows, minw, design.lag, "design_badf")
    return badf


def recursive_badf(values: np.ndarray,
                   minw: int,
                   lag: int,
                   pivot_tolerance: float) -> np.ndarray:
    """
    BADF vector of an already validated level series.

    This is the entry point used inside the replication loops of the critical
    value engines, where all arguments were checked once before the loop and
    the design is embedded inside the compiled kernel. It returns the same
    statistics as ``design_badf(build_design_matrix(values, lag), ...)``.

    Args:
        values: Contiguous float64 level series
        minw: Minimum window (validated)
        lag: Lag order (validated)
        pivot_tolerance: Pivot and update denominator tolerance

    Returns:
        np.ndarray: BADF statistics of length ``len(values) - minw - lag``

    Raises:
        ComputationError: If a window is numerically degenerate
    """
    badf, status, window_rows = series_badf(values, minw, lag, pivot_tolerance)
    _check_status(status, window_rows, minw, lag, "recursive_badf")
    return badf


def compute_statistics(series: SeriesLike,
                       minw: Optional[int] = None,
                       lag: int = 0) -> StatisticSeries:
    """
    Recursive ADF statistics of a single level series.

    Args:
        series: One-dimensional level series
        minw: Minimum window; defaults to ``default_minw(len(series))``
        lag: Number of lagged differences

    Returns:
        StatisticSeries: BADF, BSADF, ADF, SADF and GSADF

    Raises:
        InputError: If the series is malformed
        InvalidWindow: If ``minw`` is outside its admissible range
        InsufficientLength: If the series is too short
        ComputationError: If a window is numerically degenerate

    Examples:
        >>> import numpy as np
        >>> y = np.cumsum(np.random.default_rng(1).standard_normal(100))
        >>> stats = compute_statistics(y)
        >>> len(stats)
        81
        >>> stats.gsadf == stats.bsadf[-1]
        True
    """
    values = validate_numeric_array(np.asarray(series), "series")
    if values.ndim != 1:
        raise InputError("Series must be one-dimensional",
                         argument="series", value=values.shape, constraint="ndim == 1")
    lag = validate_lag(lag)
    nobs = values.shape[0]
    if minw is None:
        minw = default_minw(nobs)
    minw = validate_minw(minw, nobs, lag)

    tolerance = get_numerical_config().pivot_tolerance
    badf = design_badf(build_design_matrix(values, lag), minw, tolerance)
    return statistics_from_badf(badf, minw, lag)


@dataclass(frozen=True)
class RADFResult:
    """
    Recursive ADF statistics of a series or panel.

    Attributes:
        adf: Full-sample ADF statistic per series
        sadf: SADF statistic per series
        gsadf: GSADF statistic per series
        badf: BADF statistics (rows: trimmed time index, columns: series)
        bsadf: BSADF statistics (rows: trimmed time index, columns: series)
        bsadf_panel: Cross-sectional average of ``bsadf``
        gsadf_panel: Supremum of ``bsadf_panel``
        minw: Minimum window used
        lag: Lag order used
        names: Series names
        index: Full time index of the input
        statistics: Unlabelled statistics per series, in column order
    """
    adf: pd.Series
    sadf: pd.Series
    gsadf: pd.Series
    badf: pd.DataFrame
    bsadf: pd.DataFrame
    bsadf_panel: pd.Series
    gsadf_panel: float
    minw: int
    lag: int
    names: List[str]
    index: TimeIndex
    statistics: List[StatisticSeries] = field(repr=False)

    @property
    def nobs(self) -> int:
        """Length of the input series."""
        return len(self.index)

    @property
    def n_series(self) -> int:
        return len(self.names)

    @property
    def offset(self) -> int:
        """Zero-based position in the input index of the first statistic."""
        return self.minw + self.lag

    @property
    def trimmed_index(self) -> TimeIndex:
        """Time index of the statistic vectors."""
        return self.index[self.offset:]

    def __repr__(self) -> str:
        return (f"RADFResult(series={self.names}, nobs={self.nobs}, "
                f"minw={self.minw}, lag={self.lag})")


def radf(data: PanelLike,
         minw: Optional[int] = None,
         lag: int = 0) -> RADFResult:
    """
    Recursive ADF statistics of a series or a panel of series.

    Each column is tested separately; the panel statistic averages the BSADF
    sequences across columns.

    Args:
        data: Series or panel (array-like, pandas Series or DataFrame; a
            datetime column of a DataFrame becomes the time index)
        minw: Minimum window; defaults to ``default_minw(nobs)``
        lag: Number of lagged differences

    Returns:
        RADFResult: Labelled statistics

    Raises:
        InputError: If the data is malformed
        InvalidWindow: If ``minw`` is outside its admissible range
        InsufficientLength: If the series are too short
        ComputationError: If a window of some series is numerically degenerate

    Examples:
        >>> import numpy as np
        >>> rng = np.random.default_rng(7)
        >>> panel = np.cumsum(rng.standard_normal((60, 2)), axis=0)
        >>> result = radf(panel, lag=2)
        >>> result.bsadf.shape
        (44, 2)
    """
    prepared = prepare_data(data)
    lag = validate_lag(lag)
    nobs = prepared.nobs
    if minw is None:
        minw = default_minw(nobs)
    minw = validate_minw(minw, nobs, lag)

    tolerance = get_numerical_config().pivot_tolerance
    logger.info(f"Computing recursive ADF statistics for {prepared.nseries} series "
                f"(nobs={nobs}, minw={minw}, lag={lag})")

    statistics = []
    for j, name in enumerate(prepared.names):
        design = build_design_matrix(prepared.values[:, j], lag)
        try:
            badf = design_badf(design, minw, tolerance)
        except ComputationError as e:
            raise ComputationError(
                e.message, operation=e.operation, window_end=e.window_end,
                series=name, details=e.details, context=e.context
            ) from e
        statistics.append(statistics_from_badf(badf, minw, lag))

    trimmed = prepared.index[minw + lag:]
    badf_frame = pd.DataFrame(
        np.column_stack([s.badf for s in statistics]),
        index=trimmed, columns=prepared.names
    )
    bsadf_frame = pd.DataFrame(
        np.column_stack([s.bsadf for s in statistics]),
        index=trimmed, columns=prepared.names
    )
    bsadf_panel = bsadf_frame.mean(axis=1).rename("panel")

    result = RADFResult(
        adf=pd.Series([s.adf for s in statistics], index=prepared.names, name="adf"),
        sadf=pd.Series([s.sadf for s in statistics], index=prepared.names, name="sadf"),
        gsadf=pd.Series([s.gsadf for s in statistics], index=prepared.names, name="gsadf"),
        badf=badf_frame,
        bsadf=bsadf_frame,
        bsadf_panel=bsadf_panel,
        gsadf_panel=float(bsadf_panel.max()),
        minw=minw,
        lag=lag,
        names=list(prepared.names),
        index=prepared.index,
        statistics=statistics,
    )
    logger.debug(f"Highest GSADF statistic: {result.gsadf.max():.4f}")
    return result
