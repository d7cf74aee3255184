'''
Data preparation for the recursive unit root tests.

The engines work on a plain ``(nobs, nseries)`` float64 array. This module
turns the inputs users actually have (lists, NumPy arrays, pandas Series and
DataFrames, possibly carrying a date column) into that array plus the series
names and the time index that labels the output.

Functions:
    prepare_data: Validate and normalize a series or panel
    find_date_column: Locate the first datetime column of a DataFrame
'''

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from explosive.core.exceptions import InputError
from explosive.core.types import PanelLike
from explosive.core.validation import validate_numeric_array

# Set up module-level logger
logger = logging.getLogger("explosive.utils.data")


@dataclass(frozen=True)
class PreparedData:
    """Validated panel ready for numeric processing.

    Attributes:
        values: Read-only float64 array of shape (nobs, nseries)
        names: Series names, one per column
        index: Time index of length nobs
    """
    values: np.ndarray
    names: List[str]
    index: pd.Index

    @property
    def nobs(self) -> int:
        return self.values.shape[0]

    @property
    def nseries(self) -> int:
        return self.values.shape[1]


def find_date_column(frame: pd.DataFrame) -> Optional[str]:
    """Return the label of the first datetime-like column, or None."""
    for column, dtype in frame.dtypes.items():
        if pd.api.types.is_datetime64_any_dtype(dtype):
            return column
    return None


def prepare_data(data: PanelLike, data_name: str = "data") -> PreparedData:
    """
    Validate and normalize a series or a panel of series.

    A datetime column in a DataFrame is used as the time index and removed
    before the numeric checks. Otherwise a DatetimeIndex (or any other index)
    of a pandas object is kept; plain arrays get a RangeIndex.

    Args:
        data: A single series or a panel (columns are series)
        data_name: Name of the argument for error messages

    Returns:
        PreparedData: Values, names and index

    Raises:
        InputError: If the data is not numeric, contains NaN/inf values, or
            has more than two dimensions

    Examples:
        >>> import pandas as pd
        >>> frame = pd.DataFrame({
        ...     "date": pd.date_range("2020-01-01", periods=3),
        ...     "x": [1.0, 2.0, 3.0],
        ... })
        >>> prepared = prepare_data(frame)
        >>> prepared.names
        ['x']
        >>> prepared.values.shape
        (3, 1)
    """
    if isinstance(data, pd.DataFrame):
        frame = data
        date_column = find_date_column(frame)
        if date_column is not None:
            logger.debug(f"Using column '{date_column}' as the time index")
            index = pd.DatetimeIndex(frame[date_column])
            frame = frame.drop(columns=[date_column])
        else:
            index = frame.index
        if frame.shape[1] == 0:
            raise InputError(f"{data_name} has no numeric columns", argument=data_name)
        names = [str(c) for c in frame.columns]
        values = frame.to_numpy()
    elif isinstance(data, pd.Series):
        index = data.index
        names = [str(data.name) if data.name is not None else "series1"]
        values = data.to_numpy().reshape(-1, 1)
    else:
        values = np.asarray(data)
        if values.ndim == 1:
            values = values.reshape(-1, 1)
        index = pd.RangeIndex(values.shape[0]) if values.ndim == 2 else None
        names = [f"series{i + 1}" for i in range(values.shape[1])] if values.ndim == 2 else []

    if values.ndim != 2:
        raise InputError(
            f"{data_name} must be one- or two-dimensional",
            argument=data_name,
            value=values.shape,
            constraint="ndim <= 2"
        )

    values = validate_numeric_array(values, data_name)
    values.setflags(write=False)

    if len(set(names)) != len(names):
        raise InputError(
            f"{data_name} has duplicated series names",
            argument=data_name,
            value=names
        )

    return PreparedData(values=values, names=names, index=pd.Index(index))
