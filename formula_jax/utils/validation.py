"""
Validation utilities for formula-jax.

Provides common validation functions for arrays and data tables.
"""

import numpy as np
import pandas as pd
from typing import Any, Optional, Tuple

from ..core.exceptions import DataFormatError


def validate_array_dimensions(
    array: Any,
    expected_shape: Optional[Tuple[Optional[int], ...]] = None,
    min_dims: Optional[int] = None,
    max_dims: Optional[int] = None,
    name: str = "array"
) -> None:
    """
    Validate array dimensions.

    Args:
        array: Array to validate
        expected_shape: Expected exact shape (None values are ignored)
        min_dims: Minimum number of dimensions
        max_dims: Maximum number of dimensions
        name: Name for error messages

    Raises:
        DataFormatError: If validation fails
    """
    if not hasattr(array, 'shape'):
        raise DataFormatError(
            specific_issue=f"{name} must be an array-like object with shape attribute"
        )

    shape = array.shape
    ndims = len(shape)

    if min_dims is not None and ndims < min_dims:
        raise DataFormatError(
            specific_issue=f"{name} has {ndims} dimensions, expected at least {min_dims}"
        )

    if max_dims is not None and ndims > max_dims:
        raise DataFormatError(
            specific_issue=f"{name} has {ndims} dimensions, expected at most {max_dims}"
        )

    if expected_shape is not None:
        if len(expected_shape) != ndims:
            raise DataFormatError(
                specific_issue=f"{name} has shape {shape}, expected {expected_shape}"
            )

        for i, (actual, expected) in enumerate(zip(shape, expected_shape)):
            if expected is not None and actual != expected:
                raise DataFormatError(
                    specific_issue=(
                        f"{name} dimension {i} has size {actual}, expected {expected}"
                    )
                )


def validate_data_table(data: Any, name: str = "data") -> None:
    """
    Validate that the data table is a pandas DataFrame with unique column names.

    Raises:
        DataFormatError: If validation fails
    """
    if not isinstance(data, pd.DataFrame):
        raise DataFormatError(
            specific_issue=f"{name} must be a pandas DataFrame, got {type(data).__name__}"
        )

    duplicated = data.columns[data.columns.duplicated()]
    if len(duplicated):
        raise DataFormatError(
            specific_issue=f"{name} has duplicated column names: {list(duplicated)}"
        )


def as_float_column(values: Any, name: str = "column") -> np.ndarray:
    """
    Copy numeric values into a float64 vector, with missing values as NaN.

    Raises:
        DataFormatError: If the values are not numeric
    """
    series = values if isinstance(values, pd.Series) else pd.Series(np.asarray(values))
    if not (pd.api.types.is_numeric_dtype(series) or pd.api.types.is_bool_dtype(series)):
        raise DataFormatError(
            specific_issue=f"column '{name}' has non-numeric type {series.dtype}"
        )
    return series.to_numpy(dtype=np.float64, na_value=np.nan, copy=True)
