"""
Contrast coding for formula-jax.

Turns a model frame column into a block of numeric design columns.
Categorical columns use treatment contrasts: one indicator column per level
with the base level dropped. Numeric columns pass through as one float column.
"""

from typing import Optional, Union

import numpy as np
import pandas as pd
import scipy.sparse as sp

from ..core.exceptions import DataFormatError, InsufficientLevelsError, InvalidBaseError
from ..utils.validation import as_float_column


def contr_treatment(
    n_levels: int,
    contrasts: bool = True,
    sparse: bool = False,
    base: int = 1,
    *,
    column: Optional[str] = None,
) -> Union[np.ndarray, sp.csr_matrix]:
    """
    Treatment contrast matrix for a factor with ``n_levels`` levels.

    Args:
        n_levels: Number of levels k
        contrasts: If False return the k x k indicator block, otherwise drop
            the base column to give k x (k-1)
        sparse: Return a scipy CSR matrix instead of a dense array
        base: 1-based index of the base (reference) level
        column: Column name, used only in error context

    Raises:
        InsufficientLevelsError: If contrasts are requested for k < 2
        InvalidBaseError: If base is outside 1..k

    Examples:
        contr_treatment(3)           -> [[0, 0], [1, 0], [0, 1]]
        contr_treatment(3, base=3)   -> [[1, 0], [0, 1], [0, 0]]
    """
    if contrasts and n_levels < 2:
        raise InsufficientLevelsError(n_levels=n_levels, column=column)

    contr = sp.identity(n_levels, dtype=np.float64, format="csr") if sparse else np.eye(n_levels)
    if not contrasts:
        return contr

    if not 1 <= base <= n_levels:
        raise InvalidBaseError(n_levels=n_levels, base=base, column=column)

    keep = [i for i in range(n_levels) if i != base - 1]
    return contr[:, keep]


def is_categorical(values) -> bool:
    return isinstance(getattr(values, "dtype", None), pd.CategoricalDtype)


def code_column(values: pd.Series, base: int = 1, name: Optional[str] = None) -> np.ndarray:
    """
    Design columns for one model frame column.

    Args:
        values: Frame column; categorical columns must not contain missing values
        base: 1-based base level for categorical columns
        name: Column name for error messages

    Returns:
        (n, k-1) treatment-coded block for a categorical column with k levels,
        (n, 1) float block otherwise
    """
    name = name if name is not None else str(getattr(values, "name", "column"))

    if is_categorical(values):
        codes = np.asarray(values.cat.codes)
        if np.any(codes < 0):
            raise DataFormatError(
                specific_issue=f"categorical column '{name}' contains missing values"
            )
        contr = contr_treatment(
            len(values.cat.categories), contrasts=True, base=base, column=name
        )
        return contr[codes, :]

    return as_float_column(values, name=name).reshape(-1, 1)
