"""
Model matrix construction for formula-jax.

Converts a model frame into a dense design matrix plus an ``assign`` vector
mapping every column back to the term that produced it.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
import jax.numpy as jnp

from .contrasts import code_column
from .expressions import ExpressionNode
from .frame import ModelFrame
from .naming import coefficient_names
from ..config.settings import FormulaJaxConfig, get_default_config
from ..core.exceptions import ModelSpecificationError, UnsupportedInteractionOrderError
from ..utils.logging import get_logger
from ..utils.validation import validate_array_dimensions


@dataclass(eq=False)
class ModelMatrix:
    """
    Dense model matrix.

    Attributes:
        matrix: (n, p) design matrix
        assign: length-p vector; 0 marks the intercept, j >= 1 the j-th
            fixed-effect term
        column_names: Coefficient labels, None when the formula has terms
            without a labelling scheme
    """
    matrix: np.ndarray
    assign: np.ndarray
    column_names: Optional[List[str]] = None

    @property
    def shape(self) -> Tuple[int, int]:
        return self.matrix.shape

    @property
    def n_rows(self) -> int:
        return self.matrix.shape[0]

    @property
    def n_columns(self) -> int:
        return self.matrix.shape[1]

    def term_columns(self, term_index: int) -> np.ndarray:
        """Column indices produced by a term (0 = intercept)."""
        return np.flatnonzero(self.assign == term_index)

    def to_jax(self, dtype: Optional[str] = None) -> jnp.ndarray:
        """
        Matrix as a JAX array for JAX-based fitting code.

        Args:
            dtype: Defaults to the configured ``matrix.jax_dtype``
        """
        dtype = dtype or get_default_config().matrix.jax_dtype
        return jnp.asarray(self.matrix, dtype=dtype)


def expand_columns(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Row-wise interaction of two column blocks.

    Column ``i * q + j`` of the result is ``a[:, i] * b[:, j]``, so the
    columns of ``a`` vary slowest.

    Args:
        a: (n, p) block (1-D input is treated as one column)
        b: (n, q) block

    Returns:
        (n, p * q) block
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.ndim == 1:
        a = a.reshape(-1, 1)
    if b.ndim == 1:
        b = b.reshape(-1, 1)
    validate_array_dimensions(a, min_dims=2, max_dims=2, name="left block")
    validate_array_dimensions(b, expected_shape=(a.shape[0], None), name="right block")

    n_rows = a.shape[0]
    return (a[:, :, None] * b[:, None, :]).reshape(n_rows, a.shape[1] * b.shape[1])


class ModelMatrixBuilder:
    """
    Builds model matrices from model frames.

    Only the evaluation terms used by fixed-effect terms are coded, so large
    categorical columns that appear only in grouping terms are never expanded.
    """

    def __init__(self, config: Optional[FormulaJaxConfig] = None):
        self.logger = get_logger(self.__class__.__name__)
        self.config = config

    def build(self, frame: ModelFrame) -> ModelMatrix:
        """
        Build the model matrix of a frame.

        Raises:
            UnsupportedInteractionOrderError: For terms combining three or
                more evaluation terms
            InsufficientLevelsError: For categorical columns with one level
        """
        config = self.config or get_default_config()
        terms = frame.terms
        n_rows = frame.n_rows

        fixed = terms.fixed_effect_terms()
        used_rows = np.flatnonzero(
            terms.factors[:, [column for column, _ in fixed]].any(axis=1)
        ) if fixed else np.array([], dtype=int)

        coded: Dict[int, np.ndarray] = {
            row: code_column(
                frame.column(terms.eval_terms[row]),
                base=config.contrasts.base,
                name=str(terms.eval_terms[row]),
            )
            for row in used_rows
        }

        blocks: List[np.ndarray] = []
        assign: List[int] = []
        if terms.intercept:
            blocks.append(np.ones((n_rows, 1)))
            assign.append(0)

        for j, (column, term) in enumerate(fixed, 1):
            participating = [coded[row] for row in np.flatnonzero(terms.factors[:, column])]
            block = self._term_block(term, participating)
            blocks.append(block)
            assign.extend([j] * block.shape[1])

        matrix = np.hstack(blocks) if blocks else np.empty((n_rows, 0))
        model_matrix = ModelMatrix(
            matrix=matrix.astype(config.matrix.dtype, copy=False),
            assign=np.asarray(assign, dtype=int),
            column_names=self._column_names(frame, config.contrasts.base),
        )

        self.logger.debug(
            "Built model matrix",
            shape=model_matrix.shape,
            n_terms=len(fixed),
            intercept=terms.intercept,
        )
        return model_matrix

    def _column_names(self, frame: ModelFrame, base: int) -> Optional[List[str]]:
        try:
            return coefficient_names(frame, base=base)
        except ModelSpecificationError as e:
            self.logger.debug("No column names for model matrix", reason=e.context.get("reason"))
            return None

    @staticmethod
    def _term_block(term: ExpressionNode, participating: List[np.ndarray]) -> np.ndarray:
        if len(participating) == 1:
            return participating[0]
        if len(participating) == 2:
            return expand_columns(*participating)
        if not participating:
            raise ModelSpecificationError(
                term=str(term), reason="term does not reference any evaluation term"
            )
        raise UnsupportedInteractionOrderError(term=str(term), order=len(participating))


def build_model_matrix(frame: ModelFrame, config: Optional[FormulaJaxConfig] = None) -> ModelMatrix:
    """
    Convenience function to build a model matrix.

    Args:
        frame: ModelFrame from ``model_frame``
        config: Optional configuration overriding the global one

    Returns:
        ModelMatrix with matrix and assign vector
    """
    builder = ModelMatrixBuilder(config)
    return builder.build(frame)
