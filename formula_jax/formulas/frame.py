"""
Model frame construction for formula-jax.

Selects the evaluation-term columns of a formula from a data table, drops
incomplete rows and prunes unused categorical levels.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .contrasts import is_categorical
from .evaluation import ExpressionEvaluator
from .expressions import ExpressionNode, Formula, Symbol
from .terms import TermsTable
from ..config.settings import FormulaJaxConfig, get_default_config
from ..core.exceptions import DataFormatError, MissingResponseError
from ..utils.logging import get_logger
from ..utils.validation import as_float_column, validate_data_table


NAAction = Callable[[pd.DataFrame], Tuple[pd.DataFrame, np.ndarray]]


def na_omit(data: pd.DataFrame) -> Tuple[pd.DataFrame, np.ndarray]:
    """
    Keep the complete cases of ``data``.

    Returns:
        (copy of the retained rows, boolean mask over the original rows)
    """
    mask = ~data.isna().any(axis=1).to_numpy()
    return data.loc[mask].copy(), mask


def drop_unused_levels(values: pd.Series) -> pd.Series:
    """
    Prune the categories of a categorical column to the observed levels.

    Observed levels keep their relative order and codes become contiguous.
    Non-categorical columns are returned unchanged. The input is not modified.
    """
    if not is_categorical(values):
        return values
    return values.cat.remove_unused_categories()


@dataclass(eq=False)
class ModelFrame:
    """
    Data needed to build a model matrix.

    Attributes:
        data: One column per evaluation term, named by its string form
        terms: TermsTable of the formula
        retained_mask: Boolean mask over the source rows, True = retained
    """

    data: pd.DataFrame
    terms: TermsTable
    retained_mask: np.ndarray

    @property
    def n_rows(self) -> int:
        return len(self.data)

    def column(self, eval_term: ExpressionNode) -> pd.Series:
        """Frame column of an evaluation term."""
        return self.data[str(eval_term)]

    def is_categorical(self, eval_term: ExpressionNode) -> bool:
        return is_categorical(self.column(eval_term))

    def levels(self, eval_term: ExpressionNode) -> List[Any]:
        """Retained levels of a categorical evaluation term."""
        return list(self.column(eval_term).cat.categories)

    def response(self) -> np.ndarray:
        return model_response(self)

    def model_matrix(self):
        from .design_matrix import build_model_matrix
        return build_model_matrix(self)

    def coefficient_names(self) -> List[str]:
        from .naming import coefficient_names
        return coefficient_names(self)


class ModelFrameBuilder:
    """
    Builds model frames from formulas and pandas DataFrames.

    Symbols are looked up by column name; composite evaluation terms such
    as ``log(c)`` are delegated to ``evaluator``.
    """

    def __init__(
        self,
        evaluator: Optional[Callable[[ExpressionNode, pd.DataFrame], Any]] = None,
        na_action: NAAction = na_omit,
        config: Optional[FormulaJaxConfig] = None,
    ):
        self.logger = get_logger(self.__class__.__name__)
        self.evaluator = evaluator or ExpressionEvaluator()
        self.na_action = na_action
        self.config = config

    def build(self, formula: Union[Formula, TermsTable], data: pd.DataFrame) -> ModelFrame:
        """
        Build the model frame for a formula.

        Args:
            formula: Formula or an already built TermsTable
            data: Source table; it is never modified

        Returns:
            ModelFrame owning copies of the selected columns
        """
        terms = formula if isinstance(formula, TermsTable) else TermsTable.from_formula(formula)
        validate_data_table(data)
        settings = (self.config or get_default_config()).frame

        columns = {}
        for eval_term in terms.eval_terms:
            name = str(eval_term)
            columns[name] = self._as_column(
                self._resolve(eval_term, data), name, settings.strings_as_categorical
            )

        selected = pd.DataFrame(columns, index=data.index)
        frame_data, mask = self.na_action(selected)
        mask = np.asarray(mask, dtype=bool)

        if settings.drop_unused_levels:
            for name in frame_data.columns:
                if is_categorical(frame_data[name]):
                    frame_data[name] = drop_unused_levels(frame_data[name])

        self.logger.debug(
            "Built model frame",
            columns=list(frame_data.columns),
            n_rows=len(frame_data),
            n_dropped=int(np.sum(~mask)),
        )
        return ModelFrame(data=frame_data, terms=terms, retained_mask=mask)

    def _resolve(self, eval_term: ExpressionNode, data: pd.DataFrame) -> Any:
        """Values of one evaluation term."""
        if isinstance(eval_term, Symbol):
            if eval_term.name not in data.columns:
                raise DataFormatError(
                    missing_columns=[eval_term.name],
                    available_columns=list(data.columns),
                )
            return data[eval_term.name]

        values = self.evaluator(eval_term, data)
        if len(values) != len(data):
            raise DataFormatError(
                specific_issue=(
                    f"'{eval_term}' evaluated to {len(values)} values for {len(data)} rows"
                )
            )
        return values

    @staticmethod
    def _as_column(values: Any, name: str, strings_as_categorical: bool):
        """Copy values into a categorical or float column."""
        if is_categorical(values):
            return pd.Categorical(values).copy()

        if isinstance(values, pd.Series) and strings_as_categorical and (
            pd.api.types.is_object_dtype(values) or pd.api.types.is_string_dtype(values)
        ):
            return pd.Categorical(values)

        return as_float_column(values, name=name)


def model_frame(formula: Union[Formula, TermsTable], data: pd.DataFrame, **kwargs) -> ModelFrame:
    """
    Convenience function to build a model frame.

    Args:
        formula: Formula or TermsTable
        data: Source DataFrame
        **kwargs: Passed to ModelFrameBuilder (evaluator, na_action, config)

    Returns:
        ModelFrame
    """
    builder = ModelFrameBuilder(**kwargs)
    return builder.build(formula, data)


def model_response(frame: ModelFrame) -> np.ndarray:
    """
    Response column of a model frame.

    Raises:
        MissingResponseError: If the formula is one-sided
    """
    if not frame.terms.response:
        formula = frame.terms.formula
        raise MissingResponseError(formula=str(formula) if formula is not None else None)
    return frame.column(frame.terms.response_term).to_numpy(copy=True)
