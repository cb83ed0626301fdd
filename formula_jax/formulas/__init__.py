"""
Formula system for formula-jax.

Provides term expansion, model frames and model matrix construction.
"""

from .expressions import Symbol, Call, Literal, Formula, as_node, call, formula, all_vars
from .terms import TermsTable, ExpandedTerms, build_terms, expand
from .evaluation import ExpressionEvaluator
from .frame import ModelFrame, ModelFrameBuilder, model_frame, model_response, na_omit, drop_unused_levels
from .contrasts import contr_treatment, code_column
from .design_matrix import ModelMatrix, ModelMatrixBuilder, build_model_matrix, expand_columns
from .naming import coefficient_names

__all__ = [
    # Main API
    "build_terms",
    "model_frame",
    "build_model_matrix",
    "coefficient_names",
    "model_response",
    # Expressions
    "Symbol",
    "Call",
    "Literal",
    "Formula",
    "as_node",
    "call",
    "formula",
    "all_vars",
    # Core classes
    "TermsTable",
    "ExpandedTerms",
    "expand",
    "ExpressionEvaluator",
    "ModelFrame",
    "ModelFrameBuilder",
    "ModelMatrix",
    "ModelMatrixBuilder",
    # Building blocks
    "na_omit",
    "drop_unused_levels",
    "contr_treatment",
    "code_column",
    "expand_columns",
]
