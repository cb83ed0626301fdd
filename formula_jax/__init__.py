"""
formula-jax: model formulas to design matrices

Expands symbolic model formulas into ordered term tables and builds model
frames, treatment-coded model matrices and coefficient labels from pandas
DataFrames.
"""

__version__ = "0.1.0"

# Formula system
from .formulas import (
    Symbol,
    Call,
    Literal,
    Formula,
    call,
    formula,
    all_vars,
    TermsTable,
    ModelFrame,
    ModelMatrix,
    ExpressionEvaluator,
    build_terms,
    model_frame,
    build_model_matrix,
    coefficient_names,
    model_response,
    contr_treatment,
    expand_columns,
)

# Configuration
from .config.settings import FormulaJaxConfig, get_default_config, reset_default_config

# Import key exception classes
from .core.exceptions import (
    FormulaJaxError,
    DataFormatError,
    ModelSpecificationError,
    MalformedExpressionError,
    UnsupportedInteractionOrderError,
    MissingResponseError,
    ContrastError,
    InsufficientLevelsError,
    InvalidBaseError,
    ConfigurationError,
)

from .utils.logging import setup_logging, refresh_loggers

__all__ = [
    # Version info
    "__version__",

    # Expressions
    "Symbol",
    "Call",
    "Literal",
    "Formula",
    "call",
    "formula",
    "all_vars",

    # Pipeline
    "TermsTable",
    "ModelFrame",
    "ModelMatrix",
    "ExpressionEvaluator",
    "build_terms",
    "model_frame",
    "build_model_matrix",
    "coefficient_names",
    "model_response",
    "contr_treatment",
    "expand_columns",

    # Configuration
    "FormulaJaxConfig",
    "get_config",
    "configure",
    "reset_config",
    "setup_logging",

    # Exceptions
    "FormulaJaxError",
    "DataFormatError",
    "ModelSpecificationError",
    "MalformedExpressionError",
    "UnsupportedInteractionOrderError",
    "MissingResponseError",
    "ContrastError",
    "InsufficientLevelsError",
    "InvalidBaseError",
    "ConfigurationError",
]


def get_config() -> FormulaJaxConfig:
    """Get the global configuration instance."""
    return get_default_config()


def configure(**kwargs) -> None:
    """
    Update global configuration.

    Examples:
        configure(**{"contrasts.base": 2, "matrix.dtype": "float32"})
    """
    get_default_config().update(**kwargs)
    refresh_loggers()


def reset_config() -> FormulaJaxConfig:
    """Restore the default configuration."""
    config = reset_default_config()
    refresh_loggers()
    return config
