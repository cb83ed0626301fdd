"""Core functionality for formula-jax."""

from .exceptions import (
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

__all__ = [
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
