"""Utility functions and classes for formula-jax."""

from .logging import get_logger, setup_logging
from .validation import validate_array_dimensions, validate_data_table, as_float_column

__all__ = [
    "get_logger",
    "setup_logging",
    "validate_array_dimensions",
    "validate_data_table",
    "as_float_column",
]
