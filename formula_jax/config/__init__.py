"""Configuration management for formula-jax."""

from .settings import (
    FormulaJaxConfig,
    LoggingConfig,
    ContrastConfig,
    FrameConfig,
    MatrixConfig,
    get_default_config,
)

__all__ = [
    "FormulaJaxConfig",
    "LoggingConfig",
    "ContrastConfig",
    "FrameConfig",
    "MatrixConfig",
    "get_default_config",
]
