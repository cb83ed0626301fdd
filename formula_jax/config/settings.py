"""
Configuration management system for formula-jax.

Provides a hierarchical configuration system with support for
file-based configuration, environment variables, and runtime updates.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from enum import Enum

from ..core.exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MatrixDtype(str, Enum):
    """Floating point types for model matrices."""
    FLOAT32 = "float32"
    FLOAT64 = "float64"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    model_config = ConfigDict(validate_assignment=True, validate_default=True, use_enum_values=True)

    level: LogLevel = LogLevel.WARNING
    file_logging: bool = False
    log_file: Optional[Path] = None
    console_logging: bool = True
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator('level', mode='before')
    @classmethod
    def validate_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class ContrastConfig(BaseModel):
    """Contrast coding configuration."""
    model_config = ConfigDict(validate_assignment=True)

    base: int = 1

    @field_validator('base')
    @classmethod
    def validate_base(cls, v):
        if v < 1:
            raise ValueError("contrast base level is 1-based and must be >= 1")
        return v


class FrameConfig(BaseModel):
    """Model frame construction configuration."""
    model_config = ConfigDict(validate_assignment=True)

    drop_unused_levels: bool = True
    strings_as_categorical: bool = True


class MatrixConfig(BaseModel):
    """Model matrix configuration."""
    model_config = ConfigDict(validate_assignment=True, validate_default=True, use_enum_values=True)

    dtype: MatrixDtype = MatrixDtype.FLOAT64
    jax_dtype: MatrixDtype = MatrixDtype.FLOAT32


class FormulaJaxConfig(BaseModel):
    """Main configuration class for formula-jax."""
    model_config = ConfigDict(validate_assignment=True, validate_default=True, use_enum_values=True)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    contrasts: ContrastConfig = Field(default_factory=ContrastConfig)
    frame: FrameConfig = Field(default_factory=FrameConfig)
    matrix: MatrixConfig = Field(default_factory=MatrixConfig)

    def __init__(self, config_file: Optional[Union[str, Path]] = None, **kwargs):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML configuration file
            **kwargs: Override specific configuration values
        """
        config_data: Dict[str, Any] = {}
        if config_file:
            config_data = self._load_config_file(config_file)

        _merge_sections(config_data, self._load_environment_variables())
        _merge_sections(config_data, kwargs)

        try:
            super().__init__(**config_data)
        except ValidationError as e:
            raise ConfigurationError(
                config_key=", ".join(".".join(map(str, err["loc"])) for err in e.errors())
            ) from e

    @staticmethod
    def _load_config_file(config_file: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _load_environment_variables() -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        env_mappings = {
            'FORMULA_JAX_LOG_LEVEL': ('logging', 'level'),
            'FORMULA_JAX_CONTRAST_BASE': ('contrasts', 'base'),
            'FORMULA_JAX_MATRIX_DTYPE': ('matrix', 'dtype'),
        }

        for env_var, (section, key) in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                if key == 'base':
                    try:
                        value = int(value)
                    except ValueError as e:
                        raise ConfigurationError(config_key=f"{section}.{key}") from e
                config.setdefault(section, {})[key] = value

        return config

    def save_config(self, config_file: Union[str, Path]) -> None:
        """Save current configuration to YAML file."""
        config_path = Path(config_file)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            yaml.safe_dump(self.model_dump(mode='json'), f, default_flow_style=False, indent=2)

    def update(self, **kwargs) -> None:
        """
        Update configuration values.

        Nested values use dotted keys, e.g. ``update(**{"contrasts.base": 2})``.
        """
        for key, value in kwargs.items():
            section_name, _, subkey = key.partition('.')
            if section_name not in type(self).model_fields:
                raise ConfigurationError(config_key=key)

            try:
                if subkey:
                    section = getattr(self, section_name)
                    if subkey not in type(section).model_fields:
                        raise ConfigurationError(config_key=key)
                    setattr(section, subkey, value)
                else:
                    setattr(self, section_name, value)
            except ValidationError as e:
                raise ConfigurationError(config_key=key) from e


def _merge_sections(target: Dict[str, Any], overrides: Dict[str, Any]) -> None:
    """Merge section dictionaries one level deep."""
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key].update(value)
        else:
            target[key] = value


# Default configuration instance
_default_config: Optional[FormulaJaxConfig] = None

def get_default_config() -> FormulaJaxConfig:
    """Get the default configuration instance."""
    global _default_config
    if _default_config is None:
        _default_config = FormulaJaxConfig()
    return _default_config


def reset_default_config() -> FormulaJaxConfig:
    """Discard runtime changes and rebuild the default configuration."""
    global _default_config
    _default_config = FormulaJaxConfig()
    return _default_config
