"""
Logging utilities for formula-jax.

Provides structured logging with configurable levels, formats, and outputs.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union
from ..config.settings import get_default_config, LogLevel


class ColoredFormatter(logging.Formatter):
    """Colored console formatter for better readability."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Format log record with colors."""
        # The record is shared with other handlers
        original = record.levelname
        if original in self.COLORS:
            record.levelname = f"{self.COLORS[original]}{original}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class FormulaJaxLogger:
    """Logger for formula-jax that appends key=value context to messages."""

    def __init__(self, name: str, config=None):
        self.name = name
        self.config = config
        self.logger = logging.getLogger(name)
        self._configured = False

    def _ensure_configured(self):
        """Ensure logger is configured."""
        if not self._configured:
            self._configure()
            self._configured = True

    def _configure(self):
        """Configure the logger based on settings."""
        settings = (self.config or get_default_config()).logging
        self.logger.setLevel(getattr(logging, str(settings.level).upper()))

        self.logger.handlers.clear()

        if settings.console_logging:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(ColoredFormatter(settings.format_string))
            self.logger.addHandler(console_handler)

        if settings.file_logging and settings.log_file:
            settings.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(settings.log_file)
            file_handler.setFormatter(logging.Formatter(settings.format_string))
            self.logger.addHandler(file_handler)

        # Prevent propagation to avoid duplicate messages
        self.logger.propagate = False

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._ensure_configured()
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._ensure_configured()
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._ensure_configured()
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs):
        """Log error message."""
        self._ensure_configured()
        self.logger.error(self._format_message(message, **kwargs))

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with context."""
        if kwargs:
            context_str = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            return f"{message} | {context_str}"
        return message


# Global logger registry
_loggers = {}

def get_logger(name: str = "formula_jax") -> FormulaJaxLogger:
    """
    Get a logger instance.

    Args:
        name: Logger name (defaults to 'formula_jax')

    Returns:
        Configured logger instance
    """
    if name not in _loggers:
        _loggers[name] = FormulaJaxLogger(name)
    return _loggers[name]


def setup_logging(
    level: Optional[Union[str, LogLevel]] = None,
    console: Optional[bool] = None,
    file_path: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Setup global logging configuration.

    Args:
        level: Logging level
        console: Enable console logging
        file_path: Path for file logging
        format_string: Custom format string
    """
    settings = get_default_config().logging

    if level is not None:
        settings.level = level

    if console is not None:
        settings.console_logging = console

    if file_path is not None:
        settings.file_logging = True
        settings.log_file = Path(file_path)

    if format_string is not None:
        settings.format_string = format_string

    refresh_loggers()


def refresh_loggers() -> None:
    """Make existing loggers pick up the current logging settings."""
    for logger in _loggers.values():
        logger._configured = False
