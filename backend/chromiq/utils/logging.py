"""
ChromiQ Structured Logging
Centralized logging configuration using loguru.
"""
import sys
from typing import Dict, Any, Optional

from loguru import logger

from chromiq.config import config


LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}"


def configure_logging(level: Optional[str] = None, sink=sys.stdout) -> int:
    """
    Replace the default loguru handler with the ChromiQ format.

    Args:
        level: Minimum level to emit (default from config)
        sink: Destination for log records

    Returns:
        Handler id returned by loguru
    """
    logger.remove()
    return logger.add(
        sink,
        format=LOG_FORMAT,
        level=level or config.LOG_LEVEL,
        serialize=False
    )


class StructuredLogger:
    """Structured logger binding extra context onto loguru records."""

    def __init__(self, configure: bool = True, **context: Any):
        """Initialize structured logger."""
        self._context = context
        if configure:
            configure_logging()

    def bind(self, **extra: Any) -> "StructuredLogger":
        """Return a logger carrying additional context."""
        merged = {**self._context, **extra}
        return StructuredLogger(configure=False, **merged)

    def _log(self, level: str, message: str, extra: Optional[Dict[str, Any]]):
        payload = {**self._context, **(extra or {})}
        if payload:
            logger.bind(**payload).log(level, message)
        else:
            logger.log(level, message)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log info message with optional extra data."""
        self._log("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log warning message with optional extra data."""
        self._log("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log error message with optional extra data."""
        self._log("ERROR", message, extra)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log debug message with optional extra data."""
        self._log("DEBUG", message, extra)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """
    Get or create the global logger instance.

    Sinks are left as the host process set them up; entry points call
    configure_logging() explicitly.
    """
    global _logger
    if _logger is None:
        _logger = StructuredLogger(configure=False)
    return _logger
