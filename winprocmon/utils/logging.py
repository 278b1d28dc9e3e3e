"""Structured logging utilities for the Windows process monitor.

Every record is emitted as one JSON object so collection cycles can be
correlated by the context fields attached to them (command, cycle, ...).
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "winprocmon"


class StructuredLogger:
    """Structured logger with persistent context support."""

    def __init__(self, name: str):
        """Initialize structured logger.

        Args:
            name: Logger name (usually __name__)
        """
        self.logger = logging.getLogger(name)
        self.context: Dict[str, Any] = {}

    def set_level(self, level: str) -> None:
        """Set logging level.

        Args:
            level: Log level (DEBUG, INFO, WARN, WARNING, ERROR, CRITICAL)
        """
        level = level.upper()
        if level == "WARN":
            level = "WARNING"
        self.logger.setLevel(getattr(logging, level))

    def add_context(self, **kwargs: Any) -> None:
        """Add persistent context to all log messages."""
        self.context.update(kwargs)

    def remove_context(self, *keys: str) -> None:
        """Remove context keys."""
        for key in keys:
            self.context.pop(key, None)

    def _log(
        self, level: int, message: str, exc_info: Any = None, **kwargs: Any
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "logger": self.logger.name,
            "message": message,
        }

        if self.context:
            log_data.update(self.context)
        if kwargs:
            log_data.update(kwargs)

        serialized = json.dumps(log_data, default=str)
        self.logger.log(
            level, serialized, exc_info=exc_info, extra={"structured_json": serialized}
        )

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with structured data."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message with structured data."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with structured data."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: Any = None, **kwargs: Any) -> None:
        """Log error message with structured data and optional traceback."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log messages."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line."""
        if hasattr(record, "structured_json"):
            if not record.exc_info:
                return record.structured_json  # type: ignore[return-value]
            log_data = json.loads(record.structured_json)  # type: ignore[arg-type]
        else:
            log_data = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ContextLogger:
    """Context manager for temporary logging context."""

    def __init__(self, logger: StructuredLogger, **context: Any):
        self.logger = logger
        self.context = context
        self.previous_context: Dict[str, Any] = {}

    def __enter__(self) -> StructuredLogger:
        """Enter context - save and set new context."""
        for key in self.context:
            if key in self.logger.context:
                self.previous_context[key] = self.logger.context[key]

        self.logger.add_context(**self.context)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context - restore previous context."""
        self.logger.remove_context(*self.context.keys())

        if self.previous_context:
            self.logger.add_context(**self.previous_context)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger.

    Handlers live on the package root logger (see
    ``configure_default_logger``); module loggers only propagate to it.

    Args:
        name: Logger name

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)


def configure_default_logger(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_size_mb: int = 5,
    backup_count: int = 5,
) -> StructuredLogger:
    """Attach a JSON console handler (and optional file) to the package logger.

    Args:
        level: Log level
        log_file: Optional log file path
        max_size_mb: Size at which the log file rotates
        backup_count: Rotated files to keep

    Returns:
        The package root logger
    """
    root = StructuredLogger(ROOT_LOGGER_NAME)
    root.set_level(level)

    formatter = StructuredFormatter()
    if not any(
        getattr(handler, "_structured_console", False)
        for handler in root.logger.handlers
    ):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler._structured_console = True  # type: ignore[attr-defined]
        root.logger.addHandler(console_handler)

    if log_file:
        from ..lib.logging_config import LoggingConfig

        LoggingConfig(
            log_file,
            max_size_mb=max_size_mb,
            backup_count=backup_count,
            logger_name=ROOT_LOGGER_NAME,
        ).attach(root.logger, formatter)

    return root
