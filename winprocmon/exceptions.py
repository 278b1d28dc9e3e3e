"""Custom exceptions for the Windows process monitor.

All fatal collection errors share one structured base type carrying a
human readable message, optional details and the underlying cause. The
subclasses only narrow down where the failure came from.
"""

from typing import Optional, Any


class ProcessMonitorException(Exception):
    """Base exception for all process monitor errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
    ):
        """Initialize with message, optional details and underlying cause."""
        self.message = message
        self.details = details
        self.cause = cause
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """String representation with details if available."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class CommandExecutionError(ProcessMonitorException):
    """External tool could not be launched or its output could not be read."""

    pass


class HeaderFormatError(ProcessMonitorException):
    """Expected header columns are missing from an external tool's output."""

    pass


class ValueParseError(ProcessMonitorException):
    """A value expected to be numeric was not."""

    pass


class ConfigurationException(ProcessMonitorException):
    """Configuration file is invalid or could not be processed."""

    pass
