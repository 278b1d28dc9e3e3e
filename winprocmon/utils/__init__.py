"""Utility modules for the Windows process monitor."""

from .logging import (
    ContextLogger,
    StructuredLogger,
    configure_default_logger,
    get_logger,
)

__all__ = [
    "StructuredLogger",
    "get_logger",
    "configure_default_logger",
    "ContextLogger",
]
