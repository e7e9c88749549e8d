"""Core filterexpr utilities.

This module exports core utilities for use throughout the package.
"""

from filterexpr.core.config import Settings, get_settings
from filterexpr.core.logging import (
    LoggingContext,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "LoggingContext",
    "clear_context",
]
