"""Utility functions for imagesmith.

This module provides utility functions including:

- Logging setup and configuration
- Operation timing and statistics
"""

from imagesmith.utils.logging import (
    OperationLogger,
    OperationStats,
    configure_logging,
    get_logger,
)

__all__ = [
    "OperationLogger",
    "OperationStats",
    "configure_logging",
    "get_logger",
]
