"""Utility functions for glyfkit.

This module provides utility functions including:

- Logging setup and configuration
- Per-glyph processing statistics
"""

from glyfkit.utils.logging import (
    ProcessingLogger,
    ProcessingStats,
    configure_logging,
)

__all__ = [
    "ProcessingLogger",
    "ProcessingStats",
    "configure_logging",
]
