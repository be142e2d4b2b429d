"""Configuration management for glyfkit.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- CodecConfig: Decoding and flattening settings
- ProcessingConfig: Font processing settings
- LoggingConfig: Logging settings
- GlyfKitSettings: Main application settings
"""

from glyfkit.config.settings import (
    CodecConfig,
    ErrorPolicy,
    GlyfKitSettings,
    LoggingConfig,
    ProcessingConfig,
    get_default_settings,
)

__all__ = [
    "CodecConfig",
    "ErrorPolicy",
    "GlyfKitSettings",
    "LoggingConfig",
    "ProcessingConfig",
    "get_default_settings",
]
