"""Configuration management for imagesmith.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- BackendConfig: Backend priority order
- SaveConfig: Output encoding defaults
- TextConfig: Text rendering defaults
- CompareConfig: Perceptual hash settings
- LoggingConfig: Logging settings
- ImagesmithSettings: Main application settings
"""

from imagesmith.config.settings import (
    KNOWN_BACKENDS,
    BackendConfig,
    CompareConfig,
    ImagesmithSettings,
    LoggingConfig,
    SaveConfig,
    TextConfig,
    get_default_settings,
)

__all__ = [
    "KNOWN_BACKENDS",
    "BackendConfig",
    "CompareConfig",
    "ImagesmithSettings",
    "LoggingConfig",
    "SaveConfig",
    "TextConfig",
    "get_default_settings",
]
