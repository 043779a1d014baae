"""
==============================================================================
Configuration Package
==============================================================================

Centralized configuration management using Pydantic Settings.

Usage:
------
    from camera_scanner.config import get_settings

    settings = get_settings()
    config = settings.screen_config()

==============================================================================
"""

from .settings import (
    CAMERA_PERMISSION,
    FILENAME_FORMAT,
    REQUEST_CODE_PERMISSIONS,
    ScreenConfig,
    Settings,
    get_settings,
)

__all__ = [
    "CAMERA_PERMISSION",
    "FILENAME_FORMAT",
    "REQUEST_CODE_PERMISSIONS",
    "ScreenConfig",
    "Settings",
    "get_settings",
]
