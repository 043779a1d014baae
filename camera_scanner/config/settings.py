"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management for the camera scanner using Pydantic Settings.

A single global configuration instance is shared through ``get_settings``.
The camera screen never reads it directly: it receives an immutable
``ScreenConfig`` built from these settings at construction time.

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

==============================================================================
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Tuple, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from camera_scanner.camera.selector import LensFacing


# Module logger
logger = logging.getLogger(__name__)


CAMERA_PERMISSION = "camera"
REQUEST_CODE_PERMISSIONS = 10
FILENAME_FORMAT = "%Y-%m-%d-%H-%M-%S"
VALID_ROTATIONS = (0, 90, 180, 270)


@dataclass(frozen=True)
class ScreenConfig:
    """
    Immutable configuration handed to a camera screen.

    Attributes:
        tag: Name used in user-facing and log output
        app_name: Sub-directory name under the external media directory
        filename_format: strftime format of photo names, milliseconds appended
        request_code: Identifier of the camera permission request
        required_permissions: Permissions that must all be granted
        lens_facing: Physical camera used by the session
        scanning_enabled: Whether frames are analyzed for barcodes
    """

    tag: str = "CameraXSample"
    app_name: str = "CameraXSample"
    filename_format: str = FILENAME_FORMAT
    request_code: int = REQUEST_CODE_PERMISSIONS
    required_permissions: Tuple[str, ...] = (CAMERA_PERMISSION,)
    lens_facing: LensFacing = LensFacing.BACK
    scanning_enabled: bool = True


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name, also the photo sub-directory name
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        camera_source: Rear camera device index or capture URL/path
        sensor_rotation_degrees: Rotation reported with analysis frames
        frame_interval_ms: Delay between frames produced by the pump
        jpeg_quality: Quality of captured JPEG files
        barcode_scanning_enabled: Bind the barcode analysis use-case
        external_media_dirs: Candidate external media roots (JSON array)
        files_dir: App-private fallback directory for photos
        granted_permissions: Permissions granted up front (JSON array)
        auto_grant_accessible_devices: Grant camera access when the device node is usable
        message_history: Number of user messages kept
        preview_stream_interval_ms: Delay between preview WebSocket frames
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="CameraXSample",
        min_length=1,
        description="Display name, also used for the photo directory"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=True,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # CAMERA SETTINGS
    # =========================================================================
    camera_source: str = Field(
        default="0",
        description="Rear camera: device index or OpenCV capture URL/path"
    )

    sensor_rotation_degrees: int = Field(
        default=0,
        description="Rotation metadata attached to analysis frames"
    )

    frame_interval_ms: int = Field(
        default=33,
        ge=1,
        le=5000,
        description="Delay between frames read by the frame pump"
    )

    jpeg_quality: int = Field(
        default=95,
        ge=1,
        le=100,
        description="JPEG quality for captured photos"
    )

    barcode_scanning_enabled: bool = Field(
        default=True,
        description="Analyze preview frames for barcodes"
    )

    # =========================================================================
    # STORAGE SETTINGS
    # =========================================================================
    external_media_dirs: str = Field(
        default="[]",
        description="External media roots as JSON array string"
    )

    files_dir: str = Field(
        default="storage/files",
        description="App-private directory used when no media dir is usable"
    )

    # =========================================================================
    # PERMISSION SETTINGS
    # =========================================================================
    granted_permissions: str = Field(
        default="[]",
        description="Permissions granted at startup as JSON array string"
    )

    auto_grant_accessible_devices: bool = Field(
        default=True,
        description="Treat a readable/writable camera device as granted"
    )

    # =========================================================================
    # UI SETTINGS
    # =========================================================================
    message_history: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Number of user messages kept in memory"
    )

    preview_stream_interval_ms: int = Field(
        default=100,
        ge=10,
        le=10000,
        description="Delay between frames sent on the preview WebSocket"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """Normalize the environment name, falling back to development."""
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("sensor_rotation_degrees")
    @classmethod
    def validate_rotation(cls, value: int) -> int:
        """
        Validate the sensor rotation.

        Raises:
            ValueError: If rotation is not a multiple of 90 in [0, 270]
        """
        if value not in VALID_ROTATIONS:
            raise ValueError(
                f"Unsupported rotation: {value}. "
                f"Supported: {', '.join(str(r) for r in VALID_ROTATIONS)}"
            )
        return value

    @field_validator("camera_source")
    @classmethod
    def validate_camera_source(cls, value: str) -> str:
        """Reject an empty camera source."""
        if not value.strip():
            raise ValueError("camera_source must not be empty")
        return value.strip()

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def camera_source_value(self) -> Union[int, str]:
        """Camera source as passed to OpenCV: an int index or a URL/path."""
        if self.camera_source.isdigit():
            return int(self.camera_source)
        return self.camera_source

    @property
    def external_media_paths(self) -> List[Path]:
        """Parse external media roots from the JSON string."""
        return [Path(p) for p in self._json_list("external_media_dirs")]

    @property
    def files_path(self) -> Path:
        """App-private photo directory as a Path."""
        return Path(self.files_dir)

    @property
    def granted_permissions_list(self) -> List[str]:
        """Parse permissions granted at startup."""
        return self._json_list("granted_permissions")

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def screen_config(self) -> ScreenConfig:
        """Build the immutable configuration for a camera screen."""
        return ScreenConfig(
            tag=self.app_name,
            app_name=self.app_name,
            scanning_enabled=self.barcode_scanning_enabled,
        )

    def _json_list(self, field_name: str) -> List[str]:
        raw = getattr(self, field_name)
        try:
            values = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Invalid {field_name} JSON: {raw}, ignoring")
            return []
        if not isinstance(values, list):
            logger.warning(f"{field_name} is not a JSON array: {raw}, ignoring")
            return []
        return [str(v) for v in values]

    def __repr__(self) -> str:
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"camera_source={self.camera_source!r}, "
            f"scanning={self.barcode_scanning_enabled})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance.

    Returns:
        Global Settings instance
    """
    settings = Settings()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
