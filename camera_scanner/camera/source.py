"""
==============================================================================
Camera Sources
==============================================================================

Frame sources backing a physical camera.

- CameraSource: Abstract interface used by the camera provider
- OpenCVCameraSource: USB/V4L2 devices, files and stream URLs via OpenCV

Sources are not thread-safe on their own; the provider serializes access.

==============================================================================
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional, Union

import cv2
import numpy as np


# Module logger
logger = logging.getLogger(__name__)


class CameraSource(ABC):
    """Interface for anything that can produce BGR frames."""

    @abstractmethod
    def open(self) -> bool:
        """Open the device. Returns True when frames can be read."""

    @abstractmethod
    def read(self) -> Optional[np.ndarray]:
        """Read one frame, or None when no frame is available."""

    @abstractmethod
    def release(self) -> None:
        """Release the device."""

    @property
    @abstractmethod
    def is_opened(self) -> bool:
        """Whether the device is currently open."""

    @property
    def device_path(self) -> Optional[str]:
        """Local device node backing this source, if any."""
        return None


class OpenCVCameraSource(CameraSource):
    """
    Camera source backed by ``cv2.VideoCapture``.

    Args:
        source: Device index (e.g. 0) or a file path / stream URL
    """

    def __init__(self, source: Union[int, str] = 0) -> None:
        self._source = source
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def device_path(self) -> Optional[str]:
        if isinstance(self._source, int):
            return f"/dev/video{self._source}"
        if self._source.startswith("/dev/"):
            return self._source
        return None

    @property
    def is_opened(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def open(self) -> bool:
        if self.is_opened:
            return True

        self._cap = cv2.VideoCapture(self._source)
        if not self._cap.isOpened():
            logger.error(f"Cannot open camera {self._source}")
            self._cap = None
            return False

        logger.info(f"📷 Camera {self._source} opened")
        return True

    def read(self) -> Optional[np.ndarray]:
        if not self.is_opened:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            logger.warning("Failed to read frame")
            return None
        return frame

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.debug(f"Camera {self._source} released")

    def __repr__(self) -> str:
        return f"OpenCVCameraSource({self._source!r})"


def device_accessible(path: Optional[str]) -> bool:
    """Check that a camera device node can be read and written by this process."""
    if path is None:
        return False
    return os.path.exists(path) and os.access(path, os.R_OK | os.W_OK)
