"""
==============================================================================
Barcode Scanner Core Module
==============================================================================

On-device barcode detection client backed by pyzbar.

Features:
---------
- InputImage: frame plus rotation metadata, rotated upright before decoding
- BarcodeScannerClient: asynchronous detection returning a future that
  resolves to a (possibly empty) list of barcodes, or fails
- Decoding runs on a worker thread; results resolve on the event loop

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import cv2
import numpy as np
from pyzbar.pyzbar import decode


# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# ERRORS
# =============================================================================

class DetectionError(Exception):
    """Raised by the barcode client for unusable input or a closed client."""


# =============================================================================
# DATA TYPES
# =============================================================================

_ROTATE_CODES = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


@dataclass(frozen=True)
class Barcode:
    """
    A detected barcode.

    Attributes:
        raw_value: Decoded payload as text
        format: Symbology reported by zbar (e.g. "EAN13", "QRCODE")
        bounding_box: Location in the upright image (x, y, width, height)
    """

    raw_value: str
    format: str
    bounding_box: Dict[str, int] = field(default_factory=dict)


class InputImage:
    """
    Image submitted for detection.

    Example:
        >>> image = InputImage.from_frame(frame, rotation_degrees=90)
        >>> upright = image.upright()
    """

    def __init__(self, frame: np.ndarray, rotation_degrees: int = 0) -> None:
        self._frame = frame
        self._rotation_degrees = rotation_degrees

    @classmethod
    def from_frame(cls, frame: Optional[np.ndarray], rotation_degrees: int) -> "InputImage":
        """
        Wrap a camera frame.

        Args:
            frame: BGR or grayscale image as a numpy array
            rotation_degrees: Clockwise rotation needed to make the frame upright

        Raises:
            DetectionError: If the frame is empty or the rotation is invalid
        """
        if frame is None or frame.size == 0:
            raise DetectionError("Input image is empty")
        if rotation_degrees not in (0, 90, 180, 270):
            raise DetectionError(f"Invalid rotation: {rotation_degrees}")
        return cls(frame, rotation_degrees)

    @property
    def rotation_degrees(self) -> int:
        return self._rotation_degrees

    @property
    def frame(self) -> np.ndarray:
        return self._frame

    def upright(self) -> np.ndarray:
        """Return the frame rotated by ``rotation_degrees``."""
        code = _ROTATE_CODES.get(self._rotation_degrees)
        if code is None:
            return self._frame
        return cv2.rotate(self._frame, code)


# =============================================================================
# CLIENT
# =============================================================================

class BarcodeScannerClient:
    """
    Asynchronous barcode detection client.

    Example:
        >>> client = BarcodeScannerClient()
        >>> barcodes = await client.process(InputImage.from_frame(frame, 0))
    """

    def __init__(self) -> None:
        self._closed = False
        logger.debug("Barcode client created")

    @property
    def closed(self) -> bool:
        return self._closed

    def process(self, image: InputImage) -> "asyncio.Future[List[Barcode]]":
        """
        Start detection on ``image``.

        Must be called from the event loop thread.

        Returns:
            Future resolving on the loop to the detected barcodes

        Raises:
            DetectionError: If the client has been closed
        """
        if self._closed:
            raise DetectionError("Barcode client is closed")

        loop = asyncio.get_running_loop()
        return loop.run_in_executor(None, self._detect, image)

    @staticmethod
    def _detect(image: InputImage) -> List[Barcode]:
        try:
            results = decode(image.upright())
        except Exception as e:
            raise DetectionError(f"Decode error: {e}") from e

        barcodes = []
        for result in results:
            try:
                raw_value = result.data.decode("utf-8")
            except UnicodeDecodeError:
                raw_value = result.data.decode("latin-1")

            barcodes.append(Barcode(
                raw_value=raw_value,
                format=result.type,
                bounding_box={
                    "x": result.rect.left,
                    "y": result.rect.top,
                    "width": result.rect.width,
                    "height": result.rect.height
                }
            ))
        return barcodes

    def close(self) -> None:
        """Release the client; further ``process`` calls raise."""
        self._closed = True
        logger.debug("Barcode client closed")


def get_client() -> BarcodeScannerClient:
    """Create a barcode detection client."""
    return BarcodeScannerClient()
