"""On-screen viewfinder surface fed by the Preview use-case."""

from __future__ import annotations

import logging
import threading
from typing import Optional

import cv2
import numpy as np


logger = logging.getLogger(__name__)


class Viewfinder:
    """Keeps the most recent preview frame and serves it as JPEG."""

    def __init__(self, jpeg_quality: int = 80) -> None:
        self._jpeg_quality = jpeg_quality
        self._frame: Optional[np.ndarray] = None
        self._frame_count = 0
        self._lock = threading.Lock()

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def on_frame(self, frame: np.ndarray) -> None:
        """Replace the displayed frame. Called from the frame pump thread."""
        with self._lock:
            self._frame = frame
            self._frame_count += 1

    def latest_frame(self) -> Optional[np.ndarray]:
        with self._lock:
            return self._frame

    def latest_jpeg(self) -> Optional[bytes]:
        """Encode the latest frame, or None if no frame has arrived yet."""
        frame = self.latest_frame()
        if frame is None:
            return None

        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, self._jpeg_quality])
        if not ok:
            logger.warning("Viewfinder frame could not be encoded")
            return None
        return buf.tobytes()
