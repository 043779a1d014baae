"""
==============================================================================
Camera Use-Cases
==============================================================================

One use-case per concurrent camera function:

- Preview: pushes frames to a surface (the viewfinder)
- ImageCapture: writes a single frame to a JPEG file
- ImageAnalysis: hands frames to an analyzer, one at a time

A use-case does nothing until a CameraProvider binds it to a camera.

==============================================================================
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

import cv2
import numpy as np

from camera_scanner.camera.errors import ImageCaptureError
from camera_scanner.camera.executor import MainThreadExecutor
from camera_scanner.camera.frame import ImageInfo, ImageProxy

if TYPE_CHECKING:
    from camera_scanner.camera.provider import BoundCamera


# Module logger
logger = logging.getLogger(__name__)


class UseCase:
    """Base class tracking which camera a use-case is attached to."""

    def __init__(self) -> None:
        self._camera: Optional["BoundCamera"] = None

    @property
    def is_bound(self) -> bool:
        return self._camera is not None

    def _attach(self, camera: "BoundCamera") -> None:
        self._camera = camera

    def _detach(self) -> None:
        self._camera = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(bound={self.is_bound})"


# =============================================================================
# PREVIEW
# =============================================================================

class SurfaceProvider(Protocol):
    def on_frame(self, frame: np.ndarray) -> None:
        ...


class Preview(UseCase):
    """Streams camera frames to a surface."""

    def __init__(self) -> None:
        super().__init__()
        self._surface: Optional[SurfaceProvider] = None

    def set_surface_provider(self, surface: Optional[SurfaceProvider]) -> None:
        self._surface = surface

    def _publish(self, frame: np.ndarray) -> None:
        surface = self._surface
        if surface is not None:
            surface.on_frame(frame)


# =============================================================================
# IMAGE CAPTURE
# =============================================================================

@dataclass(frozen=True)
class OutputFileResults:
    saved_path: Path


class OnImageSavedCallback(ABC):
    """Receives the outcome of ``ImageCapture.take_picture``."""

    @abstractmethod
    def on_image_saved(self, output: OutputFileResults) -> None:
        ...

    @abstractmethod
    def on_error(self, exception: ImageCaptureError) -> None:
        ...


class ImageCapture(UseCase):
    """Single-shot still capture to a JPEG file."""

    def __init__(self, jpeg_quality: int = 95) -> None:
        super().__init__()
        self._jpeg_quality = jpeg_quality

    def take_picture(
        self,
        output_file: Path,
        executor: MainThreadExecutor,
        callback: OnImageSavedCallback
    ) -> None:
        """
        Capture one frame to ``output_file`` in the background.

        The callback always runs on ``executor``; this method never blocks
        and never raises.
        """
        camera = self._camera
        if camera is None:
            executor.execute(
                callback.on_error,
                ImageCaptureError(
                    "Not bound to a valid Camera",
                    ImageCaptureError.ERROR_INVALID_CAMERA
                )
            )
            return

        try:
            future = camera.submit(self._write_jpeg, camera, output_file)
        except RuntimeError as e:
            executor.execute(
                callback.on_error,
                ImageCaptureError(
                    "Camera is closed",
                    ImageCaptureError.ERROR_CAMERA_CLOSED,
                    e
                )
            )
            return

        future.add_done_callback(
            lambda done: executor.execute(self._dispatch, done, callback)
        )

    def _write_jpeg(self, camera: "BoundCamera", output_file: Path) -> OutputFileResults:
        frame = camera.grab_frame()
        if frame is None:
            raise ImageCaptureError(
                "Failed to read a frame from the camera",
                ImageCaptureError.ERROR_CAPTURE_FAILED
            )

        try:
            ok = cv2.imwrite(
                str(output_file), frame, [cv2.IMWRITE_JPEG_QUALITY, self._jpeg_quality]
            )
        except cv2.error as e:
            raise ImageCaptureError(
                f"Failed to encode image: {e}", ImageCaptureError.ERROR_FILE_IO, e
            ) from e

        if not ok:
            raise ImageCaptureError(
                f"Failed to write {output_file}", ImageCaptureError.ERROR_FILE_IO
            )

        return OutputFileResults(saved_path=output_file)

    @staticmethod
    def _dispatch(done: "Future[OutputFileResults]", callback: OnImageSavedCallback) -> None:
        if done.cancelled():
            callback.on_error(
                ImageCaptureError("Camera is closed", ImageCaptureError.ERROR_CAMERA_CLOSED)
            )
            return

        error = done.exception()
        if error is None:
            callback.on_image_saved(done.result())
        elif isinstance(error, ImageCaptureError):
            callback.on_error(error)
        else:
            callback.on_error(
                ImageCaptureError(str(error), ImageCaptureError.ERROR_UNKNOWN, error)
            )


# =============================================================================
# IMAGE ANALYSIS
# =============================================================================

class Analyzer(ABC):
    """Per-frame callback registered on an ImageAnalysis use-case."""

    @abstractmethod
    def analyze(self, image: ImageProxy) -> None:
        """Process ``image`` and close it when done."""


class ImageAnalysis(UseCase):
    """
    Delivers frames to an analyzer.

    Only one frame is outstanding at a time: while the analyzer holds an
    unclosed ImageProxy, newer frames are dropped.
    """

    def __init__(self) -> None:
        super().__init__()
        self._executor: Optional[MainThreadExecutor] = None
        self._analyzer: Optional[Analyzer] = None
        self._pending: Optional[ImageProxy] = None
        self._lock = threading.Lock()
        self.frames_delivered = 0
        self.frames_dropped = 0

    @property
    def analyzer(self) -> Optional[Analyzer]:
        return self._analyzer

    @property
    def busy(self) -> bool:
        return self._pending is not None

    def set_analyzer(self, executor: MainThreadExecutor, analyzer: Analyzer) -> None:
        self._executor = executor
        self._analyzer = analyzer

    def clear_analyzer(self) -> None:
        self._analyzer = None
        self._executor = None

    def _offer(self, frame: np.ndarray, rotation_degrees: int) -> bool:
        """Hand ``frame`` to the analyzer unless one is still outstanding."""
        analyzer, executor = self._analyzer, self._executor
        if analyzer is None or executor is None:
            return False

        with self._lock:
            if self._pending is not None:
                self.frames_dropped += 1
                return False
            proxy = ImageProxy(
                frame,
                ImageInfo(rotation_degrees=rotation_degrees),
                on_close=self._release
            )
            self._pending = proxy
            self.frames_delivered += 1

        executor.execute(analyzer.analyze, proxy)
        return True

    def _release(self, proxy: ImageProxy) -> None:
        with self._lock:
            if self._pending is proxy:
                self._pending = None

    def _detach(self) -> None:
        super()._detach()
        with self._lock:
            self._pending = None
