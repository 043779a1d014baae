"""Still capture triggered by the capture button."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from camera_scanner.camera.errors import ImageCaptureError
from camera_scanner.camera.executor import MainThreadExecutor
from camera_scanner.camera.use_cases import OnImageSavedCallback, OutputFileResults
from camera_scanner.screen.notifier import Notifier
from camera_scanner.screen.session import Bound, CameraSession
from camera_scanner.utils.photo_files import PhotoFileFactory


# Module logger
logger = logging.getLogger(__name__)


class _PhotoSavedCallback(OnImageSavedCallback):
    def __init__(self, handler: "StillCaptureHandler", photo_file: Path) -> None:
        self._handler = handler
        self._photo_file = photo_file

    def on_image_saved(self, output: OutputFileResults) -> None:
        self._handler._on_saved(self._photo_file)

    def on_error(self, exception: ImageCaptureError) -> None:
        self._handler._on_error(exception)


class StillCaptureHandler:
    """
    Fire-and-forget still capture.

    Example:
        >>> handler = StillCaptureHandler(session, PhotoFileFactory(out_dir), executor, notifier)
        >>> handler.take_photo()
        PosixPath('storage/files/2025-01-15-10-30-45-123.jpg')
    """

    def __init__(
        self,
        session: CameraSession,
        files: PhotoFileFactory,
        executor: MainThreadExecutor,
        notifier: Notifier
    ) -> None:
        self._session = session
        self._files = files
        self._executor = executor
        self._notifier = notifier
        self.last_saved: Optional[Path] = None

    def take_photo(self) -> Optional[Path]:
        """
        Request a capture to a new timestamped file.

        Returns:
            The requested path, or None when no capture use-case is bound
        """
        slot = self._session.capture
        if not isinstance(slot, Bound):
            return None

        photo_file = self._files.next_path()
        slot.use_case.take_picture(
            photo_file, self._executor, _PhotoSavedCallback(self, photo_file)
        )
        return photo_file

    def _on_saved(self, photo_file: Path) -> None:
        self.last_saved = photo_file
        msg = f"Photo capture succeeded: {photo_file.resolve().as_uri()}"
        self._notifier.show(msg)
        logger.debug(msg)

    def _on_error(self, exception: ImageCaptureError) -> None:
        logger.error(f"Photo capture failed: {exception.message}", exc_info=exception)
