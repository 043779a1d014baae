"""
Camera framework errors.

These are raised or reported by the camera collaborator itself. The camera
screen only logs them; nothing here is mapped to an HTTP response.
"""

from typing import Optional


class CameraError(Exception):
    """Base class for camera framework failures."""


class CameraBindingError(CameraError):
    """Use-cases could not be bound to a lifecycle."""


class ImageCaptureError(CameraError):
    """
    A still capture failed.

    Error Codes:
        ERROR_UNKNOWN (0): Unexpected failure
        ERROR_FILE_IO (1): The JPEG could not be written
        ERROR_CAPTURE_FAILED (2): No frame could be read from the camera
        ERROR_CAMERA_CLOSED (3): The camera closed during capture
        ERROR_INVALID_CAMERA (4): The use-case is not bound to a camera
    """

    ERROR_UNKNOWN = 0
    ERROR_FILE_IO = 1
    ERROR_CAPTURE_FAILED = 2
    ERROR_CAMERA_CLOSED = 3
    ERROR_INVALID_CAMERA = 4

    def __init__(
        self,
        message: str,
        error_code: int = ERROR_UNKNOWN,
        cause: Optional[BaseException] = None
    ):
        self.message = message
        self.error_code = error_code
        self.cause = cause
        super().__init__(message)
