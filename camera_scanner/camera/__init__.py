"""
==============================================================================
Camera Package
==============================================================================

Lifecycle-aware camera framework built on OpenCV.

Classes:
--------
- CameraProvider: Binds use-cases to cameras, runs the frame pump
- ProviderHandle: Shared, lazily acquired provider
- Preview / ImageCapture / ImageAnalysis: Camera use-cases
- ImageProxy: Analysis frame that must be closed
- Lifecycle: Owner lifecycle observed by the provider
- MainThreadExecutor: Marshals callbacks onto the event loop
- Viewfinder: Surface holding the latest preview frame

==============================================================================
"""

from .errors import CameraBindingError, CameraError, ImageCaptureError
from .executor import MainThreadExecutor
from .frame import ImageInfo, ImageProxy
from .lifecycle import Lifecycle, LifecycleState
from .provider import BoundCamera, CameraProvider, ProviderHandle
from .selector import DEFAULT_BACK_CAMERA, DEFAULT_FRONT_CAMERA, CameraSelector, LensFacing
from .source import CameraSource, OpenCVCameraSource, device_accessible
from .use_cases import (
    Analyzer,
    ImageAnalysis,
    ImageCapture,
    OnImageSavedCallback,
    OutputFileResults,
    Preview,
    UseCase,
)
from .viewfinder import Viewfinder

__all__ = [
    "Analyzer",
    "BoundCamera",
    "CameraBindingError",
    "CameraError",
    "CameraProvider",
    "CameraSelector",
    "CameraSource",
    "DEFAULT_BACK_CAMERA",
    "DEFAULT_FRONT_CAMERA",
    "ImageAnalysis",
    "ImageCapture",
    "ImageCaptureError",
    "ImageInfo",
    "ImageProxy",
    "LensFacing",
    "Lifecycle",
    "LifecycleState",
    "MainThreadExecutor",
    "OnImageSavedCallback",
    "OpenCVCameraSource",
    "OutputFileResults",
    "Preview",
    "ProviderHandle",
    "UseCase",
    "Viewfinder",
    "device_accessible",
]
