"""
==============================================================================
Screen Package
==============================================================================

The camera screen and the pipeline stages it drives.

Modules:
--------
- permissions: PermissionStore and PermissionGate
- session: CameraSession slots and CameraSessionBinder
- capture: StillCaptureHandler
- analyzer: BarcodeFrameAnalyzer
- notifier: User-visible messages
- screen: CameraScreen

==============================================================================
"""

from .analyzer import BarcodeFrameAnalyzer
from .capture import StillCaptureHandler
from .notifier import Notifier, UserMessage
from .permissions import PermissionGate, PermissionRequest, PermissionStore
from .screen import PERMISSIONS_DENIED_MESSAGE, CameraScreen
from .session import UNBOUND, Bound, CameraSession, CameraSessionBinder, Unbound

__all__ = [
    "BarcodeFrameAnalyzer",
    "Bound",
    "CameraScreen",
    "CameraSession",
    "CameraSessionBinder",
    "Notifier",
    "PERMISSIONS_DENIED_MESSAGE",
    "PermissionGate",
    "PermissionRequest",
    "PermissionStore",
    "StillCaptureHandler",
    "UNBOUND",
    "Unbound",
    "UserMessage",
]
