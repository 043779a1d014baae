"""
==============================================================================
Schemas Package
==============================================================================

Pydantic models for API requests and responses.

==============================================================================
"""

from .common import MessageResponse
from .camera import (
    CaptureResponse,
    MessagesResponse,
    PendingPermissionsResponse,
    PermissionRequestOut,
    PermissionResultRequest,
    ScreenStatus,
    ScreenStatusResponse,
    UserMessageOut,
)

__all__ = [
    "CaptureResponse",
    "MessageResponse",
    "MessagesResponse",
    "PendingPermissionsResponse",
    "PermissionRequestOut",
    "PermissionResultRequest",
    "ScreenStatus",
    "ScreenStatusResponse",
    "UserMessageOut",
]
