"""
==============================================================================
Camera Schemas Module
==============================================================================

Request and response schemas for the camera screen and permissions.

==============================================================================
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ScreenStatus(BaseModel):
    """Current state of the camera screen."""
    tag: str
    lifecycle: str
    finished: bool
    permissions_granted: bool
    scanning_enabled: bool
    lens_facing: str
    bound_use_cases: List[str]
    output_directory: str
    last_photo: Optional[str] = None
    frames_analyzed: int = Field(default=0, ge=0)


class ScreenStatusResponse(BaseModel):
    """Response for GET /camera."""
    success: bool = Field(default=True)
    screen: ScreenStatus


class CaptureResponse(BaseModel):
    """Capture request accepted; ``photo`` is None when nothing is bound."""
    success: bool = Field(default=True)
    photo: Optional[str] = None


class UserMessageOut(BaseModel):
    """A message shown to the user."""
    text: str
    created_at: datetime


class MessagesResponse(BaseModel):
    """User message history, oldest first."""
    success: bool = Field(default=True)
    messages: List[UserMessageOut]


class PermissionRequestOut(BaseModel):
    """A permission request waiting for an answer."""
    request_code: int
    permissions: List[str]


class PendingPermissionsResponse(BaseModel):
    """Response for GET /permissions/pending."""
    success: bool = Field(default=True)
    requests: List[PermissionRequestOut]


class PermissionResultRequest(BaseModel):
    """Answer to a pending permission request."""
    permissions: List[str] = Field(..., min_length=1)
    grant_results: List[bool] = Field(..., min_length=1)
