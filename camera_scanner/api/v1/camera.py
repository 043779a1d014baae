"""
==============================================================================
Camera Screen Endpoints
==============================================================================

Screen status, capture button, viewfinder frame and user messages.

==============================================================================
"""

import asyncio

from fastapi import APIRouter, Depends, Response

from camera_scanner.core import exceptions
from camera_scanner.core.dependencies import get_screen
from camera_scanner.schemas.camera import (
    CaptureResponse,
    MessagesResponse,
    ScreenStatus,
    ScreenStatusResponse,
    UserMessageOut,
)
from camera_scanner.screen.screen import CameraScreen


router = APIRouter(prefix="/camera", tags=["Camera"])


@router.get("", response_model=ScreenStatusResponse)
async def get_screen_status(screen: CameraScreen = Depends(get_screen)):
    """Current lifecycle state, permissions and bound use-cases."""
    return ScreenStatusResponse(screen=ScreenStatus(**screen.status()))


@router.post("/capture", response_model=CaptureResponse, status_code=202)
async def capture_photo(screen: CameraScreen = Depends(get_screen)):
    """
    Capture button.

    The capture runs in the background; the result shows up in
    ``/camera/messages`` (success) or the log (failure).
    """
    if screen.finished:
        raise exceptions.screen_finished()

    photo = screen.take_photo()
    return CaptureResponse(photo=str(photo) if photo else None)


@router.get(
    "/preview",
    response_class=Response,
    responses={200: {"content": {"image/jpeg": {}}}}
)
async def get_preview_frame(screen: CameraScreen = Depends(get_screen)):
    """Latest viewfinder frame as JPEG."""
    loop = asyncio.get_running_loop()
    jpeg = await loop.run_in_executor(None, screen.viewfinder.latest_jpeg)
    if jpeg is None:
        raise exceptions.preview_unavailable()
    return Response(content=jpeg, media_type="image/jpeg")


@router.get("/messages", response_model=MessagesResponse)
async def get_messages(screen: CameraScreen = Depends(get_screen)):
    """Messages shown to the user, oldest first."""
    return MessagesResponse(messages=[
        UserMessageOut(text=m.text, created_at=m.created_at)
        for m in screen.notifier.messages
    ])
