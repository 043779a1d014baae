"""
==============================================================================
FastAPI Dependencies
==============================================================================

Access to the objects created by the application lifespan.

The camera screen and permission store live on ``app.state``; they are
created on the running event loop at startup, so endpoints using them are
``async`` and run on that same loop.

==============================================================================
"""

from fastapi import Request

from camera_scanner.core import exceptions
from camera_scanner.screen.permissions import PermissionStore
from camera_scanner.screen.screen import CameraScreen


async def get_screen(request: Request) -> CameraScreen:
    """
    Get the running camera screen.

    Raises:
        AppException: SCREEN_NOT_READY before startup or after shutdown
    """
    screen = getattr(request.app.state, "screen", None)
    if screen is None:
        raise exceptions.screen_not_ready()
    return screen


async def get_permission_store(request: Request) -> PermissionStore:
    store = getattr(request.app.state, "permissions", None)
    if store is None:
        raise exceptions.screen_not_ready()
    return store
