"""
==============================================================================
Main API Router
==============================================================================

Combines all v1 API routes under /api/v1 prefix.

==============================================================================
"""

from fastapi import APIRouter

from camera_scanner.api.v1 import camera, health, permissions


class MainAPIRouter:
    """Main API router combining all versioned routes."""

    def __init__(self):
        self._router = APIRouter(prefix="/api/v1")
        self._include_routers()

    def _include_routers(self) -> None:
        self._router.include_router(health.router)
        self._router.include_router(camera.router)
        self._router.include_router(permissions.router)

    @property
    def router(self):
        """Get the FastAPI router instance."""
        return self._router


api_router = MainAPIRouter().router
