"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from fastapi import APIRouter, Request


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, request: Request):
        self._state = request.app.state

    def check_camera(self) -> str:
        """Check whether the camera provider has been acquired."""
        handle = getattr(self._state, "provider_handle", None)
        if handle is None:
            return "not_started"
        return "healthy" if handle.provider() is not None else "unavailable"

    def check_screen(self) -> dict:
        screen = getattr(self._state, "screen", None)
        if screen is None:
            return {"status": "not_started", "bound_use_cases": 0}
        status = "finished" if screen.finished else "healthy"
        return {"status": status, "bound_use_cases": len(screen.session.bound_use_cases())}

    def get_health(self) -> dict:
        camera_status = self.check_camera()
        screen_info = self.check_screen()

        healthy = camera_status == "healthy" and screen_info["status"] == "healthy"

        return {
            "status": "healthy" if healthy else "degraded",
            "components": {
                "api": "healthy",
                "camera": camera_status,
                "screen": screen_info["status"]
            },
            "details": {
                "bound_use_cases": screen_info["bound_use_cases"]
            }
        }


@router.get("")
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns status of the API, camera provider and camera screen.
    """
    return HealthController(request).get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
