"""
Application Exception Handling

Single AppException class for HTTP-facing errors with FastAPI integration.
Camera and detection failures never reach this layer: the camera screen
logs them and carries on.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for API error scenarios.

    Usage:
        raise AppException("Camera screen has finished", "SCREEN_FINISHED", 409)

    Error Codes:
        Screen:
            - SCREEN_FINISHED (409)
            - SCREEN_NOT_READY (503)
            - PREVIEW_UNAVAILABLE (404)

        Permissions:
            - PERMISSION_REQUEST_NOT_FOUND (404)
            - INVALID_GRANT_RESULTS (422)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert AppException to a JSON error response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def screen_finished() -> AppException:
    return AppException("Camera screen has finished", "SCREEN_FINISHED", 409)


def screen_not_ready() -> AppException:
    return AppException("Camera screen is not running", "SCREEN_NOT_READY", 503)


def preview_unavailable() -> AppException:
    return AppException("No preview frame available", "PREVIEW_UNAVAILABLE", 404)


def permission_request_not_found(request_code: int) -> AppException:
    return AppException(
        "No pending permission request with this code",
        "PERMISSION_REQUEST_NOT_FOUND",
        404,
        {"request_code": request_code}
    )


def invalid_grant_results(permissions: List[str], grant_results: List[bool]) -> AppException:
    """Create exception for mismatched permissions and grant results."""
    return AppException(
        "permissions and grant_results must have the same length",
        "INVALID_GRANT_RESULTS",
        422,
        {"permissions": len(permissions), "grant_results": len(grant_results)}
    )
