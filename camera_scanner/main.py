"""
==============================================================================
Camera Scanner - Application Entry Point
==============================================================================

FastAPI service hosting the camera screen:
- Camera preview, still capture and barcode scanning
- REST endpoints for the capture button, status and permissions
- WebSocket viewfinder stream

The screen is created on the server's event loop at startup and destroyed
at shutdown.

Usage:
------
    # Development
    uvicorn camera_scanner.main:app --reload

    # Production
    python -m camera_scanner.main

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from camera_scanner.api.router import api_router
from camera_scanner.camera.provider import ProviderHandle
from camera_scanner.camera.source import CameraSource, OpenCVCameraSource
from camera_scanner.config import Settings, get_settings
from camera_scanner.core.exceptions import register_exception_handlers
from camera_scanner.screen.notifier import Notifier
from camera_scanner.screen.permissions import PermissionStore
from camera_scanner.screen.screen import CameraScreen
from camera_scanner.utils.photo_files import resolve_output_directory
from camera_scanner.websockets import preview_router


# ============================================================================
# LOGGING SETUP
# ============================================================================

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

class Application:
    """
    FastAPI application factory and manager.

    Args:
        settings: Settings to use (global settings if None)
        camera_source: Rear camera source (OpenCV source from settings if None)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        camera_source: Optional[CameraSource] = None
    ):
        self._settings = settings or get_settings()
        self._camera_source = camera_source
        self._app = self._create_app()

    def _create_app(self) -> FastAPI:
        app = FastAPI(
            title=self._settings.app_name,
            version="1.0.0",
            description="Camera preview, still capture and barcode scanning",
            lifespan=self._lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        self._configure_middleware(app)
        register_exception_handlers(app)
        self._register_routers(app)
        self._register_root(app)

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Application lifespan manager."""
        self._startup(app, asyncio.get_running_loop())
        yield
        await self._shutdown(app)

    def _startup(self, app: FastAPI, loop: asyncio.AbstractEventLoop) -> None:
        """Create the camera screen on the running loop and enter it."""
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {self._settings.app_name}")
        logger.info("=" * 60)

        source = self._camera_source or OpenCVCameraSource(self._settings.camera_source_value)
        handle = ProviderHandle(
            source,
            loop,
            rotation_degrees=self._settings.sensor_rotation_degrees,
            frame_interval_ms=self._settings.frame_interval_ms
        )
        permissions = PermissionStore(
            granted=self._settings.granted_permissions_list,
            device_path=source.device_path,
            auto_grant_accessible_devices=self._settings.auto_grant_accessible_devices
        )
        output_directory = resolve_output_directory(
            self._settings.external_media_paths,
            self._settings.app_name,
            self._settings.files_path
        )

        screen = CameraScreen(
            self._settings.screen_config(),
            permissions,
            handle.get,
            output_directory,
            loop,
            notifier=Notifier(self._settings.message_history),
            jpeg_quality=self._settings.jpeg_quality
        )

        app.state.settings = self._settings
        app.state.provider_handle = handle
        app.state.permissions = permissions
        app.state.screen = screen

        screen.on_create()
        screen.on_start()
        screen.on_resume()

        logger.info(f"✅ {self._settings.app_name} ready")
        logger.info(f"📍 Running on http://{self._settings.host}:{self._settings.port}")
        logger.info(f"📖 API Docs: http://{self._settings.host}:{self._settings.port}/docs")
        logger.info("=" * 60)

    async def _shutdown(self, app: FastAPI) -> None:
        """Destroy the screen, then release the camera off the event loop."""
        logger.info("🛑 Shutting down...")
        screen = getattr(app.state, "screen", None)
        if screen is not None:
            screen.on_destroy()
        handle = getattr(app.state, "provider_handle", None)
        if handle is not None:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, handle.shutdown)
        app.state.screen = None
        app.state.permissions = None
        logger.info("✅ Shutdown complete")

    def _configure_middleware(self, app: FastAPI) -> None:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _register_routers(self, app: FastAPI) -> None:
        app.include_router(api_router)
        app.include_router(preview_router)

    def _register_root(self, app: FastAPI) -> None:

        @app.get("/", include_in_schema=False)
        async def root():
            """Redirect to the API docs."""
            return RedirectResponse(url="/docs")

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self._app


# ============================================================================
# APPLICATION INSTANCE
# ============================================================================

application = Application()
app = application.app


# ============================================================================
# ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "camera_scanner.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
