"""
==============================================================================
Camera Screen
==============================================================================

The visible camera screen: permission gate, session binding, still capture
and (optionally) barcode analysis, driven by lifecycle callbacks.

Lifecycle:
----------
1. on_create: check permissions; bind the camera or request permission
2. on_start / on_resume: frames start flowing to preview and analysis
3. on_request_permissions_result: bind, or show a message and finish
4. take_photo: capture button
5. finish / on_destroy: lifecycle destroyed, provider unbinds everything

All methods must be called on the event loop thread.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from camera_scanner.camera.executor import MainThreadExecutor
from camera_scanner.camera.lifecycle import Lifecycle, LifecycleState
from camera_scanner.camera.provider import CameraProvider
from camera_scanner.camera.selector import CameraSelector
from camera_scanner.camera.viewfinder import Viewfinder
from camera_scanner.config.settings import ScreenConfig
from camera_scanner.scanner.core import BarcodeScannerClient
from camera_scanner.screen.analyzer import BarcodeFrameAnalyzer
from camera_scanner.screen.capture import StillCaptureHandler
from camera_scanner.screen.notifier import Notifier
from camera_scanner.screen.permissions import PermissionGate, PermissionStore
from camera_scanner.screen.session import CameraSession, CameraSessionBinder
from camera_scanner.utils.photo_files import PhotoFileFactory


# Module logger
logger = logging.getLogger(__name__)


PERMISSIONS_DENIED_MESSAGE = "Permissions not granted by the user."


class CameraScreen:
    """
    Camera screen bound to the running event loop.

    Attributes:
        config: Immutable screen configuration
        lifecycle: Lifecycle the camera use-cases are bound to
        session: Currently bound use-cases
        viewfinder: Surface showing preview frames
        notifier: User-visible messages

    Example:
        >>> screen = CameraScreen(config, store, handle.get, Path("storage/files"), loop)
        >>> screen.on_create()
        >>> screen.on_start()
        >>> screen.take_photo()
    """

    def __init__(
        self,
        config: ScreenConfig,
        permissions: PermissionStore,
        acquire_provider: Callable[[], Awaitable[CameraProvider]],
        output_directory: Path,
        loop: asyncio.AbstractEventLoop,
        barcode_client: Optional[BarcodeScannerClient] = None,
        notifier: Optional[Notifier] = None,
        viewfinder: Optional[Viewfinder] = None,
        jpeg_quality: int = 95,
        clock: Callable[[], float] = time.time
    ) -> None:
        self.config = config
        self.lifecycle = Lifecycle(config.tag)
        self.viewfinder = viewfinder or Viewfinder()
        self.notifier = notifier or Notifier()
        self.session = CameraSession(
            selector=CameraSelector.require_lens_facing(config.lens_facing)
        )
        self.output_directory = output_directory

        self._loop = loop
        self._executor = MainThreadExecutor(loop)
        self._permissions = permissions
        self._gate = PermissionGate(
            permissions, config, self._executor, self.on_request_permissions_result
        )
        self._finished = False
        self._bind_task: Optional["asyncio.Task[bool]"] = None

        self._barcode_client: Optional[BarcodeScannerClient] = None
        self._analyzer: Optional[BarcodeFrameAnalyzer] = None
        if config.scanning_enabled:
            self._barcode_client = barcode_client or BarcodeScannerClient()
            self._analyzer = BarcodeFrameAnalyzer(self._barcode_client)

        self._binder = CameraSessionBinder(
            self.session,
            acquire_provider,
            self.lifecycle,
            self.viewfinder,
            self._executor,
            analyzer=self._analyzer,
            jpeg_quality=jpeg_quality
        )
        self._capture = StillCaptureHandler(
            self.session,
            PhotoFileFactory(output_directory, config.filename_format, clock),
            self._executor,
            self.notifier
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def bind_task(self) -> Optional["asyncio.Task[bool]"]:
        """Task of the most recent bind, if one was started."""
        return self._bind_task

    @property
    def analyzer(self) -> Optional[BarcodeFrameAnalyzer]:
        return self._analyzer

    @property
    def last_photo(self) -> Optional[Path]:
        return self._capture.last_saved

    # =========================================================================
    # LIFECYCLE CALLBACKS
    # =========================================================================

    def on_create(self) -> None:
        self.lifecycle.move_to(LifecycleState.CREATED)
        logger.info(f"📱 {self.config.tag} created, photos go to {self.output_directory}")
        self._gate.open(self._start_camera, self._on_permissions_denied)

    def on_start(self) -> None:
        self.lifecycle.move_to(LifecycleState.STARTED)

    def on_resume(self) -> None:
        self.lifecycle.move_to(LifecycleState.RESUMED)

    def on_request_permissions_result(
        self,
        request_code: int,
        permissions: List[str],
        grant_results: List[bool]
    ) -> None:
        """Result of the camera permission request; ignored once finished."""
        if self._finished:
            return
        self._gate.on_request_permissions_result(request_code, permissions, grant_results)

    def on_destroy(self) -> None:
        self.finish()

    def finish(self) -> None:
        """Close the screen. Use-cases bound to it are unbound."""
        if self._finished:
            return
        self._finished = True

        self._gate.close()
        self._binder.unbind()
        self.lifecycle.move_to(LifecycleState.DESTROYED)
        if self._barcode_client is not None:
            self._barcode_client.close()
        logger.info(f"🛑 {self.config.tag} finished")

    # =========================================================================
    # USER ACTIONS
    # =========================================================================

    def take_photo(self) -> Optional[Path]:
        """Capture button. Returns the requested photo path, if any."""
        if self._finished:
            return None
        return self._capture.take_photo()

    def rebind(self) -> Optional["asyncio.Task[bool]"]:
        """Rebuild the session, e.g. after a configuration change."""
        if self._finished or not self._gate.all_permissions_granted():
            return None
        return self._start_camera()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _start_camera(self) -> "asyncio.Task[bool]":
        self._bind_task = self._loop.create_task(self._binder.bind())
        return self._bind_task

    def _on_permissions_denied(self) -> None:
        self.notifier.show(PERMISSIONS_DENIED_MESSAGE)
        self.finish()

    def status(self) -> Dict[str, Any]:
        """Snapshot of the screen for status reporting."""
        return {
            "tag": self.config.tag,
            "lifecycle": self.lifecycle.state.name,
            "finished": self._finished,
            "permissions_granted": self._gate.all_permissions_granted(),
            "scanning_enabled": self.config.scanning_enabled,
            "lens_facing": self.session.selector.lens_facing.value,
            "bound_use_cases": [type(uc).__name__ for uc in self.session.bound_use_cases()],
            "output_directory": str(self.output_directory),
            "last_photo": str(self.last_photo) if self.last_photo else None,
            "frames_analyzed": self._analyzer.frames_analyzed if self._analyzer else 0,
        }
