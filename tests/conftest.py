"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides fake camera sources, a fake barcode client, settings pointing at
a temporary directory, and a test client running the full application.

==============================================================================
"""

import asyncio
import json
import threading
import time
from pathlib import Path
from typing import Callable, Generator, List, Optional

import numpy as np
import pytest
from fastapi.testclient import TestClient

from camera_scanner.camera.source import CameraSource
from camera_scanner.config.settings import Settings
from camera_scanner.main import Application
from camera_scanner.scanner.core import Barcode, BarcodeScannerClient, InputImage


# ============================================================================
# FAKES
# ============================================================================

class FakeCameraSource(CameraSource):
    """
    In-memory camera producing solid gray frames.

    Args:
        open_ok: Whether ``open`` succeeds
        blank: Return no frames although the camera is open
        open_delay: Seconds ``open`` takes, to mimic a slow device
    """

    def __init__(
        self,
        width: int = 64,
        height: int = 48,
        open_ok: bool = True,
        blank: bool = False,
        open_delay: float = 0.0
    ):
        self._width = width
        self._height = height
        self._open_ok = open_ok
        self._blank = blank
        self._open_delay = open_delay
        self._opened = False
        self.open_calls = 0
        self.reads = 0
        self.released = False
        self.release_thread: Optional[str] = None

    def open(self) -> bool:
        self.open_calls += 1
        if self._open_delay:
            time.sleep(self._open_delay)
        self._opened = self._open_ok
        return self._opened

    def read(self) -> Optional[np.ndarray]:
        self.reads += 1
        if not self._opened or self._blank:
            return None
        return np.full((self._height, self._width, 3), 128, dtype=np.uint8)

    def release(self) -> None:
        self._opened = False
        self.released = True
        self.release_thread = threading.current_thread().name

    @property
    def is_opened(self) -> bool:
        return self._opened


class FakeBarcodeClient(BarcodeScannerClient):
    """
    Barcode client with scripted outcomes.

    Args:
        barcodes: Result of every successful scan
        error: Exception the returned future fails with
        raise_error: Exception raised synchronously by ``process``
    """

    def __init__(
        self,
        barcodes: Optional[List[Barcode]] = None,
        error: Optional[Exception] = None,
        raise_error: Optional[Exception] = None
    ):
        super().__init__()
        self.barcodes = barcodes or []
        self.error = error
        self.raise_error = raise_error
        self.calls = 0

    def process(self, image: InputImage) -> "asyncio.Future[List[Barcode]]":
        self.calls += 1
        if self.raise_error is not None:
            raise self.raise_error

        future = asyncio.get_running_loop().create_future()
        if self.error is not None:
            future.set_exception(self.error)
        else:
            future.set_result(list(self.barcodes))
        return future


async def _wait_until(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        await asyncio.sleep(0.01)
    return True


def _poll(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.02)
    return True


# ============================================================================
# HELPER FIXTURES
# ============================================================================

@pytest.fixture
def source_factory() -> Callable[..., FakeCameraSource]:
    """Build fake camera sources with custom behaviour."""
    return FakeCameraSource


@pytest.fixture
def camera_source() -> FakeCameraSource:
    return FakeCameraSource()


@pytest.fixture
def barcode_client_factory() -> Callable[..., FakeBarcodeClient]:
    return FakeBarcodeClient


@pytest.fixture
def wait_until() -> Callable[..., "asyncio.Future[bool]"]:
    """Await until a predicate holds, polling the running loop."""
    return _wait_until


@pytest.fixture
def poll() -> Callable[..., bool]:
    """Block until a predicate holds; for state changed by the app's loop."""
    return _poll


# ============================================================================
# APPLICATION FIXTURES
# ============================================================================

def _settings(tmp_path: Path, granted: List[str], scanning: bool = False) -> Settings:
    return Settings(
        debug=False,
        files_dir=str(tmp_path / "files"),
        external_media_dirs="[]",
        granted_permissions=json.dumps(granted),
        auto_grant_accessible_devices=False,
        barcode_scanning_enabled=scanning,
        frame_interval_ms=5,
        preview_stream_interval_ms=10,
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with the camera permission granted up front."""
    return _settings(tmp_path, ["camera"])


@pytest.fixture
def client(settings: Settings, camera_source: FakeCameraSource) -> Generator[TestClient, None, None]:
    """Test client for an app whose camera permission is already granted."""
    application = Application(settings=settings, camera_source=camera_source)
    with TestClient(application.app) as test_client:
        yield test_client


@pytest.fixture
def ungranted_client(tmp_path: Path, camera_source: FakeCameraSource) -> Generator[TestClient, None, None]:
    """Test client for an app that has to ask for the camera permission."""
    application = Application(settings=_settings(tmp_path, []), camera_source=camera_source)
    with TestClient(application.app) as test_client:
        yield test_client
