"""
==============================================================================
Camera Provider
==============================================================================

Binds use-cases to cameras for the lifetime of a lifecycle owner.

Features:
---------
- Asynchronous acquisition: ``get_instance`` returns an asyncio future
  resolved once the camera sources are open
- At most one use-case of each type bound per provider
- Frame pump thread feeding Preview surfaces and ImageAnalysis analyzers
  while the owner is at least STARTED
- Everything bound to an owner is unbound when the owner is destroyed

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Mapping, Optional

import numpy as np

from camera_scanner.camera.errors import CameraBindingError
from camera_scanner.camera.lifecycle import Lifecycle, LifecycleState
from camera_scanner.camera.selector import CameraSelector, LensFacing
from camera_scanner.camera.source import CameraSource
from camera_scanner.camera.use_cases import ImageAnalysis, Preview, UseCase


# Module logger
logger = logging.getLogger(__name__)


class BoundCamera:
    """
    An opened physical camera as seen by the use-cases bound to it.

    Reads are serialized because the pump thread and capture workers
    share the source.
    """

    def __init__(
        self,
        lens_facing: LensFacing,
        source: CameraSource,
        io_pool: ThreadPoolExecutor,
        rotation_degrees: int = 0
    ) -> None:
        self.lens_facing = lens_facing
        self.source = source
        self.rotation_degrees = rotation_degrees
        self._io_pool = io_pool
        self._lock = threading.Lock()

    def grab_frame(self) -> Optional[np.ndarray]:
        with self._lock:
            return self.source.read()

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        return self._io_pool.submit(fn, *args)

    def release(self) -> None:
        with self._lock:
            self.source.release()


class CameraProvider:
    """
    Process-wide camera provider.

    Example:
        >>> future = CameraProvider.get_instance(OpenCVCameraSource(0), loop)
        >>> provider = await future
        >>> provider.bind_to_lifecycle(lifecycle, DEFAULT_BACK_CAMERA, preview, capture)
    """

    def __init__(
        self,
        sources: Mapping[LensFacing, CameraSource],
        rotation_degrees: int = 0,
        frame_interval_ms: int = 33
    ) -> None:
        self._sources = dict(sources)
        self._rotation_degrees = rotation_degrees
        self._frame_interval = frame_interval_ms / 1000.0
        self._io_pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="camera-io")
        self._cameras: Dict[LensFacing, BoundCamera] = {}
        self._bound: Dict[UseCase, Lifecycle] = {}
        self._observed: List[Lifecycle] = []
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._pump: Optional[threading.Thread] = None
        self._shut_down = False

    # =========================================================================
    # ACQUISITION
    # =========================================================================

    @classmethod
    def get_instance(
        cls,
        source: CameraSource,
        loop: asyncio.AbstractEventLoop,
        rotation_degrees: int = 0,
        frame_interval_ms: int = 33
    ) -> "asyncio.Future[CameraProvider]":
        """
        Acquire a provider for a rear camera without blocking the loop.

        Opening the device happens on a worker thread; the returned future
        resolves on ``loop``.
        """
        provider = cls(
            {LensFacing.BACK: source},
            rotation_degrees=rotation_degrees,
            frame_interval_ms=frame_interval_ms
        )
        return provider.acquire(loop)

    def acquire(self, loop: asyncio.AbstractEventLoop) -> "asyncio.Future[CameraProvider]":
        """Run ``initialize`` on the loop's default executor."""
        return loop.run_in_executor(None, self.initialize)

    def initialize(self) -> "CameraProvider":
        """
        Open every configured source.

        A source opened after ``shutdown`` has started is released again.

        Raises:
            CameraBindingError: If no source could be opened, or the
                provider was shut down while opening
        """
        for lens_facing, source in self._sources.items():
            if not source.open():
                logger.warning(f"Camera for lens {lens_facing.value} unavailable")
                continue

            with self._lock:
                if self._shut_down:
                    source.release()
                    raise CameraBindingError("Camera provider has been shut down")
                self._cameras[lens_facing] = BoundCamera(
                    lens_facing, source, self._io_pool, self._rotation_degrees
                )

        if not self._cameras:
            raise CameraBindingError("No camera available")

        logger.info(f"✅ Camera provider ready: {[c.value for c in self._cameras]}")
        return self

    # =========================================================================
    # BINDING
    # =========================================================================

    @property
    def bound_use_cases(self) -> List[UseCase]:
        with self._lock:
            return list(self._bound)

    def is_bound(self, use_case: UseCase) -> bool:
        """
        Check whether ``use_case`` is bound to a lifecycle of this provider.

        Args:
            use_case: Use-case to look up

        Returns:
            True if it is currently bound
        """
        with self._lock:
            return use_case in self._bound

    def bind_to_lifecycle(
        self,
        owner: Lifecycle,
        selector: CameraSelector,
        *use_cases: UseCase
    ) -> BoundCamera:
        """
        Bind ``use_cases`` to the camera chosen by ``selector``.

        Raises:
            CameraBindingError: If the provider is shut down, the owner is
                destroyed, no camera matches, or a use-case of the same
                type is already bound
        """
        if self._shut_down:
            raise CameraBindingError("Camera provider has been shut down")
        if owner.state == LifecycleState.DESTROYED:
            raise CameraBindingError("Cannot bind to a destroyed lifecycle")

        camera = self._cameras.get(selector.lens_facing)
        if camera is None:
            raise CameraBindingError(
                f"No available camera can be found for lens facing {selector.lens_facing.value}"
            )

        with self._lock:
            new_types = set()
            for use_case in use_cases:
                if use_case in self._bound:
                    if self._bound[use_case] is not owner:
                        raise CameraBindingError(
                            f"{use_case!r} is already bound to another lifecycle"
                        )
                    continue
                kind = type(use_case)
                if kind in new_types or any(type(b) is kind for b in self._bound):
                    raise CameraBindingError(
                        f"A {kind.__name__} use case is already bound"
                    )
                new_types.add(kind)

            for use_case in use_cases:
                if use_case not in self._bound:
                    use_case._attach(camera)
                    self._bound[use_case] = owner
                    logger.debug(f"Bound {use_case!r} to {camera.lens_facing.value} camera")

            if owner not in self._observed:
                owner.add_observer(self._on_lifecycle_event)
                self._observed.append(owner)

        self._ensure_pump()
        return camera

    def unbind(self, *use_cases: UseCase) -> None:
        """Unbind ``use_cases``; use-cases that are not bound are ignored."""
        with self._lock:
            for use_case in use_cases:
                if self._bound.pop(use_case, None) is not None:
                    use_case._detach()
                    logger.debug(f"Unbound {type(use_case).__name__}")

    def unbind_all(self) -> None:
        """Unbind every use-case, whatever lifecycle owns it."""
        with self._lock:
            self.unbind(*list(self._bound))

    def _on_lifecycle_event(self, owner: Lifecycle, state: LifecycleState) -> None:
        if state != LifecycleState.DESTROYED:
            return
        with self._lock:
            owned = [uc for uc, lc in self._bound.items() if lc is owner]
            self.unbind(*owned)
            if owner in self._observed:
                self._observed.remove(owner)
        logger.info(f"{owner.name} destroyed, unbound {len(owned)} use case(s)")

    # =========================================================================
    # FRAME PUMP
    # =========================================================================

    def _ensure_pump(self) -> None:
        if self._pump is not None and self._pump.is_alive():
            return
        self._stop.clear()
        self._pump = threading.Thread(
            target=self._run_pump, name="camera-frame-pump", daemon=True
        )
        self._pump.start()

    def _streaming_targets(self) -> Dict[LensFacing, List[UseCase]]:
        targets: Dict[LensFacing, List[UseCase]] = {}
        with self._lock:
            for use_case, owner in self._bound.items():
                if not isinstance(use_case, (Preview, ImageAnalysis)):
                    continue
                if not owner.state.is_at_least(LifecycleState.STARTED):
                    continue
                camera = use_case._camera
                if camera is not None:
                    targets.setdefault(camera.lens_facing, []).append(use_case)
        return targets

    def _run_pump(self) -> None:
        logger.debug("Frame pump started")
        while not self._stop.wait(self._frame_interval):
            for lens_facing, use_cases in self._streaming_targets().items():
                camera = self._cameras[lens_facing]
                try:
                    frame = camera.grab_frame()
                except Exception as e:
                    logger.error(f"Frame read error: {e}")
                    continue
                if frame is None:
                    continue
                for use_case in use_cases:
                    self.deliver(use_case, frame, camera.rotation_degrees)
        logger.debug("Frame pump stopped")

    @staticmethod
    def deliver(use_case: UseCase, frame: np.ndarray, rotation_degrees: int = 0) -> None:
        """Push one frame to a streaming use-case."""
        try:
            if isinstance(use_case, Preview):
                use_case._publish(frame)
            elif isinstance(use_case, ImageAnalysis):
                use_case._offer(frame, rotation_degrees)
        except Exception as e:
            logger.error(f"Frame delivery error: {e}")

    # =========================================================================
    # SHUTDOWN
    # =========================================================================

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def shutdown(self) -> None:
        """
        Unbind everything, stop the pump and release the cameras.

        Safe to call from any thread, including while ``initialize`` is
        still opening sources.
        """
        with self._lock:
            if self._shut_down:
                return
            self._shut_down = True
            cameras = list(self._cameras.values())

        self.unbind_all()
        self._stop.set()
        if self._pump is not None and self._pump is not threading.current_thread():
            self._pump.join(timeout=2.0)

        self._io_pool.shutdown(wait=True)
        for camera in cameras:
            camera.release()
        logger.info("Camera provider shut down")


class ProviderHandle:
    """
    Lazily acquired, shared provider.

    Every ``get`` returns the same future, so all screens of the process
    share one provider and one open camera.
    """

    def __init__(
        self,
        source: CameraSource,
        loop: asyncio.AbstractEventLoop,
        rotation_degrees: int = 0,
        frame_interval_ms: int = 33
    ) -> None:
        self._source = source
        self._loop = loop
        self._rotation_degrees = rotation_degrees
        self._frame_interval_ms = frame_interval_ms
        self._provider: Optional[CameraProvider] = None
        self._future: Optional["asyncio.Future[CameraProvider]"] = None

    @property
    def source(self) -> CameraSource:
        return self._source

    def get(self) -> "asyncio.Future[CameraProvider]":
        """
        Start acquisition on first use.

        Returns:
            Future resolving to the shared provider
        """
        if self._future is None:
            self._provider = CameraProvider(
                {LensFacing.BACK: self._source},
                rotation_degrees=self._rotation_degrees,
                frame_interval_ms=self._frame_interval_ms
            )
            self._future = self._provider.acquire(self._loop)
        return self._future

    def provider(self) -> Optional[CameraProvider]:
        """The provider if acquisition has completed successfully."""
        future = self._future
        if future is None or not future.done() or future.cancelled():
            return None
        if future.exception() is not None:
            return None
        return future.result()

    def shutdown(self) -> None:
        """
        Shut the provider down, even if acquisition is still in progress.

        Blocks until the frame pump and capture workers have stopped, so
        call it from a worker thread when running on the event loop.
        """
        if self._provider is not None:
            self._provider.shutdown()
        else:
            self._source.release()
