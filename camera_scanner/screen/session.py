"""
==============================================================================
Camera Session Module
==============================================================================

The camera screen's session state and the binder that (re)builds it.

Each use-case type has one slot holding either ``UNBOUND`` or
``Bound(use_case)``. Binding always empties every slot (unbinding the
previous use-cases from the provider) before new use-cases are bound, so
a session never holds two use-cases of the same type.

==============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar, Union

from camera_scanner.camera.executor import MainThreadExecutor
from camera_scanner.camera.lifecycle import Lifecycle
from camera_scanner.camera.provider import CameraProvider
from camera_scanner.camera.selector import CameraSelector
from camera_scanner.camera.use_cases import (
    Analyzer,
    ImageAnalysis,
    ImageCapture,
    Preview,
    SurfaceProvider,
    UseCase,
)


# Module logger
logger = logging.getLogger(__name__)


U = TypeVar("U", bound=UseCase)


@dataclass(frozen=True)
class Unbound:
    def __repr__(self) -> str:
        return "UNBOUND"


@dataclass(frozen=True)
class Bound(Generic[U]):
    use_case: U


UNBOUND = Unbound()

Slot = Union[Unbound, Bound[U]]


@dataclass
class CameraSession:
    """
    Use-cases currently bound for one screen.

    Attributes:
        selector: Camera the use-cases are bound to
        provider: Provider once acquired
        preview / capture / analysis: One slot per use-case type
    """

    selector: CameraSelector
    provider: Optional[CameraProvider] = None
    preview: Slot[Preview] = UNBOUND
    capture: Slot[ImageCapture] = UNBOUND
    analysis: Slot[ImageAnalysis] = UNBOUND

    def bound_use_cases(self) -> List[UseCase]:
        return [
            slot.use_case
            for slot in (self.preview, self.capture, self.analysis)
            if isinstance(slot, Bound)
        ]

    def clear(self) -> None:
        self.preview = UNBOUND
        self.capture = UNBOUND
        self.analysis = UNBOUND


class CameraSessionBinder:
    """
    Builds and binds the session's use-cases.

    Args:
        session: Session updated in place
        acquire_provider: Returns an awaitable resolving to the provider
        lifecycle: Owner the use-cases are bound to
        surface: Viewfinder receiving preview frames
        executor: Executor analysis callbacks run on
        analyzer: Frame analyzer; None binds no analysis use-case
        jpeg_quality: Quality of captured photos
    """

    def __init__(
        self,
        session: CameraSession,
        acquire_provider: Callable[[], Awaitable[CameraProvider]],
        lifecycle: Lifecycle,
        surface: SurfaceProvider,
        executor: MainThreadExecutor,
        analyzer: Optional[Analyzer] = None,
        jpeg_quality: int = 95
    ) -> None:
        self._session = session
        self._acquire_provider = acquire_provider
        self._lifecycle = lifecycle
        self._surface = surface
        self._executor = executor
        self._analyzer = analyzer
        self._jpeg_quality = jpeg_quality

    async def bind(self) -> bool:
        """
        Acquire the provider and bind preview, capture and analysis.

        Failures are logged and leave every slot unbound.

        Returns:
            True if the use-cases were bound
        """
        try:
            provider = await self._acquire_provider()
            self._session.provider = provider
            self.unbind()

            preview = Preview()
            preview.set_surface_provider(self._surface)
            capture = ImageCapture(jpeg_quality=self._jpeg_quality)
            use_cases: List[UseCase] = [preview, capture]

            analysis: Optional[ImageAnalysis] = None
            if self._analyzer is not None:
                analysis = ImageAnalysis()
                analysis.set_analyzer(self._executor, self._analyzer)
                use_cases.append(analysis)

            provider.bind_to_lifecycle(self._lifecycle, self._session.selector, *use_cases)
        except Exception as e:
            logger.error(f"Use case binding failed: {e}")
            return False

        self._session.preview = Bound(preview)
        self._session.capture = Bound(capture)
        if analysis is not None:
            self._session.analysis = Bound(analysis)

        logger.info(
            f"✅ Bound {[type(uc).__name__ for uc in use_cases]} "
            f"to {self._session.selector.lens_facing.value} camera"
        )
        return True

    def unbind(self) -> None:
        """Unbind whatever the session holds. Safe when nothing is bound."""
        provider = self._session.provider
        bound = self._session.bound_use_cases()
        if provider is not None and bound:
            provider.unbind(*bound)
        for use_case in bound:
            if isinstance(use_case, ImageAnalysis):
                use_case.clear_analyzer()
        self._session.clear()
