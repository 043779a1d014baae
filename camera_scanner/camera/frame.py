"""Analysis frames handed out by the camera pipeline."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np


@dataclass(frozen=True)
class ImageInfo:
    """Metadata delivered with a frame."""

    rotation_degrees: int = 0
    timestamp_ns: int = field(default_factory=time.monotonic_ns)


class ImageProxy:
    """
    A camera frame borrowed from the pipeline.

    The pipeline delivers no further analysis frames until the current
    proxy is closed. ``close`` releases the buffer once; later calls do
    nothing.
    """

    def __init__(
        self,
        image: Optional[np.ndarray],
        image_info: ImageInfo,
        on_close: Optional[Callable[["ImageProxy"], None]] = None
    ) -> None:
        self._image = image
        self._image_info = image_info
        self._on_close = on_close
        self._closed = False
        self._lock = threading.Lock()

    @property
    def image(self) -> Optional[np.ndarray]:
        """The frame buffer, or None once closed."""
        return None if self._closed else self._image

    @property
    def image_info(self) -> ImageInfo:
        return self._image_info

    @property
    def width(self) -> int:
        return 0 if self._image is None else int(self._image.shape[1])

    @property
    def height(self) -> int:
        return 0 if self._image is None else int(self._image.shape[0])

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True

        self._image = None
        if self._on_close is not None:
            self._on_close(self)

    def __repr__(self) -> str:
        return (
            f"ImageProxy({self.width}x{self.height}, "
            f"rotation={self._image_info.rotation_degrees}, closed={self._closed})"
        )
