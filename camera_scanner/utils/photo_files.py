"""
==============================================================================
Photo Files Module
==============================================================================

Output locations for captured photos.

- resolve_output_directory: external media directory or app-private fallback
- PhotoFileFactory: timestamped JPEG paths

File Format:
-----------
{YYYY-MM-DD}-{HH-MM-SS}-{mmm}.jpg   (local time, millisecond precision)

==============================================================================
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from camera_scanner.config.settings import FILENAME_FORMAT


# Module logger
logger = logging.getLogger(__name__)


def resolve_output_directory(
    external_media_dirs: Iterable[Path],
    app_name: str,
    files_dir: Path
) -> Path:
    """
    Pick the directory photos are written to.

    Uses ``<first external media dir>/<app_name>`` when that directory
    exists or can be created inside an existing media root, otherwise the
    app-private ``files_dir`` (created if needed).

    Args:
        external_media_dirs: Candidate media roots, first one wins
        app_name: Sub-directory name under the media root
        files_dir: Fallback directory

    Returns:
        Directory that exists on disk
    """
    media_root: Optional[Path] = next(iter(external_media_dirs), None)

    if media_root is not None:
        media_dir = media_root / app_name
        try:
            media_dir.mkdir(exist_ok=True)
        except OSError as e:
            logger.warning(f"Cannot use media directory {media_dir}: {e}")
        if media_dir.is_dir():
            return media_dir

    files_dir.mkdir(parents=True, exist_ok=True)
    return files_dir


class PhotoFileFactory:
    """
    Generator of photo file paths.

    Names are strictly increasing: a timestamp not later than the previous
    one is moved 1 ms past it.

    Example:
        >>> factory = PhotoFileFactory(Path("storage/files"))
        >>> factory.next_path()
        PosixPath('storage/files/2025-01-15-10-30-45-123.jpg')
    """

    def __init__(
        self,
        output_directory: Path,
        filename_format: str = FILENAME_FORMAT,
        clock: Callable[[], float] = time.time
    ) -> None:
        self._output_directory = output_directory
        self._filename_format = filename_format
        self._clock = clock
        self._last_ms: Optional[int] = None

    @property
    def output_directory(self) -> Path:
        return self._output_directory

    def next_path(self) -> Path:
        now_ms = int(self._clock() * 1000)
        if self._last_ms is not None and now_ms <= self._last_ms:
            now_ms = self._last_ms + 1
        self._last_ms = now_ms

        return self._output_directory / f"{self.format_timestamp(now_ms)}.jpg"

    def format_timestamp(self, epoch_ms: int) -> str:
        stamp = datetime.fromtimestamp(epoch_ms / 1000).strftime(self._filename_format)
        return f"{stamp}-{epoch_ms % 1000:03d}"
