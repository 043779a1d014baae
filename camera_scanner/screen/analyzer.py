"""Barcode analysis of camera frames."""

from __future__ import annotations

import asyncio
import logging
from typing import List

from camera_scanner.camera.frame import ImageProxy
from camera_scanner.camera.use_cases import Analyzer
from camera_scanner.scanner.core import Barcode, BarcodeScannerClient, InputImage


# Module logger
logger = logging.getLogger(__name__)


class BarcodeFrameAnalyzer(Analyzer):
    """
    Forwards each frame to the barcode client and logs the outcome.

    Every frame is closed exactly once, whether detection succeeds, fails
    or raises before it starts.
    """

    def __init__(self, client: BarcodeScannerClient) -> None:
        self._client = client
        self.frames_analyzed = 0
        self.frames_with_barcodes = 0

    def analyze(self, image: ImageProxy) -> None:
        self.frames_analyzed += 1
        try:
            input_image = InputImage.from_frame(
                image.image, image.image_info.rotation_degrees
            )
            future = self._client.process(input_image)
        except Exception as e:
            logger.error(f"Barcode detection error: {e}")
            image.close()
            return

        future.add_done_callback(lambda done: self._on_complete(done, image))

    def _on_complete(self, done: "asyncio.Future[List[Barcode]]", image: ImageProxy) -> None:
        try:
            if done.cancelled():
                logger.debug("Scan cancelled")
            elif done.exception() is not None:
                logger.warning(f"Scan failed: {done.exception()}")
            else:
                barcodes = done.result()
                if barcodes:
                    self.frames_with_barcodes += 1
                    logger.debug(f"Barcode detected ({len(barcodes)})")
                else:
                    logger.debug("No barcode detected")
        finally:
            image.close()
