"""
==============================================================================
Barcode Scanner Tests
==============================================================================

Tests for input images and the asynchronous detection client. The zbar
decoder is replaced where a test needs specific results.

==============================================================================
"""

import asyncio
from types import SimpleNamespace

import numpy as np
import pytest

from camera_scanner.scanner import core
from camera_scanner.scanner.core import BarcodeScannerClient, DetectionError, InputImage


def _zbar_result(data: bytes, kind: str = "QRCODE"):
    return SimpleNamespace(
        data=data,
        type=kind,
        rect=SimpleNamespace(left=1, top=2, width=30, height=40)
    )


class TestInputImage:
    """Tests for input image validation and rotation."""

    def test_empty_frame(self):
        with pytest.raises(DetectionError):
            InputImage.from_frame(None, 0)
        with pytest.raises(DetectionError):
            InputImage.from_frame(np.zeros((0, 0), dtype=np.uint8), 0)

    def test_invalid_rotation(self):
        with pytest.raises(DetectionError):
            InputImage.from_frame(np.zeros((4, 4), dtype=np.uint8), 45)

    def test_upright(self):
        """Test a quarter-turn swaps the frame dimensions."""
        frame = np.zeros((20, 10, 3), dtype=np.uint8)
        assert InputImage.from_frame(frame, 90).upright().shape == (10, 20, 3)
        assert InputImage.from_frame(frame, 180).upright().shape == (20, 10, 3)
        assert InputImage.from_frame(frame, 0).upright() is frame


class TestBarcodeScannerClient:
    """Tests for asynchronous detection."""

    def test_detects_barcodes(self, monkeypatch):
        monkeypatch.setattr(core, "decode", lambda frame: [_zbar_result(b"hello")])

        async def scenario():
            client = BarcodeScannerClient()
            return await client.process(InputImage.from_frame(np.zeros((8, 8), dtype=np.uint8), 0))

        barcodes = asyncio.run(scenario())
        assert len(barcodes) == 1
        assert barcodes[0].raw_value == "hello"
        assert barcodes[0].format == "QRCODE"
        assert barcodes[0].bounding_box == {"x": 1, "y": 2, "width": 30, "height": 40}

    def test_no_barcodes(self, monkeypatch):
        monkeypatch.setattr(core, "decode", lambda frame: [])

        async def scenario():
            return await BarcodeScannerClient().process(
                InputImage.from_frame(np.zeros((8, 8), dtype=np.uint8), 0)
            )

        assert asyncio.run(scenario()) == []

    def test_blank_frame_with_zbar(self):
        """Test the real decoder finds nothing in a blank frame."""

        async def scenario():
            return await BarcodeScannerClient().process(
                InputImage.from_frame(np.full((64, 64), 255, dtype=np.uint8), 90)
            )

        assert asyncio.run(scenario()) == []

    def test_non_utf8_payload(self, monkeypatch):
        monkeypatch.setattr(core, "decode", lambda frame: [_zbar_result(b"\xe9t\xe9", "CODE128")])

        async def scenario():
            return await BarcodeScannerClient().process(
                InputImage.from_frame(np.zeros((8, 8), dtype=np.uint8), 0)
            )

        assert asyncio.run(scenario())[0].raw_value == "été"

    def test_decoder_failure(self, monkeypatch):
        """Test decoder errors fail the returned future."""

        def broken(frame):
            raise RuntimeError("zbar crashed")

        monkeypatch.setattr(core, "decode", broken)

        async def scenario():
            return await BarcodeScannerClient().process(
                InputImage.from_frame(np.zeros((8, 8), dtype=np.uint8), 0)
            )

        with pytest.raises(DetectionError, match="zbar crashed"):
            asyncio.run(scenario())

    def test_closed_client(self):
        client = core.get_client()
        client.close()

        async def scenario():
            client.process(InputImage.from_frame(np.zeros((8, 8), dtype=np.uint8), 0))

        with pytest.raises(DetectionError):
            asyncio.run(scenario())
        assert client.closed
