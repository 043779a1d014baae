"""
==============================================================================
Preview WebSocket Module
==============================================================================

Streams viewfinder frames to a client.

Protocol:
---------
1. Client connects to /ws/preview
2. Server sends {"type": "frame", "frame_id": n, "frame": <base64 JPEG>}
   whenever a new preview frame is available
3. Server sends {"type": "finished"} and closes when the screen finishes
4. Client may send {"type": "stop"} to end the stream

==============================================================================
"""

import asyncio
import base64
import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from camera_scanner.screen.screen import CameraScreen


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class PreviewWebSocketHandler:
    """Sends each new viewfinder frame until the client or screen goes away."""

    def __init__(self, websocket: WebSocket, screen: Optional[CameraScreen], interval: float):
        self._websocket = websocket
        self._screen = screen
        self._interval = interval
        self._last_frame_id = 0
        self._stopped = False

    async def send_frame(self) -> None:
        viewfinder = self._screen.viewfinder
        frame_id = viewfinder.frame_count
        if frame_id == self._last_frame_id:
            return

        loop = asyncio.get_running_loop()
        jpeg = await loop.run_in_executor(None, viewfinder.latest_jpeg)
        if jpeg is None:
            return

        self._last_frame_id = frame_id
        await self._websocket.send_json({
            "type": "frame",
            "frame_id": frame_id,
            "frame": base64.b64encode(jpeg).decode("ascii")
        })

    async def listen(self) -> None:
        """Watch for a stop message from the client."""
        try:
            while not self._stopped:
                try:
                    data = await self._websocket.receive_json()
                except ValueError:
                    logger.warning("Ignoring non-JSON client message")
                    continue
                if not isinstance(data, dict):
                    continue
                if data.get("type") == "stop":
                    logger.info("🛑 Client requested stop")
                    self._stopped = True
        except WebSocketDisconnect:
            self._stopped = True

    async def run(self) -> None:
        await self._websocket.accept()
        logger.info("📱 Preview WebSocket connected")

        if self._screen is None:
            await self._websocket.send_json({"type": "error", "code": "SCREEN_NOT_READY"})
            await self._websocket.close()
            return

        listener = asyncio.create_task(self.listen())
        try:
            while not self._stopped:
                if self._screen.finished:
                    await self._websocket.send_json({"type": "finished"})
                    break
                await self.send_frame()
                await asyncio.sleep(self._interval)
        except WebSocketDisconnect:
            logger.info("📱 Client disconnected")
        finally:
            listener.cancel()
            try:
                await self._websocket.close()
            except RuntimeError:
                pass
            logger.info("✅ Preview WebSocket closed")


@router.websocket("/ws/preview")
async def websocket_preview(websocket: WebSocket):
    """Live viewfinder stream."""
    state = websocket.app.state
    settings = getattr(state, "settings", None)
    interval_ms = settings.preview_stream_interval_ms if settings else 100
    handler = PreviewWebSocketHandler(websocket, getattr(state, "screen", None), interval_ms / 1000.0)
    await handler.run()
