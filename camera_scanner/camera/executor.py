"""Executor that delivers callbacks on the event loop thread."""

from __future__ import annotations

import asyncio
from typing import Any, Callable


class MainThreadExecutor:
    """
    Runs callbacks on the thread that owns ``loop``.

    Worker threads (frame pump, capture writes, barcode decoding) use this
    to hand results back, so screen code only ever runs on the loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def execute(self, fn: Callable[..., Any], *args: Any) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(fn, *args)
