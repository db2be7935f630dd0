"""
AudioCapture: the microphone handle of one live session.

The client captures the microphone and streams PCM to us; this object is the
server side of that stream. A speech source acquires it while open and releases
it when recognition stops, ends, or fails.

- feed(): PCM bytes from the client; ignored while not acquired.
- end(): the client's stream ended on its own (e.g. silence timeout).
- deny(): the client reported that microphone access was refused.
- release(): idempotent; wakes any reader with end-of-stream.
"""
from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from livescribe.errors import PermissionDenied

logger = logging.getLogger(__name__)

_END = None


class AudioCapture:
    """Single-owner PCM stream. At most one acquisition at a time."""

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._active = False
        self._denied = False
        self._acquisitions = 0

    def acquire(self) -> None:
        """Start capturing. Raises PermissionDenied if the client refused the microphone."""
        if self._denied:
            raise PermissionDenied()
        if self._active:
            raise RuntimeError("audio capture is already acquired")
        self._queue = asyncio.Queue()
        self._active = True
        self._acquisitions += 1
        logger.debug("Capture %s acquired", self._name)

    def release(self) -> None:
        """Stop capturing. Safe to call repeatedly."""
        if not self._active:
            return
        self._active = False
        self._queue.put_nowait(_END)
        logger.debug("Capture %s released", self._name)

    def feed(self, data: bytes) -> None:
        if not self._active or not data:
            return
        self._queue.put_nowait(bytes(data))

    def end(self) -> None:
        """Client stream ended; readers see end-of-stream, the capture stays owned until release()."""
        if self._active:
            self._queue.put_nowait(_END)

    def deny(self) -> None:
        self._denied = True

    def allow(self) -> None:
        self._denied = False

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield PCM chunks in arrival order until end-of-stream or release."""
        while True:
            data = await self._queue.get()
            if data is _END:
                return
            yield data

    @property
    def active(self) -> bool:
        return self._active

    @property
    def denied(self) -> bool:
        return self._denied

    @property
    def acquisitions(self) -> int:
        """How many times the capture has been acquired (diagnostics)."""
        return self._acquisitions
