"""
AudioReceiver: turns the client's binary WebSocket payloads into VAD frames.

Clients send PCM 16-bit mono 16kHz in whatever sizes their recorder produces.
feed() returns every complete 20ms frame now available; a partial tail waits for
the next payload. Odd byte counts never split a sample across frames.
"""
from __future__ import annotations

from livescribe.config import get_settings


class AudioReceiver:
    """Reassembles arbitrary-size PCM payloads into fixed-size frames."""

    def __init__(self, frame_bytes: int | None = None) -> None:
        settings = get_settings()
        self._frame_bytes = frame_bytes or settings.FRAME_BYTES
        self._pending = bytearray()
        self._frames_out = 0

    def feed(self, data: bytes) -> list[bytes]:
        """Add one payload; return the complete frames it finishes, in order."""
        self._pending.extend(data)
        usable = len(self._pending) - len(self._pending) % self._frame_bytes
        if not usable:
            return []
        view = bytes(self._pending[:usable])
        del self._pending[:usable]
        frames = [view[i:i + self._frame_bytes] for i in range(0, usable, self._frame_bytes)]
        self._frames_out += len(frames)
        return frames

    @property
    def pending_bytes(self) -> int:
        """Bytes of the incomplete tail frame."""
        return len(self._pending)

    @property
    def frames_out(self) -> int:
        return self._frames_out

    @property
    def frame_bytes(self) -> int:
        return self._frame_bytes
