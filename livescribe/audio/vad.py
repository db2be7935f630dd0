"""
VADProcessor: per-frame speech/silence decision for the utterance chunker.

webrtcvad only accepts 10, 20 or 30ms frames at 8/16/32/48kHz; the configured
framing is checked once at construction so a bad FRAME_MS fails at session start
instead of on the first frame.
"""
from __future__ import annotations

import webrtcvad

from livescribe.config import get_settings
from livescribe.errors import CapabilityUnavailable

_VALID_FRAME_MS = (10, 20, 30)
_VALID_RATES = (8000, 16000, 32000, 48000)


class VADProcessor:
    """webrtcvad wrapper. Frames of the wrong size count as silence."""

    def __init__(self, aggressiveness: int | None = None) -> None:
        settings = get_settings()
        if settings.FRAME_MS not in _VALID_FRAME_MS or settings.SAMPLE_RATE not in _VALID_RATES:
            raise CapabilityUnavailable(
                f"VAD needs 10/20/30ms frames at 8/16/32/48kHz, "
                f"got {settings.FRAME_MS}ms at {settings.SAMPLE_RATE}Hz"
            )
        level = settings.VAD_AGGRESSIVENESS if aggressiveness is None else aggressiveness
        self._vad = webrtcvad.Vad(min(3, max(0, level)))
        self._frame_bytes = settings.FRAME_BYTES
        self._sample_rate = settings.SAMPLE_RATE

    def is_speech(self, frame: bytes) -> bool:
        if len(frame) != self._frame_bytes:
            return False
        return self._vad.is_speech(frame, self._sample_rate)
