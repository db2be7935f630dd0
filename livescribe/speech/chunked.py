"""
ChunkedSpeechSource: recognition over VAD-committed utterance chunks.

Pipeline per listening episode:
    AudioCapture -> AudioReceiver (20ms frames) -> VADProcessor -> AudioChunker
    -> ASREngine -> SpeechEvent

- Each chunk committed by the chunker (silence after speech) is decoded once as
  FINAL, in order.
- If the engine supports it, the utterance in progress is decoded as INTERIM
  every SPEECH_INTERIM_EVERY_MS of speech.
- When the capture ends on its own, the utterance in progress is flushed as a
  last FINAL before the event stream ends.
- Engine failures surface as RecognitionError.
"""
from __future__ import annotations

import logging
from typing import AsyncIterator, Protocol

from livescribe.asr.base import ASREngine
from livescribe.asr.local_whisper import pcm_bytes_to_float32
from livescribe.audio import AudioCapture, AudioChunker, AudioReceiver, VADProcessor
from livescribe.config import get_settings
from livescribe.errors import LiveScribeError, RecognitionError
from livescribe.speech.base import SpeechSource, SpeechSourceKind
from livescribe.transcript.models import SpeechEvent

logger = logging.getLogger(__name__)


class SpeechDetector(Protocol):
    def is_speech(self, frame: bytes) -> bool:
        ...


class ChunkedSpeechSource(SpeechSource):
    """Speech source backed by an ASR engine and the client's audio capture."""

    def __init__(
        self,
        kind: SpeechSourceKind,
        engine: ASREngine,
        capture: AudioCapture,
        vad: SpeechDetector | None = None,
        interim_every_ms: int | None = None,
    ) -> None:
        settings = get_settings()
        self.kind = kind
        self._engine = engine
        self._capture = capture
        self._vad = vad
        every_ms = settings.SPEECH_INTERIM_EVERY_MS if interim_every_ms is None else interim_every_ms
        self._interim_frames = max(1, every_ms // settings.FRAME_MS)
        self._emit_interim = engine.supports_interim and every_ms > 0
        self._open = False

    async def open(self) -> None:
        """Check the engine, then take the capture. Nothing is held if either fails."""
        self._engine.check_available()
        self._capture.acquire()
        self._open = True
        logger.info("Speech source %s opened", self.kind.value)

    async def close(self) -> None:
        if not self._open:
            return
        self._open = False
        self._capture.release()
        logger.info("Speech source %s closed", self.kind.value)

    @property
    def is_open(self) -> bool:
        return self._open

    async def events(self) -> AsyncIterator[SpeechEvent]:
        receiver = AudioReceiver()
        vad = self._vad or VADProcessor()
        ready: list[bytes] = []
        chunker = AudioChunker(on_chunk=ready.append)
        speech_frames = 0

        async for data in self._capture.stream():
            for frame in receiver.feed(data):
                chunker.push(frame, vad.is_speech(frame))
                if chunker.has_speech:
                    speech_frames += 1

            while ready:
                speech_frames = 0
                event = await self._decode(ready.pop(0), is_final=True)
                if event is not None:
                    yield event

            if self._emit_interim and speech_frames >= self._interim_frames:
                speech_frames = 0
                pending = chunker.pending()
                if pending:
                    event = await self._decode(pending, is_final=False)
                    if event is not None:
                        yield event

        tail = chunker.flush()
        if tail and self._open:
            event = await self._decode(tail, is_final=True)
            if event is not None:
                yield event

    async def _decode(self, chunk: bytes, is_final: bool) -> SpeechEvent | None:
        try:
            result = await self._engine.transcribe(pcm_bytes_to_float32(chunk), is_final=is_final)
        except LiveScribeError:
            raise
        except Exception as err:
            logger.exception("ASR engine failed (%s)", self.kind.value)
            raise RecognitionError(f"Speech recognition failed: {err}") from err
        text = (result.text or "").strip()
        if not text:
            return None
        if is_final:
            return SpeechEvent.final(text, confidence=result.confidence)
        return SpeechEvent.interim(text)
