"""
LocalWhisperEngine: on-device recognition using faster-whisper.

- Model loaded ONCE at startup (singleton, injected at construction).
- INTERIM: lower beam size, no conditioning on previous text, faster.
- FINAL: higher beam size, stable decode.
- Confidence: mean of exp(avg_logprob) over decoded segments.
- Runs in executor so event loop stays responsive.
"""
from __future__ import annotations

import asyncio
import math
from typing import Any

import numpy as np

from livescribe.asr.base import ASREngine, ASRResult
from livescribe.config import get_settings
from livescribe.errors import CapabilityUnavailable

# Type for shared WhisperModel (loaded at startup)
WhisperModelT = Any


def pcm_bytes_to_float32(pcm_bytes: bytes) -> np.ndarray:
    """Convert PCM 16-bit mono bytes to float32 [-1.0, 1.0]."""
    samples = np.frombuffer(pcm_bytes, dtype=np.int16)
    return samples.astype(np.float32) / 32768.0


def load_whisper_model() -> WhisperModelT:
    """Load faster-whisper model once. Called at startup when SPEECH_SOURCE=native."""
    try:
        from faster_whisper import WhisperModel
    except ImportError as err:
        raise CapabilityUnavailable(
            "faster-whisper is required for SPEECH_SOURCE=native. "
            "Install with: pip install 'livescribe[native]'"
        ) from err
    settings = get_settings()
    return WhisperModel(
        settings.LOCAL_WHISPER_MODEL,
        device=settings.LOCAL_WHISPER_DEVICE,
        compute_type=settings.LOCAL_WHISPER_COMPUTE_TYPE,
    )


def _segment_confidence(avg_logprobs: list[float]) -> float | None:
    if not avg_logprobs:
        return None
    probs = [min(1.0, math.exp(lp)) for lp in avg_logprobs]
    return sum(probs) / len(probs)


class LocalWhisperEngine(ASREngine):
    """Local Whisper via faster-whisper. Uses shared model (singleton)."""

    def __init__(self, model: WhisperModelT | None = None) -> None:
        self._model = model

    def check_available(self) -> None:
        if self._model is None:
            raise CapabilityUnavailable("Local speech model is not loaded")

    @property
    def supports_interim(self) -> bool:
        return True

    def _transcribe_sync(self, audio: np.ndarray, is_final: bool) -> ASRResult:
        self.check_available()
        settings = get_settings()
        beam_size = settings.LOCAL_WHISPER_BEAM_SIZE_FINAL if is_final else settings.LOCAL_WHISPER_BEAM_SIZE_INTERIM

        segments, _ = self._model.transcribe(
            audio,
            language=settings.LOCAL_WHISPER_LANGUAGE or None,
            beam_size=beam_size,
            vad_filter=True,
            vad_parameters=dict(min_silence_duration_ms=300, speech_pad_ms=100),
            condition_on_previous_text=is_final,
        )

        parts: list[str] = []
        logprobs: list[float] = []
        for seg in segments:
            t = (seg.text or "").strip()
            if t:
                parts.append(t)
                logprob = getattr(seg, "avg_logprob", None)
                if logprob is not None:
                    logprobs.append(logprob)

        text = " ".join(parts).strip()
        return ASRResult(
            text=text,
            confidence=_segment_confidence(logprobs) if text else None,
            is_final=is_final,
        )

    async def transcribe(self, audio: np.ndarray, is_final: bool) -> ASRResult:
        """Run _transcribe_sync in executor so event loop is not blocked."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            self._transcribe_sync,
            audio,
            is_final,
        )
