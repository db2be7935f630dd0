"""Speech source selection: an explicit strategy choice at session start."""
from __future__ import annotations

import logging
from typing import Any

from livescribe.asr.cloudflare import CloudflareWhisperEngine
from livescribe.asr.local_whisper import LocalWhisperEngine
from livescribe.audio.capture import AudioCapture
from livescribe.errors import CapabilityUnavailable
from livescribe.speech.base import SpeechSource, SpeechSourceKind
from livescribe.speech.chunked import ChunkedSpeechSource

logger = logging.getLogger(__name__)


def parse_source_kind(value: str | SpeechSourceKind) -> SpeechSourceKind:
    """Raises CapabilityUnavailable for unknown names."""
    try:
        return SpeechSourceKind(value)
    except ValueError:
        raise CapabilityUnavailable(f"Unknown speech source: {value!r}") from None


def create_speech_source(
    kind: str | SpeechSourceKind,
    capture: AudioCapture,
    whisper_model: Any | None = None,
) -> SpeechSource:
    """
    native: on-device faster-whisper (shared model loaded at startup), interim + final.
    streaming: Cloudflare Workers AI Whisper, final only.
    """
    kind = parse_source_kind(kind)
    if kind is SpeechSourceKind.NATIVE:
        engine = LocalWhisperEngine(model=whisper_model)
    else:
        engine = CloudflareWhisperEngine()
    logger.debug("Speech source %s -> %s", kind.value, type(engine).__name__)
    return ChunkedSpeechSource(kind, engine, capture)
