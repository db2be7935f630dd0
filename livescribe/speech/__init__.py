"""Speech sources: native (on-device) and streaming (remote service) recognition."""
from .base import SpeechSource, SpeechSourceKind
from .chunked import ChunkedSpeechSource
from .factory import create_speech_source, parse_source_kind

__all__ = [
    "ChunkedSpeechSource",
    "SpeechSource",
    "SpeechSourceKind",
    "create_speech_source",
    "parse_source_kind",
]
