"""Audio pipeline: capture handle, frame splitting, VAD, utterance chunking."""
from .capture import AudioCapture
from .chunker import AudioChunker
from .receiver import AudioReceiver
from .vad import VADProcessor

__all__ = [
    "AudioCapture",
    "AudioChunker",
    "AudioReceiver",
    "VADProcessor",
]
