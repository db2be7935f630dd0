"""ASR: swappable Whisper-compatible engines."""
from .base import ASREngine, ASRResult
from .cloudflare import CloudflareWhisperEngine
from .local_whisper import LocalWhisperEngine, load_whisper_model, pcm_bytes_to_float32

__all__ = [
    "ASREngine",
    "ASRResult",
    "CloudflareWhisperEngine",
    "LocalWhisperEngine",
    "load_whisper_model",
    "pcm_bytes_to_float32",
]
