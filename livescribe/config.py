"""Application configuration. Loads from env vars."""
from __future__ import annotations

import logging
import os
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings. Override via environment variables."""

    # Audio: PCM 16-bit mono, 16kHz
    SAMPLE_RATE: int = 16000
    SAMPLE_WIDTH: int = 2  # 16-bit
    CHANNELS: int = 1

    # Frame: 20ms @ 16kHz = 320 samples = 640 bytes
    FRAME_MS: int = 20
    FRAME_BYTES: int = 640  # 320 * 2

    # Utterance chunking: a chunk is committed as FINAL after SILENCE_COMMIT_MS of silence
    CHUNK_DURATION_MS: int = 1500
    OVERLAP_MS: int = 300
    SILENCE_COMMIT_MS: int = 600
    VAD_AGGRESSIVENESS: int = 2  # 0..3

    # Speech source: "native" = on-device Whisper (interim + final), "streaming" = remote service (final only)
    SPEECH_SOURCE: Literal["native", "streaming"] = "native"
    SPEECH_CONNECT_TIMEOUT_SEC: float = 10.0  # CONNECTING must resolve within this
    SPEECH_INTERIM_EVERY_MS: int = 1000  # interim decode cadence while speech is ongoing (native only)
    SPEECH_DEFAULT_CONFIDENCE: float = 0.9  # used when the source reports no confidence
    SPEECH_DEFAULT_SPEAKER: int = 0  # unattributed speech

    # Local Whisper (SPEECH_SOURCE=native); model loaded once at startup
    LOCAL_WHISPER_MODEL: str = "base"  # base | small | medium | large-v3
    LOCAL_WHISPER_DEVICE: Literal["cpu", "cuda"] = "cpu"
    LOCAL_WHISPER_COMPUTE_TYPE: Literal["int8", "float16"] = "int8"
    LOCAL_WHISPER_LANGUAGE: str = ""  # empty = auto-detect
    # Interim (faster): lower beam. Final (stable): higher beam.
    LOCAL_WHISPER_BEAM_SIZE_INTERIM: int = 1
    LOCAL_WHISPER_BEAM_SIZE_FINAL: int = 5

    # Cloudflare Workers AI: streaming speech source, recording transcription, assistant replies
    CLOUDFLARE_ACCOUNT_ID: str = ""
    CLOUDFLARE_API_TOKEN: str = ""
    CLOUDFLARE_WHISPER_MODEL: str = "@cf/openai/whisper"
    ASSISTANT_ENABLED: bool = True
    ASSISTANT_CF_MODEL: str = "@cf/meta/llama-3.1-8b-instruct"
    ASSISTANT_MAX_TOKENS: int = 1024
    ASSISTANT_TIMEOUT_SEC: float = 60.0
    ASSISTANT_DEFAULT_CONTEXT: str = "Voice input from the live transcription interface"
    ASSISTANT_TRANSCRIPT_MAX_CHARS: int = 8000  # tail of the labeled transcript sent as context

    # Logging: level (DEBUG, INFO, WARNING, ERROR); file path = also log to file (empty = console only)
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()


_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings | None = None) -> None:
    """Apply LOG_LEVEL / LOG_FILE to the root logger. Called once at app startup."""
    settings = settings or get_settings()
    level = getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.LOG_FILE:
        log_dir = os.path.dirname(settings.LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(settings.LOG_FILE, encoding="utf-8"))
    logging.basicConfig(level=level, format=_LOG_FORMAT, handlers=handlers, force=True)
