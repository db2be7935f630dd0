"""
ASREngine: abstract interface for Whisper-compatible recognition engines.

Implementations: LocalWhisperEngine (faster-whisper), CloudflareWhisperEngine.
Heavy work runs in the default executor so the event loop stays responsive.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np


@dataclass
class ASRResult:
    """Result of one ASR transcribe call."""

    text: str
    confidence: float | None = None  # 0.0-1.0 estimate; None when the engine has none
    is_final: bool = True


class ASREngine(ABC):
    """
    Abstract ASR engine. Accepts float32 mono audio (normalized [-1, 1]).
    transcribe() is async and raises on failure; callers wrap errors.
    """

    @abstractmethod
    def check_available(self) -> None:
        """Raise CapabilityUnavailable if the engine cannot run (no model, no credentials)."""
        ...

    @abstractmethod
    async def transcribe(self, audio: "np.ndarray", is_final: bool) -> ASRResult:
        """
        Transcribe one chunk of audio.
        - is_final=False: interim (faster decode, may change).
        - is_final=True: final (stable decode).
        """
        ...

    @property
    @abstractmethod
    def supports_interim(self) -> bool:
        """True if interim decodes are cheap enough to run while speech is ongoing."""
        ...
