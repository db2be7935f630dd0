"""
SpeechSource: capability interface of anything that turns captured audio into
recognition events.

Lifecycle: open() acquires the audio capture (may raise CapabilityUnavailable or
PermissionDenied) -> events() yields SpeechEvent in delivery order until the
source ends on its own -> close() releases the capture. close() is idempotent
and safe in any state. events() may raise RecognitionError or yield an ERROR event.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import AsyncIterator

from livescribe.transcript.models import SpeechEvent


class SpeechSourceKind(str, Enum):
    NATIVE = "native"  # on-device recognition, interim + final results
    STREAMING = "streaming"  # remote recognition service, final results only


class SpeechSource(ABC):
    """One listening episode's source of recognition events."""

    kind: SpeechSourceKind

    @abstractmethod
    async def open(self) -> None:
        ...

    @abstractmethod
    def events(self) -> AsyncIterator[SpeechEvent]:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...
