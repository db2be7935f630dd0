"""
Transcript data: recognition events coming in, finalized segments going out.

- SpeechEvent: what a speech source emits (interim, final, or error).
- TranscriptSegment: one committed utterance; immutable, appended in arrival order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class SpeechEventType(str, Enum):
    INTERIM = "interim"
    FINAL = "final"
    ERROR = "error"


@dataclass(frozen=True)
class WordTag:
    """One recognized word attributed to a speaker."""

    text: str
    speaker_id: int


@dataclass(frozen=True)
class SpeechEvent:
    """
    One event from a speech source.

    confidence / speaker_id are None when the source cannot provide them; the
    aggregator then applies its defaults (0.9, speaker 0). For ERROR events
    `text` carries the source's error description.
    """

    type: SpeechEventType
    text: str = ""
    confidence: float | None = None
    speaker_id: int | None = None
    words: tuple[WordTag, ...] = ()

    @classmethod
    def interim(cls, text: str) -> "SpeechEvent":
        return cls(type=SpeechEventType.INTERIM, text=text)

    @classmethod
    def final(
        cls,
        text: str,
        confidence: float | None = None,
        speaker_id: int | None = None,
        words: tuple[WordTag, ...] = (),
    ) -> "SpeechEvent":
        return cls(
            type=SpeechEventType.FINAL,
            text=text,
            confidence=confidence,
            speaker_id=speaker_id,
            words=tuple(words),
        )

    @classmethod
    def error(cls, description: str) -> "SpeechEvent":
        return cls(type=SpeechEventType.ERROR, text=description)


@dataclass(frozen=True)
class TranscriptSegment:
    """
    One finalized utterance.

    speaker_ids: ordered, duplicate-free. words: optional word-level speaker tags;
    when empty, word statistics fall back to a whitespace approximation.
    timestamp: UTC, never earlier than the previous segment's.
    """

    id: str
    text: str
    confidence: float
    speaker_ids: tuple[int, ...]
    timestamp: datetime
    words: tuple[WordTag, ...] = field(default_factory=tuple)
    is_final: bool = True
