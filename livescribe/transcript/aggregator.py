"""
TranscriptAggregator: reconciles interim and final recognition results.

- INTERIM: a single provisional string, replaced on every interim event; never logged.
- FINAL: appended to an append-only log of TranscriptSegment; clears the interim value.
- Speaker ids of a segment are registered before the segment is appended, so every
  logged speaker id is always known to the registry.
- Errors from the source clear the interim value and are re-raised; the log is kept.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, NoReturn, Sequence

from livescribe.config import get_settings
from livescribe.errors import RecognitionError
from livescribe.speakers.registry import SpeakerRegistry
from livescribe.transcript.models import SpeechEvent, SpeechEventType, TranscriptSegment, WordTag

logger = logging.getLogger(__name__)

LogListener = Callable[[tuple[TranscriptSegment, ...]], None]
InterimListener = Callable[[str], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _clamp_confidence(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


def _resolve_speakers(
    speaker_ids: Sequence[int] | None,
    words: Sequence[WordTag],
    default_speaker: int,
) -> tuple[int, ...]:
    """Explicit ids win; else speakers of the word tags in first-seen order; else the default speaker."""
    source = list(speaker_ids) if speaker_ids else [w.speaker_id for w in words]
    resolved = tuple(dict.fromkeys(source))
    return resolved or (default_speaker,)


class TranscriptAggregator:
    """
    Owns the transcript log and the current interim value for one session.
    Log subscribers receive the full log (tuple) after every append and reset.
    """

    def __init__(
        self,
        registry: SpeakerRegistry | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        settings = get_settings()
        self._registry = registry if registry is not None else SpeakerRegistry()
        self._clock = clock
        self._default_confidence = settings.SPEECH_DEFAULT_CONFIDENCE
        self._default_speaker = settings.SPEECH_DEFAULT_SPEAKER
        self._segments: list[TranscriptSegment] = []
        self._interim: str = ""
        self._log_listeners: list[LogListener] = []
        self._interim_listeners: list[InterimListener] = []

    @property
    def registry(self) -> SpeakerRegistry:
        return self._registry

    @property
    def segments(self) -> tuple[TranscriptSegment, ...]:
        """Snapshot of the log, in arrival order."""
        return tuple(self._segments)

    @property
    def interim(self) -> str:
        return self._interim

    def on_interim(self, text: str) -> None:
        """Replace the interim value. Last writer wins; the log is untouched."""
        self._set_interim(text or "")

    def on_final(
        self,
        text: str,
        confidence: float | None = None,
        speaker_ids: Sequence[int] | None = None,
        words: Sequence[WordTag] = (),
    ) -> TranscriptSegment:
        """Commit one final result as a new segment and clear the interim value."""
        words = tuple(words)
        speakers = _resolve_speakers(speaker_ids, words, self._default_speaker)
        # Word tags may name speakers beyond the explicit ids; all of them become known
        for speaker_id in dict.fromkeys(speakers + tuple(w.speaker_id for w in words)):
            self._registry.ensure(speaker_id)

        timestamp = self._clock()
        if self._segments and timestamp < self._segments[-1].timestamp:
            timestamp = self._segments[-1].timestamp

        segment = TranscriptSegment(
            id=uuid.uuid4().hex,
            text=(text or "").strip(),
            confidence=self._default_confidence if confidence is None else _clamp_confidence(confidence),
            speaker_ids=speakers,
            timestamp=timestamp,
            words=words,
        )
        self._segments.append(segment)
        logger.debug("Final segment %s speakers=%s conf=%.2f", segment.id, speakers, segment.confidence)
        self._set_interim("")
        self._notify_log()
        return segment

    def ingest(self, event: SpeechEvent) -> TranscriptSegment | None:
        """Dispatch one source event. Returns the new segment for FINAL events."""
        if event.type is SpeechEventType.INTERIM:
            self.on_interim(event.text)
            return None
        if event.type is SpeechEventType.FINAL:
            speakers = None if event.speaker_id is None else (event.speaker_id,)
            return self.on_final(event.text, event.confidence, speakers, event.words)
        self.fail(RecognitionError(event.text))

    def fail(self, error: Exception) -> NoReturn:
        """Source failed: drop the interim value, keep the log, surface the error."""
        logger.warning("Recognition failed, keeping %d segments: %s", len(self._segments), error)
        self._set_interim("")
        raise error

    def clear_interim(self) -> None:
        """Recognition ended (stop or source end)."""
        self._set_interim("")

    def reset(self) -> None:
        """Clear log and interim value. The only removal operation."""
        self._segments.clear()
        self._set_interim("")
        self._notify_log()

    def subscribe(self, listener: LogListener) -> Callable[[], None]:
        self._log_listeners.append(listener)
        return lambda: self._log_listeners.remove(listener) if listener in self._log_listeners else None

    def subscribe_interim(self, listener: InterimListener) -> Callable[[], None]:
        self._interim_listeners.append(listener)
        return lambda: self._interim_listeners.remove(listener) if listener in self._interim_listeners else None

    def _set_interim(self, text: str) -> None:
        if text == self._interim:
            return
        self._interim = text
        for listener in list(self._interim_listeners):
            listener(text)

    def _notify_log(self) -> None:
        snapshot = self.segments
        for listener in list(self._log_listeners):
            listener(snapshot)
