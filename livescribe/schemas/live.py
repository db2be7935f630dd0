"""
Read-only snapshots of a live session for the presentation layer.

The API never hands out the aggregator or registry themselves; clients get
these copies and mutate only through the documented endpoints.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from livescribe.speakers.models import SpeakerProfile, SpeakerStats
from livescribe.speakers.stats import speaker_stats_table
from livescribe.transcript.models import TranscriptSegment

if TYPE_CHECKING:
    from livescribe.session_store import LiveSession


class WordOut(BaseModel):
    text: str
    speaker_id: int


class SegmentOut(BaseModel):
    """One finalized transcript segment."""

    id: str
    text: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    speaker_ids: list[int]
    words: list[WordOut] = Field(default_factory=list)
    timestamp: datetime
    is_final: bool = True


class StatsOut(BaseModel):
    utterance_count: int = 0
    word_count: int = Field(0, description="Word-tagged count, or whitespace approximation for untagged segments")
    average_confidence: float = 0.0


class SpeakerOut(BaseModel):
    """Speaker profile with derived stats."""

    id: int
    display_name: str
    role: str
    color: str
    stats: StatsOut | None = None


class SessionSnapshot(BaseModel):
    session_id: str
    source: str
    state: str
    error: str | None = Field(None, description="User-visible message when state is 'error'")
    interim: str = ""
    segments: list[SegmentOut] = Field(default_factory=list)
    speakers: list[SpeakerOut] = Field(default_factory=list)


class CreateSessionRequest(BaseModel):
    source: str | None = Field(None, description="'native' or 'streaming'; default from SPEECH_SOURCE")


class SpeakerUpdateRequest(BaseModel):
    """Request body for PUT /api/sessions/{session_id}/speakers/{speaker_id}."""

    name: str | None = Field(None, description="Display name; blank keeps the current one")
    role: str | None = Field(None, description="Free-text role; blank keeps the current one")


class RolesResponse(BaseModel):
    roles: list[str]
    default_role: str


def segment_out(segment: TranscriptSegment) -> SegmentOut:
    return SegmentOut(
        id=segment.id,
        text=segment.text,
        confidence=segment.confidence,
        speaker_ids=list(segment.speaker_ids),
        words=[WordOut(text=w.text, speaker_id=w.speaker_id) for w in segment.words],
        timestamp=segment.timestamp,
        is_final=segment.is_final,
    )


def stats_out(stats: SpeakerStats) -> StatsOut:
    return StatsOut(
        utterance_count=stats.utterance_count,
        word_count=stats.word_count,
        average_confidence=stats.average_confidence,
    )


def speaker_out(profile: SpeakerProfile, stats: SpeakerStats | None = None) -> SpeakerOut:
    return SpeakerOut(
        id=profile.id,
        display_name=profile.display_name,
        role=profile.role,
        color=profile.color,
        stats=stats_out(stats) if stats is not None else None,
    )


def build_snapshot(session: "LiveSession") -> SessionSnapshot:
    """Copy of the session's current state; stats come from the same log snapshot as segments."""
    segments = session.aggregator.segments
    profiles = session.registry.profiles()
    stats = speaker_stats_table(segments, [p.id for p in profiles])
    error = session.controller.error
    return SessionSnapshot(
        session_id=session.session_id,
        source=session.source_kind.value,
        state=session.controller.state.value,
        error=error.message if error is not None else None,
        interim=session.aggregator.interim,
        segments=[segment_out(s) for s in segments],
        speakers=[speaker_out(p, stats[p.id]) for p in profiles],
    )
