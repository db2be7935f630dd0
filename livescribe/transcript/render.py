"""Plain-text rendering of the transcript log, one line per segment, for AI context."""
from __future__ import annotations

from typing import Sequence

from livescribe.errors import UnknownSpeakerError
from livescribe.speakers.models import default_display_name
from livescribe.speakers.registry import SpeakerRegistry
from livescribe.transcript.models import TranscriptSegment


def _speaker_label(registry: SpeakerRegistry | None, speaker_id: int) -> str:
    if registry is None:
        return default_display_name(speaker_id)
    try:
        profile = registry.profile(speaker_id)
    except UnknownSpeakerError:
        return default_display_name(speaker_id)
    return f"{profile.display_name} ({profile.role})"


def format_segment_line(
    segment: TranscriptSegment,
    registry: SpeakerRegistry | None = None,
    add_timestamps: bool = True,
) -> str:
    """Format one line with optional [HH:MM:SS] prefix and speaker labels: '[..] Person 1 (Participant): text'."""
    parts: list[str] = []
    if add_timestamps:
        parts.append(f"[{segment.timestamp.strftime('%H:%M:%S')}]")
    speakers = ", ".join(_speaker_label(registry, s) for s in segment.speaker_ids)
    parts.append(f"{speakers}:")
    parts.append(segment.text)
    return " ".join(parts).strip()


def render_transcript(
    segments: Sequence[TranscriptSegment],
    registry: SpeakerRegistry | None = None,
    add_timestamps: bool = True,
    max_chars: int | None = None,
) -> str:
    """Join segment lines; with max_chars keep only the most recent lines that fit."""
    lines = [format_segment_line(s, registry, add_timestamps) for s in segments if s.text]
    if max_chars is None:
        return "\n".join(lines)
    kept: list[str] = []
    total = 0
    for line in reversed(lines):
        total += len(line) + 1
        if total > max_chars and kept:
            break
        kept.append(line)
    return "\n".join(reversed(kept))
