"""
Per-speaker statistics, folded over the transcript log on demand.

Word counting has two methods that are NOT equivalent:
- word-level: count of the segment's word tags carrying the speaker id, used
  whenever the segment has word tags;
- approximate: whitespace-token count of the whole segment text, used only for
  segments without word tags.
A single segment is always counted with exactly one of them.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from livescribe.speakers.models import SpeakerStats
from livescribe.transcript.models import TranscriptSegment


def approximate_word_count(text: str) -> int:
    """Approximation: whitespace tokens of the text, regardless of who spoke them."""
    return len((text or "").split())


def segment_word_count(segment: TranscriptSegment, speaker_id: int) -> int:
    if segment.words:
        return sum(1 for word in segment.words if word.speaker_id == speaker_id)
    return approximate_word_count(segment.text)


def compute_speaker_stats(segments: Sequence[TranscriptSegment], speaker_id: int) -> SpeakerStats:
    """Stats for one speaker over a snapshot of the log. Empty match -> all zeros."""
    utterances = 0
    words = 0
    total_confidence = 0.0
    for segment in segments:
        if speaker_id not in segment.speaker_ids:
            continue
        utterances += 1
        words += segment_word_count(segment, speaker_id)
        total_confidence += segment.confidence
    return SpeakerStats(
        utterance_count=utterances,
        word_count=words,
        average_confidence=total_confidence / utterances if utterances else 0.0,
    )


def speaker_stats_table(
    segments: Sequence[TranscriptSegment],
    speaker_ids: Iterable[int],
) -> dict[int, SpeakerStats]:
    """Stats for several speakers from the same snapshot."""
    snapshot = tuple(segments)
    return {speaker_id: compute_speaker_stats(snapshot, speaker_id) for speaker_id in speaker_ids}
