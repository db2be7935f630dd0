"""Transcript handling: interim vs final results, append-only segment log."""
from .models import SpeechEvent, SpeechEventType, TranscriptSegment, WordTag
from .aggregator import TranscriptAggregator
from .render import render_transcript

__all__ = [
    "SpeechEvent",
    "SpeechEventType",
    "TranscriptAggregator",
    "TranscriptSegment",
    "WordTag",
    "render_transcript",
]
