"""
Speaker attribution: profiles, stable colors, per-speaker statistics.

Speaker ids are session-local; there is no identity inference across sessions.
Unattributed speech belongs to speaker 0.
"""
from __future__ import annotations

from livescribe.speakers.models import (
    DEFAULT_ROLE,
    PALETTE,
    PREDEFINED_ROLES,
    SpeakerProfile,
    SpeakerStats,
    speaker_color,
)
from livescribe.speakers.registry import SpeakerRegistry
from livescribe.speakers.stats import compute_speaker_stats, speaker_stats_table

__all__ = [
    "DEFAULT_ROLE",
    "PALETTE",
    "PREDEFINED_ROLES",
    "SpeakerProfile",
    "SpeakerRegistry",
    "SpeakerStats",
    "compute_speaker_stats",
    "speaker_color",
    "speaker_stats_table",
]
