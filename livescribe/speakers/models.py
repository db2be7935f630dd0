"""
Speaker profile and derived statistics.

Speaker ids are small non-negative integers, session-local; they are not durable
identities. Display color is a pure function of the id (palette index = id mod
palette size), so ids >= len(PALETTE) reuse colors.
"""
from __future__ import annotations

from dataclasses import dataclass

# Fixed display palette; cyclic reuse beyond its length.
PALETTE: tuple[str, ...] = (
    "#3b82f6",  # blue
    "#ef4444",  # red
    "#10b981",  # green
    "#f59e0b",  # amber
    "#8b5cf6",  # purple
    "#f97316",  # orange
    "#06b6d4",  # cyan
    "#84cc16",  # lime
    "#ec4899",  # pink
    "#6b7280",  # gray
)

DEFAULT_ROLE = "Participant"

# Quick-pick roles for editing UIs; roles are free text.
PREDEFINED_ROLES: tuple[str, ...] = (
    "Coach",
    "Client",
    "Manager",
    "Team lead",
    "Consultant",
    "Director",
    "Specialist",
    "Analyst",
    "Moderator",
    DEFAULT_ROLE,
)


def validate_speaker_id(speaker_id: int) -> int:
    if isinstance(speaker_id, bool) or not isinstance(speaker_id, int) or speaker_id < 0:
        raise ValueError(f"speaker id must be a non-negative integer, got {speaker_id!r}")
    return speaker_id


def speaker_color(speaker_id: int) -> str:
    """Display color for a speaker id. Depends on the id only."""
    return PALETTE[validate_speaker_id(speaker_id) % len(PALETTE)]


def default_display_name(speaker_id: int) -> str:
    """Person 1, Person 2, ... for ids 0, 1, ..."""
    return f"Person {validate_speaker_id(speaker_id) + 1}"


@dataclass(frozen=True)
class SpeakerProfile:
    """Display data for one speaker. Replaced as a whole on edit."""

    id: int
    display_name: str
    role: str = DEFAULT_ROLE

    @property
    def color(self) -> str:
        return speaker_color(self.id)


@dataclass(frozen=True)
class SpeakerStats:
    """Per-speaker aggregates, always derived from the transcript log."""

    utterance_count: int = 0
    word_count: int = 0
    average_confidence: float = 0.0
