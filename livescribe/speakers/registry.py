"""
Speaker registry for one live session.

- Profiles are created lazily the first time a speaker id is observed, with
  defaults ("Person N", "Participant").
- The set of known ids only grows until reset().
- Editing an id that was never observed fails with UnknownSpeakerError; the
  registry never creates profiles from edits.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from livescribe.errors import UnknownSpeakerError
from livescribe.speakers.models import (
    DEFAULT_ROLE,
    SpeakerProfile,
    default_display_name,
    validate_speaker_id,
)

logger = logging.getLogger(__name__)

ProfileListener = Callable[[SpeakerProfile], None]


class SpeakerRegistry:
    """Owns speaker profiles for one session. Observers are told about new and edited profiles."""

    def __init__(self) -> None:
        self._profiles: dict[int, SpeakerProfile] = {}
        self._listeners: list[ProfileListener] = []

    def ensure(self, speaker_id: int) -> SpeakerProfile:
        """Return the profile for speaker_id, creating it with defaults if unseen."""
        validate_speaker_id(speaker_id)
        profile = self._profiles.get(speaker_id)
        if profile is not None:
            return profile
        profile = SpeakerProfile(
            id=speaker_id,
            display_name=default_display_name(speaker_id),
            role=DEFAULT_ROLE,
        )
        self._profiles[speaker_id] = profile
        logger.debug("New speaker %s (%s)", speaker_id, profile.display_name)
        self._notify(profile)
        return profile

    def update(self, speaker_id: int, name: str | None = None, role: str | None = None) -> SpeakerProfile:
        """
        Overwrite name/role of a known speaker. Blank values keep the current ones.
        Raises UnknownSpeakerError if the id was never ensure()d.
        """
        current = self.profile(speaker_id)
        new_name = (name or "").strip() or current.display_name
        new_role = (role or "").strip() or current.role
        profile = dataclasses.replace(current, display_name=new_name, role=new_role)
        self._profiles[speaker_id] = profile
        logger.info("Speaker %s updated: name=%r role=%r", speaker_id, new_name, new_role)
        self._notify(profile)
        return profile

    def profile(self, speaker_id: int) -> SpeakerProfile:
        validate_speaker_id(speaker_id)
        try:
            return self._profiles[speaker_id]
        except KeyError:
            raise UnknownSpeakerError(speaker_id) from None

    def profiles(self) -> tuple[SpeakerProfile, ...]:
        """Profiles in ascending id order."""
        return tuple(self._profiles[i] for i in self.known_speakers())

    def known_speakers(self) -> tuple[int, ...]:
        """Ids observed so far, ascending."""
        return tuple(sorted(self._profiles))

    def __contains__(self, speaker_id: object) -> bool:
        return speaker_id in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def reset(self) -> None:
        """Forget all profiles. Only way speakers are removed."""
        self._profiles.clear()

    def subscribe(self, listener: ProfileListener) -> Callable[[], None]:
        """Register an observer; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, profile: SpeakerProfile) -> None:
        for listener in list(self._listeners):
            listener(profile)
