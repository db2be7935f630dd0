"""
Error kinds for a live transcription session.

All of them are recoverable at the session level: the listening controller moves
to ERROR (or IDLE), the committed transcript log is kept, and any held audio
capture is released. `message` is the user-visible text.
"""
from __future__ import annotations


class LiveScribeError(Exception):
    """Base for all session-level errors."""

    default_message = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = (message or "").strip() or self.default_message
        super().__init__(self.message)


class CapabilityUnavailable(LiveScribeError):
    """No speech/audio capability (engine not loaded, credentials missing, unknown source)."""

    default_message = "Speech recognition is not available"


class PermissionDenied(LiveScribeError):
    """Microphone access refused by the client."""

    default_message = "Microphone access was denied"


class RecognitionError(LiveScribeError):
    """The speech source failed mid-session."""

    default_message = "Speech recognition failed"


class BackendError(LiveScribeError):
    """Transcription/AI backend call failed or reported a failure."""

    default_message = "Backend request failed"


class UnknownSpeakerError(LiveScribeError):
    """An edit targeted a speaker id that was never observed."""

    default_message = "Unknown speaker"

    def __init__(self, speaker_id: int, message: str | None = None) -> None:
        self.speaker_id = speaker_id
        super().__init__(message or f"Unknown speaker: {speaker_id}")
