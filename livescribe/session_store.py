"""
In-memory store of live sessions. session_id is generated on the backend.

A LiveSession owns everything one client's transcription needs: the audio
capture, the speaker registry, the transcript aggregator and the listening
controller. Nothing is persisted; deleting a session drops its transcript.
"""
from __future__ import annotations

import logging
import secrets
import time
import uuid
from typing import Any

from livescribe.audio.capture import AudioCapture
from livescribe.config import get_settings
from livescribe.listening import ListeningController, ListeningState
from livescribe.speakers.models import SpeakerStats
from livescribe.speakers.registry import SpeakerRegistry
from livescribe.speakers.stats import speaker_stats_table
from livescribe.speech.base import SpeechSource, SpeechSourceKind
from livescribe.speech.factory import create_speech_source, parse_source_kind
from livescribe.transcript.aggregator import TranscriptAggregator

logger = logging.getLogger(__name__)


def generate_session_id() -> str:
    """Generate a new live session id (UUID hex, 12 chars). Backend only."""
    return uuid.uuid4().hex[:12]


def generate_query_session_id() -> str:
    """Id for one recorded voice query: session_<unix_ms>_<random>."""
    return f"session_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


class LiveSession:
    """All state of one live transcription session, with explicit mutation entry points."""

    def __init__(
        self,
        session_id: str,
        source_kind: SpeechSourceKind,
        whisper_model: Any | None = None,
    ) -> None:
        self.session_id = session_id
        self.source_kind = source_kind
        self.created_at = time.time()
        self.capture = AudioCapture(name=session_id)
        self.registry = SpeakerRegistry()
        self.aggregator = TranscriptAggregator(self.registry)
        self._whisper_model = whisper_model
        self.controller = ListeningController(self.aggregator, self._create_source)
        # Connection that started the current listening episode; only it stops listening on disconnect
        self.listening_owner: object | None = None

    def _create_source(self) -> SpeechSource:
        return create_speech_source(self.source_kind, self.capture, whisper_model=self._whisper_model)

    @property
    def state(self) -> ListeningState:
        return self.controller.state

    def speaker_stats(self) -> dict[int, SpeakerStats]:
        """Stats for every known speaker from one consistent snapshot of the log."""
        return speaker_stats_table(self.aggregator.segments, self.registry.known_speakers())

    async def close(self) -> None:
        await self.controller.stop()


_session_store: dict[str, LiveSession] = {}


def create_session(
    source: str | SpeechSourceKind | None = None,
    whisper_model: Any | None = None,
) -> LiveSession:
    """Create and register a session. Unknown source names raise CapabilityUnavailable."""
    kind = parse_source_kind(source or get_settings().SPEECH_SOURCE)
    session = LiveSession(generate_session_id(), kind, whisper_model=whisper_model)
    _session_store[session.session_id] = session
    logger.info("Session %s created (source=%s)", session.session_id, kind.value)
    return session


def get_session(session_id: str) -> LiveSession | None:
    """Return session or None if not found."""
    return _session_store.get(session_id)


async def delete_session(session_id: str) -> bool:
    """Stop and remove session. Return True if it existed."""
    session = _session_store.pop(session_id, None)
    if session is None:
        return False
    await session.close()
    logger.info("Session %s deleted", session_id)
    return True


def session_store() -> dict[str, LiveSession]:
    """Return the underlying store (read-only view for debugging)."""
    return _session_store
