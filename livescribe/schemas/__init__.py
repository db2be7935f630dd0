"""Pydantic schemas for API request/response."""
from livescribe.schemas.assistant import (
    AskRequest,
    AssistantReply,
    TranscriptionResult,
    VoiceExchange,
    VoiceRequest,
)
from livescribe.schemas.live import (
    CreateSessionRequest,
    RolesResponse,
    SegmentOut,
    SessionSnapshot,
    SpeakerOut,
    SpeakerUpdateRequest,
    StatsOut,
)

__all__ = [
    "AskRequest",
    "AssistantReply",
    "CreateSessionRequest",
    "RolesResponse",
    "SegmentOut",
    "SessionSnapshot",
    "SpeakerOut",
    "SpeakerUpdateRequest",
    "StatsOut",
    "TranscriptionResult",
    "VoiceExchange",
    "VoiceRequest",
]
