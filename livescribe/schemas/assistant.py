"""
Schemas for the transcription/AI backend collaborator.

Recorded voice query flow: audio -> TranscriptionResult -> AssistantReply,
returned to the client together as one VoiceExchange.
"""
from __future__ import annotations

from pydantic import BaseModel, Field


class TranscriptionResult(BaseModel):
    """Transcript of one recorded audio payload."""

    transcript: str = Field(..., description="Recognized text")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Recognition confidence 0-1")


class AssistantReply(BaseModel):
    """AI response for one transcript."""

    response: str = Field(..., description="Assistant reply text")
    session_id: str = Field(..., description="Session id the reply belongs to")


class VoiceExchange(BaseModel):
    """Result of POST /api/voice: what was heard and what the assistant answered."""

    transcription: str
    response: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    session_id: str


class VoiceRequest(BaseModel):
    """Request body for POST /api/voice."""

    audio_base64: str = Field(..., description="Recorded audio file (e.g. wav/webm), base64-encoded")
    context: str | None = Field(None, description="Optional context hint for the assistant")


class AskRequest(BaseModel):
    """Request body for POST /api/sessions/{session_id}/ask."""

    question: str = Field(..., min_length=1, description="Question about the live conversation")
