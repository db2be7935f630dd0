"""
FastAPI app: live transcription over WebSocket, session snapshots and speaker
editing over HTTP, and the AI assistant endpoints.

Client streams binary PCM 16-bit mono 16kHz on /ws/listen and controls listening
with JSON messages (see websocket_manager). Everything else is plain JSON.
"""
from __future__ import annotations

import base64
import binascii
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect

from livescribe.asr.local_whisper import load_whisper_model
from livescribe.config import configure_logging, get_settings
from livescribe.errors import (
    BackendError,
    CapabilityUnavailable,
    LiveScribeError,
    PermissionDenied,
    UnknownSpeakerError,
)
from livescribe.schemas.assistant import AskRequest, AssistantReply, VoiceExchange, VoiceRequest
from livescribe.schemas.live import (
    CreateSessionRequest,
    RolesResponse,
    SessionSnapshot,
    SpeakerOut,
    SpeakerUpdateRequest,
    StatsOut,
    build_snapshot,
    speaker_out,
    stats_out,
)
from livescribe.services.assistant import ask_assistant, process_voice_query
from livescribe.session_store import LiveSession, create_session, delete_session, get_session
from livescribe.speakers.models import DEFAULT_ROLE, PREDEFINED_ROLES
from livescribe.speakers.stats import compute_speaker_stats
from livescribe.speech.base import SpeechSourceKind
from livescribe.transcript.render import render_transcript
from livescribe.websocket_manager import ListenSocketManager

logger = logging.getLogger(__name__)

# Set in lifespan so the WebSocket route can reach app state without Request
_current_app: FastAPI | None = None


def _whisper_model():
    return getattr(_current_app.state, "whisper_model", None) if _current_app else None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _current_app
    _current_app = app
    settings = get_settings()
    configure_logging(settings)
    app.state.whisper_model = None
    # Load Whisper model once at startup when the native source is the default
    if settings.SPEECH_SOURCE == SpeechSourceKind.NATIVE.value:
        try:
            app.state.whisper_model = load_whisper_model()
        except CapabilityUnavailable as e:
            # Sessions still start; listening fails with CapabilityUnavailable
            logger.warning("Native speech source unavailable: %s", e.message)
    yield
    app.state.whisper_model = None
    _current_app = None


app = FastAPI(
    title="Live transcription",
    description="Live transcription with speaker attribution and AI assistant",
    lifespan=lifespan,
)


def _http_error(err: LiveScribeError) -> HTTPException:
    if isinstance(err, UnknownSpeakerError):
        return HTTPException(status_code=404, detail=err.message)
    if isinstance(err, BackendError):
        return HTTPException(status_code=502, detail=err.message)
    if isinstance(err, CapabilityUnavailable):
        return HTTPException(status_code=503, detail=err.message)
    if isinstance(err, PermissionDenied):
        return HTTPException(status_code=403, detail=err.message)
    return HTTPException(status_code=500, detail=err.message)


def _require_session(session_id: str) -> LiveSession:
    session = get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/api/roles", response_model=RolesResponse)
async def roles() -> RolesResponse:
    return RolesResponse(roles=list(PREDEFINED_ROLES), default_role=DEFAULT_ROLE)


@app.post("/api/sessions", response_model=SessionSnapshot, status_code=201)
async def create_live_session(request: CreateSessionRequest | None = None) -> SessionSnapshot:
    try:
        session = create_session(request.source if request else None, whisper_model=_whisper_model())
    except LiveScribeError as e:
        raise _http_error(e)
    return build_snapshot(session)


@app.get("/api/sessions/{session_id}", response_model=SessionSnapshot)
async def session_snapshot(session_id: str) -> SessionSnapshot:
    return build_snapshot(_require_session(session_id))


@app.delete("/api/sessions/{session_id}", status_code=204)
async def remove_session(session_id: str) -> None:
    if not await delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")


@app.post("/api/sessions/{session_id}/reset", response_model=SessionSnapshot)
async def reset_session(session_id: str) -> SessionSnapshot:
    """Stop listening and clear transcript and speakers."""
    session = _require_session(session_id)
    await session.controller.reset()
    return build_snapshot(session)


@app.put("/api/sessions/{session_id}/speakers/{speaker_id}", response_model=SpeakerOut)
async def update_speaker(session_id: str, speaker_id: int, request: SpeakerUpdateRequest) -> SpeakerOut:
    session = _require_session(session_id)
    if speaker_id < 0:
        raise HTTPException(status_code=422, detail="speaker_id must be non-negative")
    try:
        profile = session.registry.update(speaker_id, request.name, request.role)
    except LiveScribeError as e:
        raise _http_error(e)
    return speaker_out(profile, compute_speaker_stats(session.aggregator.segments, speaker_id))


@app.get("/api/sessions/{session_id}/speakers/{speaker_id}/stats", response_model=StatsOut)
async def speaker_stats(session_id: str, speaker_id: int) -> StatsOut:
    session = _require_session(session_id)
    if speaker_id < 0:
        raise HTTPException(status_code=422, detail="speaker_id must be non-negative")
    return stats_out(compute_speaker_stats(session.aggregator.segments, speaker_id))


@app.post("/api/sessions/{session_id}/ask", response_model=AssistantReply)
async def ask_about_session(session_id: str, request: AskRequest) -> AssistantReply:
    """Ask the assistant a question with the speaker-labeled live transcript as context."""
    session = _require_session(session_id)
    settings = get_settings()
    transcript_text = render_transcript(
        session.aggregator.segments,
        session.registry,
        max_chars=settings.ASSISTANT_TRANSCRIPT_MAX_CHARS,
    )
    context = (
        "Transcript of the live conversation so far:\n"
        f"{transcript_text or '(none yet)'}"
    )
    try:
        return await ask_assistant(request.question, session.session_id, context=context)
    except LiveScribeError as e:
        raise _http_error(e)


@app.post("/api/voice", response_model=VoiceExchange)
async def voice_query(request: VoiceRequest) -> VoiceExchange:
    """Recorded audio -> transcript -> assistant reply."""
    try:
        audio = base64.b64decode(request.audio_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="audio_base64 is not valid base64")
    try:
        return await process_voice_query(audio, context=request.context)
    except LiveScribeError as e:
        logger.warning("Voice query failed: %s", e.message)
        raise _http_error(e)


@app.websocket("/ws/listen")
async def websocket_listen(websocket: WebSocket, session_id: str | None = None, source: str | None = None) -> None:
    """
    Attach to an existing session (?session_id=) or create one (?source=native|streaming).
    """
    await websocket.accept()
    session = get_session(session_id) if session_id else None
    if session is None:
        try:
            session = create_session(source, whisper_model=_whisper_model())
        except LiveScribeError as e:
            await websocket.send_json({"type": "error", "error": e.message})
            await websocket.close(code=1008)
            return
    manager = ListenSocketManager(websocket, session)
    try:
        await manager.run()
    except WebSocketDisconnect:
        pass
