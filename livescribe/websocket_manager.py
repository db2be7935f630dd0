"""
ListenSocketManager: one WebSocket connection driving one live session.

Client -> server:
- binary: PCM 16-bit mono 16kHz audio (ignored unless listening)
- JSON control: {"type": "start" | "stop" | "reset" | "end" | "microphone_denied" | "microphone_granted"}

Server -> client (JSON):
- {"type": "session", "session_id", "source"} once on connect
- {"type": "state", "state", "error"} on every listening state change
- {"type": "interim", "text"} whenever the interim transcript changes
- {"type": "final", "segment": {...}} for each committed segment
- {"type": "speaker", "speaker": {...}} when a speaker appears or is edited
- {"type": "reset"} when the transcript was cleared
- {"type": "error", "error"} for malformed control messages

Model callbacks are synchronous; they enqueue messages that a sender task writes
in order, so the transcript log is never blocked on the socket.
"""
from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any, Callable

from fastapi import WebSocket

from livescribe.errors import LiveScribeError
from livescribe.listening import ListeningState
from livescribe.schemas.live import segment_out, speaker_out
from livescribe.session_store import LiveSession
from livescribe.speakers.models import SpeakerProfile
from livescribe.transcript.models import TranscriptSegment

logger = logging.getLogger(__name__)


class ListenSocketManager:
    """Bridges a WebSocket and a LiveSession until the client disconnects."""

    def __init__(self, websocket: WebSocket, session: LiveSession) -> None:
        self._ws = websocket
        self._session = session
        self._outbox: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()
        self._sender_task: asyncio.Task[None] | None = None
        self._closed = False
        self._logged_segments = len(session.aggregator.segments)
        self._unsubscribers: list[Callable[[], None]] = []

    def _post(self, payload: dict[str, Any]) -> None:
        if not self._closed:
            self._outbox.put_nowait(payload)

    async def _sender(self) -> None:
        while True:
            payload = await self._outbox.get()
            if payload is None:
                break
            try:
                await self._ws.send_text(json.dumps(payload, default=str))
            except Exception:
                logger.info("Session %s: client gone, dropping outgoing messages", self._session.session_id)
                self._closed = True
                break

    def _on_log(self, segments: tuple[TranscriptSegment, ...]) -> None:
        if not segments:
            self._logged_segments = 0
            self._post({"type": "reset"})
            return
        for segment in segments[self._logged_segments:]:
            self._post({"type": "final", "segment": segment_out(segment).model_dump(mode="json")})
        self._logged_segments = len(segments)

    def _on_interim(self, text: str) -> None:
        self._post({"type": "interim", "text": text})

    def _on_speaker(self, profile: SpeakerProfile) -> None:
        self._post({"type": "speaker", "speaker": speaker_out(profile).model_dump(mode="json")})

    def _on_state(self, state: ListeningState, error: LiveScribeError | None) -> None:
        self._post({"type": "state", "state": state.value, "error": error.message if error else None})

    async def _handle_control(self, raw: str) -> None:
        try:
            message = json.loads(raw)
            kind = message.get("type") if isinstance(message, dict) else None
        except json.JSONDecodeError:
            kind = None
        controller = self._session.controller
        capture = self._session.capture
        if kind == "start":
            if controller.state is ListeningState.IDLE:
                self._session.listening_owner = self
            await controller.start()
        elif kind == "stop":
            await controller.stop()
            self._session.listening_owner = None
        elif kind == "reset":
            await controller.reset()
            self._session.listening_owner = None
        elif kind == "end":
            capture.end()
        elif kind == "microphone_denied":
            capture.deny()
        elif kind == "microphone_granted":
            capture.allow()
        else:
            self._post({"type": "error", "error": f"Unknown control message: {raw[:100]}"})

    async def run(self) -> None:
        """Main loop: route audio to the capture and control messages to the controller."""
        session = self._session
        self._unsubscribers = [
            session.aggregator.subscribe(self._on_log),
            session.aggregator.subscribe_interim(self._on_interim),
            session.registry.subscribe(self._on_speaker),
            session.controller.subscribe(self._on_state),
        ]
        self._sender_task = asyncio.create_task(self._sender())
        self._post({"type": "session", "session_id": session.session_id, "source": session.source_kind.value})
        self._on_state(session.controller.state, session.controller.error)

        try:
            while not self._closed:
                msg = await self._ws.receive()
                if msg.get("type") == "websocket.disconnect":
                    break
                if msg.get("bytes") is not None:
                    session.capture.feed(msg["bytes"])
                elif msg.get("text") is not None:
                    await self._handle_control(msg["text"])
        finally:
            for unsubscribe in self._unsubscribers:
                unsubscribe()
            # The connection that started listening stops it and releases the capture;
            # other attached connections leave it running. The transcript stays in the store.
            if session.listening_owner is self:
                session.listening_owner = None
                await session.controller.stop()
            self._outbox.put_nowait(None)
            self._closed = True
            if self._sender_task is not None:
                try:
                    await asyncio.wait_for(self._sender_task, timeout=5.0)
                except asyncio.TimeoutError:
                    self._sender_task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await self._sender_task
