"""
Transcription/AI backend collaborator (Cloudflare Workers AI).

- transcribe_recording(): one recorded audio payload -> {transcript, confidence}.
- ask_assistant(): {transcript, session_id, context} -> {response, session_id}.
- process_voice_query(): both, under a freshly generated session id.

Every failure (transport, HTTP status, `success: false`, empty result, missing
configuration) is raised as BackendError; callers never see httpx exceptions.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from livescribe.config import Settings, get_settings
from livescribe.errors import BackendError
from livescribe.schemas.assistant import AssistantReply, TranscriptionResult, VoiceExchange
from livescribe.session_store import generate_query_session_id

logger = logging.getLogger(__name__)

CLOUDFLARE_API = "https://api.cloudflare.com/client/v4/accounts/{account_id}/ai/run/{model}"

_SYSTEM_PROMPT = """You are a voice assistant that helps with business process automation and optimization.

Your input is speech transcribed from a microphone, so it may contain recognition mistakes.
- Answer naturally and concisely, in the language of the user.
- If the transcript is ambiguous, say what you understood and ask a short clarifying question.
- When a conversation transcript is provided as context, treat it as read-only background;
  refer to speakers by the names shown in it.
- Reply in plain text, no JSON or markdown tables."""


def _get_cloudflare_auth(settings: Settings) -> tuple[str, str]:
    """Return (account_id, token). Raises BackendError when not configured."""
    account_id = (settings.CLOUDFLARE_ACCOUNT_ID or "").strip()
    token = (settings.CLOUDFLARE_API_TOKEN or "").strip()
    if not account_id or not token:
        raise BackendError("CLOUDFLARE_ACCOUNT_ID and CLOUDFLARE_API_TOKEN are required")
    return account_id, token


def _extract_result(data: Any) -> Any:
    """Workers AI wraps output as {"success": bool, "result": {...}}; some models return it bare."""
    if not isinstance(data, dict):
        return data
    if data.get("success") is False:
        errors = data.get("errors") or []
        detail = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
        raise BackendError(f"Backend reported failure: {detail or 'unknown error'}")
    return data.get("result", data)


async def _post(
    model: str,
    payload: dict[str, Any],
    client: httpx.AsyncClient | None,
    timeout: float,
) -> Any:
    settings = get_settings()
    account_id, token = _get_cloudflare_auth(settings)
    url = CLOUDFLARE_API.format(account_id=account_id, model=model)
    headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
    try:
        if client is not None:
            resp = await client.post(url, json=payload, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                resp = await own_client.post(url, json=payload, headers=headers)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPStatusError as e:
        logger.warning("Backend %s returned HTTP %s", model, e.response.status_code)
        raise BackendError(f"Backend returned HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.warning("Backend %s unreachable: %s", model, e)
        raise BackendError("Backend unreachable") from e
    except ValueError as e:
        raise BackendError("Backend returned invalid JSON") from e
    return _extract_result(data)


async def transcribe_recording(
    audio: bytes,
    client: httpx.AsyncClient | None = None,
) -> TranscriptionResult:
    """Transcribe one recorded audio file. Empty audio or empty transcript -> BackendError."""
    if not audio:
        raise BackendError("No audio recorded")
    settings = get_settings()
    result = await _post(
        settings.CLOUDFLARE_WHISPER_MODEL,
        {"audio": list(audio)},
        client,
        timeout=settings.ASSISTANT_TIMEOUT_SEC,
    )
    if isinstance(result, dict):
        text = result.get("text", result.get("transcript", "")) or ""
        confidence = result.get("confidence")
    elif isinstance(result, str):
        text, confidence = result, None
    else:
        text, confidence = "", None
    text = text.strip()
    if not text:
        raise BackendError("No speech recognized in the recording")
    if confidence is None:
        confidence = settings.SPEECH_DEFAULT_CONFIDENCE
    return TranscriptionResult(transcript=text, confidence=min(1.0, max(0.0, float(confidence))))


async def ask_assistant(
    transcript: str,
    session_id: str,
    context: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> AssistantReply:
    """Send a transcript (plus optional context) to the AI and return its reply."""
    settings = get_settings()
    if not settings.ASSISTANT_ENABLED:
        raise BackendError("Assistant is disabled (ASSISTANT_ENABLED=false)")
    transcript = (transcript or "").strip()
    if not transcript:
        raise BackendError("Nothing to send to the assistant")

    context = (context or settings.ASSISTANT_DEFAULT_CONTEXT).strip()
    messages = [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "system", "content": f"Context:\n{context}"},
        {"role": "user", "content": transcript},
    ]
    logger.info(
        "Assistant request: model=%s session=%s transcript_len=%d context_len=%d",
        settings.ASSISTANT_CF_MODEL, session_id, len(transcript), len(context),
    )
    result = await _post(
        settings.ASSISTANT_CF_MODEL,
        {"messages": messages, "max_tokens": settings.ASSISTANT_MAX_TOKENS, "temperature": 0.4},
        client,
        timeout=settings.ASSISTANT_TIMEOUT_SEC,
    )
    if isinstance(result, dict):
        content = result.get("response", "") or ""
    elif isinstance(result, str):
        content = result
    else:
        content = ""
    content = content.strip()
    if not content:
        raise BackendError("Assistant returned an empty response")
    return AssistantReply(response=content, session_id=session_id)


async def process_voice_query(
    audio: bytes,
    context: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> VoiceExchange:
    """Recorded question -> transcript -> assistant reply, under one new session id."""
    transcription = await transcribe_recording(audio, client=client)
    session_id = generate_query_session_id()
    reply = await ask_assistant(transcription.transcript, session_id, context=context, client=client)
    return VoiceExchange(
        transcription=transcription.transcript,
        response=reply.response,
        confidence=transcription.confidence,
        session_id=reply.session_id,
    )
