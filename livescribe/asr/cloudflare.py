"""
CloudflareWhisperEngine: Whisper via Cloudflare Workers AI (remote streaming service).

Accepts float32 audio; converts to PCM bytes for the API.
Runs the HTTP call in executor to avoid blocking the event loop.
No interim results: every chunk is decoded once, as final.
"""
from __future__ import annotations

import asyncio

import httpx
import numpy as np

from livescribe.asr.base import ASREngine, ASRResult
from livescribe.config import get_settings
from livescribe.errors import CapabilityUnavailable, RecognitionError

CLOUDFLARE_API = "https://api.cloudflare.com/client/v4/accounts/{account_id}/ai/run/{model}"


def _float32_to_pcm_bytes(audio: np.ndarray) -> bytes:
    """Convert float32 [-1, 1] to PCM 16-bit mono bytes."""
    samples = (audio * 32767).clip(-32768, 32767).astype(np.int16)
    return samples.tobytes()


def parse_whisper_response(data: dict) -> str:
    """Workers AI returns {"result": {"text": ...}} or the result directly."""
    result = data.get("result", data) if isinstance(data, dict) else data
    if isinstance(result, dict):
        text = result.get("text", result.get("transcript", ""))
    elif isinstance(result, str):
        text = result
    else:
        text = ""
    return (text or "").strip()


class CloudflareWhisperEngine(ASREngine):
    """Remote Whisper via Cloudflare Workers AI."""

    def __init__(self, client: httpx.Client | None = None) -> None:
        self._client = client

    def check_available(self) -> None:
        settings = get_settings()
        if not settings.CLOUDFLARE_ACCOUNT_ID or not settings.CLOUDFLARE_API_TOKEN:
            raise CapabilityUnavailable(
                "CLOUDFLARE_ACCOUNT_ID and CLOUDFLARE_API_TOKEN are required for SPEECH_SOURCE=streaming"
            )

    @property
    def supports_interim(self) -> bool:
        return False

    def _transcribe_sync(self, pcm_bytes: bytes) -> ASRResult:
        """Blocking HTTP call; run in executor."""
        self.check_available()
        settings = get_settings()
        url = CLOUDFLARE_API.format(
            account_id=settings.CLOUDFLARE_ACCOUNT_ID,
            model=settings.CLOUDFLARE_WHISPER_MODEL,
        )
        headers = {"Authorization": f"Bearer {settings.CLOUDFLARE_API_TOKEN}"}
        body = {"audio": list(pcm_bytes)}

        try:
            if self._client is not None:
                resp = self._client.post(url, headers=headers, json=body)
            else:
                with httpx.Client(timeout=30.0) as client:
                    resp = client.post(url, headers=headers, json=body)
        except httpx.HTTPError as err:
            raise RecognitionError(f"Transcription service unreachable: {err}") from err
        if resp.status_code != 200:
            raise RecognitionError(f"Transcription service returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as err:
            raise RecognitionError("Transcription service returned invalid JSON") from err

        # The service reports no confidence; the aggregator applies its default
        return ASRResult(text=parse_whisper_response(data), confidence=None, is_final=True)

    async def transcribe(self, audio: np.ndarray, is_final: bool) -> ASRResult:
        """Convert audio to PCM, run HTTP in executor. is_final ignored (one pass)."""
        pcm_bytes = _float32_to_pcm_bytes(audio)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            self._transcribe_sync,
            pcm_bytes,
        )
