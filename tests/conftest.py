"""Pytest configuration and fixtures."""

import asyncio

import pytest

from livescribe.asr.base import ASREngine, ASRResult
from livescribe.errors import CapabilityUnavailable
from livescribe.session_store import session_store
from livescribe.speakers.registry import SpeakerRegistry
from livescribe.speech.base import SpeechSource, SpeechSourceKind
from livescribe.transcript.aggregator import TranscriptAggregator

FRAME_BYTES = 640
SPEECH_FRAME = b"\x01" * FRAME_BYTES
SILENCE_FRAME = b"\x00" * FRAME_BYTES


class FakeVAD:
    """Any non-zero byte counts as speech."""

    def is_speech(self, frame: bytes) -> bool:
        return any(frame)


class FakeEngine(ASREngine):
    """Returns canned text; records every call."""

    def __init__(self, final_text="hello world", interim_text="hello", confidence=0.8,
                 interim=True, available=True, error=None):
        self.final_text = final_text
        self.interim_text = interim_text
        self.confidence = confidence
        self.interim = interim
        self.available = available
        self.error = error
        self.calls = []

    def check_available(self):
        if not self.available:
            raise CapabilityUnavailable("fake engine unavailable")

    @property
    def supports_interim(self):
        return self.interim

    async def transcribe(self, audio, is_final):
        self.calls.append((len(audio), is_final))
        if self.error is not None:
            raise self.error
        text = self.final_text if is_final else self.interim_text
        return ASRResult(text=text, confidence=self.confidence, is_final=is_final)


class CaptureTracker:
    """Counts concurrently open scripted sources."""

    def __init__(self):
        self.active = 0
        self.max_active = 0
        self.opened = 0

    def on_open(self):
        self.active += 1
        self.opened += 1
        self.max_active = max(self.max_active, self.active)

    def on_close(self):
        self.active -= 1


class ScriptedSpeechSource(SpeechSource):
    """Speech source that replays a fixed list of events."""

    kind = SpeechSourceKind.NATIVE

    def __init__(self, events=(), open_error=None, open_gate=None, hold=False,
                 fail_with=None, tracker=None):
        self._events = list(events)
        self._open_error = open_error
        self._open_gate = open_gate
        self._hold = hold
        self._fail_with = fail_with
        self._tracker = tracker or CaptureTracker()
        self._open = False
        self._closed = asyncio.Event()
        self.close_calls = 0

    async def open(self):
        if self._open_gate is not None:
            await self._open_gate.wait()
        if self._open_error is not None:
            raise self._open_error
        self._open = True
        self._tracker.on_open()

    async def events(self):
        for event in self._events:
            await asyncio.sleep(0)
            yield event
        if self._fail_with is not None:
            raise self._fail_with
        if self._hold:
            await self._closed.wait()

    async def close(self):
        self.close_calls += 1
        if self._open:
            self._open = False
            self._tracker.on_close()
        self._closed.set()

    @property
    def is_open(self):
        return self._open


async def wait_until(predicate, timeout=1.0):
    """Poll predicate while letting other tasks run."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


@pytest.fixture
def registry():
    return SpeakerRegistry()


@pytest.fixture
def aggregator(registry):
    return TranscriptAggregator(registry)


@pytest.fixture(autouse=True)
def no_cloudflare_credentials(monkeypatch):
    """Tests never reach the real backend unless they set credentials themselves."""
    monkeypatch.delenv("CLOUDFLARE_ACCOUNT_ID", raising=False)
    monkeypatch.delenv("CLOUDFLARE_API_TOKEN", raising=False)


@pytest.fixture(autouse=True)
def clear_sessions():
    yield
    session_store().clear()
