"""Tests for chunked speech sources and source selection."""

import numpy as np
import pytest
from conftest import SILENCE_FRAME, SPEECH_FRAME, FakeEngine, FakeVAD

from livescribe.asr.cloudflare import CloudflareWhisperEngine, parse_whisper_response
from livescribe.asr.local_whisper import LocalWhisperEngine, pcm_bytes_to_float32
from livescribe.audio import AudioCapture
from livescribe.errors import CapabilityUnavailable, PermissionDenied, RecognitionError
from livescribe.speech import ChunkedSpeechSource, SpeechSourceKind, create_speech_source, parse_source_kind
from livescribe.transcript import SpeechEventType


def _source(engine, capture=None, interim_every_ms=200):
    return ChunkedSpeechSource(
        SpeechSourceKind.NATIVE,
        engine,
        capture or AudioCapture(),
        vad=FakeVAD(),
        interim_every_ms=interim_every_ms,
    )


async def _run(source, capture, frames, end=True):
    await source.open()
    for frame in frames:
        capture.feed(frame)
    if end:
        capture.end()
    return [event async for event in source.events()]


class TestChunkedSpeechSource:
    """Tests for ChunkedSpeechSource."""

    @pytest.mark.asyncio
    async def test_final_after_silence_with_interims_before(self):
        engine = FakeEngine()
        capture = AudioCapture()
        source = _source(engine, capture)
        frames = [SPEECH_FRAME] * 80 + [SILENCE_FRAME] * 30

        events = await _run(source, capture, frames)
        finals = [e for e in events if e.type is SpeechEventType.FINAL]
        assert len(finals) == 1
        assert finals[0].text == "hello world"
        assert finals[0].confidence == 0.8
        assert events[-1] is finals[0]
        assert all(e.type is SpeechEventType.INTERIM for e in events[:-1])
        assert len(events) > 1
        assert [is_final for _, is_final in engine.calls].count(True) == 1

    @pytest.mark.asyncio
    async def test_end_of_stream_flushes_last_utterance(self):
        engine = FakeEngine()
        capture = AudioCapture()
        source = _source(engine, capture, interim_every_ms=0)

        events = await _run(source, capture, [SPEECH_FRAME] * 40)
        assert [(e.type, e.text) for e in events] == [(SpeechEventType.FINAL, "hello world")]

    @pytest.mark.asyncio
    async def test_streaming_engine_has_no_interims(self):
        engine = FakeEngine(interim=False)
        capture = AudioCapture()
        source = _source(engine, capture)
        frames = [SPEECH_FRAME] * 80 + [SILENCE_FRAME] * 30

        events = await _run(source, capture, frames)
        assert [e.type for e in events] == [SpeechEventType.FINAL]

    @pytest.mark.asyncio
    async def test_empty_text_is_skipped(self):
        engine = FakeEngine(final_text="   ", interim_text="")
        capture = AudioCapture()
        source = _source(engine, capture)

        assert await _run(source, capture, [SPEECH_FRAME] * 40) == []

    @pytest.mark.asyncio
    async def test_engine_failure_becomes_recognition_error(self):
        engine = FakeEngine(error=RuntimeError("boom"))
        capture = AudioCapture()
        source = _source(engine, capture, interim_every_ms=0)

        with pytest.raises(RecognitionError, match="boom"):
            await _run(source, capture, [SPEECH_FRAME] * 40)

    @pytest.mark.asyncio
    async def test_open_unavailable_engine_holds_nothing(self):
        capture = AudioCapture()
        source = _source(FakeEngine(available=False), capture)
        with pytest.raises(CapabilityUnavailable):
            await source.open()
        assert not capture.active
        assert not source.is_open

    @pytest.mark.asyncio
    async def test_open_denied_microphone(self):
        capture = AudioCapture()
        capture.deny()
        source = _source(FakeEngine(), capture)
        with pytest.raises(PermissionDenied):
            await source.open()
        assert not source.is_open

    @pytest.mark.asyncio
    async def test_close_releases_capture(self):
        capture = AudioCapture()
        source = _source(FakeEngine(), capture)
        await source.open()
        assert capture.active
        await source.close()
        await source.close()
        assert not capture.active
        assert not source.is_open

    @pytest.mark.asyncio
    async def test_closed_source_does_not_flush(self):
        engine = FakeEngine()
        capture = AudioCapture()
        source = _source(engine, capture, interim_every_ms=0)
        await source.open()
        for _ in range(40):
            capture.feed(SPEECH_FRAME)
        await source.close()

        assert [event async for event in source.events()] == []
        assert engine.calls == []


class TestSourceSelection:
    """Tests for parse_source_kind / create_speech_source."""

    def test_parse_known_kinds(self):
        assert parse_source_kind("native") is SpeechSourceKind.NATIVE
        assert parse_source_kind(SpeechSourceKind.STREAMING) is SpeechSourceKind.STREAMING

    def test_unknown_kind(self):
        with pytest.raises(CapabilityUnavailable):
            parse_source_kind("telepathy")

    @pytest.mark.asyncio
    async def test_native_without_model_is_unavailable(self):
        capture = AudioCapture()
        source = create_speech_source("native", capture)
        assert source.kind is SpeechSourceKind.NATIVE
        with pytest.raises(CapabilityUnavailable):
            await source.open()
        assert not capture.active

    @pytest.mark.asyncio
    async def test_streaming_without_credentials_is_unavailable(self):
        capture = AudioCapture()
        source = create_speech_source("streaming", capture)
        assert source.kind is SpeechSourceKind.STREAMING
        with pytest.raises(CapabilityUnavailable):
            await source.open()
        assert not capture.active


class TestEngineHelpers:
    """Tests for engine-level helpers."""

    def test_pcm_conversion(self):
        pcm = np.array([0, 16384, -32768], dtype=np.int16).tobytes()
        audio = pcm_bytes_to_float32(pcm)
        assert audio.dtype == np.float32
        assert audio.tolist() == [0.0, 0.5, -1.0]

    def test_parse_whisper_response(self):
        assert parse_whisper_response({"result": {"text": " hi "}}) == "hi"
        assert parse_whisper_response({"text": "bare"}) == "bare"
        assert parse_whisper_response({"result": None}) == ""

    def test_engine_interim_support(self):
        assert LocalWhisperEngine(model=object()).supports_interim is True
        assert CloudflareWhisperEngine().supports_interim is False
