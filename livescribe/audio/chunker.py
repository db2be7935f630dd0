"""
AudioChunker: groups speech frames into utterance chunks for recognition.

- Frame size: 20ms.
- Minimum chunk: CHUNK_DURATION_MS (e.g. 1.5s); shorter utterances are padded
  with the preceding audio kept in the buffer.
- Overlap: OVERLAP_MS of audio is carried into the next chunk for context.
- A chunk is emitted once silence lasts SILENCE_COMMIT_MS after speech, so words
  are not cut. Each emitted chunk becomes one FINAL segment.
"""
from __future__ import annotations

from collections import deque
from typing import Callable

from livescribe.config import get_settings


class AudioChunker:
    """
    Ring buffer of PCM frames. Emits a chunk via on_chunk when silence after
    speech exceeds the commit threshold.
    """

    def __init__(
        self,
        on_chunk: Callable[[bytes], None],
        frame_bytes: int | None = None,
        chunk_duration_ms: int | None = None,
        overlap_ms: int | None = None,
        silence_commit_ms: int | None = None,
    ) -> None:
        settings = get_settings()
        self._frame_bytes = frame_bytes or settings.FRAME_BYTES
        self._frame_ms = settings.FRAME_MS
        self._chunk_duration_ms = chunk_duration_ms or settings.CHUNK_DURATION_MS
        self._overlap_ms = overlap_ms if overlap_ms is not None else settings.OVERLAP_MS
        self._silence_commit_ms = silence_commit_ms or settings.SILENCE_COMMIT_MS
        self._on_chunk = on_chunk

        self._frames_per_chunk = max(1, self._chunk_duration_ms // self._frame_ms)
        self._overlap_frames = self._overlap_ms // self._frame_ms
        self._silence_commit_frames = max(1, self._silence_commit_ms // self._frame_ms)

        # Unbounded while speech continues; trimmed back to the overlap after each emit
        self._buffer: deque[bytes] = deque()
        self._silence_frames: int = 0
        self._had_speech: bool = False
        # Leading frames of the buffer carried over from the previous chunk
        self._carried_frames: int = 0

    def push(self, frame: bytes, is_speech: bool) -> None:
        """Push one frame and its VAD result. May call on_chunk."""
        self._buffer.append(frame)
        if is_speech:
            self._silence_frames = 0
            self._had_speech = True
        else:
            self._silence_frames += 1
            if not self._had_speech:
                # Leading silence: keep only enough to pad a short utterance
                while len(self._buffer) > self._frames_per_chunk:
                    self._buffer.popleft()
                    if self._carried_frames:
                        self._carried_frames -= 1

        if (
            len(self._buffer) >= self._frames_per_chunk
            and self._had_speech
            and self._silence_frames >= self._silence_commit_frames
        ):
            chunk = b"".join(self._buffer)
            self._on_chunk(chunk)
            self._had_speech = False
            self._silence_frames = 0
            keep = list(self._buffer)[-self._overlap_frames:] if self._overlap_frames else []
            self._buffer = deque(keep)
            self._carried_frames = len(keep)

    def pending(self) -> bytes | None:
        """
        Audio of the utterance in progress (for interim decoding), or None if no speech yet.
        Overlap carried from the previous chunk is left out so interims do not repeat it.
        """
        if not self._had_speech:
            return None
        frames = list(self._buffer)[self._carried_frames:]
        return b"".join(frames) if frames else None

    def flush(self) -> bytes | None:
        """
        Flush the utterance in progress as one chunk (e.g. on end of stream).
        Returns chunk bytes if it contained speech, else None.
        """
        chunk = b"".join(self._buffer) if self._had_speech and self._buffer else None
        self._buffer.clear()
        self._had_speech = False
        self._silence_frames = 0
        self._carried_frames = 0
        return chunk

    @property
    def has_speech(self) -> bool:
        return self._had_speech
