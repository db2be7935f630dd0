"""
ListeningController: the listening-session state machine.

    IDLE --start--> CONNECTING --opened--> LISTENING --stop / source ended--> IDLE
                         |                     |
                         +--error--> ERROR <---+--recognition error
    ERROR --stop/reset--> IDLE   (no auto-retry)

- start() is only honored in IDLE; the state is set before the first await, so a
  second start while CONNECTING is ignored.
- Opening the source is serialized by a lock and stop() waits on it, so
  start -> stop -> start never holds two audio captures at once.
- Every path out of CONNECTING/LISTENING releases the capture and clears the
  interim transcript; the committed log is never touched here.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Callable

from livescribe.config import get_settings
from livescribe.errors import LiveScribeError, RecognitionError
from livescribe.speech.base import SpeechSource
from livescribe.transcript.aggregator import TranscriptAggregator

logger = logging.getLogger(__name__)


class ListeningState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    LISTENING = "listening"
    ERROR = "error"


StateListener = Callable[[ListeningState, "LiveScribeError | None"], None]
SourceFactory = Callable[[], SpeechSource]


class ListeningController:
    """Drives one speech source at a time into a TranscriptAggregator."""

    def __init__(
        self,
        aggregator: TranscriptAggregator,
        source_factory: SourceFactory,
        connect_timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._aggregator = aggregator
        self._source_factory = source_factory
        self._connect_timeout = (
            settings.SPEECH_CONNECT_TIMEOUT_SEC if connect_timeout is None else connect_timeout
        )
        self._state = ListeningState.IDLE
        self._error: LiveScribeError | None = None
        self._source: SpeechSource | None = None
        self._pump_task: asyncio.Task[None] | None = None
        self._open_lock = asyncio.Lock()
        # Bumped by stop(); stale opens and pumps compare against it
        self._generation = 0
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ListeningState:
        return self._state

    @property
    def error(self) -> LiveScribeError | None:
        """Error that moved the controller to ERROR; None otherwise."""
        return self._error

    @property
    def source(self) -> SpeechSource | None:
        return self._source

    async def start(self) -> bool:
        """Open a new source and start listening. Returns False if ignored or failed."""
        if self._state is not ListeningState.IDLE:
            logger.info("Start ignored in state %s", self._state.value)
            return False
        self._error = None
        self._set_state(ListeningState.CONNECTING)
        generation = self._generation

        async with self._open_lock:
            try:
                source = self._source_factory()
            except LiveScribeError as err:
                logger.warning("No speech source: %s", err.message)
                self._error = err
                self._set_state(ListeningState.ERROR)
                return False
            self._source = source
            try:
                await asyncio.wait_for(source.open(), timeout=self._connect_timeout)
            except asyncio.TimeoutError:
                await self._fail(source, RecognitionError("Speech recognition did not start in time"))
                return False
            except LiveScribeError as err:
                await self._fail(source, err)
                return False

            if generation != self._generation:
                # stop() arrived while connecting
                await self._release(source)
                return False

            self._set_state(ListeningState.LISTENING)
            self._pump_task = asyncio.create_task(self._pump(source, generation))
        return True

    async def stop(self) -> None:
        """Stop listening from any state. Idempotent; keeps the transcript log."""
        self._generation += 1
        task, self._pump_task = self._pump_task, None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        async with self._open_lock:
            if self._source is not None:
                await self._release(self._source)

        self._aggregator.clear_interim()
        self._error = None
        if self._state is not ListeningState.IDLE:
            self._set_state(ListeningState.IDLE)

    async def reset(self) -> None:
        """Stop, then clear the transcript log and all speakers."""
        await self.stop()
        self._aggregator.reset()
        self._aggregator.registry.reset()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    async def _pump(self, source: SpeechSource, generation: int) -> None:
        """Deliver events in order until the source ends, fails, or stop() cancels us."""
        try:
            async for event in source.events():
                if generation != self._generation:
                    return
                self._aggregator.ingest(event)
        except LiveScribeError as err:
            if generation != self._generation:
                return
            self._pump_task = None
            await self._fail(source, err)
            return
        except Exception as err:
            if generation != self._generation:
                return
            logger.exception("Speech event delivery failed")
            self._pump_task = None
            await self._fail(source, RecognitionError(f"Speech recognition failed: {err}"))
            return

        if generation != self._generation:
            return
        logger.info("Speech source ended on its own")
        self._pump_task = None
        await self._release(source)
        self._aggregator.clear_interim()
        self._set_state(ListeningState.IDLE)

    async def _fail(self, source: SpeechSource, err: LiveScribeError) -> None:
        logger.warning("Listening failed (%s): %s", type(err).__name__, err.message)
        await self._release(source)
        self._aggregator.clear_interim()
        self._error = err
        self._set_state(ListeningState.ERROR)

    async def _release(self, source: SpeechSource) -> None:
        if self._source is source:
            self._source = None
        try:
            await source.close()
        except Exception:
            logger.exception("Failed to close speech source")

    def _set_state(self, state: ListeningState) -> None:
        if state is self._state:
            return
        logger.debug("Listening %s -> %s", self._state.value, state.value)
        self._state = state
        for listener in list(self._listeners):
            listener(state, self._error)
