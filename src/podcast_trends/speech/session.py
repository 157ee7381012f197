"""Streaming speech synthesis as an explicit state machine.

One synthesis run moves through::

    CONNECTING -> SENDING -> STREAMING -> COMPLETING -> DONE
                                   \\-> FAILED (from any non-terminal state)

The provider session is a duplex channel: the script is sent as the only
turn while inbound messages carrying inline audio fragments are consumed
concurrently. A ``CompletionLatch`` accepts exactly one outcome; events
arriving after the first resolution are ignored. The session is closed on
every exit path.
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar

import structlog

from podcast_trends.exceptions import (
    EmptyAudioError,
    SpeechSessionError,
    SpeechTimeoutError,
    SynthesisError,
)
from podcast_trends.speech.wav import DEFAULT_AUDIO_MIME_TYPE, WAV_MIME_TYPE, assemble_wav

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

T = TypeVar("T")


class SynthesisState(StrEnum):
    """Lifecycle states of one synthesis run."""

    CONNECTING = "CONNECTING"
    SENDING = "SENDING"
    STREAMING = "STREAMING"
    COMPLETING = "COMPLETING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass(slots=True)
class InlineAudio:
    """One inline audio fragment: base64 text or already-decoded bytes."""

    data: str | bytes
    mime_type: str | None = None


@dataclass(slots=True)
class SpeechMessage:
    """Provider-neutral inbound event from a speech session."""

    audio: list[InlineAudio] = field(default_factory=list)
    turn_complete: bool = False
    error: str | None = None


@dataclass(frozen=True, slots=True)
class SynthesizedAudio:
    """Final assembled audio buffer."""

    data: bytes
    mime_type: str = WAV_MIME_TYPE


class SpeechSession(Protocol):
    async def send_script(self, script: str) -> None: ...

    def messages(self) -> AsyncIterator[SpeechMessage]: ...

    async def close(self) -> None: ...


class SpeechProvider(Protocol):
    async def connect(self) -> SpeechSession: ...


class CompletionLatch(Generic[T]):
    """Single-assignment outcome holder; the first resolution wins.

    Must be created inside a running event loop.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._settled = False

    @property
    def settled(self) -> bool:
        return self._settled

    def resolve(self, value: T) -> bool:
        if self._settled:
            return False
        self._settled = True
        self._future.set_result(value)
        return True

    def fail(self, error: BaseException) -> bool:
        if self._settled:
            return False
        self._settled = True
        self._future.set_exception(error)
        return True

    async def wait(self) -> T:
        return await asyncio.shield(self._future)


class SynthesisRun:
    """Drive one provider session from connect to a single outcome."""

    def __init__(
        self,
        provider: SpeechProvider,
        script: str,
        timeout_seconds: float | None = None,
    ) -> None:
        self._provider = provider
        self._script = script
        self._timeout = timeout_seconds
        self._fragments: list[str | bytes] = []
        self._mime_type: str | None = None
        self._latch: CompletionLatch[SynthesizedAudio] | None = None
        self.state = SynthesisState.CONNECTING
        self.history: list[SynthesisState] = [SynthesisState.CONNECTING]

    @property
    def fragment_count(self) -> int:
        return len(self._fragments)

    def _transition(self, state: SynthesisState) -> None:
        self.state = state
        self.history.append(state)
        logger.debug("synthesis_state", state=state.value)

    def _require_latch(self) -> CompletionLatch[SynthesizedAudio]:
        if self._latch is None:
            raise RuntimeError("synthesis run has not started")
        return self._latch

    def _succeed(self, audio: SynthesizedAudio) -> None:
        if self._require_latch().resolve(audio):
            self._transition(SynthesisState.DONE)

    def _fail(self, error: SynthesisError) -> None:
        if self._require_latch().fail(error):
            self._transition(SynthesisState.FAILED)
            logger.warning(
                "synthesis_failed",
                error=str(error),
                error_type=type(error).__name__,
                fragments=len(self._fragments),
            )
        else:
            logger.debug("synthesis_event_ignored", error=str(error))

    def _handle(self, message: SpeechMessage) -> None:
        if self._latch is None or self._latch.settled:
            return

        if message.error:
            self._fail(SpeechSessionError(f"Speech provider error: {message.error}"))
            return

        for part in message.audio:
            if not part.data:
                continue
            if self._mime_type is None and part.mime_type:
                self._mime_type = part.mime_type
            self._fragments.append(part.data)

        if message.turn_complete:
            self._complete()

    def _complete(self) -> None:
        self._transition(SynthesisState.COMPLETING)
        if not self._fragments:
            self._fail(
                EmptyAudioError("Speech response did not include inline audio data")
            )
            return

        source_mime = self._mime_type or DEFAULT_AUDIO_MIME_TYPE
        try:
            data = assemble_wav(self._fragments, source_mime)
        except ValueError as exc:
            self._fail(SpeechSessionError(f"Invalid inline audio: {exc}"))
            return

        logger.info(
            "synthesis_complete",
            fragments=len(self._fragments),
            source_mime_type=source_mime,
            bytes=len(data),
        )
        self._succeed(SynthesizedAudio(data=data))

    async def _send(self, session: SpeechSession) -> None:
        try:
            await session.send_script(self._script)
        except Exception as exc:
            self._fail(SpeechSessionError(f"Failed to send script: {exc}"))

    async def _receive(self, session: SpeechSession) -> None:
        try:
            async for message in session.messages():
                self._handle(message)
                if self._latch is not None and self._latch.settled:
                    return
        except Exception as exc:
            self._fail(SpeechSessionError(f"Speech session error: {exc}"))
            return
        self._fail(SpeechSessionError("Speech session closed before completion"))

    async def run(self) -> SynthesizedAudio:
        """Execute the run and return the assembled audio.

        Raises:
            SpeechSessionError: On connection, send, provider, or premature
                close failures.
            EmptyAudioError: If the turn completed without audio.
            SpeechTimeoutError: If the run exceeds ``timeout_seconds``.
        """
        self._latch = CompletionLatch()
        session: SpeechSession | None = None
        tasks: list[asyncio.Task[None]] = []

        try:
            try:
                session = await self._provider.connect()
            except Exception as exc:
                self._fail(SpeechSessionError(f"Failed to connect: {exc}"))
                return await self._latch.wait()

            self._transition(SynthesisState.SENDING)
            tasks.append(asyncio.create_task(self._send(session)))
            self._transition(SynthesisState.STREAMING)
            tasks.append(asyncio.create_task(self._receive(session)))

            try:
                async with asyncio.timeout(self._timeout):
                    return await self._latch.wait()
            except TimeoutError:
                self._fail(
                    SpeechTimeoutError(
                        f"Speech session did not complete within {self._timeout}s"
                    )
                )
                return await self._latch.wait()
        finally:
            for task in tasks:
                task.cancel()
            for task in tasks:
                with suppress(asyncio.CancelledError):
                    await task
            if session is not None:
                try:
                    await session.close()
                except Exception as exc:
                    logger.warning("speech_session_close_failed", error=str(exc))


class AudioSynthesizer:
    """Synthesize narration scripts through a streaming speech provider."""

    def __init__(
        self,
        provider: SpeechProvider,
        timeout_seconds: float | None = None,
    ) -> None:
        self._provider = provider
        self._timeout = timeout_seconds

    async def synthesize(self, script: str) -> SynthesizedAudio:
        run = SynthesisRun(self._provider, script, timeout_seconds=self._timeout)
        return await run.run()
