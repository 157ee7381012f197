"""Gemini Live native-audio provider for the synthesis state machine."""

from __future__ import annotations

from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Any

import structlog
from google import genai
from google.genai import types

from podcast_trends.exceptions import ConfigurationError
from podcast_trends.speech.session import InlineAudio, SpeechMessage

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from podcast_trends.config import SpeechSettings

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

_COMPRESSION_TRIGGER_TOKENS = 25_600
_COMPRESSION_TARGET_TOKENS = 12_800


def build_live_config(voice_name: str) -> types.LiveConnectConfig:
    """Audio-only session config with a prebuilt voice."""
    return types.LiveConnectConfig(
        response_modalities=[types.Modality.AUDIO],
        media_resolution=types.MediaResolution.MEDIA_RESOLUTION_MEDIUM,
        speech_config=types.SpeechConfig(
            voice_config=types.VoiceConfig(
                prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice_name)
            )
        ),
        context_window_compression=types.ContextWindowCompressionConfig(
            trigger_tokens=_COMPRESSION_TRIGGER_TOKENS,
            sliding_window=types.SlidingWindow(
                target_tokens=_COMPRESSION_TARGET_TOKENS
            ),
        ),
    )


def to_speech_message(message: types.LiveServerMessage) -> SpeechMessage:
    """Extract inline audio parts and the turn-completion flag."""
    content = message.server_content
    if content is None:
        return SpeechMessage()

    parts = (content.model_turn.parts or []) if content.model_turn else []
    audio = [
        InlineAudio(data=part.inline_data.data, mime_type=part.inline_data.mime_type)
        for part in parts
        if part.inline_data is not None and part.inline_data.data
    ]
    return SpeechMessage(audio=audio, turn_complete=bool(content.turn_complete))


class GeminiLiveSession:
    """Adapts an open ``AsyncSession`` to the ``SpeechSession`` protocol."""

    def __init__(self, stack: AsyncExitStack, session: Any) -> None:
        self._stack = stack
        self._session = session

    async def send_script(self, script: str) -> None:
        await self._session.send_client_content(
            turns=types.Content(role="user", parts=[types.Part(text=script)]),
            turn_complete=True,
        )

    async def messages(self) -> AsyncIterator[SpeechMessage]:
        async for message in self._session.receive():
            yield to_speech_message(message)

    async def close(self) -> None:
        await self._stack.aclose()


class GeminiLiveProvider:
    """Open Gemini Live sessions with the configured model and voice."""

    def __init__(
        self,
        settings: SpeechSettings,
        client: genai.Client | None = None,
    ) -> None:
        if client is None:
            api_key = settings.api_key
            if not settings.has_credentials or api_key is None:
                raise ConfigurationError("Gemini API key is not configured")
            client = genai.Client(api_key=api_key.get_secret_value())
        self._client = client
        self._model = settings.model
        self._config = build_live_config(settings.voice_name)

    async def connect(self) -> GeminiLiveSession:
        stack = AsyncExitStack()
        try:
            session = await stack.enter_async_context(
                self._client.aio.live.connect(model=self._model, config=self._config)
            )
        except BaseException:
            await stack.aclose()
            raise
        logger.debug("speech_session_connected", model=self._model)
        return GeminiLiveSession(stack, session)
