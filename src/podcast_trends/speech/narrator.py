"""Narrate an episode: script, synthesis, and persistence to a public file."""

from __future__ import annotations

import asyncio
import math
from typing import TYPE_CHECKING

import structlog

from podcast_trends.exceptions import AudioWriteError, ConfigurationError
from podcast_trends.models import TtsResult
from podcast_trends.speech.wav import audio_extension

if TYPE_CHECKING:
    from pathlib import Path

    from podcast_trends.config import AudioSettings
    from podcast_trends.models import Episode
    from podcast_trends.narration.script import NarrationScriptBuilder
    from podcast_trends.speech.session import AudioSynthesizer

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

_CHARS_PER_SECOND = 8


def estimate_duration_seconds(script: str) -> int:
    """Rough spoken length of a Japanese script, from its character count."""
    return math.floor(len(script) / _CHARS_PER_SECOND + 0.5)


def _write_audio(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


class EpisodeNarrator:
    """Turn an episode into a Japanese narration file under the audio dir.

    ``synthesizer`` is None when the speech provider has no API key; every
    narration request then fails with ``ConfigurationError``.
    """

    def __init__(
        self,
        audio_settings: AudioSettings,
        script_builder: NarrationScriptBuilder,
        synthesizer: AudioSynthesizer | None,
    ) -> None:
        self._audio = audio_settings
        self._script_builder = script_builder
        self._synthesizer = synthesizer

    async def narrate(self, episode: Episode) -> TtsResult:
        """Build, synthesize, and persist narration for ``episode``.

        The file path depends only on the episode id, so repeated requests
        overwrite the previous file.

        Raises:
            ConfigurationError: If the speech API key is not configured.
            SynthesisError: If the provider produced no usable audio.
            AudioWriteError: If the audio file cannot be written.
        """
        if self._synthesizer is None:
            raise ConfigurationError("Gemini API key is not configured")

        script = await self._script_builder.build_script(episode)
        audio = await self._synthesizer.synthesize(script)

        extension = audio_extension(audio.mime_type)
        filename = f"{episode.id}.{extension}"
        path = self._audio.output_dir / filename
        try:
            await asyncio.to_thread(_write_audio, path, audio.data)
        except OSError as exc:
            raise AudioWriteError(f"Cannot write {path}: {exc}") from exc

        public_url = f"{self._audio.public_url_prefix.rstrip('/')}/{filename}"
        logger.info(
            "narration_written",
            episode_id=episode.id,
            path=str(path),
            bytes=len(audio.data),
        )
        return TtsResult(
            script=script,
            audio_path=path.resolve(),
            public_url=public_url,
            audio_format=extension,
            estimated_duration_seconds=estimate_duration_seconds(script),
        )
