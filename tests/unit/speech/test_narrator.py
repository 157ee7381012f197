"""Tests for EpisodeNarrator persistence and duration estimates."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from podcast_trends.config import AudioSettings
from podcast_trends.exceptions import (
    AudioWriteError,
    ConfigurationError,
    EmptyAudioError,
)
from podcast_trends.models import Episode
from podcast_trends.speech.narrator import EpisodeNarrator, estimate_duration_seconds
from podcast_trends.speech.session import SynthesizedAudio

if TYPE_CHECKING:
    from pathlib import Path


class FakeScriptBuilder:
    def __init__(self, script: str = "あ" * 80) -> None:
        self.script = script
        self.episodes: list[Episode] = []

    async def build_script(self, episode: Episode) -> str:
        self.episodes.append(episode)
        return self.script


class FakeSynthesizer:
    def __init__(
        self,
        audio: SynthesizedAudio | None = None,
        error: Exception | None = None,
    ) -> None:
        self.audio = audio or SynthesizedAudio(data=b"RIFF-data")
        self.error = error
        self.scripts: list[str] = []

    async def synthesize(self, script: str) -> SynthesizedAudio:
        self.scripts.append(script)
        if self.error is not None:
            raise self.error
        return self.audio


def _episode(episode_id: str = "technology-ep-1") -> Episode:
    return Episode(
        id=episode_id,
        title="t",
        podcast_title="p",
        podcast_id="pid",
        release_date=datetime(2025, 10, 8, tzinfo=UTC),
        popularity_score=50,
    )


class TestEstimateDuration:
    @pytest.mark.parametrize(
        ("chars", "expected"),
        [(0, 0), (3, 0), (4, 1), (12, 2), (80, 10), (84, 11)],
    )
    def test_eight_chars_per_second(self, chars: int, expected: int) -> None:
        assert estimate_duration_seconds("x" * chars) == expected


class TestNarrate:
    @pytest.mark.asyncio()
    async def test_writes_file_and_returns_result(
        self, audio_settings: AudioSettings
    ) -> None:
        builder = FakeScriptBuilder()
        synthesizer = FakeSynthesizer()
        narrator = EpisodeNarrator(audio_settings, builder, synthesizer)  # type: ignore[arg-type]

        result = await narrator.narrate(_episode())

        path = audio_settings.output_dir / "technology-ep-1.wav"
        assert path.read_bytes() == b"RIFF-data"
        assert result.audio_path == path.resolve()
        assert result.public_url == "/audio/technology-ep-1.wav"
        assert result.audio_format == "wav"
        assert result.script == builder.script
        assert result.estimated_duration_seconds == 10
        assert synthesizer.scripts == [builder.script]

    @pytest.mark.asyncio()
    async def test_repeat_request_overwrites(self, audio_settings: AudioSettings) -> None:
        synthesizer = FakeSynthesizer()
        narrator = EpisodeNarrator(
            audio_settings, FakeScriptBuilder(), synthesizer  # type: ignore[arg-type]
        )

        await narrator.narrate(_episode())
        synthesizer.audio = SynthesizedAudio(data=b"RIFF-second")
        await narrator.narrate(_episode())

        files = list(audio_settings.output_dir.iterdir())
        assert len(files) == 1
        assert files[0].read_bytes() == b"RIFF-second"

    @pytest.mark.asyncio()
    async def test_missing_synthesizer(self, audio_settings: AudioSettings) -> None:
        builder = FakeScriptBuilder()
        narrator = EpisodeNarrator(audio_settings, builder, None)  # type: ignore[arg-type]

        with pytest.raises(ConfigurationError):
            await narrator.narrate(_episode())
        assert builder.episodes == []

    @pytest.mark.asyncio()
    async def test_synthesis_failure_writes_nothing(
        self, audio_settings: AudioSettings
    ) -> None:
        narrator = EpisodeNarrator(
            audio_settings,
            FakeScriptBuilder(),  # type: ignore[arg-type]
            FakeSynthesizer(error=EmptyAudioError("no audio")),  # type: ignore[arg-type]
        )

        with pytest.raises(EmptyAudioError):
            await narrator.narrate(_episode())
        assert not audio_settings.output_dir.exists()

    @pytest.mark.asyncio()
    async def test_unwritable_directory(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        narrator = EpisodeNarrator(
            AudioSettings(output_dir=blocker / "audio"),
            FakeScriptBuilder(),  # type: ignore[arg-type]
            FakeSynthesizer(),  # type: ignore[arg-type]
        )

        with pytest.raises(AudioWriteError) as excinfo:
            await narrator.narrate(_episode())
        assert isinstance(excinfo.value.__cause__, OSError)
