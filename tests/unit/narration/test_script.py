"""Tests for narration script assembly."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from podcast_trends.models import Episode
from podcast_trends.narration.script import (
    MAX_DESCRIPTION_CHARS,
    NarrationScriptBuilder,
    format_release_date,
    strip_markup,
)


class FakeTranslator:
    """Marks translated text and records what it was asked to translate."""

    def __init__(self) -> None:
        self.inputs: list[str] = []

    async def translate(self, text: str) -> str:
        self.inputs.append(text)
        return f"[ja]{text}" if text.strip() else ""


def _episode(description: str = "Guests discuss AI.") -> Episode:
    return Episode(
        id="ep-1",
        title="The Future of Chips",
        description=description,
        podcast_title="Tech Weekly",
        podcast_id="pod-1",
        release_date=datetime(2025, 10, 8, 3, 0, tzinfo=UTC),
        popularity_score=80,
    )


class TestHelpers:
    def test_strip_markup(self) -> None:
        assert strip_markup("<p>Hello <b>world</b></p>\n\n  again ") == "Hello world again"

    def test_release_date_in_pacific_time(self) -> None:
        # 03:00 UTC on the 8th is still the 7th in Los Angeles.
        assert format_release_date(datetime(2025, 10, 8, 3, tzinfo=UTC)) == "2025/10/07"
        assert format_release_date(datetime(2025, 10, 8, 12, tzinfo=UTC)) == "2025/10/08"


class TestBuildScript:
    @pytest.mark.asyncio()
    async def test_four_lines(self) -> None:
        translator = FakeTranslator()
        script = await NarrationScriptBuilder(translator).build_script(_episode())

        lines = script.split("\n")
        assert lines == [
            "こんにちは。アメリカの人気ポッドキャスト「Tech Weekly」の注目エピソードをご紹介します。",
            "エピソードタイトルは「[ja]The Future of Chips」。公開日は2025/10/07です。",
            "内容のハイライト: [ja]Guests discuss AI.",
            "より詳しい内容は本編でお楽しみください。",
        ]

    @pytest.mark.asyncio()
    async def test_empty_description_omits_highlight(self) -> None:
        script = await NarrationScriptBuilder(FakeTranslator()).build_script(
            _episode(description="<br/>")
        )
        assert "内容のハイライト" not in script
        assert len(script.split("\n")) == 3

    @pytest.mark.asyncio()
    async def test_description_is_cleaned_and_truncated(self) -> None:
        translator = FakeTranslator()
        long_text = "<p>" + "word " * 400 + "</p>"

        await NarrationScriptBuilder(translator).build_script(_episode(long_text))

        title_input, description_input = translator.inputs
        assert title_input == "The Future of Chips"
        assert len(description_input) == MAX_DESCRIPTION_CHARS
        assert "<p>" not in description_input
        assert description_input.startswith("word word")

    @pytest.mark.asyncio()
    async def test_fallback_translation_is_kept_verbatim(self) -> None:
        class FailingTranslator:
            async def translate(self, text: str) -> str:
                return f"英語原文: {text}" if text else ""

        script = await NarrationScriptBuilder(FailingTranslator()).build_script(
            _episode()
        )
        assert "「英語原文: The Future of Chips」" in script
