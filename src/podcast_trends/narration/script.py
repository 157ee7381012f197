"""Japanese narration script assembly for a single episode."""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING, Protocol
from zoneinfo import ZoneInfo

if TYPE_CHECKING:
    from datetime import datetime

    from podcast_trends.models import Episode

MAX_DESCRIPTION_CHARS = 600
RELEASE_TIMEZONE = ZoneInfo("America/Los_Angeles")

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

_INTRO = "こんにちは。アメリカの人気ポッドキャスト「{podcast}」の注目エピソードをご紹介します。"
_TITLE = "エピソードタイトルは「{title}」。公開日は{date}です。"
_HIGHLIGHT = "内容のハイライト: {description}"
_CLOSING = "より詳しい内容は本編でお楽しみください。"


class TextTranslator(Protocol):
    async def translate(self, text: str) -> str: ...


def strip_markup(text: str) -> str:
    """Remove HTML tags and collapse runs of whitespace."""
    return _WHITESPACE_RE.sub(" ", _TAG_RE.sub("", text)).strip()


def format_release_date(released: datetime) -> str:
    """Render a date as ``YYYY/MM/DD`` in Pacific time."""
    return released.astimezone(RELEASE_TIMEZONE).strftime("%Y/%m/%d")


class NarrationScriptBuilder:
    """Compose the four-line Japanese introduction read by the narrator."""

    def __init__(self, translator: TextTranslator) -> None:
        self._translator = translator

    async def build_script(self, episode: Episode) -> str:
        description = strip_markup(episode.description)[:MAX_DESCRIPTION_CHARS]
        title_ja, description_ja = await asyncio.gather(
            self._translator.translate(episode.title),
            self._translator.translate(description),
        )

        lines = [
            _INTRO.format(podcast=episode.podcast_title),
            _TITLE.format(
                title=title_ja, date=format_release_date(episode.release_date)
            ),
            _HIGHLIGHT.format(description=description_ja) if description_ja else "",
            _CLOSING,
        ]
        return "\n".join(line for line in lines if line)
