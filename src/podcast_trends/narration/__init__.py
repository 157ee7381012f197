"""Narration script building and translation."""

from podcast_trends.narration.script import (
    NarrationScriptBuilder,
    format_release_date,
    strip_markup,
)
from podcast_trends.narration.translation import FALLBACK_PREFIX, Translator

__all__ = [
    "FALLBACK_PREFIX",
    "NarrationScriptBuilder",
    "Translator",
    "format_release_date",
    "strip_markup",
]
