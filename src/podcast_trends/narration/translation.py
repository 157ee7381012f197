"""English to Japanese translation via a LibreTranslate-compatible API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog

if TYPE_CHECKING:
    from podcast_trends.config import TranslationSettings

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

FALLBACK_PREFIX = "英語原文: "


class Translator:
    """Translate short texts, degrading to the marked source text on failure."""

    def __init__(
        self,
        settings: TranslationSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _payload(self, text: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "q": text,
            "source": self._settings.source,
            "target": self._settings.target,
            "format": "text",
        }
        if self._settings.api_key is not None:
            payload["api_key"] = self._settings.api_key.get_secret_value()
        return payload

    async def translate(self, text: str) -> str:
        """Translate ``text``; never raises.

        Returns:
            The translation, ``""`` for blank input, or the source text
            prefixed with ``FALLBACK_PREFIX`` when translation fails.
        """
        stripped = text.strip()
        if not stripped:
            return ""

        try:
            response = await self._client.post(
                self._settings.endpoint, json=self._payload(stripped)
            )
            response.raise_for_status()
            data = response.json()
        except Exception as exc:
            logger.warning(
                "translation_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                chars=len(stripped),
            )
            return f"{FALLBACK_PREFIX}{stripped}"

        translated = data.get("translatedText") if isinstance(data, dict) else None
        if isinstance(translated, str) and translated:
            return translated

        logger.warning("translation_empty_response", chars=len(stripped))
        return f"{FALLBACK_PREFIX}{stripped}"
