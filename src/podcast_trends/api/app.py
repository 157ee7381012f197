"""FastAPI application serving trend snapshots and episode narration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from podcast_trends import __version__
from podcast_trends.api.models import (
    DurationOptionResponse,
    MessageResponse,
    TtsRequest,
    TtsResponse,
)
from podcast_trends.config import Settings
from podcast_trends.durations import (
    DURATION_OPTIONS,
    max_duration_to_seconds,
    normalize_max_duration,
)
from podcast_trends.exceptions import NotFoundError, PodcastTrendsError
from podcast_trends.logging import request_logging_context
from podcast_trends.models import CategoryMetadata, TrendSnapshot
from podcast_trends.narration.script import NarrationScriptBuilder
from podcast_trends.narration.translation import Translator
from podcast_trends.speech.narrator import EpisodeNarrator
from podcast_trends.speech.session import AudioSynthesizer
from podcast_trends.trends.aggregator import TrendAggregator

if TYPE_CHECKING:
    from podcast_trends.speech.session import SpeechProvider

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=MessageResponse(message=message).model_dump(),
    )


def _build_speech_provider(settings: Settings) -> SpeechProvider | None:
    if not settings.speech.has_credentials:
        logger.warning("speech_api_key_missing")
        return None

    from podcast_trends.speech.gemini import GeminiLiveProvider

    return GeminiLiveProvider(settings.speech)


def create_app(
    settings: Settings | None = None,
    *,
    aggregator: TrendAggregator | None = None,
    narrator: EpisodeNarrator | None = None,
) -> FastAPI:
    """Create and configure the FastAPI server app.

    ``aggregator`` and ``narrator`` may be injected; otherwise they are
    wired from settings around one shared ``httpx.AsyncClient``.
    """
    app_settings = settings or Settings.load()

    app = FastAPI(title="podcast-trends API", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    http_client = httpx.AsyncClient(timeout=app_settings.catalog.timeout)

    if aggregator is None:
        aggregator = TrendAggregator.from_settings(app_settings, client=http_client)

    if narrator is None:
        provider = _build_speech_provider(app_settings)
        narrator = EpisodeNarrator(
            app_settings.audio,
            NarrationScriptBuilder(
                Translator(app_settings.translation, client=http_client)
            ),
            AudioSynthesizer(provider, app_settings.speech.timeout_seconds)
            if provider is not None
            else None,
        )

    app.state.settings = app_settings
    app.state.aggregator = aggregator
    app.state.narrator = narrator

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await aggregator.aclose()
        await http_client.aclose()

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/trends", response_model=TrendSnapshot)
    async def get_trends(
        max_duration: str | None = Query(default=None, alias="maxDuration"),
        refresh: bool = False,
    ) -> TrendSnapshot:
        option = normalize_max_duration(max_duration)
        with request_logging_context("trends", max_duration=option):
            return await aggregator.get_snapshot(
                force_refresh=refresh,
                max_duration_seconds=max_duration_to_seconds(option),
            )

    @app.post("/api/trends/refresh", response_model=TrendSnapshot)
    async def refresh_trends(
        max_duration: str | None = Query(default=None, alias="maxDuration"),
    ) -> TrendSnapshot:
        option = normalize_max_duration(max_duration)
        with request_logging_context("trends_refresh", max_duration=option):
            return await aggregator.get_snapshot(
                force_refresh=True,
                max_duration_seconds=max_duration_to_seconds(option),
            )

    @app.get("/api/categories", response_model=list[CategoryMetadata])
    async def list_categories() -> list[CategoryMetadata]:
        return aggregator.category_metadata()

    @app.get("/api/duration-options", response_model=list[DurationOptionResponse])
    async def list_duration_options() -> list[DurationOptionResponse]:
        return [
            DurationOptionResponse(value=opt.value, label=opt.label, seconds=opt.seconds)
            for opt in DURATION_OPTIONS
        ]

    @app.post(
        "/api/tts",
        response_model=TtsResponse,
        responses={
            400: {"model": MessageResponse},
            404: {"model": MessageResponse},
            500: {"model": MessageResponse},
        },
    )
    async def synthesize_episode(request: Request) -> TtsResponse | JSONResponse:
        try:
            body = await request.json()
            payload = TtsRequest.model_validate(body)
        except (ValueError, ValidationError):
            return _message(400, "Invalid JSON body")

        if not payload.episode_id:
            return _message(400, "episodeId is required")

        option = normalize_max_duration(payload.max_duration)
        with request_logging_context("tts", episode_id=payload.episode_id) as log:
            try:
                match = await aggregator.find_episode_by_id(
                    payload.episode_id,
                    max_duration_seconds=max_duration_to_seconds(option),
                )
            except NotFoundError:
                log.info("tts_episode_not_found")
                return _message(404, "Episode not found")

            try:
                result = await narrator.narrate(match.episode)
            except PodcastTrendsError as exc:
                log.error(
                    "tts_generation_failed",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                return _message(500, "TTS generation failed")
            except Exception:
                log.exception("tts_generation_crashed")
                return _message(500, "TTS generation failed")

            return TtsResponse(
                audio_url=result.public_url,
                script=result.script,
                estimated_duration_seconds=result.estimated_duration_seconds,
                episode_id=match.episode.id,
                category_id=match.category.id,
            )

    audio_dir = app_settings.audio.output_dir
    audio_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        app_settings.audio.public_url_prefix.rstrip("/") or "/audio",
        StaticFiles(directory=audio_dir),
        name="audio",
    )

    return app
