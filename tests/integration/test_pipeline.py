"""Integration tests for catalog -> snapshot -> narration -> HTTP."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import httpx
import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from podcast_trends.api.app import create_app
from podcast_trends.config import Settings
from podcast_trends.narration.script import NarrationScriptBuilder
from podcast_trends.narration.translation import Translator
from podcast_trends.speech.narrator import EpisodeNarrator
from podcast_trends.speech.session import AudioSynthesizer, InlineAudio, SpeechMessage
from podcast_trends.speech.wav import WAV_HEADER_SIZE
from podcast_trends.trends.aggregator import TrendAggregator

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

pytestmark = pytest.mark.integration

PCM = b"\x10\x00\x20\x00" * 8


# ---------------------------------------------------------------------------
# Upstream fakes
# ---------------------------------------------------------------------------


class UpstreamRouter:
    """MockTransport handler emulating the catalog and translation APIs."""

    def __init__(self, empty_terms: frozenset[str] = frozenset()) -> None:
        self.empty_terms = empty_terms
        self.token_requests = 0
        self.category_requests: list[dict[str, Any]] = []
        self.translations: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if request.url.host == "translate.test":
            self.translations.append(body["q"])
            return httpx.Response(200, json={"translatedText": f"訳:{body['q']}"})

        if "requestAccessToken" in body["query"]:
            self.token_requests += 1
            return httpx.Response(
                200,
                json={
                    "data": {
                        "requestAccessToken": {
                            "access_token": "live-token",
                            "expires_in": 3600,
                        }
                    }
                },
            )

        assert request.headers["authorization"] == "Bearer live-token"
        variables = body["variables"]
        self.category_requests.append(variables)
        term = variables["searchTerm"]
        if term in self.empty_terms:
            return httpx.Response(200, json={"data": {"podcasts": {"data": []}}})

        slug = term.replace(" ", "-")
        aired = (datetime.now(tz=UTC) - timedelta(hours=6)).isoformat()
        return httpx.Response(
            200,
            json={
                "data": {
                    "podcasts": {
                        "data": [
                            {
                                "id": f"{slug}-pod",
                                "title": f"{term.title()} Daily",
                                "imageUrl": "https://img.test/p.png",
                                "ratingAverage": 4.6,
                                "ratingCount": 2500,
                                "episodes": {
                                    "data": [
                                        {
                                            "id": f"{slug}-{i}",
                                            "title": f"Episode {i}",
                                            "description": "<p>Today we talk.</p>",
                                            "airDate": aired,
                                            "audioUrl": f"https://cdn.test/{i}.mp3",
                                        }
                                        for i in range(3)
                                    ]
                                },
                            }
                        ]
                    }
                }
            },
        )


class ScriptedSession:
    def __init__(self) -> None:
        self.scripts: list[str] = []

    async def send_script(self, script: str) -> None:
        self.scripts.append(script)

    async def messages(self) -> AsyncIterator[SpeechMessage]:
        yield SpeechMessage(audio=[InlineAudio(PCM[:16], "audio/L16;rate=24000")])
        yield SpeechMessage(audio=[InlineAudio(PCM[16:])], turn_complete=True)

    async def close(self) -> None:
        pass


class ScriptedProvider:
    def __init__(self) -> None:
        self.session = ScriptedSession()

    async def connect(self) -> ScriptedSession:
        return self.session


def _app(tmp_path: Path, router: UpstreamRouter, provider: ScriptedProvider) -> Any:
    settings = Settings(
        catalog={
            "endpoint": "https://catalog.test/graphql",
            "client_id": "id",
            "client_secret": "secret",
        },
        translation={"endpoint": "https://translate.test/translate"},
        audio={"output_dir": tmp_path / "audio"},
    )
    http = httpx.AsyncClient(transport=httpx.MockTransport(router))
    narrator = EpisodeNarrator(
        settings.audio,
        NarrationScriptBuilder(Translator(settings.translation, client=http)),
        AudioSynthesizer(provider, timeout_seconds=5),  # type: ignore[arg-type]
    )
    return create_app(
        settings,
        aggregator=TrendAggregator.from_settings(settings, client=http),
        narrator=narrator,
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_live_snapshot_with_partial_fallback(tmp_path: Path) -> None:
    router = UpstreamRouter(empty_terms=frozenset({"society culture"}))
    app = _app(tmp_path, router, ScriptedProvider())

    with TestClient(app) as client:
        body = client.get("/api/trends?maxDuration=10").json()
        again = client.get("/api/trends?maxDuration=10").json()

    categories = {c["id"]: c for c in body["categories"]}
    assert [e["id"] for e in categories["technology"]["sampleEpisodes"]] == [
        "technology-0",
        "technology-1",
        "technology-2",
    ]
    assert [e["id"] for e in categories["culture"]["sampleEpisodes"]] == [
        "culture-ep-1"
    ]
    scores = [e["popularityScore"] for e in categories["news"]["sampleEpisodes"]]
    assert scores == sorted(scores, reverse=True)

    assert again == body
    assert router.token_requests == 1
    assert len(router.category_requests) == 5
    assert {json.dumps(v["maxLengthRange"]) for v in router.category_requests} == {
        json.dumps([{"max": 600}])
    }


def test_narration_end_to_end(tmp_path: Path) -> None:
    router = UpstreamRouter()
    provider = ScriptedProvider()
    app = _app(tmp_path, router, provider)

    with TestClient(app) as client:
        resp = client.post("/api/tts", json={"episodeId": "business-leadership-1"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["categoryId"] == "business"
    assert body["audioUrl"] == "/audio/business-leadership-1.wav"
    assert "訳:Episode 1" in body["script"]
    assert "訳:Today we talk." in body["script"]
    assert body["estimatedDurationSeconds"] > 0

    written = (tmp_path / "audio" / "business-leadership-1.wav").read_bytes()
    assert written[:4] == b"RIFF"
    assert written[WAV_HEADER_SIZE:] == PCM
    assert provider.session.scripts == [body["script"]]
    assert sorted(router.translations) == ["Episode 1", "Today we talk."]
