"""Shared pytest fixtures for the podcast-trends test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from podcast_trends.config import AudioSettings, CatalogSettings, Settings

if TYPE_CHECKING:
    from pathlib import Path

# 2025-10-09T00:00:00Z
FROZEN_EPOCH = 1_759_968_000.0


class FrozenClock:
    """Manually advanced epoch-seconds clock."""

    def __init__(self, start: float = FROZEN_EPOCH) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep developer ``.env``/``config.yaml`` files and env vars out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("PODCAST_TRENDS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def catalog_settings() -> CatalogSettings:
    """Catalog settings with dummy credentials."""
    return CatalogSettings(
        endpoint="https://catalog.test/graphql",
        client_id="client-id",
        client_secret="client-secret",
    )


@pytest.fixture()
def audio_settings(tmp_path: Path) -> AudioSettings:
    return AudioSettings(output_dir=tmp_path / "audio", public_url_prefix="/audio")


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Offline settings: no catalog or speech credentials, audio under tmp."""
    return Settings(audio={"output_dir": tmp_path / "audio"})
