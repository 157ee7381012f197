"""Domain models for podcast trends and narration results.

All models are frozen: an episode, category trend, or snapshot is created
once per aggregation cycle and replaced wholesale on refresh. Field names
serialize as camelCase for the web UI (``model_dump(by_alias=True)``).
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Episode(_FrozenModel):
    """Normalized episode with a computed popularity score."""

    id: str
    title: str
    description: str = ""
    audio_url: str | None = None
    podcast_title: str
    podcast_id: str
    image_url: str | None = None
    thumbnail_url: str | None = None
    source_url: str | None = None
    release_date: datetime
    explicit: bool = False
    popularity_score: int = Field(ge=10, le=100)


class CategoryConfig(_FrozenModel):
    """Fixed topical grouping queried on every aggregation cycle."""

    id: str
    name: str
    summary: str
    search_term: str


class CategoryMetadata(_FrozenModel):
    """Public description of a configured category."""

    id: str
    name: str
    summary: str


class CategoryTrend(_FrozenModel):
    """Up to N sample episodes for one category."""

    id: str
    name: str
    summary: str
    sample_episodes: list[Episode] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=_utc_now)


class TrendSnapshot(_FrozenModel):
    """All category trends at one point in time, in configuration order."""

    generated_at: datetime = Field(default_factory=_utc_now)
    categories: list[CategoryTrend] = Field(default_factory=list)


class EpisodeMatch(_FrozenModel):
    """An episode found in a snapshot along with its owning category."""

    episode: Episode
    category: CategoryTrend


class TtsResult(_FrozenModel):
    """Outcome of narrating one episode to an audio file."""

    script: str
    audio_path: Path
    public_url: str
    audio_format: str
    estimated_duration_seconds: int = Field(ge=0)
