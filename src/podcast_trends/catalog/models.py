"""Raw catalog records as returned by the Podchaser GraphQL API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _opt_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _opt_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(slots=True)
class RawEpisode:
    """Episode node from the ``podcasts.episodes`` connection."""

    id: str
    title: str
    description: str | None = None
    air_date: str | None = None
    audio_url: str | None = None
    web_url: str | None = None
    url: str | None = None
    image_url: str | None = None
    explicit: bool = False

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> RawEpisode:
        return cls(
            id=str(payload.get("id", "")),
            title=str(payload.get("title") or ""),
            description=_opt_str(payload.get("description")),
            air_date=_opt_str(payload.get("airDate")),
            audio_url=_opt_str(payload.get("audioUrl")),
            web_url=_opt_str(payload.get("webUrl")),
            url=_opt_str(payload.get("url")),
            image_url=_opt_str(payload.get("imageUrl")),
            explicit=bool(payload.get("explicit")),
        )


@dataclass(slots=True)
class RawPodcast:
    """Podcast node with its filtered episode list."""

    id: str
    title: str
    description: str | None = None
    image_url: str | None = None
    web_url: str | None = None
    url: str | None = None
    rating_average: float | None = None
    rating_count: float | None = None
    episodes: list[RawEpisode] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> RawPodcast:
        episodes_block = payload.get("episodes") or {}
        episode_items = (
            episodes_block.get("data") if isinstance(episodes_block, dict) else None
        ) or []
        return cls(
            id=str(payload.get("id", "")),
            title=str(payload.get("title") or ""),
            description=_opt_str(payload.get("description")),
            image_url=_opt_str(payload.get("imageUrl")),
            web_url=_opt_str(payload.get("webUrl")),
            url=_opt_str(payload.get("url")),
            rating_average=_opt_float(payload.get("ratingAverage")),
            rating_count=_opt_float(payload.get("ratingCount")),
            episodes=[
                RawEpisode.from_payload(item)
                for item in episode_items
                if isinstance(item, dict)
            ],
        )


@dataclass(slots=True)
class CategoryQueryResult:
    """The podcast selected for a category and its qualifying episodes."""

    podcast: RawPodcast
    episodes: list[RawEpisode]
