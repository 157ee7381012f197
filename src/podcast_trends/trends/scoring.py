"""Popularity scoring and raw-record mapping.

The score is a synthetic 10-100 heuristic built from release recency, the
parent podcast's rating, its rating count, and the episode's position in
the catalog's result list:

    recency = max(0, 60 - days_since_release * 4)
    rating  = (rating_average or 4) * 8
    count   = min(20, rating_count / 500)
    score   = recency + rating + count + 20 - rank_index * 6

rounded half-up and clamped to ``[10, 100]``.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from podcast_trends.models import Episode

if TYPE_CHECKING:
    from podcast_trends.catalog.models import RawEpisode, RawPodcast

MIN_SCORE = 10
MAX_SCORE = 100
_SECONDS_PER_DAY = 86_400
_DEFAULT_RATING = 4.0


def parse_air_date(value: str | None) -> datetime | None:
    """Parse an ISO-8601 air date into an aware UTC datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def days_since_release(released: datetime, now: datetime) -> float:
    """Fractional days since release; future releases count as today."""
    return max(0.0, (now - released).total_seconds() / _SECONDS_PER_DAY)


def popularity_score(
    days_since: float,
    rating_average: float | None,
    rating_count: float | None,
    rank_index: int,
) -> int:
    """Compute the clamped integer popularity score."""
    recency = max(0.0, 60 - max(0.0, days_since) * 4)
    rating = (_DEFAULT_RATING if rating_average is None else rating_average) * 8
    count_bonus = min(20.0, (rating_count or 0) / 500)
    raw = recency + rating + count_bonus + 20 - rank_index * 6
    rounded = math.floor(raw + 0.5)
    return max(MIN_SCORE, min(MAX_SCORE, rounded))


def map_episode(
    raw: RawEpisode,
    podcast: RawPodcast,
    rank_index: int,
    *,
    now: datetime | None = None,
) -> Episode:
    """Convert a raw catalog episode into a scored ``Episode``.

    Deterministic for fixed inputs and a fixed ``now``.
    """
    current = now or datetime.now(tz=UTC)
    released = parse_air_date(raw.air_date)
    days = days_since_release(released or current, current)
    image = raw.image_url or podcast.image_url

    return Episode(
        id=raw.id,
        title=raw.title,
        description=raw.description or "",
        audio_url=raw.audio_url,
        podcast_title=podcast.title,
        podcast_id=podcast.id,
        image_url=image,
        thumbnail_url=image,
        source_url=raw.web_url or raw.url or podcast.web_url or podcast.url,
        release_date=released or current,
        explicit=raw.explicit,
        popularity_score=popularity_score(
            days, podcast.rating_average, podcast.rating_count, rank_index
        ),
    )
