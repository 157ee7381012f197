"""Trend aggregation across the configured categories.

Fans out one catalog query per category concurrently, maps and scores the
results, and caches the assembled snapshot per duration filter. Catalog
failures never escape: a failing category is replaced by its static
fallback entry, and a failing token exchange falls back for every
category.
"""

from __future__ import annotations

import asyncio
import time
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import httpx
import structlog

from podcast_trends.catalog.client import CatalogClient
from podcast_trends.catalog.token import TokenCache
from podcast_trends.exceptions import CatalogError, NotFoundError
from podcast_trends.models import CategoryTrend, EpisodeMatch, TrendSnapshot
from podcast_trends.trends.cache import SnapshotCache, cache_key
from podcast_trends.trends.categories import (
    CATEGORIES,
    FallbackCatalog,
    category_metadata,
)
from podcast_trends.trends.scoring import map_episode

if TYPE_CHECKING:
    from collections.abc import Callable

    from podcast_trends.config import CatalogSettings, Settings, TrendSettings
    from podcast_trends.models import CategoryConfig, CategoryMetadata

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class TrendAggregator:
    """Build, cache, and serve ``TrendSnapshot`` objects.

    The token cache, catalog client, and snapshot cache are injected so
    tests can substitute fakes and a frozen clock.
    """

    def __init__(
        self,
        catalog_settings: CatalogSettings,
        trend_settings: TrendSettings,
        token_cache: TokenCache,
        catalog: CatalogClient,
        cache: SnapshotCache | None = None,
        categories: tuple[CategoryConfig, ...] = CATEGORIES,
        fallback: FallbackCatalog | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._catalog_settings = catalog_settings
        self._trend_settings = trend_settings
        self._token_cache = token_cache
        self._catalog = catalog
        self._clock = clock
        self._cache = cache or SnapshotCache(
            ttl_seconds=trend_settings.cache_ttl_seconds, clock=clock
        )
        self._categories = categories
        self._fallback = fallback or FallbackCatalog(categories, now=self._now())

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ) -> TrendAggregator:
        """Wire an aggregator from application settings."""
        return cls(
            catalog_settings=settings.catalog,
            trend_settings=settings.trends,
            token_cache=TokenCache(settings.catalog, client=client),
            catalog=CatalogClient(settings.catalog, client=client),
        )

    @property
    def cache(self) -> SnapshotCache:
        return self._cache

    async def aclose(self) -> None:
        await self._token_cache.aclose()
        await self._catalog.aclose()

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=UTC)

    def category_metadata(self) -> list[CategoryMetadata]:
        return category_metadata(self._categories)

    async def get_snapshot(
        self,
        force_refresh: bool = False,
        max_duration_seconds: int | None = None,
    ) -> TrendSnapshot:
        """Return the snapshot for a duration filter, computing it if needed.

        Args:
            force_refresh: Bypass the cache and always recompute the slot.
            max_duration_seconds: Optional maximum episode length filter.

        Returns:
            The cached or freshly computed snapshot. Never raises for
            catalog failures or missing credentials.
        """
        key = cache_key(max_duration_seconds)
        if force_refresh:
            return await self._refresh(key, max_duration_seconds)

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        async with self._cache.lock(key):
            # Another request may have filled the slot while we waited.
            cached = self._cache.get(key)
            if cached is not None:
                return cached
            return await self._refresh(key, max_duration_seconds)

    async def find_episode_by_id(
        self,
        episode_id: str,
        max_duration_seconds: int | None = None,
    ) -> EpisodeMatch:
        """Locate an episode in the (possibly cached) snapshot.

        Raises:
            NotFoundError: If no category contains the episode.
        """
        snapshot = await self.get_snapshot(max_duration_seconds=max_duration_seconds)
        for category in snapshot.categories:
            for episode in category.sample_episodes:
                if episode.id == episode_id:
                    return EpisodeMatch(episode=episode, category=category)
        raise NotFoundError(f"Episode not found: {episode_id}")

    async def _refresh(
        self,
        key: int | str,
        max_duration_seconds: int | None,
    ) -> TrendSnapshot:
        snapshot = await self._compute(max_duration_seconds)
        self._cache.set(key, snapshot)
        return snapshot

    async def _compute(self, max_duration_seconds: int | None) -> TrendSnapshot:
        now = self._now()

        if not self._catalog_settings.has_credentials:
            logger.warning("catalog_credentials_missing_using_fallback")
            return self._fallback.snapshot(now)

        try:
            token = await self._token_cache.get_token()
        except Exception as exc:
            logger.warning(
                "snapshot_fallback",
                reason="token_unavailable",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return self._fallback.snapshot(now)

        results = await asyncio.gather(
            *(
                self._build_category(config, token, max_duration_seconds, now)
                for config in self._categories
            )
        )
        trends = [trend for trend, _ in results]
        logger.info(
            "snapshot_built",
            categories=len(trends),
            live=sum(1 for _, is_live in results if is_live),
            max_duration_seconds=max_duration_seconds,
        )
        return TrendSnapshot(generated_at=now, categories=trends)

    async def _build_category(
        self,
        config: CategoryConfig,
        token: str,
        max_duration_seconds: int | None,
        now: datetime,
    ) -> tuple[CategoryTrend, bool]:
        recent_since = now - timedelta(days=self._trend_settings.recency_days)
        try:
            result = await self._catalog.query_category(
                search_term=config.search_term,
                episode_limit=self._trend_settings.episodes_per_category,
                recent_since=recent_since,
                max_duration_seconds=max_duration_seconds,
                token=token,
            )
        except CatalogError as exc:
            logger.warning(
                "category_fallback",
                category=config.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return self._fallback.category(config.id, now), False
        except Exception:
            logger.exception("category_unexpected_error", category=config.id)
            return self._fallback.category(config.id, now), False

        episodes = [
            map_episode(raw, result.podcast, index, now=now)
            for index, raw in enumerate(result.episodes)
        ]
        trend = CategoryTrend(
            id=config.id,
            name=config.name,
            summary=config.summary,
            sample_episodes=episodes,
            updated_at=now,
        )
        return trend, True
