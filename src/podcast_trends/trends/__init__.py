"""Trend aggregation, scoring, and snapshot caching."""

from podcast_trends.trends.aggregator import TrendAggregator
from podcast_trends.trends.cache import UNBOUNDED, CacheEntry, SnapshotCache, cache_key
from podcast_trends.trends.categories import CATEGORIES, FallbackCatalog
from podcast_trends.trends.scoring import map_episode, popularity_score

__all__ = [
    "CATEGORIES",
    "UNBOUNDED",
    "CacheEntry",
    "FallbackCatalog",
    "SnapshotCache",
    "TrendAggregator",
    "cache_key",
    "map_episode",
    "popularity_score",
]
