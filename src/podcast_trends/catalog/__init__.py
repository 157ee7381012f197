"""Podchaser catalog access: token exchange and category queries."""

from podcast_trends.catalog.client import CatalogClient
from podcast_trends.catalog.models import CategoryQueryResult, RawEpisode, RawPodcast
from podcast_trends.catalog.token import AccessToken, TokenCache

__all__ = [
    "AccessToken",
    "CatalogClient",
    "CategoryQueryResult",
    "RawEpisode",
    "RawPodcast",
    "TokenCache",
]
