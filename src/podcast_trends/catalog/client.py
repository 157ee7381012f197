"""Podchaser GraphQL catalog client."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from podcast_trends.catalog.graphql import DISCOVER_CATEGORY_QUERY, post_graphql
from podcast_trends.catalog.models import CategoryQueryResult, RawPodcast
from podcast_trends.exceptions import NoMatchError, UpstreamQueryError

if TYPE_CHECKING:
    from datetime import datetime

    from podcast_trends.config import CatalogSettings

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def build_category_variables(
    search_term: str,
    episode_limit: int,
    recent_since: datetime,
    max_duration_seconds: float | None = None,
) -> dict[str, Any]:
    """Build the DiscoverCategory variables for one category."""
    variables: dict[str, Any] = {
        "searchTerm": search_term,
        "episodeCount": episode_limit,
        "recentSince": recent_since.isoformat(),
    }
    if max_duration_seconds is not None:
        variables["maxLengthRange"] = [
            {"max": max(0, math.floor(max_duration_seconds))}
        ]
    return variables


class CatalogClient:
    """Issue filtered podcast queries against the Podchaser catalog."""

    def __init__(
        self,
        settings: CatalogSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = settings.endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def execute(
        self,
        query: str,
        variables: dict[str, Any],
        token: str,
    ) -> dict[str, Any]:
        """Run an authenticated GraphQL query and return its ``data`` block.

        Raises:
            UpstreamQueryError: On transport failure, non-success status,
                an ``errors`` payload, or a missing ``data`` block.
        """
        try:
            result = await post_graphql(
                self._client, self._endpoint, query, variables, token=token
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("catalog_query_failed", error=str(exc))
            raise UpstreamQueryError(f"Podchaser query failed: {exc}") from exc

        if not result.ok:
            message = result.error_message()
            logger.warning(
                "catalog_query_failed",
                error=message,
                query_excerpt=query[:80],
            )
            raise UpstreamQueryError(f"Podchaser query failed: {message}")

        if result.data is None:
            logger.warning("catalog_response_missing_data")
            raise UpstreamQueryError("Podchaser response missing data")

        return result.data

    async def query_category(
        self,
        search_term: str,
        episode_limit: int,
        recent_since: datetime,
        max_duration_seconds: float | None,
        token: str,
    ) -> CategoryQueryResult:
        """Find the first English podcast with recent qualifying episodes.

        Raises:
            UpstreamQueryError: If the query itself fails.
            NoMatchError: If no returned podcast has a matching episode.
        """
        variables = build_category_variables(
            search_term, episode_limit, recent_since, max_duration_seconds
        )
        data = await self.execute(DISCOVER_CATEGORY_QUERY, variables, token)

        podcasts_block = data.get("podcasts") or {}
        items = podcasts_block.get("data") if isinstance(podcasts_block, dict) else None
        podcasts = [
            RawPodcast.from_payload(item)
            for item in (items or [])
            if isinstance(item, dict)
        ]

        selected = next((p for p in podcasts if p.episodes), None)
        if selected is None:
            logger.info(
                "catalog_no_match",
                search_term=search_term,
                podcast_count=len(podcasts),
                max_duration_seconds=max_duration_seconds,
            )
            raise NoMatchError(
                f"No episodes for {search_term!r} within the requested constraints"
            )

        return CategoryQueryResult(
            podcast=selected,
            episodes=selected.episodes[:episode_limit],
        )
