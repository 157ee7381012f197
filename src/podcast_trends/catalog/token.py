"""Short-lived bearer token cache for the Podchaser catalog.

Exchanges the configured client credentials for an access token and keeps
it until shortly before the issuer's expiry. The cached token is never
returned once past its expiry instant.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
import structlog

from podcast_trends.catalog.graphql import ACCESS_TOKEN_MUTATION, post_graphql
from podcast_trends.exceptions import ConfigurationError, UpstreamAuthError

if TYPE_CHECKING:
    from collections.abc import Callable

    from podcast_trends.config import CatalogSettings

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Opaque bearer credential and the epoch second it stops being served."""

    token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class TokenCache:
    """Holds one access token and refreshes it on expiry.

    No retries are attempted; the trend aggregator falls back to static
    data when a refresh fails.
    """

    def __init__(
        self,
        settings: CatalogSettings,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.timeout)
        self._clock = clock
        self._token: AccessToken | None = None

    @property
    def current(self) -> AccessToken | None:
        return self._token

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def invalidate(self) -> None:
        """Drop the cached token so the next call performs an exchange."""
        self._token = None

    async def get_token(self) -> str:
        """Return a valid bearer token, exchanging credentials if needed.

        Raises:
            ConfigurationError: If client id/secret are not configured.
            UpstreamAuthError: If the exchange fails or returns no token.
        """
        now = self._clock()
        if self._token is not None and self._token.is_valid(now):
            return self._token.token

        client_id = self._settings.client_id
        client_secret = self._settings.client_secret
        if (
            not self._settings.has_credentials
            or client_id is None
            or client_secret is None
        ):
            logger.warning("catalog_credentials_missing")
            raise ConfigurationError("Podchaser credentials are not configured")

        variables = {
            "client_id": client_id.get_secret_value(),
            "client_secret": client_secret.get_secret_value(),
        }
        try:
            result = await post_graphql(
                self._client,
                self._settings.endpoint,
                ACCESS_TOKEN_MUTATION,
                variables,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("catalog_token_request_failed", error=str(exc))
            raise UpstreamAuthError(f"Podchaser token request failed: {exc}") from exc

        if not result.ok:
            message = result.error_message()
            logger.warning("catalog_token_request_failed", error=message)
            raise UpstreamAuthError(f"Podchaser token request failed: {message}")

        token_data = (result.data or {}).get("requestAccessToken") or {}
        access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not access_token:
            logger.warning("catalog_token_missing_access_token")
            raise UpstreamAuthError("Podchaser token response missing access_token")

        expires_in = token_data.get("expires_in")
        if not isinstance(expires_in, (int, float)) or isinstance(expires_in, bool):
            expires_in = self._settings.default_token_lifetime_seconds

        self._token = AccessToken(
            token=str(access_token),
            expires_at=now + float(expires_in) - self._settings.token_safety_margin_seconds,
        )
        logger.info(
            "catalog_token_refreshed",
            expires_in=expires_in,
            safety_margin=self._settings.token_safety_margin_seconds,
        )
        return self._token.token
